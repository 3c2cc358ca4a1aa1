"""Conversation state stores."""

import asyncio
import json
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import resolve_db_path
from ..errors import StateStoreError
from ..models import ConversationState, Identity


class IStateStore(Protocol):
    """Load/save of ConversationState by identity.

    The dispatcher does not serialize access per identity; a store shared by
    concurrent handlers must be safe on its own.
    """

    async def load(self, identity: Identity) -> ConversationState:
        """Return the stored state, or an idle state if none exists."""
        ...

    async def save(self, identity: Identity, state: ConversationState) -> None:
        """Persist state for identity, replacing what was there."""
        ...


class InMemoryStateStore:
    """Async-safe in-memory store. Keeps copies, never shares instances."""

    def __init__(self) -> None:
        self._lock: asyncio.Lock | None = None
        self._states: dict[Identity, ConversationState] = {}

    def _ensure_lock(self) -> asyncio.Lock:
        """Create the lock inside a running event loop on first use."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def load(self, identity: Identity) -> ConversationState:
        async with self._ensure_lock():
            state = self._states.get(identity)
            return state.clone() if state else ConversationState()

    async def save(self, identity: Identity, state: ConversationState) -> None:
        async with self._ensure_lock():
            self._states[identity] = state.clone()

    async def clear(self) -> None:
        async with self._ensure_lock():
            self._states.clear()


class SqliteStateStore:
    """SQLite store; scratch data is kept as JSON.

    Scratch data must survive a JSON round trip unchanged: string keys and
    JSON values only (lists rather than tuples, no sets or objects). Anything
    else is rejected on save with StateStoreError instead of coming back
    altered on the next load.
    """

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def load(self, identity: Identity) -> ConversationState:
        """Return the stored state, or an idle state if none exists."""
        if not self._conn:
            raise StateStoreError("State store not initialized")

        cursor = await self._conn.execute(
            """
            SELECT scenario, step, data
            FROM conversation_states
            WHERE identity = ?
            """,
            (identity.key,),
        )
        row = await cursor.fetchone()

        if not row:
            return ConversationState()

        try:
            data = json.loads(row[2]) if row[2] is not None else None
        except json.JSONDecodeError as e:
            raise StateStoreError(
                f"Corrupt scratch data for {identity.key}: {e}"
            ) from e

        return ConversationState.from_dict(
            {"scenario": row[0], "step": row[1], "data": data}
        )

    async def save(self, identity: Identity, state: ConversationState) -> None:
        """Persist state for identity, replacing what was there.

        Raises:
            StateStoreError: If the scratch data would not load back equal.
        """
        if not self._conn:
            raise StateStoreError("State store not initialized")

        record = state.to_dict()
        record["data"] = _encode_data(identity, record["data"])

        await self._conn.execute(
            """
            INSERT OR REPLACE INTO conversation_states
            (identity, chat_id, user_id, scenario, step, data, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
            """,
            (
                identity.key,
                identity.chat_id,
                identity.user_id,
                record["scenario"],
                record["step"],
                record["data"],
            ),
        )
        await self._conn.commit()

    async def clear(self) -> None:
        """Delete all stored conversations."""
        if not self._conn:
            raise StateStoreError("State store not initialized")

        await self._conn.execute("DELETE FROM conversation_states")
        await self._conn.commit()


def _encode_data(identity: Identity, data: Any) -> str | None:
    if data is None:
        return None

    try:
        dumped = json.dumps(data)
    except (TypeError, ValueError) as e:
        raise StateStoreError(
            f"Scratch data for {identity.key} is not JSON serializable: {e}"
        ) from e

    # json.dumps turns tuples into lists and non-str keys into strings.
    if json.loads(dumped) != data:
        raise StateStoreError(
            f"Scratch data for {identity.key} does not survive JSON encoding; "
            "use str keys and lists"
        )
    return dumped
