"""Application bootstrap and lifecycle management."""

from typing import AsyncIterable, Protocol

from .config import Settings
from .dispatcher import Dispatcher, RawUpdate, Router
from .logging_config import get_logger
from .sender import ISender, TelegramSender
from .storage import IStateStore, SqliteStateStore

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def run(self, updates: AsyncIterable[RawUpdate]) -> None:
        """Dispatch a stream of updates until it is exhausted."""
        ...


class Application:
    """Wires settings, state store, sender and dispatcher together.

    A sender or state store passed in is used as is and not closed on stop();
    the ones created here from settings are owned and closed.
    """

    def __init__(
        self,
        router: Router,
        settings: Settings | None = None,
        sender: ISender | None = None,
        state_store: IStateStore | None = None,
    ):
        self._router = router
        self._settings = settings or Settings()

        self._sender: ISender | None = sender
        self._state_store: IStateStore | None = state_store
        self._owned_sender: TelegramSender | None = None
        self._owned_store: SqliteStateStore | None = None
        self._dispatcher: Dispatcher | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. State store (no dependencies)
        if self._state_store is None:
            self._owned_store = SqliteStateStore(self._settings.db_path)
            await self._owned_store.init()
            self._state_store = self._owned_store
            logger.info("State store initialized")

        # 2. Sender (no internal dependencies)
        if self._sender is None:
            self._owned_sender = TelegramSender(
                token=self._settings.bot_token,
                api_url=self._settings.api_url,
            )
            self._sender = self._owned_sender
            logger.info("Telegram sender initialized")

        # 3. Routes are frozen before any update is dispatched
        if self._settings.auto_answer_callbacks:
            self._router.auto_answer_callbacks = True
        routes = self._router.build()

        # 4. Dispatcher (depends on routes, sender, state store)
        self._dispatcher = Dispatcher(
            routes=routes,
            sender=self._sender,
            state_store=self._state_store,
            serialize_per_identity=self._settings.serialize_per_identity,
            strict_steps=self._settings.strict_steps,
        )
        logger.info(
            "Dispatcher ready: %d commands, %d scenarios",
            len(routes.commands),
            len(routes.scenarios),
        )

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._dispatcher:
            await self._dispatcher.drain()
        if self._owned_sender:
            await self._owned_sender.close()
            logger.info("Telegram sender closed")
        if self._owned_store:
            await self._owned_store.close()
            logger.info("State store closed")

    async def run(self, updates: AsyncIterable[RawUpdate]) -> None:
        """Dispatch a stream of updates until it is exhausted."""
        await self.dispatcher.run(updates)

    @property
    def dispatcher(self) -> Dispatcher:
        """Get dispatcher instance."""
        if not self._dispatcher:
            raise RuntimeError("Application not started")
        return self._dispatcher

    @property
    def state_store(self) -> IStateStore:
        """Get state store instance."""
        if not self._state_store:
            raise RuntimeError("Application not started")
        return self._state_store
