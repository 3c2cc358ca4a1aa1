"""Dispatcher: routes every update to exactly one owner."""

import asyncio
from typing import Any, AsyncIterable, Protocol

from pydantic import ValidationError

from ..context import UpdateContext, build_context, parse_update
from ..logging_config import get_logger
from ..models import ConversationState, Update
from ..scenario import Scenario, run_step
from ..sender import ISender
from ..storage import IStateStore
from .locks import IdentityLocks
from .router import Routes, UpdateHandler

logger = get_logger(__name__)

RawUpdate = Update | dict[str, Any]


class IDispatcher(Protocol):
    """Resolution of delivered updates."""

    async def handle_one(self, raw: RawUpdate) -> None:
        """Resolve and handle a single update. Never raises handler errors."""
        ...

    async def run(self, updates: AsyncIterable[RawUpdate]) -> None:
        """Handle a stream of updates, one task per update."""
        ...

    async def trigger_scenario(self, ctx: UpdateContext, name: str) -> None:
        """Force-start a scenario for ctx's identity."""
        ...


class Dispatcher:
    """Update router and scenario driver.

    Resolution order for every update: all-handler, callback auto-answer,
    callback handler, commands, scenario triggers, in-progress scenario,
    default handler. Scenarios are only considered when a state store is
    configured.
    """

    def __init__(
        self,
        routes: Routes,
        sender: ISender,
        state_store: IStateStore | None = None,
        serialize_per_identity: bool = False,
        strict_steps: bool = False,
    ):
        self._routes = routes
        self._sender = sender
        self._store = state_store
        self._strict_steps = strict_steps
        self._locks = IdentityLocks() if serialize_per_identity else None
        self._tasks: set[asyncio.Task] = set()

    @property
    def routes(self) -> Routes:
        return self._routes

    # Stream consumption

    async def run(self, updates: AsyncIterable[RawUpdate]) -> None:
        """Handle a stream of updates, one task per update.

        Updates are not ordered relative to each other, not even for the same
        identity unless serialize_per_identity is set. Returns once the stream
        is exhausted and every task has finished.
        """
        async for raw in updates:
            self.submit(raw)
        await self.drain()

    def submit(self, raw: RawUpdate) -> asyncio.Task:
        """Schedule handling of one update in its own task."""
        task = asyncio.create_task(self.handle_one(raw))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight update task."""
        # Handlers may submit more updates while we wait.
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # Resolution

    async def handle_one(self, raw: RawUpdate) -> None:
        """Resolve and handle a single update."""
        try:
            update = parse_update(raw)
        except ValidationError as e:
            logger.warning("Dropping malformed update: %s", e)
            return

        ctx = build_context(update, self._sender, trigger=self)

        if self._locks is None:
            await self._dispatch(ctx)
            return

        async with self._locks.hold(ctx.identity):
            await self._dispatch(ctx)

    async def _dispatch(self, ctx: UpdateContext) -> None:
        routes = self._routes

        if routes.all_handler is not None:
            await self._invoke(ctx, routes.all_handler)

        if routes.auto_answer_callbacks and ctx.is_callback:
            await self._auto_answer(ctx)

        if routes.callback_handler is not None and ctx.callback_data:
            try:
                handled = await routes.callback_handler(ctx)
            except Exception as e:
                await self._report(ctx, e)
                handled = False
            if handled:
                logger.debug(
                    "Handled by callback handler",
                    extra=ctx.log_extra(route="callback"),
                )
                return

        handler = routes.resolve_command(ctx.text)
        if handler is not None:
            logger.debug(
                "Resolved to command %r",
                ctx.text,
                extra=ctx.log_extra(route="command", command=ctx.text),
            )
            await self._invoke(ctx, handler)
            return

        if self._store is not None:
            scenario = routes.resolve_trigger(ctx.text)
            if scenario is not None:
                logger.debug(
                    "Starting scenario %r",
                    scenario.name,
                    extra=ctx.log_extra(route="trigger", scenario=scenario.name),
                )
                await self._advance(scenario, ctx, ConversationState(scenario=scenario.name))
                return

            try:
                state = await self._store.load(ctx.identity)
            except Exception as e:
                logger.warning(
                    "Failed to load state, using default handler: %s",
                    e,
                    extra=ctx.log_extra(route="default"),
                )
                await self._handle_default(ctx)
                return

            if state.is_active:
                scenario = routes.find_scenario(state.scenario)
                if scenario is None:
                    # Nothing to resume; run_step leaves the state as is.
                    scenario = Scenario(name=state.scenario)
                logger.debug(
                    "Resuming scenario %r at %r",
                    state.scenario,
                    state.step,
                    extra=ctx.log_extra(
                        route="resume", scenario=state.scenario, step=state.step
                    ),
                )
                await self._advance(scenario, ctx, state)
                return

        await self._handle_default(ctx)

    async def trigger_scenario(self, ctx: UpdateContext, name: str) -> None:
        """Force-start scenario ``name`` for ctx's identity.

        No-op without a state store or for an unknown scenario name.
        """
        if self._store is None:
            return

        scenario = self._routes.find_scenario(name)
        if scenario is None:
            logger.warning(
                "Cannot trigger unknown scenario %r",
                name,
                extra=ctx.log_extra(scenario=name),
            )
            return

        await self._advance(scenario, ctx, ConversationState(scenario=name))

    async def _advance(
        self,
        scenario: Scenario,
        ctx: UpdateContext,
        state: ConversationState,
    ) -> None:
        """Run one step and persist the state as it stands, error or not."""
        try:
            await run_step(scenario, ctx, state, strict=self._strict_steps)
        except Exception as e:
            await self._report(ctx, e, scenario=scenario.name)

        try:
            await self._store.save(ctx.identity, state)
        except Exception as e:
            await self._report(ctx, e, scenario=scenario.name)

    async def _handle_default(self, ctx: UpdateContext) -> None:
        if self._routes.default_handler is not None:
            await self._invoke(ctx, self._routes.default_handler)

    async def _invoke(self, ctx: UpdateContext, handler: UpdateHandler) -> None:
        try:
            await handler(ctx)
        except Exception as e:
            await self._report(ctx, e)

    async def _auto_answer(self, ctx: UpdateContext) -> None:
        try:
            await ctx.answer_callback_query(ctx.callback_data)
        except Exception as e:
            logger.warning(
                "Failed to answer callback query: %s", e, extra=ctx.log_extra()
            )

    async def _report(
        self,
        ctx: UpdateContext,
        error: Exception,
        scenario: str | None = None,
    ) -> None:
        """Hand an exception to the error handler; log it if there is none."""
        extra = ctx.log_extra(scenario=scenario, error=type(error).__name__)
        error_handler = self._routes.error_handler
        if error_handler is None:
            logger.error("Unhandled error: %s", error, exc_info=error, extra=extra)
            return

        try:
            await error_handler(ctx, error)
        except Exception:
            logger.exception("Error handler failed", extra=extra)
