"""Handler registration and the frozen routing table."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping

from ..context import UpdateContext
from ..logging_config import get_logger
from ..scenario import Scenario

logger = get_logger(__name__)


# Handles a message or callback. Exceptions go to the error handler.
UpdateHandler = Callable[[UpdateContext], Awaitable[None]]

# Handles any callback query; returns whether the callback was handled.
CallbackHandler = Callable[[UpdateContext], Awaitable[bool]]

# Called with the exception raised by any other handler.
ErrorHandler = Callable[[UpdateContext, Exception], Awaitable[None]]


@dataclass(frozen=True)
class Routes:
    """Immutable routing table, read concurrently by dispatch tasks."""

    commands: Mapping[str, UpdateHandler] = field(
        default_factory=lambda: MappingProxyType({})
    )
    scenarios: tuple[Scenario, ...] = ()
    default_handler: UpdateHandler | None = None
    all_handler: UpdateHandler | None = None
    callback_handler: CallbackHandler | None = None
    error_handler: ErrorHandler | None = None
    auto_answer_callbacks: bool = False
    _by_trigger: Mapping[str, Scenario] = field(
        default_factory=lambda: MappingProxyType({}), repr=False
    )
    _by_name: Mapping[str, Scenario] = field(
        default_factory=lambda: MappingProxyType({}), repr=False
    )

    def resolve_command(self, text: str) -> UpdateHandler | None:
        return self.commands.get(text)

    def resolve_trigger(self, text: str) -> Scenario | None:
        """Scenario started by ``text``; the earliest registration wins."""
        return self._by_trigger.get(text)

    def find_scenario(self, name: str) -> Scenario | None:
        """Scenario called ``name``; the earliest registration wins."""
        return self._by_name.get(name)


class Router:
    """Collects handlers during setup. Call build() before dispatching."""

    def __init__(self) -> None:
        self._commands: dict[str, UpdateHandler] = {}
        self._scenarios: list[Scenario] = []
        self._default: UpdateHandler | None = None
        self._all: UpdateHandler | None = None
        self._callback: CallbackHandler | None = None
        self._error: ErrorHandler | None = None
        self.auto_answer_callbacks = False

    def handle(self, command: str, handler: UpdateHandler) -> None:
        """Register a handler for an exact command text."""
        self._commands[command] = handler

    def handle_default(self, handler: UpdateHandler) -> None:
        """Set the handler used when no command or scenario matches."""
        self._default = handler

    def handle_all(self, handler: UpdateHandler) -> None:
        """Set a handler called for every update before any other.

        Its errors are reported but never stop further resolution.
        """
        self._all = handler

    def handle_callbacks(self, handler: CallbackHandler) -> None:
        """Set the handler for updates carrying callback data."""
        self._callback = handler

    def handle_error(self, handler: ErrorHandler) -> None:
        """Set the hook that receives every handler exception."""
        self._error = handler

    def handle_scenario(self, scenario: Scenario) -> None:
        """Register a scenario."""
        self._scenarios.append(scenario)

    def build(self) -> Routes:
        """Freeze the registrations into a Routes table."""
        by_trigger: dict[str, Scenario] = {}
        by_name: dict[str, Scenario] = {}
        for scenario in self._scenarios:
            if scenario.name in by_name:
                logger.warning(
                    "Scenario %r registered more than once; keeping the first",
                    scenario.name,
                )
            by_name.setdefault(scenario.name, scenario)
            for trigger in scenario.triggers:
                by_trigger.setdefault(trigger, scenario)

        return Routes(
            commands=MappingProxyType(dict(self._commands)),
            scenarios=tuple(self._scenarios),
            default_handler=self._default,
            all_handler=self._all,
            callback_handler=self._callback,
            error_handler=self._error,
            auto_answer_callbacks=self.auto_answer_callbacks,
            _by_trigger=MappingProxyType(by_trigger),
            _by_name=MappingProxyType(by_name),
        )
