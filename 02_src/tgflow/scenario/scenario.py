"""Scenario definitions and the builder used to author them.

A scenario (use case, user flow) is a named list of steps. The first step runs
when the user sends one of the trigger phrases; each step handler decides
which step handles the user's next input, or ends the scenario.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Union

from ..errors import ScenarioDefinitionError
from ..models import ConversationState

if TYPE_CHECKING:
    from ..context import UpdateContext


@dataclass(frozen=True)
class Continue:
    """Wait for the next input at ``step``."""

    step: str

    def __post_init__(self):
        if not self.step:
            raise ValueError("Continue requires a step name; use terminate()")


class Terminate:
    """End the scenario and clear the conversation state."""

    _instance: "Terminate | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Terminate()"


TERMINATE = Terminate()

# A bare string is accepted too: "" terminates, anything else continues.
StepResult = Union[Continue, Terminate, str, None]

StepHandler = Callable[
    ["UpdateContext", ConversationState], Awaitable[StepResult]
]


def next_step(name: str) -> Continue:
    return Continue(name)


def terminate() -> Terminate:
    return TERMINATE


def resolve_next(result: StepResult) -> str:
    """Flatten a step result into the persisted step name ("" = terminate)."""
    if isinstance(result, Continue):
        return result.step
    if result is None or isinstance(result, Terminate):
        return ""
    if isinstance(result, str):
        return result
    raise TypeError(f"Unsupported step result: {result!r}")


@dataclass(frozen=True)
class Step:
    """One named unit of scenario logic."""

    name: str
    handler: StepHandler


@dataclass(frozen=True)
class Scenario:
    """Immutable scenario definition."""

    name: str
    triggers: tuple[str, ...] = ()
    steps: tuple[Step, ...] = ()

    @property
    def entry(self) -> Step | None:
        return self.steps[0] if self.steps else None

    def find_step(self, name: str) -> Step | None:
        for step in self.steps:
            if step.name == name:
                return step
        return None


class ScenarioBuilder:
    """Fluent builder for scenarios."""

    def __init__(self, name: str):
        if not name:
            raise ScenarioDefinitionError("Scenario name must not be empty")
        self._name = name
        self._triggers: list[str] = []
        self._steps: list[Step] = []

    def triggered_by(self, *triggers: str) -> "ScenarioBuilder":
        """Set the commands or phrases that start the scenario."""
        self._triggers = list(triggers)
        return self

    def add_step(self, name: str, handler: StepHandler) -> "ScenarioBuilder":
        """Append a step. Step names must be unique within the scenario."""
        if not name:
            raise ScenarioDefinitionError(
                f"Scenario {self._name!r}: step name must not be empty"
            )
        if any(step.name == name for step in self._steps):
            raise ScenarioDefinitionError(
                f"Scenario {self._name!r}: duplicate step {name!r}"
            )
        self._steps.append(Step(name=name, handler=handler))
        return self

    def create(self) -> Scenario:
        """Return the finished, immutable scenario."""
        if not self._steps:
            raise ScenarioDefinitionError(
                f"Scenario {self._name!r} has no steps"
            )
        return Scenario(
            name=self._name,
            triggers=tuple(self._triggers),
            steps=tuple(self._steps),
        )


def new_scenario(name: str) -> ScenarioBuilder:
    """Start building a scenario. The name should be unique."""
    return ScenarioBuilder(name)
