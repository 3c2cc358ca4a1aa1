"""Exception hierarchy."""


class TgFlowError(Exception):
    """Base class for all tgflow errors."""


class ScenarioDefinitionError(TgFlowError):
    """A scenario was assembled incorrectly (raised at setup time)."""


class UnknownStepError(TgFlowError):
    """Persisted step name has no counterpart in the scenario definition."""

    def __init__(self, scenario: str, step: str):
        super().__init__(f"Scenario {scenario!r} has no step {step!r}")
        self.scenario = scenario
        self.step = step


class StateStoreError(TgFlowError):
    """Conversation state could not be loaded or saved."""
