"""Scenario module."""

from .machine import run_step
from .scenario import (
    TERMINATE,
    Continue,
    Scenario,
    ScenarioBuilder,
    Step,
    StepHandler,
    StepResult,
    Terminate,
    new_scenario,
    next_step,
    resolve_next,
    terminate,
)

__all__ = [
    "Scenario",
    "ScenarioBuilder",
    "Step",
    "StepHandler",
    "StepResult",
    "Continue",
    "Terminate",
    "TERMINATE",
    "new_scenario",
    "next_step",
    "terminate",
    "resolve_next",
    "run_step",
]
