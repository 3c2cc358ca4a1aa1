"""Update context module."""

from .context import IScenarioTrigger, UpdateContext
from .resolve import build_context, parse_update, resolve_identity

__all__ = [
    "IScenarioTrigger",
    "UpdateContext",
    "build_context",
    "parse_update",
    "resolve_identity",
]
