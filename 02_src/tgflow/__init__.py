"""Update router and conversation scenarios for Telegram bots."""

from .app import Application, IApplication
from .config import Settings
from .context import UpdateContext, build_context, parse_update
from .dispatcher import (
    CallbackHandler,
    Dispatcher,
    ErrorHandler,
    IDispatcher,
    Router,
    Routes,
    UpdateHandler,
)
from .errors import (
    ScenarioDefinitionError,
    StateStoreError,
    TgFlowError,
    UnknownStepError,
)
from .models import NONE_ID, ConversationState, Identity, Update
from .scenario import (
    Continue,
    Scenario,
    ScenarioBuilder,
    Step,
    Terminate,
    new_scenario,
    next_step,
    run_step,
    terminate,
)
from .sender import ISender, TelegramSender
from .storage import InMemoryStateStore, IStateStore, SqliteStateStore

__all__ = [
    # Application
    "Application",
    "IApplication",
    "Settings",
    # Models
    "NONE_ID",
    "Identity",
    "ConversationState",
    "Update",
    # Context
    "UpdateContext",
    "build_context",
    "parse_update",
    # Routing
    "Router",
    "Routes",
    "Dispatcher",
    "IDispatcher",
    "UpdateHandler",
    "CallbackHandler",
    "ErrorHandler",
    # Scenarios
    "Scenario",
    "ScenarioBuilder",
    "Step",
    "Continue",
    "Terminate",
    "new_scenario",
    "next_step",
    "terminate",
    "run_step",
    # Components
    "ISender",
    "TelegramSender",
    "IStateStore",
    "InMemoryStateStore",
    "SqliteStateStore",
    # Errors
    "TgFlowError",
    "ScenarioDefinitionError",
    "UnknownStepError",
    "StateStoreError",
]
