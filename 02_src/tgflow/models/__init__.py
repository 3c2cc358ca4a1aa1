"""Core data models for tgflow."""

from .state import NONE_ID, ConversationState, Identity
from .updates import (
    CallbackQuery,
    Chat,
    Contact,
    Location,
    Message,
    PreCheckoutQuery,
    Update,
    User,
)

__all__ = [
    # State
    "NONE_ID",
    "Identity",
    "ConversationState",
    # Updates
    "Update",
    "Message",
    "CallbackQuery",
    "PreCheckoutQuery",
    "User",
    "Chat",
    "Contact",
    "Location",
]
