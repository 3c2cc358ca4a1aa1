"""Conversation state models."""

import copy
from dataclasses import dataclass, field
from typing import Any

NONE_ID = 0  # identity part that could not be resolved from the update


@dataclass(frozen=True)
class Identity:
    """The (chat, user) pair conversation state is keyed by."""

    chat_id: int = NONE_ID
    user_id: int = NONE_ID

    @property
    def key(self) -> str:
        """Stable string form used as a storage key."""
        return f"{self.chat_id}:{self.user_id}"


@dataclass
class ConversationState:
    """Persistent progress of one identity through a scenario."""

    scenario: str = ""
    step: str = ""
    data: dict[str, Any] | None = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        """Whether a scenario is waiting for the next input."""
        return bool(self.scenario and self.step)

    def clear(self) -> None:
        """Return to idle: scenario, step and scratch data go together."""
        self.scenario = ""
        self.step = ""
        self.data = None

    def clone(self) -> "ConversationState":
        return ConversationState(
            scenario=self.scenario,
            step=self.step,
            data=copy.deepcopy(self.data),
        )

    def to_dict(self) -> dict:
        return {"scenario": self.scenario, "step": self.step, "data": self.data}

    @classmethod
    def from_dict(cls, raw: dict) -> "ConversationState":
        return cls(
            scenario=raw.get("scenario") or "",
            step=raw.get("step") or "",
            data=raw.get("data"),
        )
