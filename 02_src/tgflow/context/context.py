"""UpdateContext: normalized view of one delivered update."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from ..logging_config import log_context
from ..models import (
    NONE_ID,
    Contact,
    Identity,
    Location,
    PreCheckoutQuery,
    Update,
)
from ..sender import ISender, ReplyMarkup


class IScenarioTrigger(Protocol):
    """Whatever can force-start a scenario for a context (the dispatcher)."""

    async def trigger_scenario(self, ctx: "UpdateContext", name: str) -> None:
        """Start scenario ``name`` from its first step for ctx's identity."""
        ...


@dataclass(frozen=True)
class UpdateContext:
    """Context of one update, built once per delivery and never persisted."""

    update: Update
    sender: ISender = field(repr=False)
    chat_id: int = NONE_ID
    user_id: int = NONE_ID
    text: str = ""
    callback_data: str = ""
    contact: Contact | None = None
    location: Location | None = None
    pre_checkout_query: PreCheckoutQuery | None = None
    trigger: IScenarioTrigger | None = field(default=None, repr=False)

    @property
    def identity(self) -> Identity:
        return Identity(chat_id=self.chat_id, user_id=self.user_id)

    def log_extra(self, **fields: Any) -> dict:
        """``extra`` for log calls about this update."""
        return log_context(
            update_id=self.update.update_id,
            identity=self.identity.key,
            **fields,
        )

    @property
    def is_callback(self) -> bool:
        return self.update.callback_query is not None

    async def send_text(self, text: str, markup: ReplyMarkup | None = None) -> None:
        """Send a text message to the current chat."""
        await self.sender.send_message(self.chat_id, text, reply_markup=markup)

    async def send_html(self, text: str, markup: ReplyMarkup | None = None) -> None:
        """Send a message formatted as HTML to the current chat."""
        await self.sender.send_message(
            self.chat_id, text, parse_mode="HTML", reply_markup=markup
        )

    async def send_location(self, lat: float, lng: float) -> None:
        await self.sender.send_location(self.chat_id, lat, lng)

    async def send_photo(self, path: str) -> None:
        await self.sender.send_photo(self.chat_id, path)

    async def answer_callback_query(self, text: str) -> None:
        """Acknowledge the button press of this update, if it is one."""
        query = self.update.callback_query
        if query is not None:
            await self.sender.answer_callback_query(query.id, text)

    async def trigger_scenario(self, name: str) -> None:
        """Start scenario ``name`` for the current user, bypassing triggers."""
        if self.trigger is not None:
            await self.trigger.trigger_scenario(self, name)
