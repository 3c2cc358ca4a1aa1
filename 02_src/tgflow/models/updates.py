"""Raw Telegram update models.

Only the subset of the Bot API ``Update`` object the router reads is typed
here; everything else in the payload is ignored.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _TelegramModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(_TelegramModel):
    """A Telegram user or bot."""

    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None
    language_code: str | None = None


class Chat(_TelegramModel):
    """A private chat, group, supergroup or channel."""

    id: int
    type: str = "private"
    title: str | None = None
    username: str | None = None


class Contact(_TelegramModel):
    """A phone contact shared by the user."""

    phone_number: str
    first_name: str = ""
    last_name: str | None = None
    user_id: int | None = None
    vcard: str | None = None


class Location(_TelegramModel):
    """A point on the map."""

    latitude: float
    longitude: float
    horizontal_accuracy: float | None = None


class Message(_TelegramModel):
    """An incoming message."""

    message_id: int
    chat: Chat
    from_user: User | None = Field(default=None, alias="from")
    date: int = 0
    text: str | None = None
    contact: Contact | None = None
    location: Location | None = None


class CallbackQuery(_TelegramModel):
    """A press on an inline keyboard button."""

    id: str
    from_user: User = Field(alias="from")
    message: Message | None = None
    inline_message_id: str | None = None
    chat_instance: str = ""
    data: str | None = None


class PreCheckoutQuery(_TelegramModel):
    """A payment confirmation request sent before checkout."""

    id: str
    from_user: User = Field(alias="from")
    currency: str
    total_amount: int
    invoice_payload: str = ""
    shipping_option_id: str | None = None
    order_info: dict[str, Any] | None = None


class Update(_TelegramModel):
    """One inbound event from the Bot API."""

    update_id: int
    message: Message | None = None
    callback_query: CallbackQuery | None = None
    pre_checkout_query: PreCheckoutQuery | None = None
