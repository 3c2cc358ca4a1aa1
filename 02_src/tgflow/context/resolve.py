"""Building an UpdateContext from a raw update."""

from typing import Any

from ..models import NONE_ID, Update
from ..sender import ISender
from .context import IScenarioTrigger, UpdateContext


def resolve_identity(update: Update) -> tuple[int, int]:
    """Return (chat_id, user_id) from whichever sub-payload is present."""
    if update.message is not None:
        message = update.message
        user_id = message.from_user.id if message.from_user else NONE_ID
        return message.chat.id, user_id

    if update.callback_query is not None:
        query = update.callback_query
        chat_id = query.message.chat.id if query.message else NONE_ID
        return chat_id, query.from_user.id

    if update.pre_checkout_query is not None:
        user_id = update.pre_checkout_query.from_user.id
        return user_id, user_id

    return NONE_ID, NONE_ID


def parse_update(raw: Update | dict[str, Any]) -> Update:
    """Validate a raw Bot API payload. Raises pydantic.ValidationError."""
    if isinstance(raw, Update):
        return raw
    return Update.model_validate(raw)


def build_context(
    update: Update,
    sender: ISender,
    trigger: IScenarioTrigger | None = None,
) -> UpdateContext:
    """Normalize an update into an UpdateContext. Pure, never raises."""
    chat_id, user_id = resolve_identity(update)

    text = ""
    contact = None
    location = None
    if update.message is not None:
        text = update.message.text or ""
        contact = update.message.contact
        location = update.message.location

    callback_data = ""
    if update.callback_query is not None:
        callback_data = update.callback_query.data or ""

    return UpdateContext(
        update=update,
        sender=sender,
        chat_id=chat_id,
        user_id=user_id,
        text=text,
        callback_data=callback_data,
        contact=contact,
        location=location,
        pre_checkout_query=update.pre_checkout_query,
        trigger=trigger,
    )
