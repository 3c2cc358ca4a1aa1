"""Demo bot: replays a file of raw updates through the dispatcher.

Usage: python main.py updates.jsonl   (one Bot API Update object per line)
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import AsyncIterator

from dotenv import load_dotenv

from tgflow import (
    Application,
    ConversationState,
    Router,
    Settings,
    UpdateContext,
    new_scenario,
    next_step,
    terminate,
)
from tgflow.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


async def start(ctx: UpdateContext) -> None:
    await ctx.send_text(
        "Hi! Send /register to sign up.",
        markup={
            "inline_keyboard": [[{"text": "Ping", "callback_data": "ping"}]]
        },
    )


async def fallback(ctx: UpdateContext) -> None:
    await ctx.send_text("Sorry, I did not get that. Try /start.")


async def on_callback(ctx: UpdateContext) -> bool:
    if ctx.callback_data == "ping":
        await ctx.send_text("pong")
        return True
    return False


async def on_error(ctx: UpdateContext, error: Exception) -> None:
    logger.error("Handler failed for chat %s: %s", ctx.chat_id, error)
    await ctx.send_text("Something went wrong, please try again.")


async def ask_name(ctx: UpdateContext, state: ConversationState):
    await ctx.send_text("What is your name?")
    return next_step("name")


async def take_name(ctx: UpdateContext, state: ConversationState):
    state.data["name"] = ctx.text.strip()
    await ctx.send_text("How old are you?")
    return next_step("age")


async def take_age(ctx: UpdateContext, state: ConversationState):
    if not ctx.text.isdigit():
        await ctx.send_text("Please send a number.")
        return next_step("age")
    await ctx.send_html(
        f"Welcome, <b>{state.data['name']}</b> ({int(ctx.text)})!"
    )
    return terminate()


def build_router() -> Router:
    router = Router()
    router.handle("/start", start)
    router.handle_default(fallback)
    router.handle_callbacks(on_callback)
    router.handle_error(on_error)
    router.handle_scenario(
        new_scenario("register")
        .triggered_by("/register")
        .add_step("ask", ask_name)
        .add_step("name", take_name)
        .add_step("age", take_age)
        .create()
    )
    return router


async def read_updates(path: Path) -> AsyncIterator[dict]:
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                yield json.loads(line)


async def replay(path: Path) -> None:
    app = Application(build_router(), Settings())
    await app.start()
    try:
        await app.run(read_updates(path))
    finally:
        await app.stop()


def main():
    """Run the demo bot."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    if len(sys.argv) != 2:
        print(__doc__.strip().splitlines()[-1])
        sys.exit(2)

    asyncio.run(replay(Path(sys.argv[1])))


if __name__ == "__main__":
    main()
