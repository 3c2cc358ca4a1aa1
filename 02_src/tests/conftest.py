"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def sender():
    """Create mock sender recording outbound calls."""
    snd = Mock()
    snd.send_message = AsyncMock(return_value=None)
    snd.send_location = AsyncMock(return_value=None)
    snd.send_photo = AsyncMock(return_value=None)
    snd.answer_callback_query = AsyncMock(return_value=None)
    return snd


@pytest.fixture
def store():
    """Create in-memory state store."""
    from tgflow.storage import InMemoryStateStore

    return InMemoryStateStore()


@pytest_asyncio.fixture
async def sqlite_store():
    """Create in-memory SQLite state store for testing."""
    from tgflow.storage import SqliteStateStore

    st = SqliteStateStore(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def router():
    """Create empty router."""
    from tgflow.dispatcher import Router

    return Router()


@pytest.fixture
def errors():
    """Collect (context, exception) pairs passed to the error handler."""
    return []


@pytest.fixture
def error_handler(errors):
    """Error handler appending to ``errors``."""

    async def handler(ctx, error):
        errors.append((ctx, error))

    return handler
