"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from contextlib import asynccontextmanager
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest

from mealdeal.storage.seed import demo_offers, demo_restaurants

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0)


@pytest.fixture
def now():
    """Pinned clock for fixture offers."""
    return FIXED_NOW


@pytest.fixture
def restaurants(now):
    """The eight demo restaurants."""
    return demo_restaurants(now)


@pytest.fixture
def offers(now, restaurants):
    """The 22-offer demo fixture."""
    return demo_offers(now, restaurants)


@pytest.fixture
def mock_session():
    """Mock SQLAlchemy async session."""
    return AsyncMock()


@pytest.fixture
def mock_db(mock_session):
    """Mock Database whose session() yields mock_session."""
    db = MagicMock()

    @asynccontextmanager
    async def session():
        yield mock_session

    db.session = session
    db.ping = AsyncMock()
    return db


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio client."""
    client = AsyncMock()
    client.get.return_value = None
    return client


@pytest.fixture
def mock_telegram_update():
    """Mock Telegram update fixture."""
    update = Mock()
    update.effective_user = Mock()
    update.effective_user.id = 12345
    update.effective_user.username = "testuser"
    update.effective_user.full_name = "Test User"
    update.message = Mock()
    update.message.text = "/start"
    update.message.reply_text = AsyncMock()
    return update


@pytest.fixture
def mock_telegram_context():
    """Mock Telegram context fixture."""
    context = Mock()
    context.bot = Mock()
    context.bot_data = {}
    context.user_data = {}
    return context
