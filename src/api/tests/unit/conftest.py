"""Unit test fixtures with mocked dependencies."""

from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.settings import TenancySettings


def async_context(value=None) -> MagicMock:
    """Build a mock usable with ``async with`` that yields ``value``.

    ``__aexit__`` returns False so exceptions raised in the block propagate.
    """
    ctx_manager = MagicMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=value)
    ctx_manager.__aexit__ = AsyncMock(return_value=False)
    return ctx_manager


@pytest.fixture
def tenancy_settings() -> TenancySettings:
    """Provide tenancy settings independent of the environment."""
    return TenancySettings(
        schema_prefix="tenant_",
        shared_schema="public",
        base_domain="faceblog.com",
        reserved_subdomains=["www", "api", "admin"],
        provisioning_timeout_seconds=5,
    )


@pytest.fixture
def mock_session() -> Mock:
    """Mock AsyncSession whose begin() and begin_nested() work as context managers."""
    session = Mock(spec=AsyncSession)
    session.begin = Mock(return_value=async_context())
    session.begin_nested = Mock(return_value=async_context())
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.connection = AsyncMock()
    return session


@pytest.fixture
def session_factory(mock_session) -> Mock:
    """Mock async_sessionmaker producing mock_session."""
    return Mock(return_value=async_context(mock_session))


@pytest.fixture
def make_async_context():
    """Expose async_context to tests that build their own context managers."""
    return async_context
