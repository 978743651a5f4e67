"""Integration test fixtures for the tenancy engine.

These fixtures require a running PostgreSQL instance. Connection settings
come from the FACEBLOG_DB_* environment variables; tests are skipped when
the database cannot be reached.
"""

from __future__ import annotations

import os
import secrets
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_tenancy_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings, TenancySettings
from tenancy.engine import TenancyEngine
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.schema_context import quote_schema

# Every tenant created by these tests uses this subdomain prefix
TEST_SUBDOMAIN_PREFIX = "it-"
TEST_SCHEMA_PATTERN = r"tenant\_it\_%"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        FACEBLOG_DB_HOST, FACEBLOG_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("FACEBLOG_DB_HOST", "localhost"),
        port=int(os.getenv("FACEBLOG_DB_PORT", "5432")),
        database=os.getenv("FACEBLOG_DB_DATABASE", "faceblog"),
        username=os.getenv("FACEBLOG_DB_USERNAME", "faceblog"),
        password=SecretStr(os.getenv("FACEBLOG_DB_PASSWORD", "faceblog_dev_password")),
        pool_min_connections=1,
        pool_max_connections=5,
    )


@pytest.fixture
def tenancy_settings() -> TenancySettings:
    """Tenancy settings independent of the environment."""
    return TenancySettings(
        schema_prefix="tenant_",
        shared_schema="public",
        base_domain="faceblog.test",
        reserved_subdomains=["www", "api", "admin"],
        provisioning_timeout_seconds=30,
    )


async def _drop_test_tenants(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        result = await conn.execute(
            text("SELECT nspname FROM pg_namespace WHERE nspname LIKE :pattern"),
            {"pattern": TEST_SCHEMA_PATTERN},
        )
        for schema_name in result.scalars().all():
            await conn.execute(text(f"DROP SCHEMA {quote_schema(schema_name)} CASCADE"))
        await conn.execute(
            TenantModel.__table__.delete().where(
                TenantModel.subdomain.startswith(TEST_SUBDOMAIN_PREFIX)
            )
        )


async def _create_engine(settings: DatabaseSettings) -> AsyncEngine:
    engine = create_tenancy_engine(settings)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")
    return engine


@pytest_asyncio.fixture
async def db_engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine with the catalog table in place.

    Test tenants are removed before and after each test.
    """
    engine = await _create_engine(integration_db_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await _drop_test_tenants(engine)

    yield engine

    await _drop_test_tenants(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def single_connection_engine(
    integration_db_settings: DatabaseSettings, db_engine: AsyncEngine
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine whose pool holds exactly one connection.

    Consecutive operations are guaranteed to reuse the same connection.
    """
    settings = integration_db_settings.model_copy(
        update={"pool_min_connections": 1, "pool_max_connections": 1}
    )
    engine = await _create_engine(settings)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
def tenancy(
    db_engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    tenancy_settings: TenancySettings,
) -> TenancyEngine:
    """Provide a TenancyEngine bound to the integration database."""
    return TenancyEngine(
        engine=db_engine, session_factory=session_factory, settings=tenancy_settings
    )


@pytest.fixture
def unique_subdomain() -> str:
    """A subdomain no other test uses."""
    return f"{TEST_SUBDOMAIN_PREFIX}{secrets.token_hex(4)}"


@pytest.fixture
def provisioning_input(unique_subdomain: str) -> dict[str, str]:
    return {
        "name": "Integration Blog",
        "subdomain": unique_subdomain,
        "plan": "free",
        "admin_email": "owner@faceblog.dev",
        "admin_password_hash": "$2b$12$integrationhashintegrationhashintegrationhash",
        "admin_name": "Ada Owner",
    }
