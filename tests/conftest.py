"""Pytest fixtures for dashboard view engine tests."""

from __future__ import annotations

from typing import Iterator

# Load environment variables from .env before any tests run
from dotenv import load_dotenv

load_dotenv()

import pytest

from src.config import reset_config
from src.config_schema import AppConfig, validate_config_dict
from src.monitoring.session import DashboardViewController, DashboardViewSession
from tests.testing_utils import FakeLoader, FakeQueryBuilder, FakeTransport, make_metadata


@pytest.fixture(autouse=True)
def _isolated_config() -> Iterator[None]:
    """Never leak a loaded config file between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def app_config() -> AppConfig:
    """Default config: 5s tolerance, 1800s default lookback, 15s refresh."""
    return validate_config_dict({})


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def query_builder() -> FakeQueryBuilder:
    return FakeQueryBuilder()


@pytest.fixture
def loader() -> FakeLoader:
    return FakeLoader(
        dashboards={
            "db-1": make_metadata("db-1"),
            "db-2": make_metadata("db-2", event_template="", verdict_template=""),
        }
    )


@pytest.fixture
def session(
    query_builder: FakeQueryBuilder, transport: FakeTransport, app_config: AppConfig
) -> DashboardViewSession:
    """Session for db-1 without metadata (subscriptions are skipped)."""
    return DashboardViewSession("db-1", query_builder, transport, app_config)


@pytest.fixture
def loaded_session(session: DashboardViewSession) -> DashboardViewSession:
    """Session for db-1 with metadata applied and the first subscription started."""
    session.apply_metadata(make_metadata("db-1"))
    return session


@pytest.fixture
def controller(
    loader: FakeLoader,
    query_builder: FakeQueryBuilder,
    transport: FakeTransport,
    app_config: AppConfig,
) -> DashboardViewController:
    return DashboardViewController(loader, query_builder, transport, app_config)
