"""Shared fixtures for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from dividend_tracker.api.app import create_app
from dividend_tracker.api.auth import verify_token
from dividend_tracker.api.dependencies import get_holding_service
from dividend_tracker.auth.verifier import VerifiedIdentity


@pytest.fixture
def identity() -> VerifiedIdentity:
    return VerifiedIdentity(subject="user-1", email="investor@example.com", role="user")


@pytest.fixture
def mock_service() -> MagicMock:
    """Mock HoldingService."""
    service = MagicMock()
    service.list_holdings = AsyncMock(return_value=[])
    service.create_holding = AsyncMock()
    service.update_shares = AsyncMock()
    service.delete_holding = AsyncMock(return_value=None)
    service.refresh = AsyncMock()
    service.get_valuation = AsyncMock()
    service.get_quote = AsyncMock()
    service.get_dividend_info = AsyncMock()
    return service


@pytest.fixture
def mock_context() -> MagicMock:
    context = MagicMock()
    context.database.health_check = AsyncMock(return_value=True)
    context.verifier = None
    return context


@pytest.fixture
def app(mock_context):
    return create_app(context=mock_context)


@pytest.fixture
def client(app, mock_service, identity):
    """TestClient with an authenticated caller and mocked service."""
    app.dependency_overrides[get_holding_service] = lambda: mock_service
    app.dependency_overrides[verify_token] = lambda: identity

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
