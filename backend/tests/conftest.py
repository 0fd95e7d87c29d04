"""
Pytest configuration and fixtures for editor service tests.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from backend.main import app
from backend.routes import documents as document_routes


@pytest.fixture(autouse=True)
def clean_sessions():
    """Every test starts with no open editor sessions."""
    document_routes.document_repo.clear()
    yield
    document_routes.document_repo.clear()


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def doc_id(async_client):
    """Id of a freshly opened, empty editor session."""
    res = await async_client.post("/api/documents", json={})
    assert res.status_code == 201
    return res.json()["id"]
