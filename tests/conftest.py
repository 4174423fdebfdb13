"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app
from src.state_store import StoreRegistry, create_store


def increment(state):
    state["count"] += 1


@pytest.fixture
def counter_store():
    """Counter store with an increment action and a setter."""
    return create_store(
        lambda set_state, get_state: {
            "count": 0,
            "increment": lambda: set_state(increment),
            "set_count": lambda n: set_state({"count": n}),
        },
        config={"name": "counter"},
    )


@pytest.fixture
async def client():
    """Async test client fixture with a fresh store registry."""
    app.state.registry = StoreRegistry(unique_names=True)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
