"""API fixtures — the real app over in-memory collaborators.

ASGITransport does not run the lifespan, so app.state is wired here directly.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from pmflow.main import app


@pytest.fixture
async def client(dispatcher, cache):
    app.state.dispatcher = dispatcher
    app.state.cache = cache
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as ac:
        yield ac
