import json
from typing import Callable

import httpx
import pytest
import pytest_asyncio

from catalog_admin.core.category_tree import flatten_categories
from catalog_admin.dependencies import get_http_client
from catalog_admin.main import app
from tests.backend import CATEGORY_TREE, RecordingBackend, make_backend


@pytest.fixture
def tree_nodes():
    return json.loads(json.dumps(CATEGORY_TREE))


@pytest.fixture
def flat_categories(tree_nodes):
    return flatten_categories(tree_nodes)


@pytest.fixture
def tree_backend():
    return RecordingBackend(httpx.Response(200, json={"success": True, "data": {"result": CATEGORY_TREE}}))


@pytest_asyncio.fixture
async def api_client_factory():
    """Клиент к нашему приложению с подмененным бэкендом."""
    clients = []

    async def factory(backend: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        async def override_client():
            async with make_backend(backend) as client:
                yield client

        app.dependency_overrides[get_http_client] = override_client
        client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()
