import json

import httpx
import pytest

from tests.backend import RecordingBackend


class TestProxyAPI:
    @pytest.mark.asyncio
    async def test_get_forwards_path_query_and_auth(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(200, json={"success": True, "data": {"result": []}}))
        client = await api_client_factory(backend)

        response = await client.get(
            "/api/proxy/api/v1/category",
            params={"page": 2, "limit": 10},
            headers={"Authorization": "Bearer secret"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"result": []}}
        forwarded = backend.requests[0]
        assert forwarded.method == "GET"
        assert forwarded.url.path == "/api/v1/category"
        assert forwarded.url.params["page"] == "2"
        assert forwarded.url.params["limit"] == "10"
        assert forwarded.headers["Authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_post_relays_json_body_and_status(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(400, json={"success": False, "message": "Name required"}))
        client = await api_client_factory(backend)

        response = await client.post("/api/proxy/api/v1/category", json={"categoryName": ""})

        assert response.status_code == 400
        assert response.json()["message"] == "Name required"
        assert json.loads(backend.requests[0].content) == {"categoryName": ""}

    @pytest.mark.asyncio
    async def test_invalid_json_body(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(200, json={"success": True}))
        client = await api_client_factory(backend)

        response = await client.put(
            "/api/proxy/api/v1/category/1",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Invalid request body"}
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_binary_body_forwarded_byte_for_byte(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(200, json={"success": True}))
        client = await api_client_factory(backend)
        payload = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x80\xfe"

        response = await client.post(
            "/api/proxy/api/v1/upload",
            content=payload,
            headers={"Content-Type": "application/octet-stream"},
        )

        assert response.status_code == 200
        forwarded = backend.requests[0]
        assert forwarded.content == payload
        assert forwarded.headers["Content-Type"] == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_binary_response_relayed_unchanged(self, api_client_factory):
        image = b"\x89PNG\r\n\x1a\n\x00\xff"
        backend = RecordingBackend(httpx.Response(200, content=image, headers={"Content-Type": "image/png"}))
        client = await api_client_factory(backend)

        response = await client.get("/api/proxy/uploads/logo.png")

        assert response.status_code == 200
        assert response.content == image
        assert response.headers["content-type"] == "image/png"

    @pytest.mark.asyncio
    async def test_delete_sends_no_body(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(200, json={"success": True}))
        client = await api_client_factory(backend)

        response = await client.delete("/api/proxy/api/v1/subcategory/7")

        assert response.status_code == 200
        assert backend.requests[0].method == "DELETE"
        assert backend.requests[0].content == b""

    @pytest.mark.asyncio
    async def test_empty_success_becomes_envelope(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(204))
        client = await api_client_factory(backend)

        response = await client.delete("/api/proxy/api/v1/category/7")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Operation completed successfully"}

    @pytest.mark.asyncio
    async def test_text_response_is_relayed(self, api_client_factory):
        backend = RecordingBackend(httpx.Response(404, text="Not Found"))
        client = await api_client_factory(backend)

        response = await client.get("/api/proxy/api/v1/nowhere")

        assert response.status_code == 404
        assert response.text == "Not Found"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_backend_unreachable(self, api_client_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = await api_client_factory(handler)

        response = await client.get("/api/proxy/api/v1/category")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Error: connection refused"}
