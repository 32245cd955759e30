"""
Tests for the ASGI middleware stack.
"""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from autodash.middleware import ErrorHandlerMiddleware, RequestLoggerMiddleware


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestLoggerMiddleware)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    @app.get("/ok")
    async def ok():
        return {"ok": True}

    return app


@pytest.fixture
async def client():
    transport = ASGITransport(app=build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_unhandled_exception_becomes_json_500(client: AsyncClient):
    response = await client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "internal_server_error"
    assert body["path"] == "/boom"
    assert body["retryable"] is False
    assert "kaboom" not in response.text


@pytest.mark.asyncio
async def test_successful_request_passes_through(client: AsyncClient):
    response = await client.get("/ok")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert float(response.headers["x-response-time-ms"]) >= 0
