"""
Unit tests for RequestIDMiddleware and RequestTimingMiddleware.

A throwaway FastAPI app with both middleware classes is driven through
httpx so the full dispatch cycle runs.
"""

import logging
import uuid

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from yieldbook import middleware
from yieldbook.middleware import REQUEST_ID_HEADER, RequestIDMiddleware, RequestTimingMiddleware


@pytest.fixture()
def test_app():
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RequestTimingMiddleware)

    @app.get("/api/v1/users/{user_id}/portfolio")
    async def portfolio(user_id: str):
        return {"user_id": user_id}

    return app


async def _get(app: FastAPI, **kwargs):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get("/api/v1/users/u-1/portfolio", **kwargs)


class TestRequestIDMiddleware:
    @pytest.mark.asyncio
    async def test_generates_uuid_when_absent(self, test_app):
        resp = await _get(test_app)
        uuid.UUID(resp.headers[REQUEST_ID_HEADER])

    @pytest.mark.asyncio
    async def test_reuses_gateway_request_id(self, test_app):
        resp = await _get(test_app, headers={REQUEST_ID_HEADER: "gw-trace-42"})
        assert resp.headers[REQUEST_ID_HEADER] == "gw-trace-42"


class TestRequestTimingMiddleware:
    @pytest.mark.asyncio
    async def test_process_time_header(self, test_app):
        resp = await _get(test_app)
        value = resp.headers["X-Process-Time"]
        assert value.endswith("ms")
        assert float(value[:-2]) >= 0

    @pytest.mark.asyncio
    async def test_slow_requests_log_warning(self, test_app, monkeypatch, caplog):
        monkeypatch.setattr(middleware, "SLOW_REQUEST_MS", -1)
        with caplog.at_level(logging.WARNING, logger="yieldbook.middleware"):
            await _get(test_app)

        records = [r for r in caplog.records if "SLOW" in r.getMessage()]
        assert len(records) == 1
        assert records[0].path == "/api/v1/users/u-1/portfolio"
        assert records[0].status_code == 200
