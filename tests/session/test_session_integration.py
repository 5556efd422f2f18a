# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""End-to-end session flow: cookie issue, data round trip, teardown."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import timedelta
from http.cookies import SimpleCookie

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from cachesession.cache.adapters.memory import InMemoryCacheClient
from cachesession.core.config import Config
from cachesession.kernel.exceptions import NoSessionCookieException, SessionEntryNotFoundException
from cachesession.kernel.lifecycle import managed
from cachesession.session.adapters.cache import CacheSessionStore
from cachesession.session.configuration import create_session_manager
from cachesession.session.manager import SessionManager


def _request_with(response: Response) -> Request:
    """Build the follow-up request a browser would send after *response*."""
    jar: SimpleCookie = SimpleCookie()
    for header in response.headers.getlist("set-cookie"):
        jar.load(header)
    cookie = "; ".join(f"{name}={morsel.value}" for name, morsel in jar.items())
    return Request({"type": "http", "method": "GET", "path": "/", "headers": [(b"cookie", cookie.encode())]})


def _manager(track_keys: bool) -> SessionManager:
    store = CacheSessionStore(InMemoryCacheClient(), timedelta(minutes=30), track_keys=track_keys)
    return SessionManager(store, cookie_name="SID", ttl=timedelta(minutes=30))


class TestSessionFlow:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("track_keys", [True, False])
    async def test_create_store_read(self, track_keys):
        manager = _manager(track_keys)
        login = Response()
        session_id = manager.new_session(login)

        await manager.store.set(session_id, "cart", ["item1", "item2"])

        assert manager.get_session(_request_with(login)) == session_id
        assert await manager.store.get(session_id, "cart") == ["item1", "item2"]

    @pytest.mark.asyncio
    async def test_destroy_with_key_tracking_removes_data(self):
        manager = _manager(track_keys=True)
        login = Response()
        session_id = manager.new_session(login)
        await manager.store.set(session_id, "cart", ["item1", "item2"])

        await manager.destroy_session(Response(), _request_with(login))

        with pytest.raises(SessionEntryNotFoundException):
            await manager.store.get(session_id, "cart")

    @pytest.mark.asyncio
    async def test_destroy_without_key_tracking_leaves_data_to_ttl(self):
        manager = _manager(track_keys=False)
        login = Response()
        session_id = manager.new_session(login)
        await manager.store.set(session_id, "cart", ["item1", "item2"])

        await manager.destroy_session(Response(), _request_with(login))

        # Only the master key is removed; the entry expires with its TTL.
        assert await manager.store.get(session_id, "cart") == ["item1", "item2"]

    @pytest.mark.asyncio
    async def test_cleared_cookie_reads_as_no_session(self):
        manager = _manager(track_keys=True)
        logout = Response()
        await manager.destroy_session(logout, _request_with(Response()))

        with pytest.raises(NoSessionCookieException):
            manager.get_session(_request_with(logout))


class TrackingClient(InMemoryCacheClient):
    def __init__(self) -> None:
        super().__init__()
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True


def build_app(manager: SessionManager, client: TrackingClient) -> Starlette:
    async def login(request: Request) -> JSONResponse:
        response = JSONResponse({"ok": True})
        session_id = manager.new_session(response)
        await manager.store.set(session_id, "cart", ["item1", "item2"])
        return response

    async def cart(request: Request) -> JSONResponse:
        try:
            session_id = manager.get_session(request)
        except NoSessionCookieException:
            return JSONResponse({"error": "no session"}, status_code=401)
        try:
            items = await manager.store.get(session_id, "cart")
        except SessionEntryNotFoundException:
            return JSONResponse({"error": "empty"}, status_code=404)
        return JSONResponse({"cart": items})

    async def logout(request: Request) -> JSONResponse:
        response = JSONResponse({"ok": True})
        await manager.destroy_session(response, request)
        return response

    @asynccontextmanager
    async def lifespan(app):
        async with managed(client):
            yield

    return Starlette(
        routes=[
            Route("/login", login, methods=["POST"]),
            Route("/cart", cart),
            Route("/logout", logout, methods=["POST"]),
        ],
        lifespan=lifespan,
    )


class TestStarletteApplication:
    @pytest.mark.parametrize("track_keys, expected", [(True, None), (False, ["item1", "item2"])])
    def test_login_cart_logout(self, track_keys, expected):
        client = TrackingClient()
        config = Config({"cachesession": {"session": {"store": "memory", "cookie_name": "SID", "track_keys": track_keys}}})
        manager = create_session_manager(config, client=client)
        app = build_app(manager, client)

        with TestClient(app, base_url="https://testserver") as http:
            assert client.started is True
            assert http.get("/cart").status_code == 401

            assert http.post("/login").status_code == 200
            session_id = http.cookies.get("SID")
            assert session_id

            response = http.get("/cart")
            assert response.status_code == 200
            assert response.json() == {"cart": ["item1", "item2"]}

            assert http.post("/logout").status_code == 200
            assert http.cookies.get("SID") is None
            assert http.get("/cart").status_code == 401

        assert client.stopped is True

        if expected is None:
            with pytest.raises(SessionEntryNotFoundException):
                asyncio.run(manager.store.get(session_id, "cart"))
        else:
            assert asyncio.run(manager.store.get(session_id, "cart")) == expected
