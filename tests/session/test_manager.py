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
"""Tests for SessionManager — cookie issue, lookup, and teardown."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from http.cookies import Morsel, SimpleCookie
from typing import Any

import pytest
from starlette.requests import Request
from starlette.responses import Response

from cachesession.kernel.exceptions import BackendError, NoSessionCookieException
from cachesession.session.manager import SessionManager, new_session_id


class RecordingStore:
    def __init__(self, fail_delete: bool = False) -> None:
        self.deleted: list[str] = []
        self.fail_delete = fail_delete

    async def set(self, session_id: str, key: str, value: Any) -> None:
        raise AssertionError("SessionManager must not write session data")

    async def get(self, session_id: str, key: str) -> Any:
        raise AssertionError("SessionManager must not read session data")

    async def delete(self, session_id: str) -> None:
        if self.fail_delete:
            raise BackendError("Cache delete failed")
        self.deleted.append(session_id)


class CancelledStore(RecordingStore):
    async def delete(self, session_id: str) -> None:
        raise asyncio.CancelledError()


def _request(cookie: str | None = None) -> Request:
    headers = [(b"cookie", cookie.encode("latin-1"))] if cookie is not None else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def _cookie(response: Response, name: str) -> Morsel:
    headers = response.headers.getlist("set-cookie")
    assert headers, "no Set-Cookie header on response"
    jar: SimpleCookie = SimpleCookie()
    jar.load(headers[-1])
    assert name in jar
    return jar[name]


def _expires(morsel: Morsel) -> datetime:
    return parsedate_to_datetime(morsel["expires"])


class TestNewSession:
    def test_returns_uuid_and_sets_cookie(self):
        manager = SessionManager(RecordingStore(), cookie_name="SID", ttl=timedelta(hours=2))
        response = Response()

        session_id = manager.new_session(response)

        assert str(uuid.UUID(session_id)) == session_id
        cookie = _cookie(response, "SID")
        assert cookie.value == session_id
        assert cookie["path"] == "/"
        assert cookie["httponly"] is True
        assert cookie["secure"] is True
        assert cookie["samesite"].lower() == "lax"

    def test_cookie_expires_after_ttl(self):
        manager = SessionManager(RecordingStore(), ttl=timedelta(hours=2))
        response = Response()
        before = datetime.now(timezone.utc)

        manager.new_session(response)

        expires = _expires(_cookie(response, "SESSION_ID"))
        assert before + timedelta(hours=2) - timedelta(seconds=1) <= expires
        assert expires <= datetime.now(timezone.utc) + timedelta(hours=2)

    def test_does_not_touch_store(self):
        store = RecordingStore()
        SessionManager(store).new_session(Response())
        assert store.deleted == []

    def test_ids_are_unique(self):
        manager = SessionManager(RecordingStore())
        ids = {manager.new_session(Response()) for _ in range(10_000)}
        assert len(ids) == 10_000

    def test_custom_id_generator(self):
        manager = SessionManager(RecordingStore(), id_generator=lambda: "fixed-id")
        assert manager.new_session(Response()) == "fixed-id"

    def test_cookie_flags_are_configurable(self):
        manager = SessionManager(RecordingStore(), secure=False, httponly=False, samesite="strict")
        response = Response()
        manager.new_session(response)
        cookie = _cookie(response, "SESSION_ID")
        assert not cookie["secure"]
        assert not cookie["httponly"]
        assert cookie["samesite"].lower() == "strict"

    def test_new_session_id_is_random_uuid4(self):
        assert uuid.UUID(new_session_id()).version == 4


class TestGetSession:
    def test_reads_named_cookie(self):
        manager = SessionManager(RecordingStore(), cookie_name="SID")
        assert manager.get_session(_request("other=1; SID=abc-123")) == "abc-123"

    def test_missing_cookie_raises(self):
        manager = SessionManager(RecordingStore(), cookie_name="SID")
        with pytest.raises(NoSessionCookieException) as exc_info:
            manager.get_session(_request())
        assert exc_info.value.context == {"cookie_name": "SID"}

    def test_other_cookies_only_raises(self):
        manager = SessionManager(RecordingStore(), cookie_name="SID")
        with pytest.raises(NoSessionCookieException):
            manager.get_session(_request("theme=dark"))

    def test_empty_cookie_raises(self):
        manager = SessionManager(RecordingStore(), cookie_name="SID")
        with pytest.raises(NoSessionCookieException):
            manager.get_session(_request('SID=""'))


class TestDestroySession:
    @pytest.mark.asyncio
    async def test_deletes_from_store_and_expires_cookie(self):
        store = RecordingStore()
        manager = SessionManager(store, cookie_name="SID")
        response = Response()

        await manager.destroy_session(response, _request("SID=abc"))

        assert store.deleted == ["abc"]
        cookie = _cookie(response, "SID")
        assert cookie.value == ""
        assert cookie["path"] == "/"
        assert cookie["httponly"] is True
        assert cookie["secure"] is True
        assert _expires(cookie) < datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_without_cookie_skips_store_but_clears_cookie(self):
        store = RecordingStore()
        manager = SessionManager(store, cookie_name="SID")
        response = Response()

        await manager.destroy_session(response, _request())

        assert store.deleted == []
        assert _expires(_cookie(response, "SID")) < datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_store_failure_is_swallowed_and_cookie_cleared(self, caplog):
        manager = SessionManager(RecordingStore(fail_delete=True), cookie_name="SID")
        response = Response()

        with caplog.at_level(logging.WARNING, logger="cachesession.session.manager"):
            await manager.destroy_session(response, _request("SID=abc"))

        assert _expires(_cookie(response, "SID")) < datetime.now(timezone.utc)
        assert any("Failed to delete" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_cookie_expires_one_hour_ago(self):
        manager = SessionManager(RecordingStore())
        response = Response()

        await manager.destroy_session(response, _request())

        expires = _expires(_cookie(response, "SESSION_ID"))
        expected = datetime.now(timezone.utc) - timedelta(hours=1)
        assert abs((expires - expected).total_seconds()) < 5

    @pytest.mark.asyncio
    async def test_cancellation_during_delete_propagates(self, caplog):
        manager = SessionManager(CancelledStore(), cookie_name="SID")

        with caplog.at_level(logging.WARNING, logger="cachesession.session.manager"):
            with pytest.raises(asyncio.CancelledError):
                await manager.destroy_session(Response(), _request("SID=abc"))

        assert not any("Failed to delete" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_cancelled_task_does_not_clear_cookie(self):
        manager = SessionManager(CancelledStore(), cookie_name="SID")
        response = Response()

        task = asyncio.ensure_future(manager.destroy_session(response, _request("SID=abc")))
        with pytest.raises(asyncio.CancelledError):
            await task

        assert task.cancelled()
        assert response.headers.getlist("set-cookie") == []
