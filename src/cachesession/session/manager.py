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
"""SessionManager — issues session identifiers and carries them in cookies."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Literal

from starlette.requests import Request
from starlette.responses import Response

from cachesession.kernel.exceptions import NoSessionCookieException
from cachesession.session.ports.outbound import SessionStore

_logger = logging.getLogger(__name__)

_DEFAULT_COOKIE_NAME = "SESSION_ID"
_DEFAULT_TTL = timedelta(minutes=30)
_EXPIRED_OFFSET = timedelta(hours=1)


def new_session_id() -> str:
    """Return a fresh random 128-bit identifier in canonical UUID text form."""
    return str(uuid.uuid4())


class SessionManager:
    """Manages the session cookie and delegates session data to a store.

    Creating a session only issues an identifier and a cookie; nothing is
    written to the store until the caller sets a value. Destroying a
    session removes the store's master key on a best-effort basis and
    always expires the cookie.
    """

    def __init__(
        self,
        store: SessionStore,
        cookie_name: str = _DEFAULT_COOKIE_NAME,
        ttl: timedelta = _DEFAULT_TTL,
        *,
        secure: bool = True,
        httponly: bool = True,
        samesite: Literal["lax", "strict", "none"] | None = "lax",
        id_generator: Callable[[], str] = new_session_id,
    ) -> None:
        self._store = store
        self._cookie_name = cookie_name
        self._ttl = ttl
        self._secure = secure
        self._httponly = httponly
        self._samesite = samesite
        self._id_generator = id_generator

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def new_session(self, response: Response) -> str:
        """Issue a new session id and set its cookie on *response*."""
        session_id = self._id_generator()
        self._set_cookie(response, session_id, datetime.now(timezone.utc) + self._ttl)
        _logger.debug("Issued session cookie '%s'", self._cookie_name)
        return session_id

    def get_session(self, request: Request) -> str:
        """Return the session id carried by *request*.

        Raises:
            NoSessionCookieException: the cookie is absent or empty.
        """
        session_id = request.cookies.get(self._cookie_name)
        if not session_id:
            raise NoSessionCookieException(
                f"Request has no '{self._cookie_name}' cookie",
                context={"cookie_name": self._cookie_name},
            )
        return session_id

    async def destroy_session(self, response: Response, request: Request) -> None:
        """Delete the session's data and expire its cookie.

        Store failures are logged and swallowed; the cookie is cleared
        regardless.
        """
        try:
            session_id = self.get_session(request)
        except NoSessionCookieException:
            session_id = None

        if session_id is not None:
            try:
                await self._store.delete(session_id)
            except Exception:
                _logger.warning("Failed to delete data for destroyed session", exc_info=True)

        self._set_cookie(response, "", datetime.now(timezone.utc) - _EXPIRED_OFFSET)
        _logger.debug("Cleared session cookie '%s'", self._cookie_name)

    def _set_cookie(self, response: Response, value: str, expires: datetime) -> None:
        response.set_cookie(
            key=self._cookie_name,
            value=value,
            expires=expires,
            path="/",
            secure=self._secure,
            httponly=self._httponly,
            samesite=self._samesite,
        )
