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
"""Cache-backed session store."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from cachesession.cache.ports.outbound import CacheClient
from cachesession.kernel.exceptions import DecodingError, SessionEntryNotFoundException
from cachesession.session.codec import JsonEnvelopeCodec, SessionCodec

_logger = logging.getLogger(__name__)

_SEPARATOR = ":"


class CacheSessionStore:
    """Session store backed by a :class:`CacheClient`.

    Each value lives under the composite key ``{session_id}:{key}`` and
    expires after ``ttl`` (whole seconds, truncated). The bare session id is
    the *master key*; ``delete`` removes exactly that key.

    With ``track_keys`` enabled the master key holds an index of the data
    keys written through ``set``, so ``delete`` can remove every composite
    entry without scanning the cache. With it disabled, composite entries
    are left for the backend to expire.

    Index updates are read-modify-write and not atomic across concurrent
    ``set`` calls on one session; a key missed by the index still expires
    with its TTL.
    """

    def __init__(
        self,
        client: CacheClient,
        ttl: timedelta,
        *,
        codec: SessionCodec | None = None,
        track_keys: bool = True,
    ) -> None:
        self._client = client
        self._ttl_seconds = int(ttl.total_seconds())
        self._codec: SessionCodec = codec if codec is not None else JsonEnvelopeCodec()
        self._track_keys = track_keys

    @property
    def client(self) -> CacheClient:
        return self._client

    @property
    def track_keys(self) -> bool:
        return self._track_keys

    @staticmethod
    def entry_key(session_id: str, key: str) -> str:
        """Return the composite cache key for a session value."""
        return f"{session_id}{_SEPARATOR}{key}"

    async def set(self, session_id: str, key: str, value: Any) -> None:
        """Encode and store a session value with the configured TTL."""
        raw = self._codec.encode(value)
        await self._client.set(self.entry_key(session_id, key), raw, self._ttl_seconds)
        if self._track_keys:
            await self._index_key(session_id, key)

    async def get(self, session_id: str, key: str) -> Any:
        """Fetch and decode a session value."""
        raw = await self._client.get(self.entry_key(session_id, key))
        if raw is None:
            raise SessionEntryNotFoundException(
                f"No value for '{key}' in session",
                context={"session_id": session_id, "key": key},
            )
        return self._codec.decode(raw)

    async def delete(self, session_id: str) -> None:
        """Remove the session's master key and, when tracked, its entries."""
        if self._track_keys:
            for key in await self._indexed_keys(session_id):
                await self._client.delete(self.entry_key(session_id, key))
        await self._client.delete(session_id)

    async def _indexed_keys(self, session_id: str) -> list[str]:
        raw = await self._client.get(session_id)
        if raw is None:
            return []
        try:
            keys = self._codec.decode(raw)
        except DecodingError:
            _logger.warning("Ignoring unreadable key index for session '%s'", session_id)
            return []
        if not isinstance(keys, list):
            _logger.warning("Ignoring unreadable key index for session '%s'", session_id)
            return []
        return [k for k in keys if isinstance(k, str)]

    async def _index_key(self, session_id: str, key: str) -> None:
        keys = await self._indexed_keys(session_id)
        if key not in keys:
            keys.append(key)
        await self._client.set(session_id, self._codec.encode(keys), self._ttl_seconds)
