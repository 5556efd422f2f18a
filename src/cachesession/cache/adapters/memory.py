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
"""In-memory cache client with TTL-based expiry."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

_logger = logging.getLogger(__name__)


class InMemoryCacheClient:
    """Process-local cache client with TTL support.

    Suitable for development, testing, and single-process applications.
    The clock is injectable so expiry can be exercised without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[bytes, float | None]] = {}
        self._clock = clock

    async def get(self, key: str) -> bytes | None:
        """Get a value by key. Returns None if missing or expired."""
        entry = self._store.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None

        return value

    async def set(self, key: str, value: bytes, ttl_seconds: int | None = None) -> None:
        """Store a value with optional TTL in seconds."""
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._clock() + ttl_seconds
        self._store[key] = (bytes(value), expires_at)

    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if a live entry existed."""
        present = await self.get(key) is not None
        self._store.pop(key, None)
        return present

    async def start(self) -> None:
        _logger.info("In-memory cache client started")

    async def stop(self) -> None:
        self._store.clear()
        _logger.info("In-memory cache client stopped")

    def __len__(self) -> int:
        return len(self._store)
