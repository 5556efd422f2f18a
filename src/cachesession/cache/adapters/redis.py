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
"""Redis-backed cache client."""

from __future__ import annotations

import logging
from typing import Any, cast

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from cachesession.kernel.exceptions import BackendError

_logger = logging.getLogger(__name__)

_DEFAULT_PORT = 6379


class RedisCacheClient:
    """Cache client that delegates to a ``redis.asyncio.Redis``-like client.

    Every ``RedisError`` raised by the underlying client is re-raised as
    :class:`BackendError` carrying the operation and key in its context.
    Connection pooling and socket timeouts belong to the wrapped client.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_address(cls, address: str) -> RedisCacheClient:
        """Build a client from ``host:port`` or a ``redis://`` URL."""
        if "://" in address:
            client = aioredis.from_url(address)  # type: ignore[no-untyped-call,unused-ignore]
        else:
            host, port = _parse_address(address)
            client = aioredis.Redis(host=host, port=port)
        return cls(client)

    async def get(self, key: str) -> bytes | None:
        """Fetch the raw bytes stored under *key*."""
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            raise _backend_error("get", key, exc) from exc
        if raw is None:
            return None
        return raw.encode() if isinstance(raw, str) else cast(bytes, raw)

    async def set(self, key: str, value: bytes, ttl_seconds: int | None = None) -> None:
        """Store *value* under *key* with an optional TTL in seconds."""
        try:
            if ttl_seconds is not None and ttl_seconds <= 0:
                # Redis rejects non-positive expiry; such an entry is already gone.
                await self._client.delete(key)
                return
            await self._client.set(key, value, ex=ttl_seconds)
        except RedisError as exc:
            raise _backend_error("set", key, exc) from exc

    async def delete(self, key: str) -> bool:
        """Remove a key. Returns True if the key existed."""
        try:
            count = await self._client.delete(key)
        except RedisError as exc:
            raise _backend_error("delete", key, exc) from exc
        return cast(bool, count > 0)

    async def start(self) -> None:
        """Validate connectivity by pinging Redis."""
        try:
            await self._client.ping()
        except RedisError as exc:
            raise _backend_error("ping", None, exc) from exc
        _logger.info("Redis cache client connected")

    async def stop(self) -> None:
        """Close the underlying Redis connection pool."""
        await self._client.aclose()
        _logger.info("Redis cache client closed")


def _backend_error(operation: str, key: str | None, exc: Exception) -> BackendError:
    return BackendError(
        f"Cache {operation} failed: {exc}",
        context={"operation": operation, "key": key, "backend": "redis"},
    )


def _parse_address(address: str) -> tuple[str, int]:
    """Split ``host[:port]`` or ``[ipv6][:port]`` into host and port."""
    if address.startswith("["):
        end = address.find("]")
        if end == -1:
            raise ValueError(f"Invalid cache address '{address}': missing ']'")
        host, rest = address[1:end], address[end + 1 :]
        if rest and not rest.startswith(":"):
            raise ValueError(f"Invalid cache address '{address}'")
        port_text = rest[1:] if rest else None
    elif address.count(":") > 1:
        raise ValueError(f"Invalid cache address '{address}': IPv6 hosts must be bracketed, e.g. '[::1]:6379'")
    else:
        host, sep, port_text = address.partition(":")
        if not sep:
            port_text = None

    if not host:
        raise ValueError(f"Invalid cache address '{address}': missing host")
    if port_text is None:
        return host, _DEFAULT_PORT
    if not port_text.isdigit() or not 0 < int(port_text) < 65536:
        raise ValueError(f"Invalid cache address '{address}': bad port '{port_text}'")
    return host, int(port_text)
