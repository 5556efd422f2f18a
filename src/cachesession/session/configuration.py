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
"""Builds the session subsystem from configuration."""

from __future__ import annotations

from datetime import timedelta
from typing import Literal, cast

from cachesession.cache.adapters.memory import InMemoryCacheClient
from cachesession.cache.adapters.redis import RedisCacheClient
from cachesession.cache.ports.outbound import CacheClient
from cachesession.config.properties.session import SessionProperties
from cachesession.core.config import Config
from cachesession.session.adapters.cache import CacheSessionStore
from cachesession.session.manager import SessionManager


def create_cache_client(props: SessionProperties) -> CacheClient:
    """Create the cache client selected by ``cachesession.session.store``.

    The client is not connected yet; open it with ``start()`` (or
    :func:`cachesession.kernel.lifecycle.managed`) at application startup.
    """
    store_type = props.store.lower()
    if store_type == "redis":
        return RedisCacheClient.from_address(props.address)
    if store_type == "memory":
        return InMemoryCacheClient()
    raise ValueError(f"Unknown session store '{props.store}' (expected 'redis' or 'memory')")


def create_session_manager(config: Config, client: CacheClient | None = None) -> SessionManager:
    """Bind ``SessionProperties`` and assemble client, store, and manager.

    Pass *client* to share a cache client the application already owns.
    """
    props = config.bind(SessionProperties)
    if client is None:
        client = create_cache_client(props)

    ttl = timedelta(seconds=props.ttl)
    store = CacheSessionStore(client, ttl, track_keys=props.track_keys)
    samesite = props.samesite.lower() if props.samesite else None
    return SessionManager(
        store,
        cookie_name=props.cookie_name,
        ttl=ttl,
        secure=props.secure,
        httponly=props.httponly,
        samesite=cast(Literal["lax", "strict", "none"] | None, samesite),
    )
