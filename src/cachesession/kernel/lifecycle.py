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
"""Unified lifecycle protocol for infrastructure adapters.

Adapters that own connections or pools implement start() and stop().
The application opens them at startup and closes them at shutdown, in
registration order and reverse order respectively.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol, runtime_checkable

_logger = logging.getLogger(__name__)


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for infrastructure adapters."""

    async def start(self) -> None:
        """Initialize connections and validate connectivity.

        If the connection fails, raise -- startup should fail fast.
        """
        ...

    async def stop(self) -> None:
        """Release connections and clean up resources.

        Best-effort cleanup -- exceptions are logged by :func:`managed`
        but do not prevent shutdown of other adapters.
        """
        ...


@asynccontextmanager
async def managed(*components: Lifecycle) -> AsyncIterator[None]:
    """Start *components* in order and stop them in reverse on exit.

    A component that fails to start aborts startup; the components started
    before it are stopped again before the error propagates.

    Usage with Starlette::

        @asynccontextmanager
        async def lifespan(app):
            async with managed(cache_client):
                yield
    """
    started: list[Lifecycle] = []
    try:
        for component in components:
            await component.start()
            started.append(component)
        yield
    finally:
        for component in reversed(started):
            try:
                await component.stop()
            except Exception:
                _logger.warning("Failed to stop %s", type(component).__name__, exc_info=True)
