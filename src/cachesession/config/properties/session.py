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
"""Session subsystem configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from cachesession.core.config import config_properties


@config_properties(prefix="cachesession.session")
@dataclass
class SessionProperties:
    """Configuration for the session subsystem (cachesession.session.*)."""

    store: str = "redis"
    address: str = "localhost:6379"
    cookie_name: str = "SESSION_ID"
    ttl: int = 1800
    secure: bool = True
    httponly: bool = True
    samesite: str = "lax"
    track_keys: bool = True
