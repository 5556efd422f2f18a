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
"""Tests for SessionProperties binding."""

from cachesession.config.properties import SessionProperties
from cachesession.core.config import Config


class TestSessionProperties:
    def test_bind_defaults(self):
        props = Config({"cachesession": {"session": {}}}).bind(SessionProperties)
        assert props.store == "redis"
        assert props.address == "localhost:6379"
        assert props.cookie_name == "SESSION_ID"
        assert props.ttl == 1800
        assert props.secure is True
        assert props.httponly is True
        assert props.samesite == "lax"
        assert props.track_keys is True

    def test_bind_custom_values(self):
        config = Config(
            {
                "cachesession": {
                    "session": {
                        "store": "memory",
                        "address": "cache:11211",
                        "cookie_name": "SID",
                        "ttl": 60,
                        "secure": False,
                        "track_keys": False,
                    }
                }
            }
        )
        props = config.bind(SessionProperties)
        assert props.store == "memory"
        assert props.address == "cache:11211"
        assert props.cookie_name == "SID"
        assert props.ttl == 60
        assert props.secure is False
        assert props.track_keys is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CACHESESSION_SESSION_TTL", "900")
        monkeypatch.setenv("CACHESESSION_SESSION_SECURE", "false")
        monkeypatch.setenv("CACHESESSION_SESSION_ADDRESS", "redis://cache:6380/1")
        props = Config({"cachesession": {"session": {"ttl": 60}}}).bind(SessionProperties)
        assert props.ttl == 900
        assert props.secure is False
        assert props.address == "redis://cache:6380/1"

    def test_packaged_defaults_match_dataclass(self, tmp_path):
        from_file = Config.from_sources(tmp_path).bind(SessionProperties)
        assert from_file == SessionProperties()
