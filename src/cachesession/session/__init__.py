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
"""cachesession session — cookie-carried session ids with cache-backed data.

Import concrete store types from the adapter package::

    from cachesession.session.adapters.cache import CacheSessionStore
"""

from cachesession.session.codec import JsonEnvelopeCodec, SessionCodec
from cachesession.session.manager import SessionManager
from cachesession.session.ports.outbound import SessionStore

__all__ = [
    "JsonEnvelopeCodec",
    "SessionCodec",
    "SessionManager",
    "SessionStore",
]
