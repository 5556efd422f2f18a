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
"""Exception hierarchy for cachesession.

All errors inherit from SessionException so callers can catch the whole
family at once, or a specific subclass for targeted handling.

Categories:
- BusinessException: missing resources (absent entries, absent cookies)
- SerializationException: values that cannot be encoded or decoded
- InfrastructureException: cache backend and network failures
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class SessionException(Exception):
    """Base exception for all cachesession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_NOT_FOUND").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    default_code: str | None = None

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(SessionException):
    """Errors caused by the state of the caller's request or data."""


class ResourceNotFoundException(BusinessException):
    """Requested resource does not exist."""


class SessionEntryNotFoundException(ResourceNotFoundException):
    """No entry is stored for the session key, or it has expired."""

    default_code = "SESSION_NOT_FOUND"


class NoSessionCookieException(ResourceNotFoundException):
    """The request does not carry the session cookie."""

    default_code = "SESSION_NO_COOKIE"


# =============================================================================
# Serialization Exceptions
# =============================================================================


class SerializationException(SessionException):
    """A session value could not be converted to or from its stored form."""


class EncodingError(SerializationException):
    """The value cannot be serialized by the session codec."""

    default_code = "SESSION_ENCODE"


class DecodingError(SerializationException):
    """Stored bytes are malformed or use an unsupported format."""

    default_code = "SESSION_DECODE"


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(SessionException):
    """Infrastructure failures: cache, network."""


class BackendError(InfrastructureException):
    """The cache backend rejected the operation or could not be reached."""

    default_code = "SESSION_BACKEND"
