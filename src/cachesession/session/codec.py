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
"""Session value codecs.

Values are stored as a versioned JSON envelope::

    {"v": 1, "value": <tagged value>}

JSON scalars, lists, and string-keyed dicts are stored as-is. Other
supported types are written as a tagged object ``{"__type__": name, ...}``
so they decode back to the same Python type:

==============  ============================================
tag             payload
==============  ============================================
``tuple``       ``items``: list of tagged values
``set``         ``items``: list of tagged values
``frozenset``   ``items``: list of tagged values
``dict``        ``items``: list of ``[key, value]`` pairs
``bytes``       ``data``: base64 text
``datetime``    ``iso``: ISO 8601 text
``date``        ``iso``: ISO 8601 text
``time``        ``iso``: ISO 8601 text
``decimal``     ``str``: decimal text
``uuid``        ``str``: canonical UUID text
==============  ============================================

The ``dict`` tag is used when a dict has non-string keys or a key named
``__type__``.

NaN and infinity have no JSON form and are rejected on both encode and
decode.
"""

from __future__ import annotations

import base64
import datetime as dt
import json
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, runtime_checkable

from cachesession.kernel.exceptions import DecodingError, EncodingError

_VERSION = 1
_TAG = "__type__"


@runtime_checkable
class SessionCodec(Protocol):
    """Converts session values to and from their stored bytes."""

    def encode(self, value: Any) -> bytes: ...

    def decode(self, raw: bytes) -> Any: ...


class JsonEnvelopeCodec:
    """Default codec: tagged JSON inside a versioned envelope."""

    def encode(self, value: Any) -> bytes:
        """Serialize *value*, raising :class:`EncodingError` for unsupported types."""
        try:
            tagged = _tag(value)
        except RecursionError as exc:
            raise EncodingError("Value is self-referential or nested too deeply") from exc
        envelope = {"v": _VERSION, "value": tagged}
        try:
            return json.dumps(envelope, separators=(",", ":"), allow_nan=False).encode("utf-8")
        except ValueError as exc:
            # NaN and infinity have no JSON representation.
            raise EncodingError(f"Value cannot be encoded as JSON: {exc}") from exc

    def decode(self, raw: bytes) -> Any:
        """Deserialize stored bytes, raising :class:`DecodingError` if malformed."""
        try:
            envelope = json.loads(raw, parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError, TypeError, RecursionError) as exc:
            raise DecodingError(f"Stored value is not valid JSON: {exc}") from exc

        if not isinstance(envelope, dict) or "value" not in envelope:
            raise DecodingError("Stored value is not a session envelope")
        version = envelope.get("v")
        if version != _VERSION:
            raise DecodingError(
                f"Unsupported session envelope version: {version!r}",
                context={"version": version},
            )
        try:
            return _untag(envelope["value"])
        except (KeyError, TypeError, ValueError, InvalidOperation, RecursionError) as exc:
            raise DecodingError(f"Malformed tagged value: {exc}") from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _tag(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, list):
        return [_tag(item) for item in value]
    if isinstance(value, dict):
        if all(isinstance(k, str) for k in value) and _TAG not in value:
            return {k: _tag(v) for k, v in value.items()}
        return {_TAG: "dict", "items": [[_tag(k), _tag(v)] for k, v in value.items()]}
    if isinstance(value, tuple):
        return {_TAG: "tuple", "items": [_tag(item) for item in value]}
    if isinstance(value, frozenset):
        return {_TAG: "frozenset", "items": [_tag(item) for item in value]}
    if isinstance(value, set):
        return {_TAG: "set", "items": [_tag(item) for item in value]}
    if isinstance(value, (bytes, bytearray)):
        return {_TAG: "bytes", "data": base64.b64encode(bytes(value)).decode("ascii")}
    # datetime subclasses date, so it must be checked first
    if isinstance(value, dt.datetime):
        return {_TAG: "datetime", "iso": value.isoformat()}
    if isinstance(value, dt.date):
        return {_TAG: "date", "iso": value.isoformat()}
    if isinstance(value, dt.time):
        return {_TAG: "time", "iso": value.isoformat()}
    if isinstance(value, Decimal):
        return {_TAG: "decimal", "str": str(value)}
    if isinstance(value, uuid.UUID):
        return {_TAG: "uuid", "str": str(value)}
    raise EncodingError(
        f"Values of type {type(value).__name__} cannot be stored in a session",
        context={"type": type(value).__name__},
    )


def _untag(value: Any) -> Any:
    if isinstance(value, list):
        return [_untag(item) for item in value]
    if not isinstance(value, dict):
        return value
    tag = value.get(_TAG)
    if tag is None:
        return {k: _untag(v) for k, v in value.items()}

    if tag == "tuple":
        return tuple(_untag(item) for item in value["items"])
    if tag == "set":
        return {_untag(item) for item in value["items"]}
    if tag == "frozenset":
        return frozenset(_untag(item) for item in value["items"])
    if tag == "dict":
        return {_untag(k): _untag(v) for k, v in value["items"]}
    if tag == "bytes":
        return base64.b64decode(value["data"], validate=True)
    if tag == "datetime":
        return dt.datetime.fromisoformat(value["iso"])
    if tag == "date":
        return dt.date.fromisoformat(value["iso"])
    if tag == "time":
        return dt.time.fromisoformat(value["iso"])
    if tag == "decimal":
        return Decimal(value["str"])
    if tag == "uuid":
        return uuid.UUID(value["str"])
    raise DecodingError(f"Unknown type tag: {tag!r}", context={"tag": tag})
