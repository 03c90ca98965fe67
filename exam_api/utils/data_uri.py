"""Helpers for inline `data:` URI payloads."""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from urllib.parse import unquote_to_bytes

DATA_URI_PREFIX = "data:"


@dataclass(frozen=True)
class DataUri:
    media_type: str
    data: bytes

    @property
    def subtype(self) -> str:
        """Media subtype, e.g. "png" for image/png. Empty if undeclared."""
        _, _, subtype = self.media_type.partition("/")
        return subtype


def is_data_uri(value: object) -> bool:
    return isinstance(value, str) and value.startswith(DATA_URI_PREFIX)


def parse_data_uri(value: str) -> DataUri:
    """Decode a `data:<mime>[;base64],<payload>` string.

    Raises ValueError for anything that is not a well-formed data URI.
    """
    if not is_data_uri(value):
        raise ValueError("Not a data URI")
    header, sep, payload = value[len(DATA_URI_PREFIX):].partition(",")
    if not sep:
        raise ValueError("Data URI has no payload separator")
    params = header.split(";")
    media_type = params[0]
    if "base64" in params[1:]:
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError("Invalid base64 payload in data URI") from exc
    else:
        data = unquote_to_bytes(payload)
    return DataUri(media_type=media_type.lower(), data=data)


def to_data_uri(data: bytes, media_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"
