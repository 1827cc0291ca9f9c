from __future__ import annotations

import base64
from typing import Any

from solders.pubkey import Pubkey

PUBKEY_LENGTH = 32


def parse_pubkey(value: Any) -> Pubkey:
    # Titan encodes addresses as base58 strings or as raw 32-byte arrays depending on the format
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, str):
        try:
            return Pubkey.from_string(value)
        except ValueError as e:
            raise ValueError(f"invalid base58 pubkey {value!r}: {e}") from e
    if isinstance(value, (bytes, bytearray, list, tuple)):
        try:
            raw = bytes(value)
        except TypeError as e:
            raise ValueError(f"invalid pubkey bytes: {e}") from e
        if len(raw) != PUBKEY_LENGTH:
            raise ValueError(f"expected {PUBKEY_LENGTH} bytes for a pubkey, got {len(raw)}")
        return Pubkey.from_bytes(raw)
    raise ValueError(f"cannot interpret {type(value).__name__} as a pubkey")


def parse_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    if isinstance(value, (list, tuple)):
        try:
            return bytes(value)
        except TypeError as e:
            raise ValueError(f"invalid byte array: {e}") from e
    raise ValueError(f"cannot interpret {type(value).__name__} as bytes")
