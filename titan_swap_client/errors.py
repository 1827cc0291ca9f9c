from __future__ import annotations

import json


class TitanClientError(Exception):
    """Base class for everything the Titan client raises."""


class TransportError(TitanClientError):
    """The request never produced an HTTP response (DNS, connect, TLS, timeout)."""


class ApiError(TitanClientError):
    def __init__(self, status_code: int | None, body: str, message: str | None = None):
        self.status_code = status_code
        self.body = body
        self.message = message if message is not None else error_message(body)
        super().__init__(f"Request failed with status {status_code}: {self.message}")


class NoRoutesAvailable(ApiError):
    def __init__(self, status_code: int | None = None, body: str = ""):
        super().__init__(status_code, body, message="No routes available")


class DecodeError(TitanClientError):
    def __init__(self, message: str, body: str | bytes | None = None):
        super().__init__(message)
        self.body = body


def error_message(body: str) -> str:
    """
    Pull a human-readable message out of an error body.
    JSON bodies of the form {"error": ...} or {"message": ...} yield that field; anything else is returned as-is.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        for key in ("error", "message", "msg"):
            val = data.get(key)
            if isinstance(val, str) and val:
                return val
    return body
