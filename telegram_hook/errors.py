from typing import Any, Dict, Optional


class TelegramHookError(Exception):
    """Base class for every failure raised while talking to Telegram."""


class TransportError(TelegramHookError):
    """The HTTP request itself failed (connection, TLS, timeout)."""


class DecodeError(TelegramHookError):
    """The response body was not a Telegram response envelope."""


class ApiError(TelegramHookError):
    """Telegram answered with ok=false."""

    def __init__(
        self,
        error_code: Optional[int] = None,
        description: Optional[str] = None,
        envelope: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.error_code = error_code
        self.description = description
        self.envelope = envelope
        super().__init__(message or _describe(error_code, description))


def _describe(error_code: Optional[int], description: Optional[str]) -> str:
    msg = "Received error response from Telegram API"
    if error_code is not None:
        msg = f"{msg} (error code {error_code})"
    if description is not None:
        msg = f"{msg}: {description}"
    return msg
