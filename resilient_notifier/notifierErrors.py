"""
Error taxonomy for the resilient notifier.

Every failure the client can surface is a NotifierError subclass carrying a
closed ErrorKind tag plus a `retryable` flag the delivery loop uses to decide
whether another attempt can possibly succeed.
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    NETWORK = "network"
    INVALID_TOKEN = "invalid_token"
    INVALID_CHAT_ID = "invalid_chat_id"
    MESSAGE_TOO_LONG = "message_too_long"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    TIMEOUT = "timeout"
    INVALID_CONFIG = "invalid_config"
    WEBHOOK_ERROR = "webhook_error"
    CANCELLED = "cancelled"


class NotifierError(Exception):
    """Base class for all notifier errors."""

    kind: ErrorKind = ErrorKind.API_ERROR
    retryable: bool = False


class NetworkError(NotifierError):
    kind = ErrorKind.NETWORK
    retryable = True

    def __init__(self, detail: str) -> None:
        super().__init__(f"Network error: {detail}")
        self.detail = detail


class InvalidToken(NotifierError):
    kind = ErrorKind.INVALID_TOKEN

    def __init__(self, message: str = "Invalid bot token") -> None:
        super().__init__(message)


class InvalidChatId(NotifierError):
    kind = ErrorKind.INVALID_CHAT_ID

    def __init__(self, chat_id: str) -> None:
        super().__init__(f"Invalid chat id: {chat_id!r}")
        self.chat_id = chat_id


class MessageTooLong(NotifierError):
    kind = ErrorKind.MESSAGE_TOO_LONG

    def __init__(self, length: int, limit: int = 4096) -> None:
        super().__init__(f"Message too long: {length} characters (max: {limit})")
        self.length = length
        self.limit = limit


class RateLimited(NotifierError):
    kind = ErrorKind.RATE_LIMIT
    retryable = True

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(message or f"Rate limited: retry after {retry_after}s")
        self.retry_after = retry_after


class ApiError(NotifierError):
    """
    Provider-side or structural error.

    Retryable only when it came from a 5xx response; client errors (4xx) and
    local structural errors (no status) cannot succeed unmodified.
    """

    kind = ErrorKind.API_ERROR

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Telegram API error: {detail}")
        self.detail = detail
        self.status_code = status_code

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code is not None and self.status_code >= 500


class RequestTimeout(NotifierError):
    kind = ErrorKind.TIMEOUT
    retryable = True

    def __init__(self, detail: str = "request timed out") -> None:
        super().__init__(f"Timeout: {detail}")
        self.detail = detail


class InvalidConfig(NotifierError):
    kind = ErrorKind.INVALID_CONFIG

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid configuration: {detail}")
        self.detail = detail


class WebhookError(NotifierError):
    kind = ErrorKind.WEBHOOK_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(f"Webhook error: {detail}")
        self.detail = detail


class DeliveryCancelled(NotifierError):
    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Delivery cancelled") -> None:
        super().__init__(message)
