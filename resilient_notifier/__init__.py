"""
Resilient Notifier - Telegram delivery client that survives the real world.

- Dual sliding-window rate limiting (per second / per minute)
- Exponential backoff with a bounded attempt budget
- Typed error taxonomy mapped from HTTP status codes
- HTML sanitization with tag balance checks
- Delivery metrics, message history and a diagnostic pipeline

Basic usage:
    from resilient_notifier import ResilientNotifier, NotifierConfig

    notifier = ResilientNotifier(NotifierConfig.from_env())  # Reads from env vars
    notifier.send("<b>Nightly job</b> finished 🚀")
    report = notifier.run_diagnostics()
    print(report.render())
"""

__version__ = "0.2.0"

from .notifierErrors import (
    ApiError,
    DeliveryCancelled,
    ErrorKind,
    InvalidChatId,
    InvalidConfig,
    InvalidToken,
    MessageTooLong,
    NetworkError,
    NotifierError,
    RateLimited,
    RequestTimeout,
    WebhookError,
)
from .notifierConfig import CachedConfig, Credentials, NotifierConfig, RetryPolicy, load_config_cached
from .deliveryModels import BotInfo, DeliveryMetrics, DeliveryRecord, MessageKind, MessageStats
from .messageValidator import validate_message
from .rateLimiter import RateLimiter
from .backoffPolicy import backoff_delay
from .diagnosticRunner import DiagnosticReport, DiagnosticRunner, OverallStatus, TestOutcome
from .resilientNotifier import ResilientNotifier, create_notifier_from_env, send_notification

__all__ = [
    "ResilientNotifier",
    "NotifierConfig",
    "Credentials",
    "RetryPolicy",
    "CachedConfig",
    "load_config_cached",
    "create_notifier_from_env",
    "send_notification",
    "validate_message",
    "RateLimiter",
    "backoff_delay",
    "DiagnosticReport",
    "DiagnosticRunner",
    "OverallStatus",
    "TestOutcome",
    "BotInfo",
    "DeliveryMetrics",
    "DeliveryRecord",
    "MessageKind",
    "MessageStats",
    "ErrorKind",
    "NotifierError",
    "NetworkError",
    "InvalidToken",
    "InvalidChatId",
    "MessageTooLong",
    "RateLimited",
    "ApiError",
    "RequestTimeout",
    "InvalidConfig",
    "WebhookError",
    "DeliveryCancelled",
    "__version__",
]
