"""
resilientNotifier.py

Basic usage:
  from resilient_notifier import ResilientNotifier, NotifierConfig
  notifier = ResilientNotifier(NotifierConfig.from_env())
  notifier.send("<b>Backup finished</b> ✅")
  print(notifier.get_metrics())

Every send() validates the text, then loops: local rate limit check ->
sendMessage -> classify; transient failures back off exponentially and retry,
fatal ones (bad token, unknown chat, 4xx) stop right away. Each send() leaves
exactly one DeliveryRecord in the history.

Not safe for concurrent use: serialize send() calls on one instance.
"""

from __future__ import annotations

import threading
import time
import typing as t
from dataclasses import replace
from datetime import datetime

import requests
from loguru import logger

from resilient_notifier.backoffPolicy import backoff_delay
from resilient_notifier.botApiTransport import BotApiTransport
from resilient_notifier.deliveryModels import (
    BotInfo,
    DeliveryMetrics,
    DeliveryRecord,
    MessageKind,
    MessageStats,
)
from resilient_notifier.diagnosticRunner import DiagnosticReport, DiagnosticRunner
from resilient_notifier.messageValidator import validate_message
from resilient_notifier.notifierConfig import NotifierConfig, RetryPolicy
from resilient_notifier.notifierErrors import DeliveryCancelled, NotifierError, RateLimited
from resilient_notifier.rateLimiter import RateLimiter
from resilient_notifier.responseClassifier import classify_response


class ResilientNotifier:
    """
    Telegram delivery client with rate limiting, retries, metrics and diagnostics.

    - Credentials are validated when the NotifierConfig is built.
    - send() retries transient errors with exponential backoff.
    - get_metrics() / get_history() expose delivery health.
    - run_diagnostics() checks connectivity, token and chat permissions.

    A cancel_event passed in is shared with the caller: setting it cancels
    sends on this instance, clearing it (or reset_cancel()) re-enables them.
    """

    def __init__(
        self,
        config: NotifierConfig,
        *,
        retry_policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
        rate_limiter: RateLimiter | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._cfg = config
        self._policy = retry_policy or config.retry_policy()
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self._transport = BotApiTransport(config, session)
        self._rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(
            config.rate_limit_per_second,
            config.rate_limit_per_minute,
            sleep=self._pause,
        )
        self._history: list[DeliveryRecord] = []
        self._metrics = DeliveryMetrics()

    # ----------------------------- Public API -----------------------------

    @property
    def config(self) -> NotifierConfig:
        return self._cfg

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._policy

    def send(self, text: str, *, kind: MessageKind = MessageKind.INFO) -> dict[str, t.Any]:
        """
        Send a message with rate limiting and automatic retry.

        Args:
            text: Message text; <b>, <i>, <code> and <pre> are kept, everything else is escaped
            kind: Display tag stored in the delivery history

        Returns:
            Telegram API response dict

        Raises:
            MessageTooLong, ApiError: Text rejected before any network attempt
            NotifierError: Last classified error once the attempt budget is spent
            DeliveryCancelled: cancel() was called while the message was in flight
        """
        content = validate_message(text)

        policy = self._policy
        started = time.monotonic()
        attempt = 0

        while True:
            attempt += 1
            try:
                self._raise_if_cancelled()
                logger.debug(f"Sending message (attempt {attempt}/{policy.max_attempts})")
                self._rate_limiter.check_and_record()
                data = classify_response(self._transport.post_message(content), self._cfg.chat_id)
            except DeliveryCancelled as e:
                self._record_failure(content, kind, started, attempt - 1, e)
                raise
            except NotifierError as e:
                if isinstance(e, RateLimited):
                    self._metrics.rate_limit_hits += 1

                if not e.retryable and not policy.retry_fatal_errors:
                    logger.error(f"Non-retryable error on attempt {attempt}: {e}")
                    self._record_failure(content, kind, started, attempt - 1, e)
                    raise
                if attempt >= policy.max_attempts:
                    logger.error(f"Message delivery failed after {attempt} attempt(s): {e}")
                    self._record_failure(content, kind, started, attempt - 1, e)
                    raise

                delay = backoff_delay(attempt, policy)
                logger.warning(
                    f"Attempt {attempt}/{policy.max_attempts} failed: {e}. Retrying in {delay:.2f}s"
                )
                try:
                    self._pause(delay)
                except DeliveryCancelled as cancelled:
                    self._record_failure(content, kind, started, attempt - 1, cancelled)
                    raise
                self._metrics.retry_attempts += 1
            else:
                # the provider accepted it; a cancel() arriving now only affects later sends
                self._record_success(content, kind, started, attempt - 1)
                if attempt > 1:
                    logger.info(f"Message delivered after {attempt} attempts")
                return data

    def get_me(self) -> BotInfo:
        return self._transport.get_me()

    def get_metrics(self) -> DeliveryMetrics:
        return replace(self._metrics)

    def get_history(self) -> list[DeliveryRecord]:
        return list(self._history)

    def get_message_stats(self) -> MessageStats:
        return MessageStats.from_history(self._history)

    def clear_history(self) -> None:
        self._history.clear()
        logger.debug("Message history cleared")

    def run_diagnostics(self) -> DiagnosticReport:
        return DiagnosticRunner(self._cfg, self._transport).run()

    def cancel(self) -> None:
        """Abort the in-flight send() at its next suspension point. Sticky until reset_cancel()."""
        self._cancel.set()

    def reset_cancel(self) -> None:
        """Clear a previous cancel() so later sends go through again."""
        self._cancel.clear()

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "ResilientNotifier":
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close session on exit."""
        self.close()

    # --------------------------- Internal helpers -------------------------

    def _pause(self, seconds: float) -> None:
        """Sleep that wakes up early (and raises) when cancel() is called."""
        if seconds > 0 and self._cancel.wait(seconds):
            raise DeliveryCancelled()
        self._raise_if_cancelled()

    def _raise_if_cancelled(self) -> None:
        if self._cancel.is_set():
            raise DeliveryCancelled()

    def _record_success(self, content: str, kind: MessageKind, started: float, retry_count: int) -> None:
        elapsed = time.monotonic() - started
        self._metrics.record_success(elapsed)
        self._history.append(
            DeliveryRecord(
                timestamp=datetime.now().astimezone(),
                content=content,
                success=True,
                response_time=elapsed,
                retry_count=retry_count,
                kind=kind,
            )
        )

    def _record_failure(
        self, content: str, kind: MessageKind, started: float, retry_count: int, error: NotifierError
    ) -> None:
        elapsed = time.monotonic() - started
        self._metrics.record_failure(str(error))
        self._history.append(
            DeliveryRecord(
                timestamp=datetime.now().astimezone(),
                content=content,
                success=False,
                response_time=elapsed,
                retry_count=retry_count,
                kind=kind,
                error=str(error),
            )
        )


# ------------------------------ Utility functions -------------------------------

def create_notifier_from_env(**kwargs: t.Any) -> ResilientNotifier:
    """Convenience function to create a notifier from environment variables."""
    return ResilientNotifier(NotifierConfig.from_env(), **kwargs)


def send_notification(message: str, **kwargs: t.Any) -> dict[str, t.Any]:
    """Quick one-off notification using environment variables."""
    with create_notifier_from_env() as notifier:
        return notifier.send(message, **kwargs)
