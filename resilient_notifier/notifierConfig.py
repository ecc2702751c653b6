"""
notifierConfig.py

Environment variables:
  TELEGRAM_BOT_TOKEN              -> BotFather token (e.g., 123456:ABC-DEF...)
  TELEGRAM_CHAT_ID                -> destination chat id or @channel
  TELEGRAM_API_BASE_URL           -> optional, defaults to https://api.telegram.org
  TELEGRAM_TIMEOUT_SECONDS        -> optional per-request timeout
  TELEGRAM_MAX_RETRIES            -> optional attempt budget per message
  TELEGRAM_RATE_LIMIT_PER_SECOND  -> optional local cap
  TELEGRAM_RATE_LIMIT_PER_MINUTE  -> optional local cap
"""

from __future__ import annotations

import os
import re
import time
import typing as t
from dataclasses import dataclass, field

from loguru import logger

from resilient_notifier.notifierErrors import InvalidChatId, InvalidConfig, InvalidToken

DEFAULT_API_BASE_URL = "https://api.telegram.org"
MIN_TOKEN_SECRET_LENGTH = 35

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_SIGNED_INT_RE = re.compile(r"[+-]?[0-9]+")


def is_valid_token(token: str) -> bool:
    """Bot tokens look like `<numeric bot id>:<secret of 35+ chars>`."""
    parts = token.split(":")
    if len(parts) != 2:
        return False
    bot_id, secret = parts
    return bot_id.isascii() and bot_id.isdigit() and len(secret) >= MIN_TOKEN_SECRET_LENGTH


def is_valid_chat_id(chat_id: str) -> bool:
    """A chat id is a signed 64-bit integer or a public @username."""
    if chat_id.startswith("@"):
        return True
    if not _SIGNED_INT_RE.fullmatch(chat_id):
        return False
    return _INT64_MIN <= int(chat_id) <= _INT64_MAX


@dataclass(frozen=True)
class Credentials:
    token: str
    destination_id: str

    def __post_init__(self) -> None:
        if not is_valid_token(self.token):
            raise InvalidToken()
        if not is_valid_chat_id(self.destination_id):
            raise InvalidChatId(self.destination_id)

    @property
    def masked_token(self) -> str:
        return f"{self.token[:6]}...{self.token[-4:]}"


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_delay: float = 0.5              # seconds
    max_delay: float = 30.0                 # seconds
    backoff_multiplier: float = 2.0
    retry_fatal_errors: bool = False        # True -> retry 4xx/auth errors like transient ones

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise InvalidConfig(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise InvalidConfig(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay < self.initial_delay:
            raise InvalidConfig(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})"
            )
        if self.backoff_multiplier < 1:
            raise InvalidConfig(f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}")


@dataclass(frozen=True)
class NotifierConfig:
    credentials: Credentials
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 30.0           # per-request timeout
    max_retries: int = 3                    # attempts per message
    rate_limit_per_second: int = 30
    rate_limit_per_minute: int = 20
    session_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.api_base_url:
            raise InvalidConfig("api_base_url cannot be empty")
        object.__setattr__(self, "api_base_url", self.api_base_url.rstrip("/"))
        if self.timeout_seconds <= 0:
            raise InvalidConfig(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.max_retries < 1:
            raise InvalidConfig(f"max_retries must be >= 1, got {self.max_retries}")
        if self.rate_limit_per_second < 1 or self.rate_limit_per_minute < 1:
            raise InvalidConfig("rate limits must be >= 1")

    @classmethod
    def create(cls, token: str, destination_id: str | int, **overrides: t.Any) -> "NotifierConfig":
        """Validate credentials and build a config in one step."""
        return cls(credentials=Credentials(token, str(destination_id)), **overrides)

    @classmethod
    def from_env(cls, environ: t.Mapping[str, str] | None = None) -> "NotifierConfig":
        env = os.environ if environ is None else environ

        token = env.get("TELEGRAM_BOT_TOKEN")
        chat_id = env.get("TELEGRAM_CHAT_ID")
        if not token:
            raise InvalidConfig("Missing bot token. Set TELEGRAM_BOT_TOKEN")
        if not chat_id:
            raise InvalidConfig("Missing chat id. Set TELEGRAM_CHAT_ID")

        overrides: dict[str, t.Any] = {}
        if env.get("TELEGRAM_API_BASE_URL"):
            overrides["api_base_url"] = env["TELEGRAM_API_BASE_URL"]
        for var, name, cast in (
            ("TELEGRAM_TIMEOUT_SECONDS", "timeout_seconds", float),
            ("TELEGRAM_MAX_RETRIES", "max_retries", int),
            ("TELEGRAM_RATE_LIMIT_PER_SECOND", "rate_limit_per_second", int),
            ("TELEGRAM_RATE_LIMIT_PER_MINUTE", "rate_limit_per_minute", int),
        ):
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError as e:
                raise InvalidConfig(f"{var}={raw!r} is not a valid {cast.__name__}") from e

        logger.debug(f"Loaded notifier config from environment ({len(overrides)} overrides)")
        return cls.create(token, chat_id, **overrides)

    @property
    def token(self) -> str:
        return self.credentials.token

    @property
    def chat_id(self) -> str:
        return self.credentials.destination_id

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_retries)


@dataclass
class CachedConfig:
    """A loaded config plus when it was loaded; owned by whoever loads it."""

    value: NotifierConfig
    loaded_at: float
    ttl: float

    def is_expired(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.loaded_at > self.ttl


def load_config_cached(
    cache: CachedConfig | None,
    ttl: float = 300.0,
    loader: t.Callable[[], NotifierConfig] = NotifierConfig.from_env,
    *,
    now: float | None = None,
) -> CachedConfig:
    """Return `cache` while it is fresh, otherwise reload through `loader`."""
    now = time.monotonic() if now is None else now
    if cache is not None and not cache.is_expired(now):
        logger.debug("Config served from cache")
        return cache
    config = loader()
    logger.debug(f"Config reloaded and cached for {ttl}s")
    return CachedConfig(value=config, loaded_at=now, ttl=ttl)
