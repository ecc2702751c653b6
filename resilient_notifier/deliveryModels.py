from __future__ import annotations

import enum
import typing as t
from dataclasses import dataclass, field
from datetime import datetime


class MessageKind(str, enum.Enum):
    """Display-only tag attached to each delivered message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SYSTEM_INFO = "system_info"
    DIAGNOSTIC = "diagnostic"
    UPDATES_AVAILABLE = "updates_available"
    UPDATES_INSTALLED = "updates_installed"
    UPDATE_FAILED = "update_failed"


@dataclass(frozen=True)
class DeliveryRecord:
    """One entry per send() call, whatever the number of attempts."""

    timestamp: datetime
    content: str
    success: bool
    response_time: float                    # seconds, first attempt to terminal outcome
    retry_count: int
    kind: MessageKind = MessageKind.INFO
    error: str | None = None


@dataclass
class DeliveryMetrics:
    total_messages: int = 0
    successful_messages: int = 0
    failed_messages: int = 0
    average_response_time: float = 0.0      # seconds, successful sends only
    rate_limit_hits: int = 0
    retry_attempts: int = 0
    last_error: str | None = None

    def record_success(self, response_time: float) -> None:
        self.total_messages += 1
        self.successful_messages += 1
        n = self.successful_messages
        self.average_response_time += (response_time - self.average_response_time) / n

    def record_failure(self, error: str) -> None:
        self.total_messages += 1
        self.failed_messages += 1
        self.last_error = error

    @property
    def success_rate(self) -> float:
        if not self.total_messages:
            return 0.0
        return self.successful_messages / self.total_messages


@dataclass(frozen=True)
class MessageStats:
    total_messages: int
    successful_messages: int
    failed_messages: int
    by_kind: dict[str, int] = field(default_factory=dict)
    last_message_at: datetime | None = None

    @classmethod
    def from_history(cls, history: t.Sequence[DeliveryRecord]) -> "MessageStats":
        by_kind: dict[str, int] = {}
        for record in history:
            by_kind[record.kind.value] = by_kind.get(record.kind.value, 0) + 1
        successful = sum(1 for record in history if record.success)
        return cls(
            total_messages=len(history),
            successful_messages=successful,
            failed_messages=len(history) - successful,
            by_kind=by_kind,
            last_message_at=history[-1].timestamp if history else None,
        )


@dataclass(frozen=True)
class BotInfo:
    id: int
    is_bot: bool
    first_name: str
    username: str | None = None
    can_join_groups: bool | None = None
    can_read_all_group_messages: bool | None = None
    supports_inline_queries: bool | None = None

    @classmethod
    def from_api(cls, result: dict[str, t.Any]) -> "BotInfo":
        return cls(
            id=int(result["id"]),
            is_bot=bool(result.get("is_bot", True)),
            first_name=str(result.get("first_name", "")),
            username=result.get("username"),
            can_join_groups=result.get("can_join_groups"),
            can_read_all_group_messages=result.get("can_read_all_group_messages"),
            supports_inline_queries=result.get("supports_inline_queries"),
        )
