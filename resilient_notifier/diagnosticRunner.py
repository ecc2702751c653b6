"""
Diagnostic pipeline.

Runs a fixed battery of independent health checks against the network, the
Bot API and the configured destination, and folds the outcomes into a single
report with an overall status and remediation hints.
"""

from __future__ import annotations

import enum
import typing as t
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from resilient_notifier.botApiTransport import BotApiTransport
from resilient_notifier.messageValidator import validate_message
from resilient_notifier.notifierConfig import NotifierConfig
from resilient_notifier.notifierErrors import InvalidToken, NotifierError

INTERNET_PROBE_URL = "https://www.google.com"
PROBE_TIMEOUT_SECONDS = 10.0
DIAGNOSTIC_MESSAGE = "🔍 Diagnostic test message from resilient_notifier"

INTERNET_CHECK = "Internet connectivity"
PROVIDER_API_CHECK = "Provider API"
AUTH_CHECK = "Bot authentication"
PERMISSIONS_CHECK = "Destination permissions"
VALIDATION_CHECK = "Message validation"

RECOMMENDATIONS = {
    INTERNET_CHECK: "Check your internet connection",
    PROVIDER_API_CHECK: "Check that the Telegram API is reachable (proxy, firewall, DNS)",
    AUTH_CHECK: "Check your Telegram bot token",
    PERMISSIONS_CHECK: "Make sure the bot has been added to the chat and is allowed to post",
}


class OutcomeStatus(str, enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


class OverallStatus(str, enum.Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TestOutcome:
    __test__ = False  # keep pytest from collecting this as a test class

    status: OutcomeStatus
    message: str

    @classmethod
    def success(cls, message: str) -> "TestOutcome":
        return cls(OutcomeStatus.SUCCESS, message)

    @classmethod
    def warning(cls, message: str) -> "TestOutcome":
        return cls(OutcomeStatus.WARNING, message)

    @classmethod
    def failure(cls, message: str) -> "TestOutcome":
        return cls(OutcomeStatus.FAILURE, message)


class DiagnosticReport:
    """Appended to check by check, then frozen by finalize()."""

    def __init__(self, timestamp: datetime | None = None) -> None:
        self.timestamp = timestamp or datetime.now().astimezone()
        self.overall_status = OverallStatus.UNKNOWN
        self._tests: list[tuple[str, TestOutcome]] = []
        self._recommendations: list[str] = []
        self._finalized = False

    @property
    def tests(self) -> tuple[tuple[str, TestOutcome], ...]:
        return tuple(self._tests)

    @property
    def recommendations(self) -> tuple[str, ...]:
        return tuple(self._recommendations)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def add_test(self, name: str, outcome: TestOutcome) -> None:
        if self._finalized:
            raise RuntimeError("DiagnosticReport is finalized")
        self._tests.append((name, outcome))

    def finalize(self) -> "DiagnosticReport":
        if self._finalized:
            return self
        statuses = {outcome.status for _, outcome in self._tests}
        if OutcomeStatus.FAILURE in statuses:
            self.overall_status = OverallStatus.CRITICAL
        elif OutcomeStatus.WARNING in statuses:
            self.overall_status = OverallStatus.WARNING
        else:
            self.overall_status = OverallStatus.HEALTHY

        for name, outcome in self._tests:
            if outcome.status is OutcomeStatus.SUCCESS:
                continue
            hint = RECOMMENDATIONS.get(name)
            if hint is None:
                prefix = "Resolve" if outcome.status is OutcomeStatus.FAILURE else "Attention"
                hint = f"{prefix}: {outcome.message}"
            self._recommendations.append(hint)

        self._finalized = True
        return self

    def render(self) -> str:
        icons = {OutcomeStatus.SUCCESS: "✅", OutcomeStatus.WARNING: "⚠️ ", OutcomeStatus.FAILURE: "❌"}
        lines = [
            f"Diagnostic report generated at {self.timestamp:%Y-%m-%d %H:%M:%S}",
            f"Overall status: {self.overall_status.value.upper()}",
            "",
        ]
        for name, outcome in self._tests:
            lines.append(f"  {icons[outcome.status]} {name}: {outcome.message}")
        if self._recommendations:
            lines.append("")
            lines.append("Recommendations:")
            lines.extend(f"  💡 {hint}" for hint in self._recommendations)
        return "\n".join(lines)


class DiagnosticRunner:
    def __init__(
        self,
        config: NotifierConfig,
        transport: BotApiTransport,
        *,
        validator: t.Callable[[str], str] = validate_message,
    ) -> None:
        self._cfg = config
        self._transport = transport
        self._validate = validator

    def run(self) -> DiagnosticReport:
        report = DiagnosticReport()
        logger.info("🔍 Starting Telegram diagnostics")

        checks: list[tuple[str, t.Callable[[], TestOutcome]]] = [
            (INTERNET_CHECK, self.check_internet),
            (PROVIDER_API_CHECK, self.check_provider_api),
            (AUTH_CHECK, self.check_authentication),
            (PERMISSIONS_CHECK, self.check_permissions),
            (VALIDATION_CHECK, self.check_message_validation),
        ]
        for name, check in checks:
            outcome = check()
            logger.info(f"{name}: {outcome.status.value} - {outcome.message}")
            report.add_test(name, outcome)

        report.finalize()
        logger.info(f"📊 Diagnostics finished: {report.overall_status.value}")
        return report

    def check_internet(self) -> TestOutcome:
        try:
            self._transport.probe(INTERNET_PROBE_URL, timeout=PROBE_TIMEOUT_SECONDS)
        except NotifierError as e:
            return TestOutcome.failure(f"No internet connection: {e}")
        return TestOutcome.success("Internet connectivity OK")

    def check_provider_api(self) -> TestOutcome:
        try:
            resp = self._transport.probe(self._cfg.api_base_url, timeout=PROBE_TIMEOUT_SECONDS)
        except NotifierError as e:
            return TestOutcome.failure(f"Telegram API unreachable: {e}")
        if 200 <= resp.status_code < 300:
            return TestOutcome.success("Telegram API reachable")
        return TestOutcome.warning(f"Telegram API answered with HTTP {resp.status_code}")

    def check_authentication(self) -> TestOutcome:
        try:
            bot = self._transport.get_me()
        except InvalidToken:
            return TestOutcome.failure("invalid bot token")
        except NotifierError as e:
            return TestOutcome.failure(f"authentication error: {e}")
        name = f"@{bot.username}" if bot.username else bot.first_name
        return TestOutcome.success(f"Bot authenticated: {name} (id {bot.id})")

    def check_permissions(self) -> TestOutcome:
        try:
            resp = self._transport.post_message(DIAGNOSTIC_MESSAGE)
        except NotifierError as e:
            return TestOutcome.failure(f"permission check failed: {e}")
        status = resp.status_code
        if 200 <= status < 300:
            return TestOutcome.success("Destination permissions OK, test message sent")
        if status == 403:
            return TestOutcome.failure("forbidden")
        if status == 404:
            return TestOutcome.failure("invalid destination")
        return TestOutcome.warning(f"unexpected response: HTTP {status}")

    def check_message_validation(self) -> TestOutcome:
        samples = [
            ("plain", "Plain test message"),
            ("html", "<b>Bold</b> and <i>italic</i> with <code>code</code>"),
            ("long", "A" * 4000),
            ("unicode", "🚀 Unicode test: é ü 中文 🎉"),
        ]
        failed = []
        for name, sample in samples:
            try:
                self._validate(sample)
            except NotifierError as e:
                failed.append(f"{name} ({e})")

        if failed:
            return TestOutcome.warning(f"validation failed for: {', '.join(failed)}")
        return TestOutcome.success(f"all {len(samples)} samples validated")
