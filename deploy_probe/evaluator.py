"""Threshold evaluation of probe outcomes."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import Alert, Classification, ProbeResult
from deploy_probe.models.thresholds import ThresholdConfig

log = logging.getLogger(__name__)


class ProbeRules(Protocol):
    """Probe-specific conditions applied on top of the latency thresholds."""

    @property
    def name(self) -> str:
        """Probe name, used to select latency thresholds."""
        ...

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        """Conditions that make the check fail."""
        ...

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        """Conditions that make the check a warning."""
        ...

    def alerts(self, outcome: ProbeOutcome) -> Sequence[Alert]:
        """Alerts reported by the service itself."""
        ...


@dataclass(frozen=True, kw_only=True)
class Verdict:
    """Classification of an outcome with the alerts that justify it."""

    classification: Classification
    alerts: Sequence[Alert] = ()


def classify(
    outcome: ProbeOutcome, thresholds: ThresholdConfig, rules: ProbeRules
) -> Verdict:
    """Classify an outcome as pass, warning or fail.

    Policy, applied in order:
        1. Unsuccessful outcome (transport error or bad status) fails.
        2. Any hard threshold violation fails.
        3. Any soft threshold violation is a warning.
        4. Otherwise the outcome passes.

    Never raises: an error while evaluating a probe condition counts as a
    hard violation.
    """
    if not outcome.succeeded:
        reason = outcome.failure_reason or "unknown failure"
        return Verdict(
            classification="fail",
            alerts=(Alert(level="critical", message=f"Check failed: {reason}"),),
        )

    latency = thresholds.latency_for(rules.name)

    hard = _violations(rules.hard_violations, outcome, thresholds, rules.name)
    if outcome.elapsed_ms >= latency.hard_ms:
        hard.append(
            f"Response time {outcome.elapsed_ms:.0f}ms exceeds the "
            f"{latency.hard_ms:.0f}ms limit"
        )
    if hard:
        return Verdict(
            classification="fail",
            alerts=tuple(Alert(level="critical", message=m) for m in hard),
        )

    soft = _violations(rules.soft_violations, outcome, thresholds, rules.name)
    if outcome.elapsed_ms >= latency.soft_ms:
        soft.append(
            f"Response time {outcome.elapsed_ms:.0f}ms exceeds the "
            f"{latency.soft_ms:.0f}ms target"
        )
    if soft:
        return Verdict(
            classification="warning",
            alerts=tuple(Alert(level="warning", message=m) for m in soft),
        )

    return Verdict(classification="pass")


def _violations(
    check: Callable[[ProbeOutcome, ThresholdConfig], Sequence[str]],
    outcome: ProbeOutcome,
    thresholds: ThresholdConfig,
    name: str,
) -> list[str]:
    try:
        return list(check(outcome, thresholds))
    except Exception as e:
        log.error("Failed to evaluate %s: %s", name, e, exc_info=e)
        return [f"Could not evaluate response: {e}"]


def evaluate(
    rules: ProbeRules,
    outcome: ProbeOutcome,
    thresholds: ThresholdConfig,
    *,
    timestamp: datetime | None = None,
) -> ProbeResult:
    """Classify an outcome and wrap it into a probe result."""
    verdict = classify(outcome, thresholds, rules)

    details = dict(outcome.payload)
    if outcome.status_code is not None:
        details["status_code"] = outcome.status_code
    if outcome.failure_reason is not None:
        details["error"] = outcome.failure_reason

    reported: Sequence[Alert] = ()
    if outcome.succeeded:
        try:
            reported = rules.alerts(outcome)
        except Exception as e:
            log.error("Failed to read alerts of %s: %s", rules.name, e, exc_info=e)

    return ProbeResult(
        name=rules.name,
        classification=verdict.classification,
        elapsed_ms=max(outcome.elapsed_ms, 0.0),
        timestamp=timestamp or datetime.now(timezone.utc),
        details=details,
        alerts=(*verdict.alerts, *reported),
    )
