"""Probes for the metrics, alerts and cost endpoints."""

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import Alert
from deploy_probe.models.thresholds import ThresholdConfig
from deploy_probe.probes.base import Probe

PERFORMANCE_METRICS = "Performance Metrics"
SYSTEM_ALERTS = "System Alerts"
COST_MONITORING = "Cost Monitoring"

# Warning alerts attached to a result, after all critical ones
MAX_WARNING_ALERTS = 3


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)


@dataclass(frozen=True, kw_only=True)
class MetricsProbe(Probe):
    """Performance metrics checked against the uptime floor and error ceiling."""

    name: str = PERFORMANCE_METRICS
    path: str = "/api/monitoring/metrics"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        metrics = body.get("metrics")
        metrics = metrics if isinstance(metrics, Mapping) else {}
        performance = metrics.get("performance")
        performance = performance if isinstance(performance, Mapping) else {}
        database = metrics.get("database")
        database = database if isinstance(database, Mapping) else {}
        return {
            "uptime": performance.get("uptime"),
            "error_rate": performance.get("errorRate"),
            "avg_response_time": performance.get("avgResponseTime"),
            "request_count": performance.get("requestCount"),
            "database_response_time": database.get("responseTime"),
        }

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations: list[str] = []

        uptime = _number(outcome.payload.get("uptime"))
        if uptime is None:
            violations.append("Uptime is not reported")
        elif uptime < thresholds.uptime_floor:
            violations.append(
                f"Uptime {uptime}% is below the {thresholds.uptime_floor}% floor"
            )

        error_rate = _number(outcome.payload.get("error_rate"))
        if error_rate is None:
            violations.append("Error rate is not reported")
        elif error_rate >= thresholds.error_rate_ceiling:
            violations.append(
                f"Error rate {error_rate}% exceeds the "
                f"{thresholds.error_rate_ceiling}% ceiling"
            )

        return violations


@dataclass(frozen=True, kw_only=True)
class AlertsProbe(Probe):
    """Active alerts listed by the service."""

    name: str = SYSTEM_ALERTS
    path: str = "/api/monitoring/alerts"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        entries = body.get("alerts")
        entries = [
            entry
            for entry in (entries if isinstance(entries, list) else [])
            if isinstance(entry, Mapping)
        ]
        levels = [entry.get("level") for entry in entries]
        return {
            "total_alerts": len(entries),
            "critical_alerts": levels.count("critical"),
            "warning_alerts": levels.count("warning"),
            "info_alerts": levels.count("info"),
            "alerts": entries,
        }

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        if critical := outcome.payload.get("critical_alerts", 0):
            return [f"{critical} critical alert(s) active"]
        return []

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations = list(super().soft_violations(outcome, thresholds))
        if warnings := outcome.payload.get("warning_alerts", 0):
            violations.append(f"{warnings} warning alert(s) active")
        return violations

    def alerts(self, outcome: ProbeOutcome) -> Sequence[Alert]:
        entries = outcome.payload.get("alerts", [])
        critical = [e for e in entries if e.get("level") == "critical"]
        warnings = [e for e in entries if e.get("level") == "warning"]
        return [
            Alert(level=entry["level"], message=str(entry.get("message", "")))
            for entry in critical + warnings[:MAX_WARNING_ALERTS]
        ]


@dataclass(frozen=True, kw_only=True)
class CostProbe(Probe):
    """Estimated monthly cost checked against the cost ceiling.

    The cost endpoint depends on an external billing source, so a 503 is
    tolerated and classified as a warning.
    """

    name: str = COST_MONITORING
    path: str = "/api/monitoring/costs"
    tolerated_statuses: Collection[int] = (503,)

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        data = body.get("data")
        data = data if isinstance(data, Mapping) else {}
        return {
            "estimated_monthly_cost": data.get("estimatedMonthlyCost") or 0,
            "request_count": data.get("requestCount"),
            "lambda_invocations": data.get("lambdaInvocations"),
            "storage_usage": data.get("storageUsage"),
        }

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations = list(super().soft_violations(outcome, thresholds))
        cost = _number(outcome.payload.get("estimated_monthly_cost"))
        if cost is not None and cost > thresholds.cost_ceiling:
            violations.append(
                f"Estimated monthly cost {cost:.2f} is above the "
                f"{thresholds.cost_ceiling:.2f} budget"
            )
        return violations
