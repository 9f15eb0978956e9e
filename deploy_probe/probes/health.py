"""Probes for the liveness, health and readiness endpoints."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import Alert
from deploy_probe.models.thresholds import ThresholdConfig
from deploy_probe.probes.base import Probe

BASIC_HEALTH = "Basic Health Check"
MONITORING_HEALTH = "Monitoring Health Check"
SYSTEM_STATUS = "System Status"
READINESS = "Readiness Probe"
LIVENESS = "Liveness Probe"

ALERT_LEVELS = frozenset({"info", "warning", "critical"})


def _section(body: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = body.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True, kw_only=True)
class BasicHealthProbe(Probe):
    """Basic liveness check of the service."""

    name: str = BASIC_HEALTH
    path: str = "/api/health"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        return {
            "status": body.get("status"),
            "has_monitoring": bool(body.get("monitoring")),
            "environment": _section(body, "health").get("environment", "unknown"),
        }

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations = list(super().soft_violations(outcome, thresholds))
        status = outcome.payload.get("status")
        if status != "OK":
            violations.append(f"Health status is {status!r}, expected 'OK'")
        return violations


@dataclass(frozen=True, kw_only=True)
class MonitoringHealthProbe(Probe):
    """Structured health check reported by the monitoring subsystem."""

    name: str = MONITORING_HEALTH
    path: str = "/api/monitoring/health"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        health = _section(body, "health")
        alerts = body.get("alerts")
        return {
            "status": body.get("status"),
            "response_time": body.get("responseTime"),
            "database_connected": _section(health, "database").get("connected"),
            "features_available": _section(health, "features").get(
                "availabilityPercentage"
            ),
            "alerts": list(alerts) if isinstance(alerts, list) else [],
        }

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations = list(super().soft_violations(outcome, thresholds))
        status = outcome.payload.get("status")
        if status != "healthy":
            violations.append(f"Monitoring status is {status!r}")
        return violations

    def alerts(self, outcome: ProbeOutcome) -> Sequence[Alert]:
        return [
            Alert(level=entry["level"], message=str(entry.get("message", "")))
            for entry in outcome.payload.get("alerts", [])
            if isinstance(entry, Mapping) and entry.get("level") in ALERT_LEVELS
        ]


@dataclass(frozen=True, kw_only=True)
class SystemStatusProbe(Probe):
    """Overall system status with per-component breakdown."""

    name: str = SYSTEM_STATUS
    path: str = "/api/monitoring/status"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        components = _section(body, "components")
        return {
            "overall_status": body.get("status"),
            "health_percentage": _section(body, "summary").get("healthPercentage"),
            "api_status": _section(components, "api").get("status"),
            "database_status": _section(components, "database").get("status"),
            "features_status": _section(components, "features").get("status"),
            "performance_status": _section(components, "performance").get("status"),
        }

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        status = outcome.payload.get("overall_status")
        if status not in {"healthy", "degraded"}:
            return [f"System status is {status!r}"]
        return []

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations = list(super().soft_violations(outcome, thresholds))
        if outcome.payload.get("overall_status") == "degraded":
            violations.append("System status is 'degraded'")
        return violations


@dataclass(frozen=True, kw_only=True)
class ReadinessProbe(Probe):
    """Readiness check: the service accepts traffic."""

    name: str = READINESS
    path: str = "/api/monitoring/ready"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        return {"ready": body.get("ready"), "checks": body.get("checks")}

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        if outcome.payload.get("ready") is not True:
            return ["Service reports it is not ready"]
        return []


@dataclass(frozen=True, kw_only=True)
class LivenessProbe(Probe):
    """Liveness check of the monitoring subsystem."""

    name: str = LIVENESS
    path: str = "/api/monitoring/live"

    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        return {"alive": body.get("alive"), "uptime": body.get("uptime")}

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        if outcome.payload.get("alive") is not True:
            return ["Service reports it is not alive"]
        return []
