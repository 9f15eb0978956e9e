"""Report assembly and recommendation derivation."""

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from deploy_probe.burst import CONCURRENT_LOAD
from deploy_probe.health import aggregate
from deploy_probe.models.result import (
    Classification,
    Counters,
    LoadBurstStats,
    ProbeResult,
    Report,
)
from deploy_probe.probes.health import (
    BASIC_HEALTH,
    LIVENESS,
    MONITORING_HEALTH,
    READINESS,
    SYSTEM_STATUS,
)
from deploy_probe.probes.metrics import (
    COST_MONITORING,
    PERFORMANCE_METRICS,
    SYSTEM_ALERTS,
)

RECOMMENDATIONS: Mapping[tuple[str, Classification], str] = {
    (BASIC_HEALTH, "fail"): "Verify the service process is running and reachable",
    (BASIC_HEALTH, "warning"): "Check application startup logs for degraded health",
    (MONITORING_HEALTH, "fail"): "Check logs and system resources",
    (MONITORING_HEALTH, "warning"): "Verify database connectivity and configuration",
    (PERFORMANCE_METRICS, "fail"): "Investigate and fix API errors",
    (PERFORMANCE_METRICS, "warning"): (
        "Increase compute memory or optimize database queries"
    ),
    (SYSTEM_ALERTS, "fail"): "Resolve critical alerts before promoting the build",
    (SYSTEM_ALERTS, "warning"): "Review active warning alerts",
    (SYSTEM_STATUS, "fail"): "Check component status and database connectivity",
    (SYSTEM_STATUS, "warning"): "Monitor degraded components closely",
    (READINESS, "fail"): "Verify dependencies required for readiness are available",
    (READINESS, "warning"): "Investigate slow readiness checks",
    (LIVENESS, "fail"): "Restart the service and check for crash loops",
    (LIVENESS, "warning"): "Investigate slow liveness responses",
    (COST_MONITORING, "fail"): "Check the cost monitoring endpoint configuration",
    (COST_MONITORING, "warning"): "Review resource usage to reduce estimated costs",
    (CONCURRENT_LOAD, "fail"): "Scale the service or increase concurrency limits",
    (CONCURRENT_LOAD, "warning"): (
        "Increase compute memory or optimize database queries"
    ),
}

FALLBACK_RECOMMENDATIONS: Mapping[Classification, str] = {
    "fail": "Immediate attention required for {name}",
    "warning": "Address warning conditions reported by {name}",
}


def derive_recommendations(results: Sequence[ProbeResult]) -> Sequence[str]:
    """Derive recommendations for failing and warning results.

    Recommendations are deduplicated, preserving first-seen order.
    """
    recommendations: list[str] = []
    for result in results:
        if result.classification == "pass":
            continue
        recommendation = RECOMMENDATIONS.get(
            (result.name, result.classification),
            FALLBACK_RECOMMENDATIONS[result.classification].format(name=result.name),
        )
        if recommendation not in recommendations:
            recommendations.append(recommendation)
    return recommendations


def build_report(
    counters: Counters,
    results: Sequence[ProbeResult],
    recommendations: Sequence[str],
    *,
    base_url: str | None = None,
    burst: LoadBurstStats | None = None,
    generated_at: datetime | None = None,
) -> Report:
    """Assemble the final report of a run."""
    return Report(
        overall_status=aggregate(counters),
        counters=counters,
        results=tuple(results),
        recommendations=tuple(recommendations),
        generated_at=generated_at or datetime.now(timezone.utc),
        base_url=base_url,
        burst=burst,
    )


def format_output(report: Report) -> dict[str, Any]:
    """Format a report as a JSON-serializable document."""
    output: dict[str, Any] = {
        "success": report.overall_status == "healthy",
        "overall_status": report.overall_status,
        "base_url": report.base_url,
        "generated_at": report.generated_at.isoformat(),
        "total": report.counters.total,
        "passed": report.counters.passed,
        "failed": report.counters.failed,
        "warnings": report.counters.warnings,
        "success_rate": report.counters.success_rate,
        "recommendations": list(report.recommendations),
        "results": [
            {
                "name": result.name,
                "status": result.classification,
                "duration": round(result.elapsed_ms),
                "timestamp": result.timestamp.isoformat(),
                "details": dict(result.details),
                "alerts": [
                    {"level": alert.level, "message": alert.message}
                    for alert in result.alerts
                ],
            }
            for result in report.results
        ],
    }
    if report.burst is not None:
        output["burst"] = {
            "requested": report.burst.requested,
            "succeeded": report.burst.succeeded,
            "measured": report.burst.measured,
            "error_rate": round(report.burst.error_rate, 1),
            "mean_ms": round(report.burst.mean_ms, 1),
            "median_ms": round(report.burst.median_ms, 1),
            "min_ms": round(report.burst.min_ms, 1),
            "max_ms": round(report.burst.max_ms, 1),
            "stddev_ms": round(report.burst.stddev_ms, 1),
            "total_ms": round(report.burst.total_ms, 1),
        }
    return output
