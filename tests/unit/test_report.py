"""Tests for report building."""

import json
from datetime import datetime, timezone

from deploy_probe.burst import CONCURRENT_LOAD
from deploy_probe.models.result import Alert, Counters, LoadBurstStats
from deploy_probe.probes.health import BASIC_HEALTH, READINESS
from deploy_probe.probes.metrics import PERFORMANCE_METRICS
from deploy_probe.report import (
    RECOMMENDATIONS,
    build_report,
    derive_recommendations,
    format_output,
)
from deploy_probe.testing.factories import ProbeResultFactory

GENERATED_AT = datetime(2099, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestDeriveRecommendations:
    """Tests for derive_recommendations."""

    def test_no_recommendations_when_all_pass(self) -> None:
        """Passing results yield no recommendations."""
        results = [ProbeResultFactory.build(name=BASIC_HEALTH)]

        assert derive_recommendations(results) == []

    def test_looks_up_template_by_name_and_classification(self) -> None:
        """Templates are keyed by probe name and classification."""
        results = [
            ProbeResultFactory.build(
                name=PERFORMANCE_METRICS, classification="warning"
            ),
            ProbeResultFactory.build(name=READINESS, classification="fail"),
        ]

        assert derive_recommendations(results) == [
            RECOMMENDATIONS[(PERFORMANCE_METRICS, "warning")],
            RECOMMENDATIONS[(READINESS, "fail")],
        ]

    def test_deduplicates_preserving_first_seen_order(self) -> None:
        """Shared templates appear once, at their first position."""
        results = [
            ProbeResultFactory.build(name=CONCURRENT_LOAD, classification="warning"),
            ProbeResultFactory.build(name=READINESS, classification="fail"),
            ProbeResultFactory.build(
                name=PERFORMANCE_METRICS, classification="warning"
            ),
        ]

        recommendations = derive_recommendations(results)

        assert recommendations == [
            RECOMMENDATIONS[(CONCURRENT_LOAD, "warning")],
            RECOMMENDATIONS[(READINESS, "fail")],
        ]

    def test_falls_back_for_unknown_probe(self) -> None:
        """Probes without a template get a generic recommendation."""
        results = [ProbeResultFactory.build(name="Custom Check", classification="fail")]

        assert derive_recommendations(results) == [
            "Immediate attention required for Custom Check"
        ]


class TestBuildReport:
    """Tests for build_report."""

    def test_healthy_report(self) -> None:
        """A single fast success yields a healthy report."""
        result = ProbeResultFactory.build(name=BASIC_HEALTH, elapsed_ms=150.0)
        counters = Counters(total=1, passed=1)

        report = build_report(counters, [result], [], generated_at=GENERATED_AT)

        assert report.overall_status == "healthy"
        assert report.counters == counters
        assert report.results == (result,)
        assert report.recommendations == ()
        assert report.generated_at == GENERATED_AT

    def test_unhealthy_report(self) -> None:
        """Any failure makes the report unhealthy."""
        result = ProbeResultFactory.build(classification="fail")

        report = build_report(
            Counters(total=1, failed=1), [result], derive_recommendations([result])
        )

        assert report.overall_status == "unhealthy"
        assert report.recommendations


class TestFormatOutput:
    """Tests for format_output."""

    def test_flattens_report(self) -> None:
        """The report is flattened into a JSON-serializable document."""
        result = ProbeResultFactory.build(
            name=BASIC_HEALTH,
            classification="warning",
            elapsed_ms=2500.4,
            timestamp=GENERATED_AT,
            details={"status": "OK"},
            alerts=(Alert(level="warning", message="slow"),),
        )
        report = build_report(
            Counters(total=1, warnings=1),
            [result],
            ["Check logs"],
            base_url="http://service.test",
            generated_at=GENERATED_AT,
        )

        output = format_output(report)

        assert output["success"] is False
        assert output["overall_status"] == "degraded"
        assert output["base_url"] == "http://service.test"
        assert output["total"] == 1
        assert output["warnings"] == 1
        assert output["success_rate"] == 0.0
        assert output["recommendations"] == ["Check logs"]
        assert output["results"] == [
            {
                "name": BASIC_HEALTH,
                "status": "warning",
                "duration": 2500,
                "timestamp": "2099-01-01T12:00:00+00:00",
                "details": {"status": "OK"},
                "alerts": [{"level": "warning", "message": "slow"}],
            }
        ]
        assert "burst" not in output
        json.dumps(output)

    def test_includes_burst_stats(self) -> None:
        """Burst statistics are included when a burst ran."""
        burst = LoadBurstStats(
            requested=5, succeeded=4, measured=5, mean_ms=1080.0, max_ms=5000.0
        )
        report = build_report(Counters(), [], [], burst=burst)

        output = format_output(report)

        assert output["burst"]["requested"] == 5
        assert output["burst"]["succeeded"] == 4
        assert output["burst"]["error_rate"] == 20.0
        assert output["burst"]["max_ms"] == 5000.0
