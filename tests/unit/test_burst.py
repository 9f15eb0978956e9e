"""Tests for the load burst runner."""

import asyncio
import statistics
from unittest.mock import Mock

import aiohttp
import pytest

from deploy_probe.burst import CONCURRENT_LOAD, compute_stats, evaluate_burst, run_burst
from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import LoadBurstStats
from deploy_probe.models.target import Target
from deploy_probe.models.thresholds import ThresholdConfig
from deploy_probe.testing.factories import ProbeOutcomeFactory
from deploy_probe.testing.probes import RaisingProbe, StaticProbe


@pytest.fixture
def session() -> Mock:
    """Create mock HTTP session."""
    return Mock(spec=aiohttp.ClientSession)


@pytest.fixture
def target() -> Target:
    """Create test target."""
    return Target(base_url="http://service.test", timeout=1.0)


class TestRunBurst:
    """Tests for run_burst."""

    async def test_all_invocations_succeed(self, session: Mock, target: Target) -> None:
        """All succeeding invocations are counted with non-negative stddev."""
        stats = await run_burst(StaticProbe, session, target, 5)

        assert stats.requested == 5
        assert stats.succeeded == 5
        assert stats.measured == 5
        assert stats.mean_ms == 150.0
        assert stats.stddev_ms >= 0

    async def test_invocations_run_concurrently(
        self, session: Mock, target: Target
    ) -> None:
        """Invocations are all in flight at the same time."""
        probes = [StaticProbe(delay=0.1) for _ in range(5)]
        factory = iter(probes).__next__

        stats = await asyncio.wait_for(run_burst(factory, session, target, 5), 0.4)

        assert stats.succeeded == 5
        starts = [probe.calls[0] for probe in probes]
        assert max(starts) - min(starts) < 0.05

    async def test_excludes_escaped_exceptions_from_stats(
        self, session: Mock, target: Target
    ) -> None:
        """Invocations that escape with an exception have no measured duration."""
        probes = iter([StaticProbe(), StaticProbe(), RaisingProbe()])

        stats = await run_burst(probes.__next__, session, target, 3)

        assert stats.requested == 3
        assert stats.succeeded == 2
        assert stats.measured == 2

    async def test_rejects_zero_concurrency(
        self, session: Mock, target: Target
    ) -> None:
        """Concurrency must be at least one."""
        with pytest.raises(ValueError, match="concurrency"):
            await run_burst(StaticProbe, session, target, 0)


class TestComputeStats:
    """Tests for compute_stats."""

    def test_computes_population_statistics(self) -> None:
        """Statistics use the population standard deviation."""
        durations = [100.0, 110.0, 90.0, 105.0, 5000.0]
        outcomes = [ProbeOutcomeFactory.build(elapsed_ms=d) for d in durations]

        stats = compute_stats(5, outcomes)

        assert stats.mean_ms == pytest.approx(statistics.fmean(durations))
        assert stats.median_ms == 105.0
        assert stats.min_ms == 90.0
        assert stats.max_ms == 5000.0
        assert stats.stddev_ms == pytest.approx(statistics.pstdev(durations))

    def test_counts_only_succeeded(self) -> None:
        """Failed outcomes are measured but not counted as succeeded."""
        outcomes = [
            ProbeOutcomeFactory.build(elapsed_ms=100.0),
            ProbeOutcomeFactory.build(
                succeeded=False, elapsed_ms=5000.0, failure_reason="timeout"
            ),
        ]

        stats = compute_stats(2, outcomes)

        assert stats.succeeded == 1
        assert stats.measured == 2

    def test_empty_outcomes(self) -> None:
        """Nothing measured yields zeroed statistics."""
        stats = compute_stats(3, [], total_ms=12.0)

        assert stats == LoadBurstStats(
            requested=3, succeeded=0, measured=0, total_ms=12.0
        )

    def test_single_outcome_has_zero_stddev(self) -> None:
        """A single measurement has no spread."""
        stats = compute_stats(1, [ProbeOutcomeFactory.build(elapsed_ms=80.0)])

        assert stats.stddev_ms == 0.0


class TestEvaluateBurst:
    """Tests for evaluate_burst."""

    def test_passes_fast_complete_burst(self) -> None:
        """A complete and fast burst passes."""
        stats = LoadBurstStats(
            requested=5, succeeded=5, measured=5, mean_ms=100.0, max_ms=120.0
        )

        result = evaluate_burst(stats, ThresholdConfig())

        assert result.name == CONCURRENT_LOAD
        assert result.classification == "pass"
        assert result.details["success_rate"] == "5/5"

    def test_fails_when_error_rate_exceeds_tolerance(self) -> None:
        """One timeout out of five exceeds the default 5% tolerance."""
        outcomes = [ProbeOutcomeFactory.build(elapsed_ms=100.0) for _ in range(4)]
        outcomes.append(
            ProbeOutcome(succeeded=False, elapsed_ms=5000.0, failure_reason="timeout")
        )
        stats = compute_stats(5, outcomes)

        result = evaluate_burst(stats, ThresholdConfig())

        assert stats.succeeded == 4
        assert stats.mean_ms == pytest.approx(1080.0)
        assert result.classification == "fail"
        assert "20.0%" in result.details["error"]

    def test_warns_when_losses_within_tolerance(self) -> None:
        """Losses within the error-rate tolerance are a warning."""
        stats = LoadBurstStats(
            requested=5, succeeded=4, measured=5, mean_ms=100.0, max_ms=150.0
        )

        result = evaluate_burst(stats, ThresholdConfig(error_rate_ceiling=25.0))

        assert result.classification == "warning"

    def test_warns_on_slow_mean(self) -> None:
        """A mean latency above the soft ceiling is a warning."""
        stats = LoadBurstStats(
            requested=5, succeeded=5, measured=5, mean_ms=2500.0, max_ms=3000.0
        )

        result = evaluate_burst(stats, ThresholdConfig())

        assert result.classification == "warning"

    def test_warns_on_slow_outlier(self) -> None:
        """A single request above the hard ceiling is a warning."""
        stats = LoadBurstStats(
            requested=5, succeeded=5, measured=5, mean_ms=1100.0, max_ms=5200.0
        )

        result = evaluate_burst(stats, ThresholdConfig())

        assert result.classification == "warning"

    def test_fails_when_nothing_measured(self) -> None:
        """A burst with no measured invocation fails."""
        stats = LoadBurstStats(requested=5, succeeded=0, measured=0)

        result = evaluate_burst(stats, ThresholdConfig(error_rate_ceiling=100.0))

        assert result.classification == "fail"
