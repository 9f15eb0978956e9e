"""Concurrent load burst against a single probe kind."""

import asyncio
import logging
import statistics
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

import aiohttp

from deploy_probe.evaluator import evaluate
from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import Alert, LoadBurstStats, ProbeResult
from deploy_probe.models.target import Target
from deploy_probe.models.thresholds import ThresholdConfig
from deploy_probe.probes.base import Probe

log = logging.getLogger(__name__)

CONCURRENT_LOAD = "Concurrent Load Test"


async def run_burst(
    probe_factory: Callable[[], Probe],
    session: aiohttp.ClientSession,
    target: Target,
    concurrency: int,
) -> LoadBurstStats:
    """Run ``concurrency`` invocations of the same probe at once.

    Every invocation enforces its own timeout, so a slow or failed invocation
    never blocks or cancels the others.

    Args:
        probe_factory: Creates one probe per invocation
        session: HTTP session shared by all invocations
        target: Service under validation
        concurrency: Number of simultaneous invocations

    Returns:
        Statistics computed over the invocations with a measured duration

    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    log.info("Starting load burst with %d concurrent request(s)", concurrency)
    start = time.perf_counter()
    results = await asyncio.gather(
        *(probe_factory().run(session, target) for _ in range(concurrency)),
        return_exceptions=True,
    )
    total_ms = (time.perf_counter() - start) * 1000

    outcomes: list[ProbeOutcome] = []
    for result in results:
        if isinstance(result, ProbeOutcome):
            outcomes.append(result)
        elif isinstance(result, Exception):
            log.error("Burst invocation failed: %s", result, exc_info=result)
        else:
            raise result

    stats = compute_stats(concurrency, outcomes, total_ms=total_ms)
    log.info(
        "Load burst completed: %d/%d succeeded, mean=%.1fms max=%.1fms",
        stats.succeeded,
        stats.requested,
        stats.mean_ms,
        stats.max_ms,
    )
    return stats


def compute_stats(
    requested: int, outcomes: Sequence[ProbeOutcome], *, total_ms: float = 0.0
) -> LoadBurstStats:
    """Compute burst statistics from the measured outcomes.

    Invocations missing from ``outcomes`` count as requested but neither
    succeeded nor measured.
    """
    durations = [outcome.elapsed_ms for outcome in outcomes]
    succeeded = sum(1 for outcome in outcomes if outcome.succeeded)

    if not durations:
        return LoadBurstStats(
            requested=requested, succeeded=succeeded, measured=0, total_ms=total_ms
        )

    return LoadBurstStats(
        requested=requested,
        succeeded=succeeded,
        measured=len(durations),
        mean_ms=statistics.fmean(durations),
        median_ms=statistics.median(durations),
        max_ms=max(durations),
        min_ms=min(durations),
        stddev_ms=statistics.pstdev(durations),
        total_ms=total_ms,
    )


@dataclass(frozen=True, kw_only=True)
class BurstRules:
    """Burst-specific conditions on top of the latency thresholds."""

    stats: LoadBurstStats
    name: str = CONCURRENT_LOAD

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        if self.stats.measured == 0:
            return ["No burst request completed"]
        return []

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        violations: list[str] = []
        if self.stats.succeeded < self.stats.requested:
            violations.append(
                f"{self.stats.requested - self.stats.succeeded} of "
                f"{self.stats.requested} burst request(s) failed"
            )
        hard_ms = thresholds.latency_for(self.name).hard_ms
        if self.stats.max_ms >= hard_ms:
            violations.append(
                f"Slowest burst request took {self.stats.max_ms:.0f}ms "
                f"(limit {hard_ms:.0f}ms)"
            )
        return violations

    def alerts(self, outcome: ProbeOutcome) -> Sequence[Alert]:
        return ()


def evaluate_burst(
    stats: LoadBurstStats,
    thresholds: ThresholdConfig,
    *,
    timestamp: datetime | None = None,
) -> ProbeResult:
    """Classify a burst through the same evaluator used for single probes.

    The burst succeeds when its error rate stays within the configured
    error-rate ceiling and is judged on its mean latency.
    """
    tolerated = stats.error_rate <= thresholds.error_rate_ceiling
    outcome = ProbeOutcome(
        succeeded=tolerated,
        elapsed_ms=stats.mean_ms,
        payload={
            "concurrency": stats.requested,
            "success_rate": f"{stats.succeeded}/{stats.requested}",
            "avg_response_time": round(stats.mean_ms),
            "median_response_time": round(stats.median_ms),
            "min_response_time": round(stats.min_ms),
            "max_response_time": round(stats.max_ms),
            "stddev_response_time": round(stats.stddev_ms, 1),
            "total_duration": round(stats.total_ms),
        },
        failure_reason=None
        if tolerated
        else (
            f"Error rate {stats.error_rate:.1f}% exceeds the "
            f"{thresholds.error_rate_ceiling}% tolerance"
        ),
    )
    return evaluate(BurstRules(stats=stats), outcome, thresholds, timestamp=timestamp)
