"""Validation suite driving probes, the load burst and the report."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import aiohttp

from deploy_probe.burst import evaluate_burst, run_burst
from deploy_probe.evaluator import evaluate
from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import LoadBurstStats, Report
from deploy_probe.models.target import Target
from deploy_probe.models.thresholds import ThresholdConfig
from deploy_probe.probes.base import Probe
from deploy_probe.recorder import ResultRecorder
from deploy_probe.report import build_report, derive_recommendations

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ValidationSuite:
    """Runs registered probes sequentially, then one load burst.

    Every registered probe runs exactly once per run, whatever the outcome
    of the probes before it.
    """

    probes: Sequence[Probe]
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    burst_probe: Callable[[], Probe] | None = None
    inter_probe_delay: float = 0.2

    async def run(self, session: aiohttp.ClientSession, target: Target) -> Report:
        """Run the whole suite against the target and build its report.

        Args:
            session: HTTP session used by every probe
            target: Service under validation

        Returns:
            Report with every attempted probe, in execution order

        """
        recorder = ResultRecorder()

        log.info(
            "Running %d probe(s) against %s", len(self.probes), target.base_url
        )
        for probe in self.probes:
            outcome = await self._run_probe(probe, session, target)
            result = evaluate(probe, outcome, self.thresholds)
            recorder.record(result)
            log.info(
                "Probe completed: name=%s status=%s duration=%.0fms",
                result.name,
                result.classification,
                result.elapsed_ms,
            )
            await asyncio.sleep(self.inter_probe_delay)

        burst: LoadBurstStats | None = None
        if self.burst_probe is not None:
            burst = await run_burst(
                self.burst_probe, session, target, target.burst_concurrency
            )
            result = evaluate_burst(burst, self.thresholds)
            recorder.record(result)
            log.info(
                "Load burst classified: status=%s mean=%.0fms",
                result.classification,
                burst.mean_ms,
            )

        results = recorder.results
        return build_report(
            recorder.snapshot(),
            results,
            derive_recommendations(results),
            base_url=target.base_url,
            burst=burst,
        )

    async def _run_probe(
        self, probe: Probe, session: aiohttp.ClientSession, target: Target
    ) -> ProbeOutcome:
        """Run one probe, converting any escaped exception into a failure."""
        try:
            return await probe.run(session, target)
        except Exception as e:
            log.error("Probe %s raised: %s", probe.name, e, exc_info=e)
            return ProbeOutcome(
                succeeded=False,
                elapsed_ms=0.0,
                failure_reason=str(e) or type(e).__name__,
            )
