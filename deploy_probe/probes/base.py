"""Abstract base class for remote probes."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import aiohttp

from deploy_probe.models.outcome import ProbeOutcome
from deploy_probe.models.result import Alert
from deploy_probe.models.target import Target
from deploy_probe.models.thresholds import ThresholdConfig

log = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


@dataclass(frozen=True, kw_only=True)
class Probe(ABC):
    """One bounded remote check against the service under validation.

    Subclasses define which response fields are extracted into the outcome
    payload and which conditions, beyond a 2xx status, count as hard (fail)
    or soft (warning) threshold violations.
    """

    name: str
    path: str
    tolerated_statuses: Collection[int] = ()

    async def run(self, session: aiohttp.ClientSession, target: Target) -> ProbeOutcome:
        """Perform the check and return its raw outcome.

        Never raises for transport failures, timeouts or unexpected statuses,
        these are captured in the returned outcome instead.
        """
        url = target.url_for(self.path)
        status: int | None = None
        start = time.perf_counter()
        try:
            async with asyncio.timeout(target.timeout):
                async with session.get(url) as response:
                    status = response.status
                    if not 200 <= status < 300:
                        return self._unexpected_status(status, _elapsed_ms(start))
                    body = await response.json(content_type=None)
        except TimeoutError:
            log.warning("%s timed out after %.1fs", self.name, target.timeout)
            return ProbeOutcome(
                succeeded=False, elapsed_ms=_elapsed_ms(start), failure_reason="timeout"
            )
        except aiohttp.ClientError as e:
            log.warning("%s request failed: %s", self.name, e)
            return ProbeOutcome(
                succeeded=False,
                elapsed_ms=_elapsed_ms(start),
                failure_reason=str(e) or type(e).__name__,
            )
        except ValueError:
            body = None

        elapsed_ms = _elapsed_ms(start)

        if not isinstance(body, Mapping):
            log.warning("%s returned an invalid response body", self.name)
            return ProbeOutcome(
                succeeded=False,
                elapsed_ms=elapsed_ms,
                status_code=status,
                failure_reason="invalid response body",
            )

        return ProbeOutcome(
            succeeded=True,
            elapsed_ms=elapsed_ms,
            status_code=status,
            payload=self.extract(body),
        )

    def _unexpected_status(self, status: int, elapsed_ms: float) -> ProbeOutcome:
        """Capture a non-2xx response, tolerated statuses are kept successful."""
        if status in self.tolerated_statuses:
            log.info("%s returned tolerated status %d", self.name, status)
            return ProbeOutcome(
                succeeded=True, elapsed_ms=elapsed_ms, status_code=status
            )
        return ProbeOutcome(
            succeeded=False,
            elapsed_ms=elapsed_ms,
            status_code=status,
            failure_reason=f"HTTP {status}",
        )

    @abstractmethod
    def extract(self, body: Mapping[str, Any]) -> Mapping[str, Any]:
        """Extract the diagnostic fields of interest from a response body."""

    def hard_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        """Return probe-specific conditions that make the check fail."""
        return ()

    def soft_violations(
        self, outcome: ProbeOutcome, thresholds: ThresholdConfig
    ) -> Sequence[str]:
        """Return probe-specific conditions that make the check a warning.

        A tolerated non-2xx status is always a soft violation.
        """
        if outcome.status_code in self.tolerated_statuses:
            return (f"Service returned HTTP {outcome.status_code}",)
        return ()

    def alerts(self, outcome: ProbeOutcome) -> Sequence[Alert]:
        """Return alerts reported by the service itself."""
        return ()
