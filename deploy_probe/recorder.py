"""Append-only log of classified probe results."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from deploy_probe.models.result import Counters, ProbeResult


@dataclass(kw_only=True)
class ResultRecorder:
    """Ordered, write-once log of results with running counters.

    Owned by a single run driver, never shared between runs.
    """

    _results: list[ProbeResult] = field(default_factory=list, init=False)
    _passed: int = field(default=0, init=False)
    _failed: int = field(default=0, init=False)
    _warnings: int = field(default=0, init=False)

    def record(self, result: ProbeResult) -> None:
        """Append a result and count it under its classification."""
        match result.classification:
            case "pass":
                self._passed += 1
            case "fail":
                self._failed += 1
            case "warning":
                self._warnings += 1
            case other:
                raise ValueError(f"Unknown classification: {other!r}")
        self._results.append(result)

    def snapshot(self) -> Counters:
        """Return the current counters."""
        return Counters(
            total=len(self._results),
            passed=self._passed,
            failed=self._failed,
            warnings=self._warnings,
        )

    @property
    def results(self) -> Sequence[ProbeResult]:
        """Recorded results in recording order."""
        return tuple(self._results)
