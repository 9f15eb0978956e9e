"""Models for classified probe results and run reports."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Literal

type Classification = Literal["pass", "warning", "fail"]
type AlertLevel = Literal["info", "warning", "critical"]
type OverallStatus = Literal["healthy", "degraded", "unhealthy"]


@dataclass(frozen=True, kw_only=True)
class Alert:
    """Alert attached to a probe result."""

    level: AlertLevel
    message: str


@dataclass(frozen=True, kw_only=True)
class ProbeResult:
    """Classified result of a single probe."""

    name: str
    classification: Classification
    elapsed_ms: float
    timestamp: datetime
    details: Mapping[str, Any] = field(default_factory=dict)
    alerts: Sequence[Alert] = ()

    def __post_init__(self) -> None:
        if self.elapsed_ms < 0:
            raise ValueError(f"elapsed_ms must be >= 0, got {self.elapsed_ms}")
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))
        object.__setattr__(self, "alerts", tuple(self.alerts))


@dataclass(frozen=True, kw_only=True)
class Counters:
    """Running totals of recorded results."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    warnings: int = 0

    @property
    def success_rate(self) -> float:
        """Percentage of passed results, 0 when nothing was recorded."""
        if self.total == 0:
            return 0.0
        return round(self.passed / self.total * 100, 1)


@dataclass(frozen=True, kw_only=True)
class LoadBurstStats:
    """Aggregate statistics of one concurrent load burst.

    Latency statistics cover only invocations with a measured duration.
    """

    requested: int
    succeeded: int
    measured: int
    mean_ms: float = 0.0
    median_ms: float = 0.0
    max_ms: float = 0.0
    min_ms: float = 0.0
    stddev_ms: float = 0.0
    total_ms: float = 0.0

    @property
    def error_rate(self) -> float:
        """Percentage of requested invocations that did not succeed."""
        if self.requested == 0:
            return 0.0
        return (self.requested - self.succeeded) / self.requested * 100


@dataclass(frozen=True, kw_only=True)
class Report:
    """Final report of a validation run."""

    overall_status: OverallStatus
    counters: Counters
    results: Sequence[ProbeResult]
    recommendations: Sequence[str]
    generated_at: datetime
    base_url: str | None = None
    burst: LoadBurstStats | None = None
