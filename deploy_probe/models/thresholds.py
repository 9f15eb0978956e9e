"""Threshold configuration used to classify probe outcomes."""

from collections.abc import Mapping
from typing import Any, Self

from pydantic import Field, ValidationError, model_validator

from deploy_probe.models.base import Model


class InvalidThresholdConfigError(Exception):
    """Raised when the threshold configuration is malformed."""


class LatencyThresholds(Model):
    """Soft and hard latency ceilings in milliseconds."""

    soft_ms: float = Field(default=2000, gt=0, description="Warning ceiling")
    hard_ms: float = Field(default=5000, gt=0, description="Failure ceiling")

    @model_validator(mode="after")
    def check_order(self) -> Self:
        """Soft ceiling must be below the hard ceiling."""
        if self.soft_ms >= self.hard_ms:
            raise ValueError(
                f"soft_ms ({self.soft_ms}) must be lower than hard_ms ({self.hard_ms})"
            )
        return self


class ThresholdConfig(Model):
    """Numeric ceilings and floors that parameterize classification."""

    latency: LatencyThresholds = Field(
        default_factory=LatencyThresholds,
        description="Default latency ceilings for every probe",
    )
    probe_latency: Mapping[str, LatencyThresholds] = Field(
        default_factory=dict,
        description="Latency ceilings overridden per probe name",
    )
    error_rate_ceiling: float = Field(
        default=5.0,
        ge=0,
        le=100,
        description="Maximum tolerated error rate in percent",
    )
    uptime_floor: float = Field(
        default=99.5, ge=0, le=100, description="Minimum uptime in percent"
    )
    cost_ceiling: float = Field(
        default=5.0, ge=0, description="Maximum estimated monthly cost"
    )

    def latency_for(self, probe_name: str) -> LatencyThresholds:
        """Return the latency ceilings that apply to the given probe."""
        return self.probe_latency.get(probe_name, self.latency)


def load_threshold_config(raw: Mapping[str, Any] | None = None) -> ThresholdConfig:
    """Validate a raw threshold configuration.

    Unset keys fall back to their defaults.

    Raises:
        InvalidThresholdConfigError: If the configuration is malformed

    """
    try:
        return ThresholdConfig.model_validate(raw or {})
    except ValidationError as e:
        raise InvalidThresholdConfigError(
            f"Invalid threshold configuration: {e}"
        ) from e
