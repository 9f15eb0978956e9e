"""Built-in probes against the monitored service."""

from collections.abc import Sequence

from deploy_probe.probes.base import Probe
from deploy_probe.probes.health import (
    BasicHealthProbe,
    LivenessProbe,
    MonitoringHealthProbe,
    ReadinessProbe,
    SystemStatusProbe,
)
from deploy_probe.probes.metrics import AlertsProbe, CostProbe, MetricsProbe


def default_probes() -> Sequence[Probe]:
    """Return the full battery of sequential probes, in execution order."""
    return [
        BasicHealthProbe(),
        MonitoringHealthProbe(),
        MetricsProbe(),
        AlertsProbe(),
        SystemStatusProbe(),
        ReadinessProbe(),
        LivenessProbe(),
        CostProbe(),
    ]


def quick_probes() -> Sequence[Probe]:
    """Return the essential subset of probes for a fast verification."""
    return [
        BasicHealthProbe(),
        MonitoringHealthProbe(),
        SystemStatusProbe(),
        ReadinessProbe(),
        CostProbe(),
    ]


__all__ = [
    "AlertsProbe",
    "BasicHealthProbe",
    "CostProbe",
    "LivenessProbe",
    "MetricsProbe",
    "MonitoringHealthProbe",
    "Probe",
    "ReadinessProbe",
    "SystemStatusProbe",
    "default_probes",
    "quick_probes",
]
