"""Overall health derived from recorded results."""

from deploy_probe.models.result import Counters, OverallStatus


def aggregate(counters: Counters) -> OverallStatus:
    """Derive the overall status; a single failure dominates any warnings."""
    if counters.failed > 0:
        return "unhealthy"
    if counters.warnings > 0:
        return "degraded"
    return "healthy"
