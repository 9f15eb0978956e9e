"""Raw outcome of a single probe invocation."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, kw_only=True)
class ProbeOutcome:
    """Raw result of one probe invocation, before any classification.

    Transport errors, timeouts and unexpected statuses are captured in
    ``failure_reason`` with ``succeeded=False``.
    """

    succeeded: bool
    elapsed_ms: float
    status_code: int | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)
    failure_reason: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))
