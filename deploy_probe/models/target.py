"""Description of the service under validation."""

from pydantic import Field, field_validator

from deploy_probe.models.base import Model


class Target(Model):
    """Service under validation."""

    base_url: str = Field(..., description="Base URL of the service")
    timeout: float = Field(default=10.0, gt=0, description="Per-request timeout (s)")
    burst_concurrency: int = Field(
        default=5, ge=1, description="Concurrent requests in the load burst"
    )
    user_agent: str = "deploy-probe/1.0"

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be appended."""
        return value.rstrip("/")

    def url_for(self, path: str) -> str:
        """Build the absolute URL of a service path."""
        return f"{self.base_url}{path}"
