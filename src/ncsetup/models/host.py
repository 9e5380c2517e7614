"""Host target model."""

from pydantic import BaseModel, Field


class HostTarget(BaseModel):
    """The single machine being provisioned. Read-only during a run."""

    hostname: str = Field(description="Host name reported by the system")
    address: str = Field(description="Primary reachable address or domain")
    os_id: str = Field(default="", description="Distributor ID (e.g. Ubuntu)")
    os_version: str = Field(default="", description="Release (e.g. 24.04)")
    supported: bool = Field(default=True, description="OS version is in the supported set")
