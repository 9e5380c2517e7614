"""Credential model for secrets produced or consumed by a run."""

from enum import Enum

from pydantic import BaseModel, Field


class CredentialSource(str, Enum):
    GENERATED = "generated"
    SUPPLIED = "supplied"


class Credential(BaseModel):
    """A secret used by the pipeline.

    Attributes:
        label: Report label ("admin", "database", "database-root").
        username: Account the secret belongs to.
        secret: The secret value. Never written to run records.
        source: Whether the value was generated this run or supplied.
        insecure: True for weak or well-known supplied values.
        applied_by: Name of the step that installs the secret on the host.
    """

    label: str
    username: str
    secret: str = Field(repr=False)
    source: CredentialSource
    insecure: bool = False
    applied_by: str
