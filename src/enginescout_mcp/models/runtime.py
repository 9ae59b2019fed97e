"""Container engine models.

This module defines the models describing a detected container engine,
shared by the engine layer, the host readiness checks and the MCP tools.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EngineKind(str, Enum):
    """Supported container engines."""

    DOCKER = "docker"
    PODMAN = "podman"


class ProbeStatus(str, Enum):
    """Outcome of a single capability probe."""

    PRESENT = "present"
    ABSENT = "absent"
    INDETERMINATE = "indeterminate"


class RuntimeInfo(BaseModel):
    """Version and compose capability of the detected engine."""

    model_config = ConfigDict(frozen=True)

    kind: EngineKind = Field(description="Detected engine")
    version: str = Field(default="", description="Raw output of '<engine> --version'")
    compose_installed: bool = Field(
        default=False,
        description="Compose plugin present at version 2 or later",
    )
    compose_version: str | None = Field(
        default=None,
        description="Compose plugin version (major.minor.patch) if reported",
    )
