"""Runtime settings.

Settings are read from ``ENGINESCOUT_*`` environment variables and
validated with pydantic, so a malformed value fails at load time instead
of in the middle of a probe.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Timeouts, access-control and readiness thresholds."""

    model_config = SettingsConfigDict(env_prefix="ENGINESCOUT_", env_ignore_empty=True)

    command_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for probes and single pass-through commands",
    )
    compose_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Timeout in seconds for compose up/down",
    )
    docker_group: str = Field(
        default="docker",
        min_length=1,
        description="Group a Docker user must belong to",
    )
    min_ram_gb: float = Field(default=4.0, ge=0, description="Minimum total RAM in GB")
    min_cpu_cores: int = Field(default=2, ge=0, description="Minimum physical CPU cores")
    log_level: str = Field(default="INFO", description="Logging level for the MCP server")
