"""Host readiness models."""

from pydantic import BaseModel, Field


class MemoryInfo(BaseModel):
    """Host memory in gigabytes, rounded to two decimals."""

    total_gb: float = 0.0
    available_gb: float = 0.0


class HostSpecs(BaseModel):
    """Readiness signals gathered from the host.

    Every field defaults to its "not satisfied" value so a failed probe
    leaves the specs in a state that fails the prerequisite check.
    """

    cpu_cores: int = Field(default=0, description="Physical CPU cores")
    ram_gb: float = Field(default=0.0, description="Total memory in GB")
    kvm_enabled: bool = Field(default=False, description="VT-x/AMD-V present and /dev/kvm exists")
    docker_installed: bool = Field(default=False, description="A container engine was detected")
    docker_compose_installed: bool = Field(default=False, description="Compose v2+ is available")
    docker_is_running: bool = Field(default=False, description="Engine answers 'ps'")
    docker_is_in_user_groups: bool = Field(
        default=False,
        description="Invoking user satisfies the engine's access control",
    )
    freerdp3_installed: bool = Field(default=False, description="A FreeRDP 3.x client is available")
    ip_tables_loaded: bool = Field(default=False, description="ip_tables kernel module loaded")
    iptable_nat_loaded: bool = Field(default=False, description="iptable_nat kernel module loaded")
