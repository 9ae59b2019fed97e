"""Host statistics collection.

Reads CPU, memory, virtualization and kernel module facts from the local
Linux host. Only the memory reader raises; the other probes log and return
their "not satisfied" value.
"""

import logging
from pathlib import Path

import psutil

from enginescout_mcp.engines.runner import CommandRunner
from enginescout_mcp.models.specs import MemoryInfo

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1024 ** 3


def _bytes_to_gb(value: int) -> float:
    return round(value / BYTES_PER_GB, 2)


class HostStatsCollector:
    """Collects host readiness facts."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        cpuinfo_path: Path = Path("/proc/cpuinfo"),
        kvm_device: Path = Path("/dev/kvm"),
    ):
        self.runner = runner or CommandRunner()
        self.cpuinfo_path = cpuinfo_path
        self.kvm_device = kvm_device

    def cpu_cores(self) -> int:
        """Count physical cores (SMT siblings are not counted twice)."""
        return psutil.cpu_count(logical=False) or 0

    def memory_info(self) -> MemoryInfo:
        """Read total and available memory.

        Raises:
            OSError: If memory statistics cannot be read
        """
        try:
            memory = psutil.virtual_memory()
        except OSError as e:
            logger.error(f"Error reading memory info: {e}")
            raise

        return MemoryInfo(
            total_gb=_bytes_to_gb(memory.total),
            available_gb=_bytes_to_gb(memory.available),
        )

    def kvm_enabled(self) -> bool:
        """Check for hardware virtualization (VT-x/AMD-V) and a KVM device."""
        try:
            cpuinfo = self.cpuinfo_path.read_text()
        except OSError as e:
            logger.warning(f"Error reading {self.cpuinfo_path}: {e}")
            return False
        has_extension = "vmx" in cpuinfo or "svm" in cpuinfo
        return has_extension and self.kvm_device.exists()

    async def module_loaded(self, name: str) -> bool:
        """Check if a kernel module is loaded according to lsmod."""
        result = await self.runner.run(["lsmod"])
        if not result.success:
            logger.warning(f"lsmod failed: {result.stderr.strip()}")
            return False
        lines = result.stdout.splitlines()[1:]  # Skip header
        return any(line.split()[0] == name for line in lines if line.strip())
