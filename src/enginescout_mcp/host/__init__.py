"""Host readiness signals and the prerequisite check."""

from enginescout_mcp.host.rdp import find_freerdp
from enginescout_mcp.host.specs import check_prerequisites, get_specs, satisfies_prerequisites
from enginescout_mcp.host.stats import HostStatsCollector

__all__ = [
    "HostStatsCollector",
    "check_prerequisites",
    "find_freerdp",
    "get_specs",
    "satisfies_prerequisites",
]
