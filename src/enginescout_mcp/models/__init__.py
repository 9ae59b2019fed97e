"""Data models shared across the engine and host layers."""

from enginescout_mcp.models.runtime import EngineKind, ProbeStatus, RuntimeInfo
from enginescout_mcp.models.specs import HostSpecs, MemoryInfo

__all__ = [
    "EngineKind",
    "HostSpecs",
    "MemoryInfo",
    "ProbeStatus",
    "RuntimeInfo",
]
