"""Container engine support.

This package detects the installed container engine and exposes a single
front for probing it and running commands with it.

Supported engines:
- Docker
- Podman (including the podman-docker compatibility shim)
"""

from enginescout_mcp.engines.base import EngineCommandError, EngineError, EngineNotFoundError
from enginescout_mcp.engines.profiles import get_profile, get_supported_engines
from enginescout_mcp.engines.runner import CommandRunner
from enginescout_mcp.engines.runtime import ContainerEngine, get_engine

__all__ = [
    "CommandRunner",
    "ContainerEngine",
    "EngineCommandError",
    "EngineError",
    "EngineNotFoundError",
    "get_engine",
    "get_profile",
    "get_supported_engines",
]
