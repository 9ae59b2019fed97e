"""MCP Server for container engine and host readiness checks.

This module provides an MCP (Model Context Protocol) server that exposes
container engine detection and host prerequisite checks as MCP tools.

Usage:
    # Run as stdio server (for AI host integration)
    python -m enginescout_mcp.mcp_server

    # Or via entry point
    enginescout-mcp
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

from enginescout_mcp.engines.base import EngineError
from enginescout_mcp.engines.profiles import get_supported_engines
from enginescout_mcp.engines.runtime import ContainerEngine, get_engine
from enginescout_mcp.host.specs import check_prerequisites, get_specs

logger = logging.getLogger(__name__)

# Engine shared by all tools (initialized in lifespan)
_engine: ContainerEngine | None = None


@asynccontextmanager
async def lifespan(app: FastMCP):  # type: ignore[no-untyped-def]
    """Create the shared container engine."""
    global _engine
    _engine = get_engine()
    logger.info("EngineScout MCP server started")
    try:
        yield {"engine": _engine}
    finally:
        logger.info("EngineScout MCP server stopped")


# Create the MCP server
mcp = FastMCP(
    name="enginescout",
    instructions="""Container engine (Docker/Podman) detection and host readiness checks. Workflow: engine_detect -> engine_info -> host_check_prerequisites. Use engine_reset after installing or removing an engine.""",
    lifespan=lifespan,
)


def _get_engine() -> ContainerEngine:
    """Get the shared engine, raising if not initialized."""
    if _engine is None:
        raise RuntimeError("Container engine not initialized")
    return _engine


def _error(e: EngineError) -> dict[str, Any]:
    return {"error": e.message, "code": e.code, "details": e.details}


# =============================================================================
# Engine Tools
# =============================================================================


@mcp.tool()
async def engine_detect() -> dict[str, Any]:
    """Detect the installed container engine (docker or podman)."""
    engine = _get_engine()
    kind = await engine.detect()
    return {
        "engine": kind.value if kind else None,
        "status": engine.detection_status.value,
        "command": await engine.get_command(),
        "requires_group_membership": await engine.requires_group_membership(),
        "supported": get_supported_engines(),
    }


@mcp.tool()
async def engine_info() -> dict[str, Any]:
    """Get engine version, compose support, daemon status and group access."""
    engine = _get_engine()
    info = await engine.get_info()
    if info is None:
        return {
            "error": "No usable container engine found",
            "code": "ENGINE_NOT_FOUND",
            "status": engine.detection_status.value,
        }
    return {
        "engine": info.kind.value,
        "version": info.version,
        "compose_installed": info.compose_installed,
        "compose_version": info.compose_version,
        "running": await engine.is_running(),
        "user_in_group": await engine.is_user_in_group(),
    }


@mcp.tool()
async def engine_network_mode() -> dict[str, Any]:
    """Get the network backend containers should use (None = engine default)."""
    engine = _get_engine()
    return {"network_mode": await engine.get_network_mode()}


@mcp.tool()
async def engine_list_containers(filter: str | None = None) -> dict[str, Any]:
    """List container names.

    Args:
        filter: Engine filter expression (e.g. "name=winboat")
    """
    engine = _get_engine()
    try:
        kind = await engine.require()
        output = await engine.container_list(filter)
    except EngineError as e:
        return _error(e)
    names = [line for line in output.splitlines() if line.strip()]
    return {"engine": kind.value, "containers": names, "total": len(names)}


@mcp.tool()
async def engine_reset() -> dict[str, Any]:
    """Forget the detected engine so the next call probes again."""
    _get_engine().reset()
    return {"status": "reset"}


# =============================================================================
# Host Tools
# =============================================================================


@mcp.tool()
async def host_get_specs() -> dict[str, Any]:
    """Gather CPU, memory, KVM, kernel module, FreeRDP and engine signals."""
    specs = await get_specs(_get_engine())
    return specs.model_dump()


@mcp.tool()
async def host_check_prerequisites() -> dict[str, Any]:
    """Check whether the host meets the workload prerequisites."""
    engine = _get_engine()
    specs, satisfied = await check_prerequisites(engine)
    return {
        "satisfied": satisfied,
        "specs": specs.model_dump(),
        "thresholds": {
            "min_ram_gb": engine.settings.min_ram_gb,
            "min_cpu_cores": engine.settings.min_cpu_cores,
        },
    }


# =============================================================================
# Main Entry Point
# =============================================================================


def main():
    """Run the MCP server via stdio transport."""
    import sys

    from enginescout_mcp.config import Settings

    settings = Settings()

    # Configure logging to stderr (stdout is for MCP protocol)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    # Run with stdio transport
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
