"""Host readiness checks.

Gathers HostSpecs from the host and the container engine and decides
whether the host meets the prerequisites for the workload. Every field is
gathered on its own: a failing probe is logged and leaves its field at the
default without affecting the others.
"""

import logging
from collections.abc import Awaitable, Callable

from enginescout_mcp.config import Settings
from enginescout_mcp.engines.runtime import ContainerEngine
from enginescout_mcp.host.rdp import find_freerdp
from enginescout_mcp.host.stats import HostStatsCollector
from enginescout_mcp.models.specs import HostSpecs

logger = logging.getLogger(__name__)

RdpLocator = Callable[[], Awaitable[list[str] | None]]


def satisfies_prerequisites(
    specs: HostSpecs,
    requires_group: bool,
    settings: Settings | None = None,
) -> bool:
    """Check gathered specs against the workload prerequisites.

    Args:
        specs: Gathered host specs
        requires_group: Whether the engine needs group membership; when
            False the group check is skipped
        settings: Thresholds (defaults: 4 GB RAM, 2 cores)
    """
    settings = settings or Settings()
    group_ok = specs.docker_is_in_user_groups if requires_group else True
    return (
        specs.docker_installed
        and specs.docker_compose_installed
        and specs.docker_is_running
        and group_ok
        and specs.freerdp3_installed
        and specs.ip_tables_loaded
        and specs.iptable_nat_loaded
        and specs.kvm_enabled
        and specs.ram_gb >= settings.min_ram_gb
        and specs.cpu_cores >= settings.min_cpu_cores
    )


async def get_specs(
    engine: ContainerEngine,
    collector: HostStatsCollector | None = None,
    rdp_locator: RdpLocator | None = None,
) -> HostSpecs:
    """Gather all readiness signals.

    Args:
        engine: Container engine to probe
        collector: Host stats collector (defaults to one sharing the engine's runner)
        rdp_locator: FreeRDP locator (defaults to find_freerdp)
    """
    collector = collector or HostStatsCollector(runner=engine.runner)
    if rdp_locator is None:
        async def rdp_locator() -> list[str] | None:
            return await find_freerdp(engine.runner)

    specs = HostSpecs()

    try:
        specs.cpu_cores = collector.cpu_cores()
    except Exception as e:
        logger.error(f"Error getting CPU cores: {e}")

    try:
        specs.ram_gb = collector.memory_info().total_gb
    except Exception as e:
        logger.error(f"Error reading memory info: {e}")

    try:
        specs.kvm_enabled = collector.kvm_enabled()
    except Exception as e:
        logger.error(f"Error checking KVM support: {e}")

    try:
        specs.docker_installed = await engine.detect() is not None
    except Exception as e:
        logger.error(f"Error checking for container engine installation: {e}")

    try:
        info = await engine.get_info()
        specs.docker_compose_installed = info.compose_installed if info else False
    except Exception as e:
        logger.error(f"Error checking container engine compose version: {e}")

    try:
        specs.docker_is_running = await engine.is_running()
    except Exception as e:
        logger.error(f"Error checking if container engine is running: {e}")

    try:
        specs.docker_is_in_user_groups = await engine.is_user_in_group()
    except Exception as e:
        logger.error(f"Error checking user groups for container engine: {e}")

    try:
        specs.freerdp3_installed = bool(await rdp_locator())
    except Exception as e:
        logger.error(f"Error checking FreeRDP 3.x installation: {e}")

    try:
        specs.ip_tables_loaded = await collector.module_loaded("ip_tables")
    except Exception as e:
        logger.error(f"Error checking ip_tables module: {e}")

    try:
        specs.iptable_nat_loaded = await collector.module_loaded("iptable_nat")
    except Exception as e:
        logger.error(f"Error checking iptable_nat module: {e}")

    logger.info(f"Specs: {specs.model_dump()}")
    return specs


async def check_prerequisites(
    engine: ContainerEngine,
    collector: HostStatsCollector | None = None,
    rdp_locator: RdpLocator | None = None,
) -> tuple[HostSpecs, bool]:
    """Gather specs and evaluate them.

    Returns:
        Tuple of (specs, satisfied)
    """
    specs = await get_specs(engine, collector=collector, rdp_locator=rdp_locator)
    try:
        requires_group = await engine.requires_group_membership()
    except Exception as e:
        logger.error(f"Error checking group requirement: {e}")
        requires_group = True
    return specs, satisfies_prerequisites(specs, requires_group, engine.settings)
