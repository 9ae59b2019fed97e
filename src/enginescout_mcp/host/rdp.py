"""FreeRDP client discovery.

The downstream workload is reached over RDP and needs a FreeRDP 3.x
client, either installed natively or as a Flatpak.
"""

import logging
import re
import shutil

from enginescout_mcp.engines.runner import CommandRunner

logger = logging.getLogger(__name__)

NATIVE_CLIENTS = ("xfreerdp3", "xfreerdp", "sdl-freerdp3", "sdl-freerdp")
FLATPAK_APP_ID = "com.freerdp.FreeRDP"
REQUIRED_MAJOR = 3

_VERSION_RE = re.compile(r"version\s+(\d+)\.\d+", re.IGNORECASE)


def freerdp_major_version(output: str) -> int | None:
    """Parse the major version from 'xfreerdp --version' output."""
    match = _VERSION_RE.search(output)
    if not match:
        return None
    return int(match.group(1))


async def find_freerdp(runner: CommandRunner | None = None) -> list[str] | None:
    """Locate a FreeRDP 3.x client.

    Args:
        runner: Command runner for version probes

    Returns:
        Argument prefix that launches the client, or None if no 3.x client
        is installed
    """
    runner = runner or CommandRunner()

    for name in NATIVE_CLIENTS:
        path = shutil.which(name)
        if not path:
            continue
        result = await runner.run([path, "--version"])
        major = freerdp_major_version(result.stdout)
        if major == REQUIRED_MAJOR:
            logger.debug(f"Found FreeRDP {major} at {path}")
            return [path]
        logger.debug(f"Ignoring {path}: version {major} is not {REQUIRED_MAJOR}.x")

    if shutil.which("flatpak"):
        result = await runner.run(["flatpak", "list", "--app", "--columns=application"])
        if result.success and FLATPAK_APP_ID in result.stdout.split():
            logger.debug(f"Found FreeRDP Flatpak {FLATPAK_APP_ID}")
            return ["flatpak", "run", "--command=xfreerdp", FLATPAK_APP_ID]

    return None
