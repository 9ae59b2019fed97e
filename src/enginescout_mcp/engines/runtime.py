"""Container engine detection and command dispatch.

This module provides ContainerEngine, a uniform front for Docker and
Podman. It detects which engine is installed (including Podman installed
as a 'docker' compatibility shim), memoizes the result, probes the
engine's capabilities and runs pass-through commands with the detected
engine's binary.
"""

import asyncio
import logging
import re
import shlex
from collections.abc import Sequence

from enginescout_mcp.config import Settings
from enginescout_mcp.engines.base import EngineCommandError, EngineNotFoundError
from enginescout_mcp.engines.models import ExecResult
from enginescout_mcp.engines.profiles import get_profile
from enginescout_mcp.engines.runner import CommandRunner
from enginescout_mcp.models.runtime import EngineKind, ProbeStatus, RuntimeInfo

logger = logging.getLogger(__name__)

_ENGINE_PREFIX_RE = re.compile(r"^(docker|podman)")
_SEMVER_RE = re.compile(r"(\d+\.\d+\.\d+)")


def parse_compose_version(output: str) -> tuple[str | None, bool]:
    """Extract the compose plugin version from 'compose version' output.

    Returns:
        Tuple of (version, installed). Only compose v2+ counts as installed;
        v1 plugins have a different CLI and are treated as absent.
    """
    match = _SEMVER_RE.search(output)
    if not match:
        return None, False
    version = match.group(1)
    major = int(version.split(".")[0])
    return version, major >= 2


def rewrite_command(argv: Sequence[str], cli: str) -> list[str]:
    """Point a command at the given engine binary.

    Only a 'docker' or 'podman' prefix of the program name is replaced, so
    'docker-compose' becomes 'podman-compose'. Later arguments (a container
    named 'docker', a filter value, ...) are kept.
    """
    cmd = list(argv)
    if cmd:
        cmd[0] = _ENGINE_PREFIX_RE.sub(cli, cmd[0], count=1)
    return cmd


class ContainerEngine:
    """Detected container engine with cached capabilities.

    Detection trusts the first success: once an engine is found it is
    reused until reset() is called. RuntimeInfo is cached alongside and is
    only served while its kind matches the cached engine kind.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the engine front.

        Args:
            runner: Command runner (defaults to one using the settings' timeout)
            settings: Settings (defaults to Settings() read from the environment)
        """
        self.settings = settings or Settings()
        self.runner = runner or CommandRunner(timeout=self.settings.command_timeout)
        self._kind: EngineKind | None = None
        self._info: RuntimeInfo | None = None
        self._detection_status = ProbeStatus.INDETERMINATE
        self._detect_lock = asyncio.Lock()
        self._info_lock = asyncio.Lock()
        self._generation = 0

    @property
    def detection_status(self) -> ProbeStatus:
        """Outcome of the last detection.

        ABSENT means neither binary answered; INDETERMINATE means a probe
        timed out (or detection has not run yet), so the engine may exist.
        """
        return self._detection_status

    async def detect(self) -> EngineKind | None:
        """Detect which container engine is installed.

        Returns:
            The engine kind, or None if neither docker nor podman is usable
        """
        if self._kind is not None:
            return self._kind

        async with self._detect_lock:
            if self._kind is not None:
                return self._kind

            generation = self._generation
            result = await self.runner.run([EngineKind.DOCKER.value, "--version"])
            if result.success:
                if EngineKind.PODMAN.value in result.stdout.lower():
                    logger.info("Detected podman-docker compatibility shim")
                    kind = EngineKind.PODMAN
                else:
                    kind = EngineKind.DOCKER
                return self._remember(kind, generation)
            timed_out = result.timed_out

            result = await self.runner.run([EngineKind.PODMAN.value, "--version"])
            if result.success:
                return self._remember(EngineKind.PODMAN, generation)
            timed_out = timed_out or result.timed_out

            if generation != self._generation:
                return None
            if timed_out:
                self._detection_status = ProbeStatus.INDETERMINATE
                logger.warning("Container engine detection timed out")
            else:
                self._detection_status = ProbeStatus.ABSENT
                logger.info("No container engine found")
            return None

    async def require(self) -> EngineKind:
        """Detect the engine, raising if none is installed.

        Raises:
            EngineNotFoundError: If neither docker nor podman is usable
        """
        kind = await self.detect()
        if kind is None:
            raise EngineNotFoundError()
        return kind

    def _remember(self, kind: EngineKind, generation: int) -> EngineKind:
        # A reset() during the probe discards its result
        if generation != self._generation:
            return kind
        self._kind = kind
        self._detection_status = ProbeStatus.PRESENT
        logger.info(f"Detected container engine: {kind.value}")
        return kind

    async def get_info(self) -> RuntimeInfo | None:
        """Get version and compose support of the detected engine.

        Returns:
            RuntimeInfo, or None if no engine is installed or its version
            could not be read
        """
        generation = self._generation
        kind = await self.detect()
        if kind is None:
            return None

        async with self._info_lock:
            if self._info is not None and self._info.kind == kind:
                return self._info
            if generation != self._generation:
                # Reset while waiting: resolve the engine again
                generation = self._generation
                kind = await self.detect()
                if kind is None:
                    return None

            cli = get_profile(kind).cli_command
            result = await self.runner.run([cli, "--version"])
            if not result.success:
                logger.error(f"Error getting {cli} info: {result.stderr.strip()}")
                return None

            compose_version: str | None = None
            compose_installed = False
            compose = await self.runner.run([cli, "compose", "version"])
            if compose.success and compose.stdout:
                compose_version, compose_installed = parse_compose_version(compose.stdout)
            if compose_version and not compose_installed:
                logger.warning(f"Compose {compose_version} is too old, version 2 or later is required")

            info = RuntimeInfo(
                kind=kind,
                version=result.stdout.strip(),
                compose_installed=compose_installed,
                compose_version=compose_version,
            )
            if generation == self._generation:
                self._info = info
            return info

    async def get_command(self) -> str:
        """Get the binary name of the detected engine.

        Falls back to 'docker' when nothing is detected so callers that
        predate detection keep their behaviour.
        """
        kind = await self.detect()
        if kind is None:
            return EngineKind.DOCKER.value
        return get_profile(kind).cli_command

    async def is_running(self) -> bool:
        """Check if the engine answers and lists containers."""
        cli = await self.get_command()
        result = await self.runner.run([cli, "ps"])
        return result.success and bool(result.stdout)

    async def is_user_in_group(self) -> bool:
        """Check if the invoking user satisfies the engine's access control.

        Podman runs rootless and needs no group, so this is always True for
        it. For Docker the user must be in the configured group.
        """
        kind = await self.detect()
        if kind is None:
            return False
        if not get_profile(kind).requires_group_membership:
            return True

        result = await self.runner.run(["id", "-Gn"])
        if not result.success:
            logger.warning(f"Failed to read user groups: {result.stderr.strip()}")
            return False
        return self.settings.docker_group in result.stdout.split()

    async def requires_group_membership(self) -> bool:
        """Check if the detected engine needs a group membership (Docker only)."""
        kind = await self.detect()
        return kind is not None and get_profile(kind).requires_group_membership

    async def get_network_mode(self) -> str | None:
        """Get the network backend containers should use.

        Returns:
            None for Docker (engine default), 'pasta' or 'slirp4netns' for
            Podman. An unreadable Podman version selects 'slirp4netns'.
        """
        kind = await self.detect()
        if kind is None:
            return None
        info = await self.get_info()
        return get_profile(kind).network_mode(info.version if info else None)

    def reset(self) -> None:
        """Forget the detected engine and its cached info.

        Probes still in flight finish but do not write their results back.
        """
        self._generation += 1
        self._kind = None
        self._info = None
        self._detection_status = ProbeStatus.INDETERMINATE

    # =========================================================================
    # Command dispatch
    # =========================================================================

    async def execute(
        self,
        command: str | Sequence[str],
        timeout: float | None = None,
    ) -> ExecResult:
        """Run a command with the detected engine's binary.

        Args:
            command: Argument list, or a string split with shell-like rules,
                whose leading 'docker'/'podman' token is replaced
            timeout: Override the runner timeout (seconds)

        Returns:
            Raw ExecResult; the exit code is not checked
        """
        argv = shlex.split(command) if isinstance(command, str) else list(command)
        cli = await self.get_command()
        return await self.runner.run(rewrite_command(argv, cli), timeout=timeout)

    async def _dispatch(self, *args: str, timeout: float | None = None) -> ExecResult:
        """Run an engine subcommand, raising on failure."""
        argv = [EngineKind.DOCKER.value, *args]
        result = await self.execute(argv, timeout=timeout)
        if not result.success:
            raise EngineCommandError(
                command=shlex.join(args),
                exit_code=result.exit_code,
                stderr=result.stderr,
                timed_out=result.timed_out,
            )
        return result

    async def container_inspect(self, name: str, fmt: str) -> str:
        """Inspect a container with a Go template format."""
        result = await self._dispatch("inspect", f"--format={fmt}", name)
        return result.stdout.strip()

    async def container_start(self, name: str) -> str:
        result = await self._dispatch("container", "start", name)
        return result.stdout

    async def container_stop(self, name: str) -> str:
        result = await self._dispatch("container", "stop", name)
        return result.stdout

    async def container_pause(self, name: str) -> str:
        result = await self._dispatch("container", "pause", name)
        return result.stdout

    async def container_unpause(self, name: str) -> str:
        result = await self._dispatch("container", "unpause", name)
        return result.stdout

    async def container_remove(self, name: str) -> str:
        result = await self._dispatch("rm", name)
        return result.stdout

    async def volume_remove(self, name: str) -> str:
        result = await self._dispatch("volume", "rm", name)
        return result.stdout

    async def container_list(self, filter: str | None = None) -> str:
        """List container names (all states), optionally filtered.

        Args:
            filter: Engine filter expression (e.g. 'name=winboat')

        Returns:
            Raw output, one name per line
        """
        args = ["ps", "-a"]
        if filter:
            args.extend(["--filter", filter])
        args.extend(["--format", "{{.Names}}"])
        result = await self._dispatch(*args)
        return result.stdout

    async def compose_up(self, compose_file: str) -> ExecResult:
        """Start a compose project in the background."""
        return await self._dispatch(
            "compose", "-f", compose_file, "up", "-d",
            timeout=self.settings.compose_timeout,
        )

    async def compose_down(self, compose_file: str) -> None:
        """Stop and remove a compose project."""
        await self._dispatch(
            "compose", "-f", compose_file, "down",
            timeout=self.settings.compose_timeout,
        )


# Process-wide engine for callers that do not manage their own instance
_default_engine: ContainerEngine | None = None


def get_engine() -> ContainerEngine:
    """Get the shared ContainerEngine, creating it if needed."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ContainerEngine()
    return _default_engine
