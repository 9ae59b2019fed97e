"""Shared fixtures."""

import asyncio
from collections.abc import Sequence

import pytest

from enginescout_mcp.config import Settings
from enginescout_mcp.engines.models import ExecResult
from enginescout_mcp.engines.runner import CommandRunner
from enginescout_mcp.engines.runtime import ContainerEngine


class FakeRunner(CommandRunner):
    """CommandRunner returning scripted results.

    Commands without a scripted result fail as if the binary were missing.
    """

    def __init__(self) -> None:
        super().__init__(timeout=1.0)
        self.results: dict[tuple[str, ...], ExecResult] = {}
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []

    def add(self, argv: Sequence[str], stdout: str = "", exit_code: int = 0, stderr: str = "") -> None:
        self.results[tuple(argv)] = ExecResult(exit_code=exit_code, stdout=stdout, stderr=stderr)

    def add_timeout(self, argv: Sequence[str]) -> None:
        self.results[tuple(argv)] = ExecResult(
            exit_code=-1, stdout="", stderr="Command timed out", timed_out=True
        )

    async def run(self, argv: Sequence[str], timeout: float | None = None) -> ExecResult:
        self.calls.append(list(argv))
        self.timeouts.append(timeout)
        await asyncio.sleep(0)
        return self.results.get(
            tuple(argv),
            ExecResult(exit_code=127, stdout="", stderr=f"{argv[0]}: not found"),
        )


DOCKER_VERSION = "Docker version 24.0.7, build afdd53b\n"
PODMAN_VERSION = "podman version 4.4.1\n"


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def engine(runner: FakeRunner, settings: Settings) -> ContainerEngine:
    return ContainerEngine(runner=runner, settings=settings)


@pytest.fixture
def docker_runner(runner: FakeRunner) -> FakeRunner:
    """Host with real Docker and compose v2."""
    runner.add(["docker", "--version"], DOCKER_VERSION)
    runner.add(["docker", "compose", "version"], "Docker Compose version v2.5.1\n")
    return runner


@pytest.fixture
def podman_runner(runner: FakeRunner) -> FakeRunner:
    """Host with Podman only."""
    runner.add(["podman", "--version"], PODMAN_VERSION)
    runner.add(["podman", "compose", "version"], "Docker Compose version v2.24.0\n")
    return runner
