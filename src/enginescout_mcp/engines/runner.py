"""Async external command execution.

Commands are always passed as argument lists and never through a shell,
so container names, filters and file paths are not subject to quoting.
"""

import asyncio
import logging
from collections.abc import Sequence

from enginescout_mcp.engines.models import ExecResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class CommandRunner:
    """Runs a command and captures its output.

    A missing binary or a spawn failure is reported as a failed ExecResult
    (exit code 127) rather than raised, and a command that outlives its
    timeout is killed and reported with ``timed_out`` set.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    async def run(self, argv: Sequence[str], timeout: float | None = None) -> ExecResult:
        """Run a command.

        Args:
            argv: Program and arguments
            timeout: Override the runner's default timeout (seconds)

        Returns:
            ExecResult with stdout, stderr, exit code
        """
        cmd = list(argv)
        limit = self.timeout if timeout is None else timeout
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"Failed to start {cmd[0]}: {e}")
            return ExecResult(exit_code=127, stdout="", stderr=str(e))

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(),
                timeout=limit,
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning(f"Command timed out after {limit}s: {' '.join(cmd)}")
            return ExecResult(
                exit_code=-1,
                stdout="",
                stderr="Command timed out",
                timed_out=True,
            )

        return ExecResult(
            exit_code=proc.returncode or 0,
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
        )
