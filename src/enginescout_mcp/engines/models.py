"""Command execution models."""

from dataclasses import dataclass


@dataclass
class ExecResult:
    """Result of running an external command."""

    exit_code: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        """Check if command succeeded."""
        return self.exit_code == 0 and not self.timed_out
