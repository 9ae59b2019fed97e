"""Exceptions raised by the container engine layer.

Probes never raise these: an absent engine or capability is reported as a
value. They surface only from pass-through commands whose caller asked for
a side effect (start, stop, compose up, ...).
"""

from typing import Any


class EngineError(Exception):
    """Base exception for container engine operations."""

    def __init__(
        self,
        message: str,
        code: str = "ENGINE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class EngineNotFoundError(EngineError):
    """No supported container engine is installed."""

    def __init__(self) -> None:
        super().__init__(
            "No container engine found (tried docker and podman)",
            code="ENGINE_NOT_FOUND",
        )


class EngineCommandError(EngineError):
    """An engine command exited with an error."""

    def __init__(self, command: str, exit_code: int, stderr: str, timed_out: bool = False):
        if timed_out:
            message = f"Command timed out: {command}"
        else:
            message = f"Command failed with exit code {exit_code}: {stderr[:200]}"
        super().__init__(
            message,
            code="ENGINE_COMMAND_ERROR",
            details={
                "command": command,
                "exit_code": exit_code,
                "stderr": stderr,
                "timed_out": timed_out,
            },
        )
