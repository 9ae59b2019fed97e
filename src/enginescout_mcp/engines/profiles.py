"""Per-engine policy.

Each supported engine gets a profile describing how it is invoked and how
it is expected to run on this host: whether the user needs a group
membership to reach the daemon, and which user-space network backend
rootless containers should use.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeVar

from enginescout_mcp.engines.base import EngineError
from enginescout_mcp.models.runtime import EngineKind

T = TypeVar("T", bound="EngineProfile")

PASTA = "pasta"
SLIRP4NETNS = "slirp4netns"


class UnsupportedEngineError(EngineError):
    """Raised when a container engine is not supported."""

    def __init__(self, engine: str):
        super().__init__(
            f"Container engine '{engine}' is not supported",
            code="UNSUPPORTED_ENGINE",
            details={
                "engine": engine,
                "supported": [k.value for k in EngineKind],
            },
        )


class EngineProfile(ABC):
    """Policy for one container engine."""

    @property
    @abstractmethod
    def kind(self) -> EngineKind:
        """The engine this profile describes."""
        ...

    @property
    def cli_command(self) -> str:
        """The CLI command for this engine."""
        return self.kind.value

    @property
    @abstractmethod
    def requires_group_membership(self) -> bool:
        """Whether the user must belong to a group to reach the engine."""
        ...

    @abstractmethod
    def network_mode(self, version: str | None) -> str | None:
        """Network backend for containers, or None for the engine default.

        Args:
            version: Raw engine version string, None if it could not be read
        """
        ...


_PROFILE_REGISTRY: dict[EngineKind, type[EngineProfile]] = {}


def register_profile(kind: EngineKind) -> Callable[[type[T]], type[T]]:
    """Decorator to register a profile class for an engine kind."""

    def decorator(cls: type[T]) -> type[T]:
        _PROFILE_REGISTRY[kind] = cls
        return cls

    return decorator


@register_profile(EngineKind.DOCKER)
class DockerProfile(EngineProfile):
    """Docker runs a root daemon reached through the 'docker' group."""

    @property
    def kind(self) -> EngineKind:
        return EngineKind.DOCKER

    @property
    def requires_group_membership(self) -> bool:
        return True

    def network_mode(self, version: str | None) -> str | None:
        return None


@register_profile(EngineKind.PODMAN)
class PodmanProfile(DockerProfile):
    """Podman runs rootless.

    No group membership is needed, but rootless networking needs a
    user-space backend: pasta where available (Podman 4.4), slirp4netns
    otherwise.
    """

    @property
    def kind(self) -> EngineKind:
        return EngineKind.PODMAN

    @property
    def requires_group_membership(self) -> bool:
        return False

    def network_mode(self, version: str | None) -> str | None:
        if version and "4.4" in version:
            return PASTA
        return SLIRP4NETNS


def get_profile(engine: str | EngineKind) -> EngineProfile:
    """Create the profile for an engine.

    Args:
        engine: Engine kind or its name (docker, podman)

    Raises:
        UnsupportedEngineError: If no profile is registered for the engine
    """
    if isinstance(engine, str) and not isinstance(engine, EngineKind):
        try:
            kind = EngineKind(engine.lower())
        except ValueError:
            raise UnsupportedEngineError(engine)
    else:
        kind = engine

    profile_class = _PROFILE_REGISTRY.get(kind)
    if profile_class is None:
        raise UnsupportedEngineError(kind.value)
    return profile_class()


def get_supported_engines() -> list[str]:
    """Get the names of engines with a registered profile."""
    return [kind.value for kind in _PROFILE_REGISTRY]
