"""Exceptions raised while building or resolving workloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.domain.kubernetes import ContainerRole, ProbeKind

__all__ = [
    "DuplicateResourceError",
    "EmptyContainerSetError",
    "MissingProbePortError",
    "NameConflictError",
    "PodcraftError",
    "RoleViolationError",
    "StrategyConfigurationError",
    "TemplateResolvedError",
    "VolumeNameCollisionError",
]


class PodcraftError(Exception):
    """Base class for all errors raised by podcraft.

    These are all errors in the input provided by the author of a manifest.
    None of them are transient, so none of them are retried.
    """


class DuplicateResourceError(PodcraftError):
    """A resource with the same ID was already added to the chart.

    Parameters
    ----------
    resource_id
        Conflicting resource ID.
    chart
        Name of the chart.
    """

    def __init__(self, resource_id: str, chart: str) -> None:
        self.resource_id = resource_id
        msg = f"Resource with ID {resource_id} already exists in chart {chart}"
        super().__init__(msg)


class EmptyContainerSetError(PodcraftError):
    """Resolution was attempted on a pod template with no containers.

    Init containers do not count. A pod must have at least one regular
    container.
    """

    def __init__(self) -> None:
        super().__init__("PodSpec must have at least 1 container")


class MissingProbePortError(PodcraftError):
    """A probe needs the container port but the container has none.

    HTTP and TCP probes without an explicit port connect to the port of the
    container they are attached to.

    Parameters
    ----------
    container
        Name of the container.
    kind
        Kind of probe that was rejected.
    """

    def __init__(self, container: str, kind: ProbeKind) -> None:
        self.container = container
        self.kind = kind
        msg = f"Container {container} has no port for its {kind} probe"
        super().__init__(msg)


class NameConflictError(PodcraftError):
    """A different volume with the same name is already registered.

    Raised eagerly, when the second volume is registered with the template.

    Parameters
    ----------
    name
        Name shared by the two volumes.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Volume with name {name} already exists")


class RoleViolationError(PodcraftError):
    """A container setting is not permitted for the role of the container.

    Currently the only such restriction is that init containers may not
    declare liveness, readiness, or startup probes.

    Parameters
    ----------
    role
        Role of the container.
    kind
        Kind of probe that was rejected.
    """

    def __init__(self, role: ContainerRole, kind: ProbeKind) -> None:
        self.role = role
        self.kind = kind
        msg = f"{role.display_name} containers must not have a {kind} probe"
        super().__init__(msg)


class StrategyConfigurationError(PodcraftError):
    """A rolling update allows neither surge nor unavailable pods."""

    def __init__(self) -> None:
        msg = "'max_surge' and 'max_unavailable' cannot both be zero"
        super().__init__(msg)


class TemplateResolvedError(PodcraftError):
    """A pod template was modified after it was resolved.

    Parameters
    ----------
    operation
        Description of the attempted modification.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        msg = f"Cannot {operation}: pod template has already been resolved"
        super().__init__(msg)


class VolumeNameCollisionError(PodcraftError):
    """Mounts reference two different volumes that share a name.

    This can only be detected once all containers are known, so it is raised
    when the pod template is resolved.

    Parameters
    ----------
    name
        Name shared by the volumes.
    sources
        Human-readable descriptions of the sources of the two volumes.
    """

    def __init__(self, name: str, sources: tuple[str, str]) -> None:
        self.name = name
        self.sources = sources
        msg = (
            "Invalid mount configuration. At least two different volumes have"
            f" the same name: {name} ({sources[0]} and {sources[1]})"
        )
        super().__init__(msg)
