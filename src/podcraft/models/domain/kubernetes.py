"""Data types for interacting with Kubernetes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Any, Protocol

from kubernetes_asyncio.client import V1ObjectMeta

__all__ = [
    "ContainerRole",
    "FsGroupChangePolicy",
    "KubernetesModel",
    "ObjectMetadata",
    "ProbeKind",
    "PullPolicy",
    "ResolutionPhase",
    "RestartPolicy",
]


class KubernetesModel(Protocol):
    """Protocol for Kubernetes object models.

    kubernetes-asyncio_ doesn't currently expose type information, so this
    tells mypy that all the object models we deal with can be serialized.
    """

    def to_dict(self, *, serialize: bool = False) -> dict[str, Any]: ...


class ContainerRole(Enum):
    """Role of a container within a pod."""

    REGULAR = "regular"
    INIT = "init"

    @property
    def display_name(self) -> str:
        """Capitalized name of the role for use in messages."""
        return self.value.capitalize()


class FsGroupChangePolicy(Enum):
    """How the ownership of volumes is changed to match ``fsGroup``."""

    ALWAYS = "Always"
    ON_ROOT_MISMATCH = "OnRootMismatch"


class ProbeKind(StrEnum):
    """Kinds of health probes a container may declare."""

    LIVENESS = "liveness"
    READINESS = "readiness"
    STARTUP = "startup"


class PullPolicy(Enum):
    """Pull policy for Docker images in Kubernetes."""

    ALWAYS = "Always"
    IF_NOT_PRESENT = "IfNotPresent"
    NEVER = "Never"


class ResolutionPhase(Enum):
    """Lifecycle phase of a pod template.

    A template starts in the building phase, where it may be modified. The
    first resolution moves it to the resolved phase, after which it is
    read-only.
    """

    BUILDING = "building"
    RESOLVED = "resolved"


class RestartPolicy(Enum):
    """Restart policy for all containers within a pod."""

    ALWAYS = "Always"
    ON_FAILURE = "OnFailure"
    NEVER = "Never"


@dataclass
class ObjectMetadata:
    """Mutable metadata for a Kubernetes object.

    Used both for top-level resources and for the metadata of the pods
    created from a pod template.
    """

    name: str | None = None
    """Name of the object, if known."""

    namespace: str | None = None
    """Namespace of the object, if any."""

    labels: dict[str, str] = field(default_factory=dict)
    """Labels of the object."""

    annotations: dict[str, str] = field(default_factory=dict)
    """Annotations of the object."""

    def add_label(self, key: str, value: str) -> None:
        """Add or replace a label."""
        self.labels[key] = value

    def add_annotation(self, key: str, value: str) -> None:
        """Add or replace an annotation."""
        self.annotations[key] = value

    def to_kubernetes(self) -> V1ObjectMeta:
        """Convert to the corresponding Kubernetes model.

        Empty label and annotation sets are omitted.
        """
        return V1ObjectMeta(
            name=self.name,
            namespace=self.namespace,
            labels=dict(self.labels) or None,
            annotations=dict(self.annotations) or None,
        )
