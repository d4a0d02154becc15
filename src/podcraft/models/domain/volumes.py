"""Models for volumes that may be mounted by containers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Self

from kubernetes_asyncio.client import (
    V1ConfigMapVolumeSource,
    V1EmptyDirVolumeSource,
    V1HostPathVolumeSource,
    V1KeyToPath,
    V1NFSVolumeSource,
    V1PersistentVolumeClaimVolumeSource,
    V1SecretVolumeSource,
    V1Volume,
)

from ...units import bytes_to_si, memory_to_bytes

__all__ = [
    "ConfigMapVolumeSource",
    "EmptyDirMedium",
    "EmptyDirVolumeSource",
    "HostPathVolumeSource",
    "NFSVolumeSource",
    "PersistentVolumeClaimVolumeSource",
    "SecretVolumeSource",
    "Volume",
    "VolumeSource",
]


class EmptyDirMedium(Enum):
    """Storage medium backing an ``emptyDir`` volume."""

    DEFAULT = ""
    MEMORY = "Memory"


@dataclass(frozen=True)
class ConfigMapVolumeSource:
    """Populate a volume from the keys of a ``ConfigMap``."""

    name: str
    """Name of the ``ConfigMap``."""

    default_mode: int | None = None
    """Mode bits for created files."""

    items: tuple[tuple[str, str], ...] = ()
    """Pairs of key and relative path to project. Empty projects all keys."""

    optional: bool | None = None
    """Whether the ``ConfigMap`` or its keys may be missing."""

    def describe(self) -> str:
        return f"configMap {self.name}"


@dataclass(frozen=True)
class SecretVolumeSource:
    """Populate a volume from the keys of a ``Secret``."""

    secret_name: str
    """Name of the ``Secret``."""

    default_mode: int | None = None
    """Mode bits for created files."""

    items: tuple[tuple[str, str], ...] = ()
    """Pairs of key and relative path to project. Empty projects all keys."""

    optional: bool | None = None
    """Whether the ``Secret`` or its keys may be missing."""

    def describe(self) -> str:
        return f"secret {self.secret_name}"


@dataclass(frozen=True)
class EmptyDirVolumeSource:
    """Empty scratch directory sharing the lifetime of the pod."""

    medium: EmptyDirMedium = EmptyDirMedium.DEFAULT
    """Storage medium. ``Memory`` makes this a tmpfs."""

    size_limit: int | None = None
    """Maximum size in bytes, if limited."""

    def describe(self) -> str:
        return "emptyDir"


@dataclass(frozen=True)
class HostPathVolumeSource:
    """Path on the Kubernetes node."""

    path: str
    """Absolute path on the host."""

    type: str | None = None
    """Type of the host path, such as ``Directory``."""

    def describe(self) -> str:
        return f"hostPath {self.path}"


@dataclass(frozen=True)
class NFSVolumeSource:
    """NFS export."""

    server: str
    """Name or IP address of the NFS server."""

    path: str
    """Absolute path of the export on the server."""

    read_only: bool = False
    """Whether to force all mounts of this volume to be read-only."""

    def describe(self) -> str:
        return f"nfs {self.server}:{self.path}"


@dataclass(frozen=True)
class PersistentVolumeClaimVolumeSource:
    """Existing persistent volume claim in the same namespace."""

    claim_name: str
    """Name of the persistent volume claim."""

    read_only: bool = False
    """Whether to force all mounts of this volume to be read-only."""

    def describe(self) -> str:
        return f"persistentVolumeClaim {self.claim_name}"


type VolumeSource = (
    ConfigMapVolumeSource
    | SecretVolumeSource
    | EmptyDirVolumeSource
    | HostPathVolumeSource
    | NFSVolumeSource
    | PersistentVolumeClaimVolumeSource
)


def _build_items(
    items: tuple[tuple[str, str], ...],
) -> list[V1KeyToPath] | None:
    if not items:
        return None
    return [V1KeyToPath(key=k, path=p) for k, p in items]


@dataclass(frozen=True, eq=False)
class Volume:
    """A volume that may be mounted by the containers of a pod.

    Volumes are immutable and compare by identity. Two separately constructed
    volumes are different volumes even if they have the same name and
    source, and a pod template will refuse to contain both.

    Use the ``from_*`` class methods to construct volumes.
    """

    name: str
    """Name of the volume, unique within a pod."""

    source: VolumeSource
    """Where the contents of the volume come from."""

    @classmethod
    def from_config_map(
        cls,
        config_map: str,
        *,
        name: str | None = None,
        default_mode: int | None = None,
        items: dict[str, str] | None = None,
        optional: bool | None = None,
    ) -> Self:
        """Create a volume populated from a ``ConfigMap``.

        Parameters
        ----------
        config_map
            Name of the ``ConfigMap``.
        name
            Name of the volume. Defaults to ``configmap-`` followed by the
            name of the ``ConfigMap``.
        default_mode
            Mode bits for created files.
        items
            Mapping of keys to the relative paths at which to project them.
            If not given, all keys are projected using the key as the path.
        optional
            Whether the ``ConfigMap`` or its keys may be missing.
        """
        source = ConfigMapVolumeSource(
            name=config_map,
            default_mode=default_mode,
            items=tuple((items or {}).items()),
            optional=optional,
        )
        return cls(name=name or f"configmap-{config_map}", source=source)

    @classmethod
    def from_secret(
        cls,
        secret: str,
        *,
        name: str | None = None,
        default_mode: int | None = None,
        items: dict[str, str] | None = None,
        optional: bool | None = None,
    ) -> Self:
        """Create a volume populated from a ``Secret``.

        The name defaults to ``secret-`` followed by the name of the
        ``Secret``. Other parameters are as for `from_config_map`.
        """
        source = SecretVolumeSource(
            secret_name=secret,
            default_mode=default_mode,
            items=tuple((items or {}).items()),
            optional=optional,
        )
        return cls(name=name or f"secret-{secret}", source=source)

    @classmethod
    def from_empty_dir(
        cls,
        name: str,
        *,
        medium: EmptyDirMedium = EmptyDirMedium.DEFAULT,
        size_limit: int | str | None = None,
    ) -> Self:
        """Create an empty scratch volume.

        Parameters
        ----------
        name
            Name of the volume.
        medium
            Storage medium.
        size_limit
            Size limit in bytes or as a Kubernetes quantity such as ``1Gi``.

        Raises
        ------
        ValueError
            Raised if the size limit is not a valid amount of memory.
        """
        limit = memory_to_bytes(size_limit) if size_limit is not None else None
        source = EmptyDirVolumeSource(medium=medium, size_limit=limit)
        return cls(name=name, source=source)

    @classmethod
    def from_host_path(
        cls, name: str, path: str, *, type: str | None = None
    ) -> Self:
        """Create a volume from a path on the Kubernetes node."""
        source = HostPathVolumeSource(path=path, type=type)
        return cls(name=name, source=source)

    @classmethod
    def from_nfs(
        cls, name: str, server: str, path: str, *, read_only: bool = False
    ) -> Self:
        """Create a volume from an NFS export."""
        source = NFSVolumeSource(server=server, path=path, read_only=read_only)
        return cls(name=name, source=source)

    @classmethod
    def from_persistent_volume_claim(
        cls,
        claim_name: str,
        *,
        name: str | None = None,
        read_only: bool = False,
    ) -> Self:
        """Create a volume from an existing persistent volume claim.

        The name defaults to ``pvc-`` followed by the name of the claim.
        """
        source = PersistentVolumeClaimVolumeSource(
            claim_name=claim_name, read_only=read_only
        )
        return cls(name=name or f"pvc-{claim_name}", source=source)

    def describe(self) -> str:
        """Describe the volume and its source for error messages."""
        return f"volume {self.name} from {self.source.describe()}"

    def to_kubernetes(self) -> V1Volume:
        """Convert to the corresponding Kubernetes model."""
        match self.source:
            case ConfigMapVolumeSource() as source:
                config_map = V1ConfigMapVolumeSource(
                    name=source.name,
                    default_mode=source.default_mode,
                    items=_build_items(source.items),
                    optional=source.optional,
                )
                return V1Volume(name=self.name, config_map=config_map)
            case SecretVolumeSource() as source:
                secret = V1SecretVolumeSource(
                    secret_name=source.secret_name,
                    default_mode=source.default_mode,
                    items=_build_items(source.items),
                    optional=source.optional,
                )
                return V1Volume(name=self.name, secret=secret)
            case EmptyDirVolumeSource() as source:
                size_limit = None
                if source.size_limit is not None:
                    size_limit = bytes_to_si(source.size_limit)
                empty_dir = V1EmptyDirVolumeSource(
                    medium=source.medium.value or None, size_limit=size_limit
                )
                return V1Volume(name=self.name, empty_dir=empty_dir)
            case HostPathVolumeSource() as source:
                host_path = V1HostPathVolumeSource(
                    path=source.path, type=source.type
                )
                return V1Volume(name=self.name, host_path=host_path)
            case NFSVolumeSource() as source:
                nfs = V1NFSVolumeSource(
                    path=source.path,
                    read_only=source.read_only,
                    server=source.server,
                )
                return V1Volume(name=self.name, nfs=nfs)
            case PersistentVolumeClaimVolumeSource() as source:
                claim = V1PersistentVolumeClaimVolumeSource(
                    claim_name=source.claim_name, read_only=source.read_only
                )
                return V1Volume(name=self.name, persistent_volume_claim=claim)
