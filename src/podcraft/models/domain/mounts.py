"""Models for mounts of volumes inside containers."""

from dataclasses import dataclass

from kubernetes_asyncio.client import V1VolumeMount

from .volumes import Volume

__all__ = ["VolumeMount"]


@dataclass(frozen=True)
class VolumeMount:
    """Binding of a volume to a path inside a container.

    The volume is held by reference. When the pod is resolved, the mount
    refers to the volume by name and the volume itself is emitted once at
    the pod level, however many mounts reference it.
    """

    path: str
    """Path inside the container at which to mount the volume."""

    volume: Volume
    """Volume to mount."""

    sub_path: str | None = None
    """Mount only this path within the volume."""

    read_only: bool = False
    """Whether this mount of the volume is read-only."""

    def to_kubernetes(self) -> V1VolumeMount:
        """Convert to the corresponding Kubernetes model."""
        return V1VolumeMount(
            mount_path=self.path,
            name=self.volume.name,
            read_only=self.read_only or None,
            sub_path=self.sub_path,
        )
