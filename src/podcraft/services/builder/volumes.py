"""Registration of the volumes of a pod template."""

from __future__ import annotations

from collections.abc import Iterator

from structlog.stdlib import BoundLogger

from ...exceptions import NameConflictError
from ...models.domain.volumes import Volume

__all__ = ["VolumeRegistry"]


class VolumeRegistry:
    """Volumes registered with a pod template, keyed by name.

    Registration order is preserved and becomes the order of the volumes in
    the resolved pod. A volume object is registered at most once no matter
    how many containers mount it.

    Parameters
    ----------
    logger
        Logger to use.
    """

    def __init__(self, logger: BoundLogger) -> None:
        self._logger = logger
        self._volumes: dict[str, Volume] = {}

    def __iter__(self) -> Iterator[Volume]:
        return iter(self._volumes.values())

    def __len__(self) -> int:
        return len(self._volumes)

    def register(self, volume: Volume) -> None:
        """Register a volume added directly to the template.

        Parameters
        ----------
        volume
            Volume to register.

        Raises
        ------
        NameConflictError
            Raised if a different volume with the same name is already
            registered.
        """
        existing = self._volumes.get(volume.name)
        if existing is volume:
            return
        if existing is not None:
            raise NameConflictError(volume.name)
        self._volumes[volume.name] = volume
        self._logger.debug("Registered volume", volume=volume.name)

    def register_from_mount(self, volume: Volume) -> None:
        """Register a volume because a container mounted it.

        If the name is free, the volume is registered exactly as by
        `register`. If a different volume already holds the name, the mount
        is left dangling rather than rejected here: mounts are only
        consistent or inconsistent relative to the whole pod, so the
        conflict is reported when the template is resolved, together with
        any conflicts between mounts of different containers.

        Parameters
        ----------
        volume
            Volume referenced by the new mount.
        """
        existing = self._volumes.get(volume.name)
        if existing is None:
            self._volumes[volume.name] = volume
            self._logger.debug(
                "Registered volume from mount", volume=volume.name
            )
        elif existing is not volume:
            self._logger.debug(
                "Mounted volume shadowed by registered volume",
                volume=volume.name,
            )
