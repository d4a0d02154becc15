"""Builder for the containers of a pod template."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypedDict

from kubernetes_asyncio.client import V1Container, V1ContainerPort, V1EnvVar

from ...exceptions import MissingProbePortError, RoleViolationError
from ...models.domain.container import (
    ContainerResources,
    ContainerSecurityContext,
)
from ...models.domain.kubernetes import ContainerRole, ProbeKind, PullPolicy
from ...models.domain.mounts import VolumeMount
from ...models.domain.probes import Probe
from ...models.domain.volumes import Volume

if TYPE_CHECKING:
    from .pod import PodTemplate

__all__ = ["Container", "ContainerOptions"]


class ContainerOptions(TypedDict, total=False):
    """Optional settings accepted when adding a container to a template."""

    name: str
    command: list[str]
    args: list[str]
    env: dict[str, str]
    working_dir: str
    image_pull_policy: PullPolicy
    port: int
    resources: ContainerResources
    security_context: ContainerSecurityContext
    liveness: Probe
    readiness: Probe
    startup: Probe
    volume_mounts: list[VolumeMount]


class Container:
    """Mutable description of one container of a pod template.

    Containers are created by `~podcraft.services.builder.pod.PodTemplate`
    (or a workload that owns one), never directly, since every container
    belongs to exactly one template. Mounting a volume registers that volume
    with the template.

    Parameters
    ----------
    template
        Template that owns this container.
    image
        Docker image reference.
    name
        Name of the container, unique within the pod.
    role
        Whether this is a regular or an init container.

    Raises
    ------
    RoleViolationError
        Raised if probes are given for an init container.
    MissingProbePortError
        Raised if a probe needs the container port and none was given.
    """

    def __init__(
        self,
        template: PodTemplate,
        image: str,
        *,
        name: str,
        role: ContainerRole = ContainerRole.REGULAR,
        command: list[str] | None = None,
        args: list[str] | None = None,
        env: dict[str, str] | None = None,
        working_dir: str | None = None,
        image_pull_policy: PullPolicy | None = None,
        port: int | None = None,
        resources: ContainerResources | None = None,
        security_context: ContainerSecurityContext | None = None,
        liveness: Probe | None = None,
        readiness: Probe | None = None,
        startup: Probe | None = None,
        volume_mounts: list[VolumeMount] | None = None,
    ) -> None:
        self._template = template
        self.image = image
        self.name = name
        self.role = role
        self.command = list(command) if command else None
        self.args = list(args) if args else None
        self.working_dir = working_dir
        self.image_pull_policy = image_pull_policy
        self._port = port
        self.resources = resources
        self.security_context = security_context
        self._env = dict(env or {})
        self._mounts: list[VolumeMount] = []
        self._probes: dict[ProbeKind, Probe] = {}

        for kind, probe in (
            (ProbeKind.LIVENESS, liveness),
            (ProbeKind.READINESS, readiness),
            (ProbeKind.STARTUP, startup),
        ):
            if probe:
                self.set_probe(kind, probe)
        for mount in volume_mounts or []:
            self._add_mount(mount)

    @property
    def env(self) -> dict[str, str]:
        """Environment variables. Returns a copy; use `add_env` to modify."""
        return dict(self._env)

    @property
    def liveness(self) -> Probe | None:
        """Liveness probe, if any."""
        return self._probes.get(ProbeKind.LIVENESS)

    @property
    def mounts(self) -> list[VolumeMount]:
        """Mounts in the order added. Returns a copy; use `mount` to add."""
        return list(self._mounts)

    @property
    def port(self) -> int | None:
        """Port the container listens on, if any."""
        return self._port

    @port.setter
    def port(self, port: int | None) -> None:
        self._template.check_mutable(f"set the port of container {self.name}")
        if port is None:
            for kind, probe in self._probes.items():
                if probe.needs_container_port:
                    raise MissingProbePortError(self.name, kind)
        self._port = port

    @property
    def readiness(self) -> Probe | None:
        """Readiness probe, if any."""
        return self._probes.get(ProbeKind.READINESS)

    @property
    def startup(self) -> Probe | None:
        """Startup probe, if any."""
        return self._probes.get(ProbeKind.STARTUP)

    def add_env(self, name: str, value: str) -> None:
        """Add or replace an environment variable."""
        self._template.check_mutable(f"set {name} in container {self.name}")
        self._env[name] = value

    def mount(
        self,
        path: str,
        volume: Volume,
        *,
        sub_path: str | None = None,
        read_only: bool = False,
    ) -> VolumeMount:
        """Mount a volume into this container.

        As part of creating the mount, the volume is registered with the
        owning pod template if it is not already known there, so a volume
        need not be added to the template separately before mounting it.

        Parameters
        ----------
        path
            Path inside the container at which to mount the volume.
        volume
            Volume to mount.
        sub_path
            Mount only this path within the volume.
        read_only
            Whether to mount the volume read-only.

        Returns
        -------
        VolumeMount
            The new mount.

        Raises
        ------
        TemplateResolvedError
            Raised if the owning template has already been resolved.
        """
        mount = VolumeMount(
            path=path, volume=volume, sub_path=sub_path, read_only=read_only
        )
        self._add_mount(mount)
        return mount

    def set_probe(self, kind: ProbeKind, probe: Probe) -> None:
        """Attach a liveness, readiness, or startup probe.

        Parameters
        ----------
        kind
            Kind of probe.
        probe
            Probe to attach, replacing any existing probe of that kind.

        Raises
        ------
        RoleViolationError
            Raised if this is an init container, which may not have probes.
        MissingProbePortError
            Raised if the probe needs the container port and the container
            has no port.
        """
        self._template.check_mutable(f"set {kind} probe on {self.name}")
        if self.role == ContainerRole.INIT:
            raise RoleViolationError(self.role, kind)
        if probe.needs_container_port and self.port is None:
            raise MissingProbePortError(self.name, kind)
        self._probes[kind] = probe

    def to_kubernetes(self) -> V1Container:
        """Convert to the corresponding Kubernetes model."""
        env = [V1EnvVar(name=k, value=v) for k, v in self._env.items()]
        ports = None
        if self.port is not None:
            ports = [V1ContainerPort(container_port=self.port)]
        pull_policy = None
        if self.image_pull_policy:
            pull_policy = self.image_pull_policy.value
        resources = None
        if self.resources:
            resources = self.resources.to_kubernetes()
        security_context = None
        if self.security_context:
            security_context = self.security_context.to_kubernetes()
        liveness = readiness = startup = None
        if self.liveness:
            liveness = self.liveness.to_kubernetes(self.port)
        if self.readiness:
            readiness = self.readiness.to_kubernetes(self.port)
        if self.startup:
            startup = self.startup.to_kubernetes(self.port)
        return V1Container(
            args=self.args,
            command=self.command,
            env=env or None,
            image=self.image,
            image_pull_policy=pull_policy,
            liveness_probe=liveness,
            name=self.name,
            ports=ports,
            readiness_probe=readiness,
            resources=resources,
            security_context=security_context,
            startup_probe=startup,
            volume_mounts=[m.to_kubernetes() for m in self._mounts] or None,
            working_dir=self.working_dir,
        )

    def _add_mount(self, mount: VolumeMount) -> None:
        """Record a mount and register its volume with the template."""
        self._template.check_mutable(f"mount {mount.path} in {self.name}")
        self._template.register_mounted_volume(mount.volume)
        self._mounts.append(mount)
