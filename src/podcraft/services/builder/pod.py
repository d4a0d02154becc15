"""Builder for pod templates shared by all workloads."""

from __future__ import annotations

from typing import TypedDict, Unpack

import structlog
from kubernetes_asyncio.client import (
    V1LocalObjectReference,
    V1PodSpec,
    V1PodTemplateSpec,
)
from structlog.stdlib import BoundLogger

from ...constants import (
    INIT_CONTAINER_PREFIX,
    MAIN_CONTAINER_PREFIX,
    ROOT_LOGGER,
)
from ...exceptions import (
    EmptyContainerSetError,
    TemplateResolvedError,
    VolumeNameCollisionError,
)
from ...models.domain.kubernetes import (
    ContainerRole,
    ObjectMetadata,
    ResolutionPhase,
    RestartPolicy,
)
from ...models.domain.pod import HostAlias, PodSecurityContext
from ...models.domain.volumes import Volume
from .container import Container, ContainerOptions
from .volumes import VolumeRegistry

__all__ = ["PodTemplate", "PodTemplateOptions"]


class PodTemplateOptions(TypedDict, total=False):
    """Settings accepted when constructing a pod template."""

    volumes: list[Volume]
    host_aliases: list[HostAlias]
    security_context: PodSecurityContext
    restart_policy: RestartPolicy
    service_account: str
    image_pull_secrets: list[str]
    pod_metadata: ObjectMetadata


class PodTemplate:
    """Mutable description of the pods created by a workload.

    This is the aggregation root of the builder graph. It owns the regular
    and init containers, the volumes they mount, the host aliases, and the
    pod security context. Invariants that only depend on a single call are
    checked immediately; invariants that depend on the whole graph are
    checked by `resolve`.

    A template is in the building phase until it is first resolved, and
    resolved (read-only) afterwards. Resolving again is permitted and returns
    an identical result.

    Parameters
    ----------
    volumes
        Volumes to register immediately.
    host_aliases
        Initial entries for :file:`/etc/hosts`.
    security_context
        Pod security context. Defaults to `PodSecurityContext` defaults.
    restart_policy
        Restart policy for the containers. Unset by default, which lets
        Kubernetes apply its own default.
    service_account
        Name of the service account to run the pod as.
    image_pull_secrets
        Names of secrets holding credentials for pulling images.
    pod_metadata
        Metadata (labels and annotations) of the created pods.
    logger
        Logger to use.

    Raises
    ------
    NameConflictError
        Raised if two of the given volumes share a name.
    """

    def __init__(
        self,
        *,
        volumes: list[Volume] | None = None,
        host_aliases: list[HostAlias] | None = None,
        security_context: PodSecurityContext | None = None,
        restart_policy: RestartPolicy | None = None,
        service_account: str | None = None,
        image_pull_secrets: list[str] | None = None,
        pod_metadata: ObjectMetadata | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._logger = logger or structlog.get_logger(ROOT_LOGGER)
        self._restart_policy = restart_policy
        self._security_context = security_context or PodSecurityContext()
        self._service_account = service_account
        self.pod_metadata = pod_metadata or ObjectMetadata()
        self._image_pull_secrets = list(image_pull_secrets or [])
        self._containers: list[Container] = []
        self._init_containers: list[Container] = []
        self._host_aliases = list(host_aliases or [])
        self._volumes = VolumeRegistry(self._logger)
        self._phase = ResolutionPhase.BUILDING

        for volume in volumes or []:
            self._volumes.register(volume)

    @property
    def containers(self) -> list[Container]:
        """Regular containers in the order added."""
        return list(self._containers)

    @property
    def host_aliases(self) -> list[HostAlias]:
        """Host aliases in the order added."""
        return list(self._host_aliases)

    @property
    def image_pull_secrets(self) -> list[str]:
        """Names of the image pull secrets."""
        return list(self._image_pull_secrets)

    @property
    def init_containers(self) -> list[Container]:
        """Init containers in the order added."""
        return list(self._init_containers)

    @property
    def phase(self) -> ResolutionPhase:
        """Lifecycle phase of the template."""
        return self._phase

    @property
    def restart_policy(self) -> RestartPolicy | None:
        """Restart policy for the containers, if set."""
        return self._restart_policy

    @restart_policy.setter
    def restart_policy(self, restart_policy: RestartPolicy | None) -> None:
        self.check_mutable("set the restart policy")
        self._restart_policy = restart_policy

    @property
    def security_context(self) -> PodSecurityContext:
        """Pod security context."""
        return self._security_context

    @security_context.setter
    def security_context(self, security_context: PodSecurityContext) -> None:
        self.check_mutable("set the security context")
        self._security_context = security_context

    @property
    def service_account(self) -> str | None:
        """Name of the service account the pod runs as, if set."""
        return self._service_account

    @service_account.setter
    def service_account(self, service_account: str | None) -> None:
        self.check_mutable("set the service account")
        self._service_account = service_account

    @property
    def volumes(self) -> list[Volume]:
        """Registered volumes in registration order."""
        return list(self._volumes)

    def add_container(
        self, image: str, **options: Unpack[ContainerOptions]
    ) -> Container:
        """Add a regular container.

        Containers are emitted in the order they are added. Containers
        without an explicit name are named ``main-0``, ``main-1``, and so on
        by their position among the regular containers.

        Parameters
        ----------
        image
            Docker image reference.
        **options
            Additional container settings.

        Returns
        -------
        Container
            The new container, which may be further modified.

        Raises
        ------
        TemplateResolvedError
            Raised if the template has already been resolved.
        """
        self.check_mutable("add a container")
        name = options.pop("name", None)
        if not name:
            name = f"{MAIN_CONTAINER_PREFIX}-{len(self._containers)}"
        container = Container(self, image, name=name, **options)
        self._containers.append(container)
        return container

    def add_init_container(
        self, image: str, **options: Unpack[ContainerOptions]
    ) -> Container:
        """Add an init container.

        Init containers run to completion, in the order they are added,
        before any regular container starts. Init containers without an
        explicit name are named ``init-0``, ``init-1``, and so on by their
        position among the init containers.

        Raises
        ------
        RoleViolationError
            Raised if a liveness, readiness, or startup probe is given.
        TemplateResolvedError
            Raised if the template has already been resolved.
        """
        self.check_mutable("add an init container")
        name = options.pop("name", None)
        if not name:
            name = f"{INIT_CONTAINER_PREFIX}-{len(self._init_containers)}"
        container = Container(
            self, image, name=name, role=ContainerRole.INIT, **options
        )
        self._init_containers.append(container)
        return container

    def add_host_alias(self, host_alias: HostAlias) -> None:
        """Add an entry to :file:`/etc/hosts` of the pod."""
        self.check_mutable("add a host alias")
        self._host_aliases.append(host_alias)

    def add_image_pull_secret(self, name: str) -> None:
        """Add the name of a secret used to pull images."""
        self.check_mutable("add an image pull secret")
        self._image_pull_secrets.append(name)

    def add_volume(self, volume: Volume) -> None:
        """Register a volume that containers may mount.

        Raises
        ------
        NameConflictError
            Raised if a different volume with the same name is already
            registered.
        TemplateResolvedError
            Raised if the template has already been resolved.
        """
        self.check_mutable("add a volume")
        self._volumes.register(volume)

    def check_mutable(self, operation: str) -> None:
        """Ensure the template is still in its building phase.

        Parameters
        ----------
        operation
            Description of the modification, for the error message.

        Raises
        ------
        TemplateResolvedError
            Raised if the template has already been resolved.
        """
        if self._phase == ResolutionPhase.RESOLVED:
            raise TemplateResolvedError(operation)

    def register_mounted_volume(self, volume: Volume) -> None:
        """Register a volume referenced by a new container mount.

        Called by `Container` while creating a mount.
        """
        self._volumes.register_from_mount(volume)

    def resolve(self) -> V1PodSpec:
        """Resolve the template into a Kubernetes pod spec.

        This does not change any builder state other than moving the
        template into its resolved phase.

        Returns
        -------
        kubernetes_asyncio.client.V1PodSpec
            Pod spec for the current state of the template.

        Raises
        ------
        EmptyContainerSetError
            Raised if the template has no regular containers.
        VolumeNameCollisionError
            Raised if container mounts reference two different volumes with
            the same name.
        """
        if not self._containers:
            raise EmptyContainerSetError

        # Mounts are normally registered when created, but a mount whose
        # name was already taken by a different volume was not, so check
        # every mount against the registered volumes.
        volumes = {v.name: v for v in self._volumes}
        for container in (*self._containers, *self._init_containers):
            for mount in container.mounts:
                volume = mount.volume
                existing = volumes.setdefault(volume.name, volume)
                if existing is not volume:
                    sources = (existing.describe(), volume.describe())
                    raise VolumeNameCollisionError(volume.name, sources)

        containers = [c.to_kubernetes() for c in self._containers]
        init_containers = [c.to_kubernetes() for c in self._init_containers]
        host_aliases = [a.to_kubernetes() for a in self._host_aliases]
        pull_secrets = [
            V1LocalObjectReference(name=n) for n in self._image_pull_secrets
        ]
        restart_policy = None
        if self._restart_policy:
            restart_policy = self._restart_policy.value
        spec = V1PodSpec(
            containers=containers,
            host_aliases=host_aliases or None,
            image_pull_secrets=pull_secrets or None,
            init_containers=init_containers or None,
            restart_policy=restart_policy,
            security_context=self._security_context.to_kubernetes(),
            service_account_name=self._service_account,
            volumes=[v.to_kubernetes() for v in volumes.values()] or None,
        )
        self._phase = ResolutionPhase.RESOLVED
        self._logger.debug(
            "Resolved pod template",
            containers=len(containers),
            init_containers=len(init_containers),
            volumes=len(volumes),
        )
        return spec

    def to_pod_template_spec(self) -> V1PodTemplateSpec:
        """Resolve the template along with the metadata of its pods.

        The metadata is omitted if the pods have no labels or annotations.
        """
        metadata = None
        if self.pod_metadata.labels or self.pod_metadata.annotations:
            metadata = self.pod_metadata.to_kubernetes()
        return V1PodTemplateSpec(metadata=metadata, spec=self.resolve())
