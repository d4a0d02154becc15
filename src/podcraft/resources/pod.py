"""Bare pod resource."""

from __future__ import annotations

from typing import Unpack

from kubernetes_asyncio.client import V1PodSpec
from structlog.stdlib import BoundLogger

from ..chart import Chart
from ..models.domain.kubernetes import ObjectMetadata, RestartPolicy
from ..models.domain.pod import HostAlias, PodSecurityContext
from ..models.domain.volumes import Volume
from ..services.builder.container import Container, ContainerOptions
from ..services.builder.pod import PodTemplate, PodTemplateOptions
from .base import Resource

__all__ = ["Pod"]


class Pod(Resource):
    """A single pod not managed by any controller.

    Parameters
    ----------
    chart
        Chart to add the pod to.
    resource_id
        Identifier of the pod, unique within the chart.
    name
        Kubernetes name of the pod, generated if not given.
    labels
        Labels of the pod.
    annotations
        Annotations of the pod.
    logger
        Logger to use.
    **options
        Settings for the pod template. ``pod_metadata`` is ignored, since
        the metadata of the pod is the metadata of the resource.

    Raises
    ------
    DuplicateResourceError
        Raised if the chart already has a resource with the same ID.
    NameConflictError
        Raised if two of the given volumes share a name.
    """

    api_version = "v1"
    kind = "Pod"

    def __init__(
        self,
        chart: Chart,
        resource_id: str,
        *,
        name: str | None = None,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
        logger: BoundLogger | None = None,
        **options: Unpack[PodTemplateOptions],
    ) -> None:
        options.pop("pod_metadata", None)
        self._template = PodTemplate(logger=logger, **options)
        super().__init__(
            chart,
            resource_id,
            name=name,
            labels=labels,
            annotations=annotations,
            logger=logger,
        )
        self._template.pod_metadata = self.metadata

    @property
    def containers(self) -> list[Container]:
        """Regular containers of the pod."""
        return self._template.containers

    @property
    def host_aliases(self) -> list[HostAlias]:
        """Host aliases of the pod."""
        return self._template.host_aliases

    @property
    def init_containers(self) -> list[Container]:
        """Init containers of the pod."""
        return self._template.init_containers

    @property
    def pod_metadata(self) -> ObjectMetadata:
        """Metadata of the pod, the same as `metadata`."""
        return self._template.pod_metadata

    @property
    def restart_policy(self) -> RestartPolicy | None:
        """Restart policy of the pod."""
        return self._template.restart_policy

    @property
    def security_context(self) -> PodSecurityContext:
        """Security context of the pod."""
        return self._template.security_context

    @property
    def service_account(self) -> str | None:
        """Service account the pod runs as."""
        return self._template.service_account

    @property
    def template(self) -> PodTemplate:
        """Underlying pod template."""
        return self._template

    @property
    def volumes(self) -> list[Volume]:
        """Volumes of the pod."""
        return self._template.volumes

    def add_container(
        self, image: str, **options: Unpack[ContainerOptions]
    ) -> Container:
        """Add a regular container to the pod."""
        return self._template.add_container(image, **options)

    def add_host_alias(self, host_alias: HostAlias) -> None:
        """Add an entry to :file:`/etc/hosts` of the pod."""
        self._template.add_host_alias(host_alias)

    def add_init_container(
        self, image: str, **options: Unpack[ContainerOptions]
    ) -> Container:
        """Add an init container to the pod."""
        return self._template.add_init_container(image, **options)

    def add_volume(self, volume: Volume) -> None:
        """Add a volume that containers of the pod may mount."""
        self._template.add_volume(volume)

    def build_spec(self) -> V1PodSpec:
        return self._template.resolve()
