"""Job resource."""

from __future__ import annotations

from datetime import timedelta
from typing import Unpack

from kubernetes_asyncio.client import V1JobSpec
from structlog.stdlib import BoundLogger

from ..chart import Chart
from ..models.domain.kubernetes import ObjectMetadata, RestartPolicy
from ..models.domain.pod import HostAlias, PodSecurityContext
from ..models.domain.volumes import Volume
from ..services.builder.container import Container, ContainerOptions
from ..services.builder.pod import PodTemplate, PodTemplateOptions
from .base import Resource

__all__ = ["Job"]


def _to_seconds(duration: timedelta | None) -> int | None:
    if duration is None:
        return None
    return int(duration.total_seconds())


class Job(Resource):
    """Pods that run until a number of them complete successfully.

    Unlike other workloads, the restart policy of the pods defaults to
    `RestartPolicy.NEVER`.

    Parameters
    ----------
    chart
        Chart to add the job to.
    resource_id
        Identifier of the job, unique within the chart.
    name
        Kubernetes name of the job, generated if not given.
    labels
        Labels of the job object itself.
    annotations
        Annotations of the job object itself.
    active_deadline
        Maximum duration of the job, after which all of its pods are
        terminated. Rounded down to whole seconds.
    backoff_limit
        Number of retries before the job is marked as failed.
    ttl_after_finished
        How long to keep the job after it finishes before it is deleted.
        Rounded down to whole seconds.
    logger
        Logger to use.
    **options
        Settings for the pod template.

    Raises
    ------
    DuplicateResourceError
        Raised if the chart already has a resource with the same ID.
    NameConflictError
        Raised if two of the given volumes share a name.
    """

    api_version = "batch/v1"
    kind = "Job"

    def __init__(
        self,
        chart: Chart,
        resource_id: str,
        *,
        name: str | None = None,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
        active_deadline: timedelta | None = None,
        backoff_limit: int | None = None,
        ttl_after_finished: timedelta | None = None,
        logger: BoundLogger | None = None,
        **options: Unpack[PodTemplateOptions],
    ) -> None:
        if options.get("restart_policy") is None:
            options["restart_policy"] = RestartPolicy.NEVER
        self._template = PodTemplate(logger=logger, **options)
        super().__init__(
            chart,
            resource_id,
            name=name,
            labels=labels,
            annotations=annotations,
            logger=logger,
        )
        self._active_deadline = active_deadline
        self._backoff_limit = backoff_limit
        self._ttl_after_finished = ttl_after_finished

    @property
    def active_deadline(self) -> timedelta | None:
        """Maximum duration of the job, if any."""
        return self._active_deadline

    @active_deadline.setter
    def active_deadline(self, active_deadline: timedelta | None) -> None:
        self._template.check_mutable("set the active deadline")
        self._active_deadline = active_deadline

    @property
    def backoff_limit(self) -> int | None:
        """Number of retries before the job fails, if set."""
        return self._backoff_limit

    @backoff_limit.setter
    def backoff_limit(self, backoff_limit: int | None) -> None:
        self._template.check_mutable("set the backoff limit")
        self._backoff_limit = backoff_limit

    @property
    def containers(self) -> list[Container]:
        """Regular containers of the pods."""
        return self._template.containers

    @property
    def host_aliases(self) -> list[HostAlias]:
        """Host aliases of the pods."""
        return self._template.host_aliases

    @property
    def init_containers(self) -> list[Container]:
        """Init containers of the pods."""
        return self._template.init_containers

    @property
    def pod_metadata(self) -> ObjectMetadata:
        """Metadata of the created pods."""
        return self._template.pod_metadata

    @property
    def restart_policy(self) -> RestartPolicy | None:
        """Restart policy of the pods."""
        return self._template.restart_policy

    @property
    def security_context(self) -> PodSecurityContext:
        """Security context of the pods."""
        return self._template.security_context

    @property
    def service_account(self) -> str | None:
        """Service account the pods run as."""
        return self._template.service_account

    @property
    def template(self) -> PodTemplate:
        """Underlying pod template."""
        return self._template

    @property
    def ttl_after_finished(self) -> timedelta | None:
        """How long to keep the job after it finishes, if set."""
        return self._ttl_after_finished

    @ttl_after_finished.setter
    def ttl_after_finished(self, ttl: timedelta | None) -> None:
        self._template.check_mutable("set the time to live")
        self._ttl_after_finished = ttl

    @property
    def volumes(self) -> list[Volume]:
        """Volumes of the pods."""
        return self._template.volumes

    def add_container(
        self, image: str, **options: Unpack[ContainerOptions]
    ) -> Container:
        """Add a regular container to the pods."""
        return self._template.add_container(image, **options)

    def add_host_alias(self, host_alias: HostAlias) -> None:
        """Add an entry to :file:`/etc/hosts` of the pods."""
        self._template.add_host_alias(host_alias)

    def add_init_container(
        self, image: str, **options: Unpack[ContainerOptions]
    ) -> Container:
        """Add an init container to the pods."""
        return self._template.add_init_container(image, **options)

    def add_volume(self, volume: Volume) -> None:
        """Add a volume that containers of the pods may mount."""
        self._template.add_volume(volume)

    def build_spec(self) -> V1JobSpec:
        return V1JobSpec(
            active_deadline_seconds=_to_seconds(self._active_deadline),
            backoff_limit=self._backoff_limit,
            template=self._template.to_pod_template_spec(),
            ttl_seconds_after_finished=_to_seconds(self._ttl_after_finished),
        )
