"""Deployment resource."""

from __future__ import annotations

from typing import Unpack

from kubernetes_asyncio.client import V1DeploymentSpec, V1LabelSelector
from structlog.stdlib import BoundLogger

from ..chart import Chart
from ..constants import DEFAULT_SELECTOR_LABEL
from ..models.domain.deployment import DeploymentStrategy
from ..models.domain.kubernetes import ObjectMetadata, RestartPolicy
from ..models.domain.pod import HostAlias, PodSecurityContext
from ..models.domain.volumes import Volume
from ..services.builder.container import Container, ContainerOptions
from ..services.builder.pod import PodTemplate, PodTemplateOptions
from .base import Resource

__all__ = ["Deployment"]


class Deployment(Resource):
    """A set of identical, replicated pods.

    Pods are matched to the deployment by its label selector. Every label
    added with `select_by_label` is also added to the pod metadata so that
    the selector always matches the pods the deployment creates.

    Parameters
    ----------
    chart
        Chart to add the deployment to.
    resource_id
        Identifier of the deployment, unique within the chart.
    name
        Kubernetes name of the deployment, generated if not given.
    labels
        Labels of the deployment object itself.
    annotations
        Annotations of the deployment object itself.
    replicas
        Number of desired pods.
    strategy
        Strategy used to replace old pods with new ones. Defaults to a
        rolling update with 25% surge and 25% unavailable.
    default_selector
        Whether to select pods with a label identifying this deployment. If
        disabled, call `select_by_label` to add at least one selector.
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

    api_version = "apps/v1"
    kind = "Deployment"

    def __init__(
        self,
        chart: Chart,
        resource_id: str,
        *,
        name: str | None = None,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
        replicas: int = 1,
        strategy: DeploymentStrategy | None = None,
        default_selector: bool = True,
        logger: BoundLogger | None = None,
        **options: Unpack[PodTemplateOptions],
    ) -> None:
        self._template = PodTemplate(logger=logger, **options)
        super().__init__(
            chart,
            resource_id,
            name=name,
            labels=labels,
            annotations=annotations,
            logger=logger,
        )
        self._replicas = replicas
        self._strategy = strategy or DeploymentStrategy.rolling_update()
        self._selector: dict[str, str] = {}
        if default_selector:
            self.select_by_label(DEFAULT_SELECTOR_LABEL, self.name)

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
    def label_selector(self) -> dict[str, str]:
        """Labels used to select pods. Returns a copy."""
        return dict(self._selector)

    @property
    def pod_metadata(self) -> ObjectMetadata:
        """Metadata of the created pods."""
        return self._template.pod_metadata

    @property
    def replicas(self) -> int:
        """Number of pods to run."""
        return self._replicas

    @replicas.setter
    def replicas(self, replicas: int) -> None:
        self._template.check_mutable("set the number of replicas")
        self._replicas = replicas

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
    def strategy(self) -> DeploymentStrategy:
        """Strategy for replacing old pods with new ones."""
        return self._strategy

    @strategy.setter
    def strategy(self, strategy: DeploymentStrategy) -> None:
        self._template.check_mutable("set the rollout strategy")
        self._strategy = strategy

    @property
    def template(self) -> PodTemplate:
        """Underlying pod template."""
        return self._template

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

    def select_by_label(self, key: str, value: str) -> None:
        """Select pods with the given label.

        The label is also added to the pod metadata.

        Raises
        ------
        TemplateResolvedError
            Raised if the deployment has already been resolved.
        """
        self._template.check_mutable(f"select pods by label {key}")
        self._selector[key] = value
        self._template.pod_metadata.add_label(key, value)

    def build_spec(self) -> V1DeploymentSpec:
        return V1DeploymentSpec(
            replicas=self._replicas,
            selector=V1LabelSelector(match_labels=dict(self._selector)),
            strategy=self._strategy.to_kubernetes(),
            template=self._template.to_pod_template_spec(),
        )
