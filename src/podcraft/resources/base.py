"""Common base for resources stored in a chart."""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any, ClassVar

import structlog
from structlog.stdlib import BoundLogger

from ..chart import ApiObject, Chart
from ..constants import ROOT_LOGGER
from ..lazy import Lazy
from ..models.domain.kubernetes import KubernetesModel, ObjectMetadata

__all__ = ["Resource"]


class Resource(metaclass=ABCMeta):
    """A named Kubernetes object that belongs to a chart.

    This holds only the object metadata and the membership of the resource in
    its chart. Subclasses supply the spec by implementing `build_spec`, which
    is called when the chart is serialized so that any modifications made
    after construction are included.

    Parameters
    ----------
    chart
        Chart to add the resource to.
    resource_id
        Identifier of the resource, unique within the chart.
    name
        Kubernetes name of the resource. Generated from the chart name and
        resource ID if not given.
    labels
        Labels to add to the resource, in addition to those of the chart.
    annotations
        Annotations to add to the resource.
    logger
        Logger to use.

    Raises
    ------
    DuplicateResourceError
        Raised if the chart already has a resource with the same ID.
    """

    api_version: ClassVar[str]
    """API version of the Kubernetes object."""

    kind: ClassVar[str]
    """Kind of the Kubernetes object."""

    def __init__(
        self,
        chart: Chart,
        resource_id: str,
        *,
        name: str | None = None,
        labels: dict[str, str] | None = None,
        annotations: dict[str, str] | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.chart = chart
        self.id = resource_id
        self._logger = logger or structlog.get_logger(ROOT_LOGGER)
        self._name = name or chart.generate_name(resource_id)
        self.metadata = ObjectMetadata(
            name=self._name,
            namespace=chart.namespace,
            labels={**chart.labels, **(labels or {})},
            annotations=dict(annotations or {}),
        )
        self.api_object = ApiObject(
            api_version=self.api_version,
            kind=self.kind,
            metadata=self.metadata,
            spec=Lazy(self._build_spec),
        )
        chart.add(resource_id, self.api_object)

    @property
    def name(self) -> str:
        """Kubernetes name of the resource."""
        return self._name

    def to_dict(self) -> dict[str, Any]:
        """Serialize the resource, resolving it if necessary."""
        return self.api_object.to_dict()

    @abstractmethod
    def build_spec(self) -> KubernetesModel:
        """Construct the Kubernetes spec of the resource.

        Called at most once, when the resource is first serialized.
        """

    def _build_spec(self) -> KubernetesModel:
        self._logger.debug(
            "Resolving resource", kind=self.kind, name=self.name
        )
        return self.build_spec()
