"""Document tree of Kubernetes objects and its serialization."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml
from structlog.stdlib import BoundLogger

from .constants import MAX_NAME_LENGTH, ROOT_LOGGER
from .exceptions import DuplicateResourceError
from .lazy import Lazy
from .models.domain.kubernetes import KubernetesModel, ObjectMetadata

__all__ = [
    "ApiObject",
    "Chart",
]


def _strip_none(value: Any) -> Any:
    """Remove `None` values from nested dicts and lists.

    Unlike stripping empty values, this preserves empty dicts and lists,
    which are meaningful in some Kubernetes objects (``emptyDir: {}``).
    """
    if isinstance(value, dict):
        return {k: _strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_strip_none(v) for v in value if v is not None]
    return value


@dataclass
class ApiObject:
    """A Kubernetes object stored in a chart.

    The spec may be a `~podcraft.lazy.Lazy`, in which case it is computed
    when the chart is first serialized.
    """

    api_version: str
    """API version of the object, such as ``apps/v1``."""

    kind: str
    """Kind of the object, such as ``Deployment``."""

    metadata: ObjectMetadata
    """Metadata of the object, which may still be modified."""

    spec: Lazy[KubernetesModel] | KubernetesModel
    """Spec of the object, possibly deferred."""

    def resolve_spec(self) -> KubernetesModel:
        """Return the spec, resolving it if it is deferred."""
        if isinstance(self.spec, Lazy):
            return self.spec.resolve()
        return self.spec

    def to_dict(self) -> dict[str, Any]:
        """Serialize the object with Kubernetes field names.

        Returns
        -------
        dict of Any
            Serialized object with `None` values removed.
        """
        metadata = self.metadata.to_kubernetes()
        result = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata.to_dict(serialize=True),
            "spec": self.resolve_spec().to_dict(serialize=True),
        }
        return _strip_none(result)


class Chart:
    """Ordered collection of Kubernetes objects forming one manifest.

    Parameters
    ----------
    name
        Name of the chart, used as the prefix of generated resource names.
    namespace
        Namespace to set on all resources, if any.
    labels
        Labels to add to all resources.
    logger
        Logger to use.
    """

    def __init__(
        self,
        name: str,
        *,
        namespace: str | None = None,
        labels: dict[str, str] | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.labels = dict(labels or {})
        self._logger = logger or structlog.get_logger(ROOT_LOGGER)
        self._objects: dict[str, ApiObject] = {}

    def __contains__(self, resource_id: str) -> bool:
        return resource_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    @property
    def objects(self) -> list[ApiObject]:
        """Objects in the order they were added."""
        return list(self._objects.values())

    def add(self, resource_id: str, api_object: ApiObject) -> None:
        """Add an object to the chart.

        Parameters
        ----------
        resource_id
            Identifier of the resource, unique within the chart.
        api_object
            Object to add.

        Raises
        ------
        DuplicateResourceError
            Raised if an object with that ID is already in the chart.
        """
        if resource_id in self._objects:
            raise DuplicateResourceError(resource_id, self.name)
        self._objects[resource_id] = api_object

    def generate_name(self, resource_id: str) -> str:
        """Generate a stable Kubernetes name for a resource.

        The name is built from the chart name and resource ID, converted to a
        DNS label, followed by a short hash of the path of the resource in
        the chart so that different paths never produce the same name.

        Parameters
        ----------
        resource_id
            Identifier of the resource.

        Returns
        -------
        str
            Name of at most 63 characters.
        """
        path = f"{self.name}/{resource_id}"
        digest = hashlib.sha256(path.encode()).hexdigest()[:8]
        prefix = f"{self.name}-{resource_id}".lower()
        prefix = re.sub("[^a-z0-9]+", "-", prefix)
        prefix = prefix[: MAX_NAME_LENGTH - len(digest) - 1].strip("-")
        return f"{prefix}-{digest}" if prefix else digest

    def synth(self) -> list[dict[str, Any]]:
        """Resolve and serialize every object in the chart.

        Returns
        -------
        list of dict
            Serialized objects in the order they were added.

        Raises
        ------
        PodcraftError
            Raised if any object cannot be resolved.
        """
        results = [o.to_dict() for o in self._objects.values()]
        self._logger.debug(
            "Synthesized chart", chart=self.name, resources=len(results)
        )
        return results

    def to_yaml(self) -> str:
        """Render the chart as a multi-document YAML manifest."""
        return yaml.safe_dump_all(self.synth(), sort_keys=False)

    def write(self, path: Path) -> None:
        """Write the YAML manifest for the chart to a file."""
        path.write_text(self.to_yaml())
