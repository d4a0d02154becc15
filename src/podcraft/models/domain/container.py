"""Value models for container-level settings."""

from __future__ import annotations

from typing import Annotated

from kubernetes_asyncio.client import (
    V1ResourceRequirements,
    V1SecurityContext,
)
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...units import bytes_to_si, cores_to_cpu, cpu_to_cores, memory_to_bytes

__all__ = [
    "ContainerResources",
    "ContainerSecurityContext",
    "ResourceQuantity",
]


class ResourceQuantity(BaseModel):
    """Amount of CPU and memory, either of which may be unset."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cpu: Annotated[
        float | None,
        Field(
            title="CPU",
            description=(
                "Number of CPU cores. May be given as a Kubernetes quantity"
                " such as ``500m``."
            ),
            examples=[1.5],
        ),
        BeforeValidator(lambda v: None if v is None else cpu_to_cores(v)),
    ] = None

    memory: Annotated[
        int | None,
        Field(
            title="Memory",
            description=(
                "Amount of memory in bytes. May be given as a Kubernetes"
                " quantity such as ``1Gi``."
            ),
            examples=[1073741824],
        ),
        BeforeValidator(lambda v: None if v is None else memory_to_bytes(v)),
    ] = None

    def to_kubernetes(self) -> dict[str, str] | None:
        """Convert to a Kubernetes quantity mapping."""
        result = {}
        if self.cpu is not None:
            result["cpu"] = cores_to_cpu(self.cpu)
        if self.memory is not None:
            result["memory"] = bytes_to_si(self.memory)
        return result or None


class ContainerResources(BaseModel):
    """Resource requests and limits for a container."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    limits: Annotated[
        ResourceQuantity,
        Field(
            title="Maximum allowed resources",
            description=(
                "If the container exceeds this CPU limit, it will be"
                " throttled. If it exceeds this memory limit, it will usually"
                " be killed with an out-of-memory error."
            ),
        ),
    ] = ResourceQuantity()

    requests: Annotated[
        ResourceQuantity,
        Field(
            title="Minimum requested resources",
            description="Resources the scheduler guarantees the container",
        ),
    ] = ResourceQuantity()

    def to_kubernetes(self) -> V1ResourceRequirements:
        """Convert to the Kubernetes object representation."""
        return V1ResourceRequirements(
            limits=self.limits.to_kubernetes(),
            requests=self.requests.to_kubernetes(),
        )


class ContainerSecurityContext(BaseModel):
    """Security settings for a single container."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    ensure_non_root: Annotated[
        bool,
        Field(
            title="Require non-root",
            description="Refuse to start the container as UID 0",
        ),
    ] = False

    privileged: Annotated[
        bool,
        Field(
            title="Privileged",
            description="Run the container with host-level privileges",
        ),
    ] = False

    read_only_root_filesystem: Annotated[
        bool,
        Field(
            title="Read-only root file system",
            description="Mount the container root file system read-only",
        ),
    ] = False

    allow_privilege_escalation: Annotated[
        bool | None,
        Field(
            title="Allow privilege escalation",
            description="Whether a process may gain more privileges",
        ),
    ] = None

    user: Annotated[
        int | None,
        Field(title="UID", description="UID to run the entrypoint as"),
    ] = None

    group: Annotated[
        int | None,
        Field(title="GID", description="Primary GID of the entrypoint"),
    ] = None

    def to_kubernetes(self) -> V1SecurityContext:
        """Convert to the corresponding Kubernetes model."""
        return V1SecurityContext(
            allow_privilege_escalation=self.allow_privilege_escalation,
            privileged=self.privileged,
            read_only_root_filesystem=self.read_only_root_filesystem,
            run_as_group=self.group,
            run_as_non_root=self.ensure_non_root,
            run_as_user=self.user,
        )
