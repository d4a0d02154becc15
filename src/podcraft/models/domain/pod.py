"""Value models for pod-level settings."""

from __future__ import annotations

from typing import Annotated

from kubernetes_asyncio.client import (
    V1HostAlias,
    V1PodSecurityContext,
    V1Sysctl,
)
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .kubernetes import FsGroupChangePolicy

__all__ = [
    "HostAlias",
    "PodSecurityContext",
    "Sysctl",
]


class HostAlias(BaseModel):
    """Additional entry for the :file:`/etc/hosts` file of a pod."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    ip: Annotated[
        str,
        Field(
            title="IP address",
            description="IP address the host names resolve to",
            examples=["127.0.0.1"],
        ),
    ]

    hostnames: Annotated[
        list[str],
        Field(
            title="Host names",
            description="Host names that resolve to the IP address",
            examples=[["foo.local", "bar.local"]],
        ),
    ]

    def to_kubernetes(self) -> V1HostAlias:
        """Convert to the corresponding Kubernetes model."""
        return V1HostAlias(ip=self.ip, hostnames=list(self.hostnames))


class Sysctl(BaseModel):
    """Namespaced kernel parameter to set for a pod."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Annotated[
        str,
        Field(title="Name", examples=["net.core.somaxconn"]),
    ]

    value: Annotated[str, Field(title="Value", examples=["1024"])]

    def to_kubernetes(self) -> V1Sysctl:
        """Convert to the corresponding Kubernetes model."""
        return V1Sysctl(name=self.name, value=self.value)


class PodSecurityContext(BaseModel):
    """Security settings applied to every container in a pod."""

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
            description=(
                "If true, the kubelet refuses to start any container that"
                " would run as UID 0"
            ),
        ),
    ] = False

    fs_group: Annotated[
        int | None,
        Field(
            title="File system group",
            description=(
                "Supplemental group applied to all containers. Volumes that"
                " support ownership management are owned by this group."
            ),
            examples=[5000],
        ),
    ] = None

    fs_group_change_policy: Annotated[
        FsGroupChangePolicy,
        Field(
            title="File system group change policy",
            description=(
                "Whether to always change volume ownership to ``fsGroup``"
                " or only when the root directory does not already match"
            ),
        ),
    ] = FsGroupChangePolicy.ALWAYS

    user: Annotated[
        int | None,
        Field(
            title="UID",
            description="UID to run the entrypoint of all containers as",
            examples=[1000],
        ),
    ] = None

    group: Annotated[
        int | None,
        Field(
            title="GID",
            description="Primary GID of the entrypoint of all containers",
            examples=[2000],
        ),
    ] = None

    sysctls: Annotated[
        list[Sysctl],
        Field(title="Sysctls", description="Kernel parameters to set"),
    ] = []

    def to_kubernetes(self) -> V1PodSecurityContext:
        """Convert to the corresponding Kubernetes model."""
        return V1PodSecurityContext(
            fs_group=self.fs_group,
            fs_group_change_policy=self.fs_group_change_policy.value,
            run_as_group=self.group,
            run_as_non_root=self.ensure_non_root,
            run_as_user=self.user,
            sysctls=[s.to_kubernetes() for s in self.sysctls],
        )
