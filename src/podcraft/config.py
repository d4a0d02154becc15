"""Configuration parsing for manifests and the command-line interface."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Self

import yaml
from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict
from safir.logging import LogLevel, Profile, configure_logging
from safir.pydantic import HumanTimedelta

from .constants import KUBERNETES_NAME_PATTERN, ROOT_LOGGER
from .models.domain.container import (
    ContainerResources,
    ContainerSecurityContext,
)
from .models.domain.kubernetes import PullPolicy, RestartPolicy
from .models.domain.pod import HostAlias, PodSecurityContext
from .models.domain.probes import URIScheme
from .models.domain.volumes import EmptyDirMedium
from .units import memory_to_bytes

__all__ = [
    "BaseContainerConfig",
    "BaseProbeConfig",
    "BaseVolumeSource",
    "BaseWorkloadConfig",
    "CommandProbeConfig",
    "Config",
    "ConfigMapVolumeSource",
    "ContainerConfig",
    "DeploymentConfig",
    "DeploymentStrategyConfig",
    "EmptyDirVolumeSource",
    "HostPathVolumeSource",
    "HttpGetProbeConfig",
    "InitContainerConfig",
    "JobConfig",
    "ManifestConfig",
    "NFSVolumeSource",
    "PVCVolumeSource",
    "PodConfig",
    "ProbeConfig",
    "SecretVolumeSource",
    "TcpSocketProbeConfig",
    "TemplatedWorkloadConfig",
    "VolumeConfig",
    "VolumeMountConfig",
    "WorkloadConfig",
]


def _validate_percent_or_absolute(v: int | str | None) -> int | str | None:
    if isinstance(v, str):
        if not v.endswith("%") or not v[:-1].isdigit():
            raise ValueError(f"Invalid percentage {v}, must be like 25%")
    elif isinstance(v, int) and v < 0:
        raise ValueError(f"Pod count {v} must not be negative")
    return v


class BaseVolumeSource(BaseModel):
    """Source of a volume to be mounted in a container.

    This is a base class that must be subclassed by the different supported
    ways a volume can be provided.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    type: Annotated[
        str, Field(title="Type of volume to mount", examples=["nfs"])
    ]


class ConfigMapVolumeSource(BaseVolumeSource):
    """Keys of a ``ConfigMap`` projected as files."""

    type: Literal["configMap"]

    config_map_name: Annotated[
        str,
        Field(
            title="Name of ConfigMap",
            description="Name of the ConfigMap in the namespace of the pod",
            examples=["app-config"],
        ),
    ]

    default_mode: Annotated[
        int | None,
        Field(
            title="Mode of files",
            description="Mode bits of the projected files",
            examples=[0o644],
        ),
    ] = None

    items: Annotated[
        dict[str, str],
        Field(
            title="Projected keys",
            description=(
                "Mapping of keys to relative paths. If empty, every key is"
                " projected using the key as its path."
            ),
        ),
    ] = {}

    optional: Annotated[
        bool | None,
        Field(
            title="Is optional",
            description="Whether the ConfigMap or its keys may be missing",
        ),
    ] = None


class SecretVolumeSource(BaseVolumeSource):
    """Keys of a ``Secret`` projected as files."""

    type: Literal["secret"]

    secret_name: Annotated[
        str,
        Field(
            title="Name of Secret",
            description="Name of the Secret in the namespace of the pod",
            examples=["app-secret"],
        ),
    ]

    default_mode: Annotated[
        int | None,
        Field(
            title="Mode of files",
            description="Mode bits of the projected files",
            examples=[0o600],
        ),
    ] = None

    items: Annotated[
        dict[str, str],
        Field(
            title="Projected keys",
            description=(
                "Mapping of keys to relative paths. If empty, every key is"
                " projected using the key as its path."
            ),
        ),
    ] = {}

    optional: Annotated[
        bool | None,
        Field(
            title="Is optional",
            description="Whether the Secret or its keys may be missing",
        ),
    ] = None


class EmptyDirVolumeSource(BaseVolumeSource):
    """Scratch space that lives as long as the pod."""

    type: Literal["emptyDir"]

    medium: Annotated[
        EmptyDirMedium,
        Field(
            title="Storage medium",
            description="Set to ``Memory`` to back the volume with tmpfs",
        ),
    ] = EmptyDirMedium.DEFAULT

    size_limit: Annotated[
        int | None,
        Field(
            title="Size limit",
            description=(
                "Maximum size of the volume in bytes. May be given as a"
                " Kubernetes quantity such as ``1Gi``."
            ),
            examples=["1Gi"],
        ),
        BeforeValidator(lambda v: None if v is None else memory_to_bytes(v)),
    ] = None


class HostPathVolumeSource(BaseVolumeSource):
    """Path on Kubernetes node to mount in the container."""

    type: Literal["hostPath"]

    path: Annotated[
        str,
        Field(
            title="Host path",
            description="Absolute host path to mount in the container",
            examples=["/home"],
            pattern="^/.*",
        ),
    ]

    host_path_type: Annotated[
        str | None,
        Field(
            title="Type of host path",
            description="Kubernetes check to apply to the host path",
            examples=["Directory"],
        ),
    ] = None


class NFSVolumeSource(BaseVolumeSource):
    """NFS volume to mount in the container."""

    type: Literal["nfs"]

    server: Annotated[
        str,
        Field(
            title="NFS server",
            description="Name or IP address of the NFS server for the volume",
            examples=["10.13.105.122"],
        ),
    ]

    server_path: Annotated[
        str,
        Field(
            title="Export path",
            description="Absolute path of NFS server export of the volume",
            examples=["/share1/home"],
            pattern="^/.*",
        ),
    ]

    read_only: Annotated[
        bool,
        Field(
            title="Is read-only",
            description=(
                "Whether to mount the NFS volume read-only. If this is true,"
                " any mount of this volume will be read-only even if the mount"
                " is not marked as such."
            ),
        ),
    ] = False


class PVCVolumeSource(BaseVolumeSource):
    """Existing persistent volume claim to mount in the container."""

    type: Literal["persistentVolumeClaim"]

    claim_name: Annotated[
        str,
        Field(
            title="Name of claim",
            description="Name of the persistent volume claim",
            examples=["scratch"],
            pattern=KUBERNETES_NAME_PATTERN,
        ),
    ]

    read_only: Annotated[
        bool,
        Field(
            title="Is read-only",
            description="Whether to force all mounts of the claim read-only",
        ),
    ] = False


class VolumeConfig(BaseModel):
    """A volume that may be mounted inside a container."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    name: Annotated[
        str,
        Field(
            title="Name of volume",
            description=(
                "Used as the Kubernetes volume name and therefore must be a"
                " valid Kubernetes name"
            ),
            pattern=KUBERNETES_NAME_PATTERN,
        ),
    ]

    source: Annotated[
        (
            ConfigMapVolumeSource
            | SecretVolumeSource
            | EmptyDirVolumeSource
            | HostPathVolumeSource
            | NFSVolumeSource
            | PVCVolumeSource
        ),
        Field(title="Source of volume", discriminator="type"),
    ]


class VolumeMountConfig(BaseModel):
    """The mount of a volume inside a container."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    container_path: Annotated[
        str,
        Field(
            title="Path inside container",
            description="Absolute path at which to mount the volume",
            examples=["/home"],
            pattern="^/.*",
        ),
    ]

    sub_path: Annotated[
        str | None,
        Field(
            title="Sub-path of source to mount",
            description="Mount only this sub-path of the volume source",
            examples=["groups"],
        ),
    ] = None

    read_only: Annotated[
        bool,
        Field(
            title="Is read-only",
            description="Whether this mount of the volume should be read-only",
            examples=[True],
        ),
    ] = False

    volume_name: Annotated[
        str,
        Field(title="Volume name", description="Name of the volume to mount"),
    ]


class BaseProbeConfig(BaseModel):
    """Health probe of a container.

    This is a base class that must be subclassed by the different ways a
    container can be checked.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    type: Annotated[str, Field(title="Type of check", examples=["httpGet"])]

    failure_threshold: Annotated[
        int | None,
        Field(
            title="Failure threshold",
            description="Consecutive failures before the probe fails",
            examples=[3],
            ge=1,
        ),
    ] = None

    initial_delay: Annotated[
        HumanTimedelta | None,
        Field(
            title="Initial delay",
            description="Delay after the container starts before probing",
            examples=["10s"],
        ),
    ] = None

    period: Annotated[
        HumanTimedelta | None,
        Field(
            title="Period", description="How often to probe", examples=["30s"]
        ),
    ] = None

    success_threshold: Annotated[
        int | None,
        Field(
            title="Success threshold",
            description="Consecutive successes before the probe recovers",
            examples=[1],
            ge=1,
        ),
    ] = None

    timeout: Annotated[
        HumanTimedelta | None,
        Field(
            title="Timeout",
            description="Timeout of each probe",
            examples=["5s"],
        ),
    ] = None


class CommandProbeConfig(BaseProbeConfig):
    """Probe that runs a command inside the container."""

    type: Literal["exec"]

    command: Annotated[
        list[str],
        Field(
            title="Command",
            description="Command whose zero exit status means healthy",
            examples=[["cat", "/tmp/healthy"]],
            min_length=1,
        ),
    ]


class HttpGetProbeConfig(BaseProbeConfig):
    """Probe that sends an HTTP GET request to the container."""

    type: Literal["httpGet"]

    path: Annotated[
        str,
        Field(title="URL path", examples=["/healthz"], pattern="^/.*"),
    ]

    port: Annotated[
        int | None,
        Field(
            title="Port",
            description="Port to connect to, defaulting to the container port",
            examples=[8080],
        ),
    ] = None

    scheme: Annotated[URIScheme, Field(title="Scheme")] = URIScheme.HTTP


class TcpSocketProbeConfig(BaseProbeConfig):
    """Probe that opens a TCP connection to the container."""

    type: Literal["tcpSocket"]

    port: Annotated[
        int | None,
        Field(
            title="Port",
            description="Port to connect to, defaulting to the container port",
            examples=[5432],
        ),
    ] = None

    host: Annotated[
        str | None,
        Field(title="Host", description="Host to connect to, default pod IP"),
    ] = None


ProbeConfig = Annotated[
    CommandProbeConfig | HttpGetProbeConfig | TcpSocketProbeConfig,
    Field(discriminator="type"),
]


class BaseContainerConfig(BaseModel):
    """Settings shared by regular and init containers."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    name: Annotated[
        str | None,
        Field(
            title="Name of container",
            description=(
                "Must be unique within the pod. If not given, a name is"
                " assigned based on the position of the container."
            ),
            examples=["app"],
            pattern=KUBERNETES_NAME_PATTERN,
        ),
    ] = None

    image: Annotated[
        str,
        Field(
            title="Docker image",
            description="Docker image reference, including any tag",
            examples=["nginx:1.27"],
        ),
    ]

    command: Annotated[
        list[str] | None,
        Field(title="Entrypoint", description="Replaces the image entrypoint"),
    ] = None

    args: Annotated[
        list[str] | None,
        Field(title="Arguments", description="Arguments to the entrypoint"),
    ] = None

    env: Annotated[
        dict[str, str],
        Field(title="Environment", description="Environment variables"),
    ] = {}

    working_dir: Annotated[
        str | None,
        Field(title="Working directory", examples=["/app"], pattern="^/.*"),
    ] = None

    image_pull_policy: Annotated[
        PullPolicy | None,
        Field(title="Image pull policy", examples=[PullPolicy.IF_NOT_PRESENT]),
    ] = None

    port: Annotated[
        int | None,
        Field(
            title="Container port",
            description="Port exposed by the container",
            examples=[8080],
            ge=1,
            le=65535,
        ),
    ] = None

    resources: Annotated[
        ContainerResources | None,
        Field(title="Resource requests and limits"),
    ] = None

    security_context: Annotated[
        ContainerSecurityContext | None,
        Field(title="Security context of the container"),
    ] = None

    volume_mounts: Annotated[
        list[VolumeMountConfig],
        Field(
            title="Volume mounts",
            description="Volumes mounted inside this container",
        ),
    ] = []


class InitContainerConfig(BaseContainerConfig):
    """A container run to completion before the regular containers start."""


class ContainerConfig(BaseContainerConfig):
    """A regular container of a pod."""

    liveness: Annotated[
        ProbeConfig | None,
        Field(
            title="Liveness probe",
            description="The container is restarted if this probe fails",
        ),
    ] = None

    readiness: Annotated[
        ProbeConfig | None,
        Field(
            title="Readiness probe",
            description="The pod receives no traffic while this probe fails",
        ),
    ] = None

    startup: Annotated[
        ProbeConfig | None,
        Field(
            title="Startup probe",
            description="Other probes are delayed until this probe succeeds",
        ),
    ] = None


class BaseWorkloadConfig(BaseModel):
    """Settings shared by all workloads.

    This is a base class that must be subclassed by each supported kind of
    workload.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    type: Annotated[str, Field(title="Kind of workload", examples=["Job"])]

    id: Annotated[
        str,
        Field(
            title="Resource ID",
            description=(
                "Identifier of the workload, unique within the manifest. Used"
                " to generate the Kubernetes name if none is given."
            ),
            examples=["web"],
        ),
    ]

    name: Annotated[
        str | None,
        Field(
            title="Kubernetes name",
            description="Name of the Kubernetes object",
            pattern=KUBERNETES_NAME_PATTERN,
        ),
    ] = None

    labels: Annotated[
        dict[str, str], Field(title="Labels of the Kubernetes object")
    ] = {}

    annotations: Annotated[
        dict[str, str], Field(title="Annotations of the Kubernetes object")
    ] = {}

    volumes: Annotated[
        list[VolumeConfig],
        Field(
            title="Volumes",
            description="Volumes that may be mounted by containers",
        ),
    ] = []

    containers: Annotated[
        list[ContainerConfig],
        Field(title="Containers", description="Regular containers, in order"),
    ] = []

    init_containers: Annotated[
        list[InitContainerConfig],
        Field(
            title="Init containers",
            description="Containers run in order before the regular ones",
        ),
    ] = []

    host_aliases: Annotated[
        list[HostAlias],
        Field(title="Host aliases", description="Entries for /etc/hosts"),
    ] = []

    security_context: Annotated[
        PodSecurityContext | None,
        Field(title="Security context of the pod"),
    ] = None

    restart_policy: Annotated[
        RestartPolicy | None,
        Field(title="Restart policy", examples=[RestartPolicy.ON_FAILURE]),
    ] = None

    service_account: Annotated[
        str | None,
        Field(title="Service account", description="Service account of pods"),
    ] = None

    image_pull_secrets: Annotated[
        list[str],
        Field(
            title="Image pull secrets",
            description="Secrets holding credentials for pulling images",
        ),
    ] = []

    @model_validator(mode="after")
    def _validate_volumes(self) -> Self:
        volumes = {v.name for v in self.volumes}
        containers: list[BaseContainerConfig] = [
            *self.containers,
            *self.init_containers,
        ]
        for container in containers:
            for mount in container.volume_mounts:
                if mount.volume_name not in volumes:
                    msg = f"Unknown mounted volume {mount.volume_name}"
                    raise ValueError(msg)
        return self


class PodConfig(BaseWorkloadConfig):
    """A bare pod."""

    type: Literal["Pod"]


class TemplatedWorkloadConfig(BaseWorkloadConfig):
    """A workload that creates pods from a template."""

    pod_labels: Annotated[
        dict[str, str],
        Field(title="Pod labels", description="Labels of the created pods"),
    ] = {}

    pod_annotations: Annotated[
        dict[str, str],
        Field(
            title="Pod annotations",
            description="Annotations of the created pods",
        ),
    ] = {}


class DeploymentStrategyConfig(BaseModel):
    """How a deployment replaces old pods."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    type: Annotated[
        Literal["Recreate", "RollingUpdate"], Field(title="Strategy")
    ] = "RollingUpdate"

    max_surge: Annotated[
        int | str | None,
        Field(
            title="Maximum surge",
            description=(
                "Pods that may be created above the desired count, as a count"
                " or a percentage. Only for rolling updates. Default 25%."
            ),
            examples=["25%", 1],
        ),
        AfterValidator(_validate_percent_or_absolute),
    ] = None

    max_unavailable: Annotated[
        int | str | None,
        Field(
            title="Maximum unavailable",
            description=(
                "Pods that may be unavailable during the update, as a count"
                " or a percentage. Only for rolling updates. Default 25%."
            ),
            examples=["25%", 0],
        ),
        AfterValidator(_validate_percent_or_absolute),
    ] = None

    @model_validator(mode="after")
    def _validate_recreate(self) -> Self:
        bounds = (self.max_surge, self.max_unavailable)
        if self.type == "Recreate" and bounds != (None, None):
            msg = "Recreate strategy does not accept surge settings"
            raise ValueError(msg)
        return self


class DeploymentConfig(TemplatedWorkloadConfig):
    """A set of replicated pods."""

    type: Literal["Deployment"]

    replicas: Annotated[
        int, Field(title="Replicas", description="Desired pods", ge=0)
    ] = 1

    strategy: Annotated[
        DeploymentStrategyConfig, Field(title="Rollout strategy")
    ] = DeploymentStrategyConfig()

    default_selector: Annotated[
        bool,
        Field(
            title="Use default selector",
            description=(
                "Whether to select pods by a label identifying the deployment"
            ),
        ),
    ] = True

    selector: Annotated[
        dict[str, str],
        Field(
            title="Selector labels",
            description="Additional labels used to select the pods",
        ),
    ] = {}

    @model_validator(mode="after")
    def _validate_selector(self) -> Self:
        if not self.default_selector and not self.selector:
            msg = "selector is required if defaultSelector is false"
            raise ValueError(msg)
        return self


class JobConfig(TemplatedWorkloadConfig):
    """Pods that run to completion."""

    type: Literal["Job"]

    active_deadline: Annotated[
        HumanTimedelta | None,
        Field(
            title="Active deadline",
            description="Maximum duration of the job",
            examples=["1h"],
        ),
    ] = None

    backoff_limit: Annotated[
        int | None,
        Field(
            title="Backoff limit",
            description="Retries before the job is marked failed",
            examples=[6],
            ge=0,
        ),
    ] = None

    ttl_after_finished: Annotated[
        HumanTimedelta | None,
        Field(
            title="Time to live",
            description="How long to keep the job after it finishes",
            examples=["1d"],
        ),
    ] = None


WorkloadConfig = Annotated[
    PodConfig | DeploymentConfig | JobConfig, Field(discriminator="type")
]


class ManifestConfig(BaseModel):
    """A manifest of workloads to generate."""

    model_config = ConfigDict(
        alias_generator=to_camel, extra="forbid", populate_by_name=True
    )

    name: Annotated[
        str,
        Field(
            title="Name of manifest",
            description="Prefix of generated Kubernetes names",
            examples=["myapp"],
            pattern=KUBERNETES_NAME_PATTERN,
        ),
    ]

    namespace: Annotated[
        str | None,
        Field(
            title="Namespace",
            description="Namespace of every object in the manifest",
            pattern=KUBERNETES_NAME_PATTERN,
        ),
    ] = None

    labels: Annotated[
        dict[str, str],
        Field(title="Labels", description="Labels added to every object"),
    ] = {}

    workloads: Annotated[
        list[WorkloadConfig],
        Field(title="Workloads", description="Workloads in output order"),
    ] = []

    @field_validator("workloads")
    @classmethod
    def _validate_workloads(
        cls, v: list[PodConfig | DeploymentConfig | JobConfig]
    ) -> list[PodConfig | DeploymentConfig | JobConfig]:
        seen = set()
        for workload in v:
            if workload.id in seen:
                raise ValueError(f"Duplicate workload ID {workload.id}")
            seen.add(workload.id)
        return v

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load a manifest from a YAML file.

        Parameters
        ----------
        path
            Path to the manifest file.
        """
        with path.open("r") as f:
            return cls.model_validate(yaml.safe_load(f))


class Config(BaseSettings):
    """Settings of the command-line interface.

    Read from environment variables prefixed with ``PODCRAFT_``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PODCRAFT_", case_sensitive=False
    )

    debug: Annotated[
        bool,
        Field(
            title="Debug mode",
            description=(
                "If true, log at debug level with the development profile,"
                " ignoring the other logging settings"
            ),
        ),
    ] = False

    log_level: Annotated[
        LogLevel,
        Field(
            title="Log level",
            description="Python logging level",
            examples=[LogLevel.INFO],
        ),
    ] = LogLevel.WARNING

    log_profile: Annotated[
        Profile,
        Field(
            title="Application logging profile",
            description=(
                "Logging profile to use, either ``production`` for JSON logs"
                " or ``development`` for human-friendly logs"
            ),
            examples=[Profile.development],
        ),
    ] = Profile.development

    def configure_logging(self) -> None:
        """Configure logging based on these settings."""
        if self.debug:
            log_level = LogLevel.DEBUG
            log_profile = Profile.development
        else:
            log_level = self.log_level
            log_profile = self.log_profile

        configure_logging(
            profile=log_profile, log_level=log_level, name=ROOT_LOGGER
        )
