"""Typed builders that resolve into Kubernetes workload manifests."""

from importlib.metadata import PackageNotFoundError, version

from .chart import ApiObject, Chart
from .exceptions import (
    DuplicateResourceError,
    EmptyContainerSetError,
    MissingProbePortError,
    NameConflictError,
    PodcraftError,
    RoleViolationError,
    StrategyConfigurationError,
    TemplateResolvedError,
    VolumeNameCollisionError,
)
from .lazy import Lazy
from .models.domain.container import (
    ContainerResources,
    ContainerSecurityContext,
    ResourceQuantity,
)
from .models.domain.deployment import DeploymentStrategy, PercentOrAbsolute
from .models.domain.kubernetes import (
    FsGroupChangePolicy,
    ProbeKind,
    PullPolicy,
    RestartPolicy,
)
from .models.domain.mounts import VolumeMount
from .models.domain.pod import HostAlias, PodSecurityContext, Sysctl
from .models.domain.probes import Probe, URIScheme
from .models.domain.volumes import EmptyDirMedium, Volume
from .resources.deployment import Deployment
from .resources.job import Job
from .resources.pod import Pod
from .services.builder.container import Container
from .services.builder.pod import PodTemplate

__all__ = [
    "ApiObject",
    "Chart",
    "Container",
    "ContainerResources",
    "ContainerSecurityContext",
    "Deployment",
    "DeploymentStrategy",
    "DuplicateResourceError",
    "EmptyContainerSetError",
    "EmptyDirMedium",
    "FsGroupChangePolicy",
    "HostAlias",
    "Job",
    "Lazy",
    "MissingProbePortError",
    "NameConflictError",
    "PercentOrAbsolute",
    "Pod",
    "PodSecurityContext",
    "PodTemplate",
    "PodcraftError",
    "Probe",
    "ProbeKind",
    "PullPolicy",
    "ResourceQuantity",
    "RestartPolicy",
    "RoleViolationError",
    "StrategyConfigurationError",
    "Sysctl",
    "TemplateResolvedError",
    "URIScheme",
    "Volume",
    "VolumeMount",
    "VolumeNameCollisionError",
    "__version__",
]


__version__: str
"""The library version string (PEP 440 / SemVer compatible)."""

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0"
