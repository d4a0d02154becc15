"""Construction of a chart from a manifest configuration."""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from structlog.stdlib import BoundLogger

from ...chart import Chart
from ...config import (
    BaseContainerConfig,
    BaseWorkloadConfig,
    CommandProbeConfig,
    ConfigMapVolumeSource,
    ContainerConfig,
    DeploymentConfig,
    DeploymentStrategyConfig,
    EmptyDirVolumeSource,
    HostPathVolumeSource,
    HttpGetProbeConfig,
    JobConfig,
    ManifestConfig,
    NFSVolumeSource,
    PodConfig,
    PVCVolumeSource,
    SecretVolumeSource,
    TcpSocketProbeConfig,
    TemplatedWorkloadConfig,
    VolumeConfig,
)
from ...constants import ROOT_LOGGER
from ...models.domain.deployment import DeploymentStrategy, PercentOrAbsolute
from ...models.domain.kubernetes import ObjectMetadata
from ...models.domain.mounts import VolumeMount
from ...models.domain.probes import Probe
from ...models.domain.volumes import Volume
from ...resources.deployment import Deployment
from ...resources.job import Job
from ...resources.pod import Pod
from .container import ContainerOptions
from .pod import PodTemplateOptions

__all__ = ["ManifestBuilder"]


class ManifestBuilder:
    """Construct a chart of workloads from a manifest configuration.

    All objects are created through the same builder API available to
    library users, so configuration input is subject to the same checks.

    Parameters
    ----------
    logger
        Logger to use.
    """

    def __init__(self, logger: BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger(ROOT_LOGGER)

    def build(self, config: ManifestConfig) -> Chart:
        """Construct the chart for a manifest.

        Parameters
        ----------
        config
            Manifest configuration.

        Returns
        -------
        Chart
            Chart containing one resource per configured workload, not yet
            resolved.

        Raises
        ------
        PodcraftError
            Raised if the configuration violates a builder invariant that is
            detected during construction.
        """
        chart = Chart(
            config.name,
            namespace=config.namespace,
            labels=config.labels,
            logger=self._logger,
        )
        for workload in config.workloads:
            self.build_workload(chart, workload)
        self._logger.debug(
            "Built chart from configuration",
            chart=config.name,
            workloads=len(config.workloads),
        )
        return chart

    def build_workload(
        self, chart: Chart, config: PodConfig | DeploymentConfig | JobConfig
    ) -> Pod | Deployment | Job:
        """Construct one workload and add it to a chart.

        Parameters
        ----------
        chart
            Chart to add the workload to.
        config
            Configuration of the workload.

        Returns
        -------
        Pod or Deployment or Job
            Newly created workload.
        """
        volumes = self.build_volumes(config.volumes)
        options = self._build_template_options(config, volumes)
        workload: Pod | Deployment | Job
        match config:
            case PodConfig():
                workload = Pod(
                    chart,
                    config.id,
                    name=config.name,
                    labels=config.labels,
                    annotations=config.annotations,
                    logger=self._logger,
                    **options,
                )
            case DeploymentConfig():
                workload = Deployment(
                    chart,
                    config.id,
                    name=config.name,
                    labels=config.labels,
                    annotations=config.annotations,
                    replicas=config.replicas,
                    strategy=self._build_strategy(config.strategy),
                    default_selector=config.default_selector,
                    logger=self._logger,
                    **options,
                )
                for key, value in config.selector.items():
                    workload.select_by_label(key, value)
            case JobConfig():
                workload = Job(
                    chart,
                    config.id,
                    name=config.name,
                    labels=config.labels,
                    annotations=config.annotations,
                    active_deadline=config.active_deadline,
                    backoff_limit=config.backoff_limit,
                    ttl_after_finished=config.ttl_after_finished,
                    logger=self._logger,
                    **options,
                )

        by_name = {v.name: v for v in volumes}
        for spec in config.init_containers:
            init_options = self._build_container_options(spec, by_name)
            workload.add_init_container(spec.image, **init_options)
        for spec in config.containers:
            container_options = self._build_container_options(spec, by_name)
            workload.add_container(spec.image, **container_options)
        return workload

    def build_volumes(self, volumes: Iterable[VolumeConfig]) -> list[Volume]:
        """Construct volumes from their configuration.

        Parameters
        ----------
        volumes
            Configured volumes.

        Returns
        -------
        list of Volume
            Corresponding volumes in the same order.
        """
        results = []
        for spec in volumes:
            match spec.source:
                case ConfigMapVolumeSource() as source:
                    volume = Volume.from_config_map(
                        source.config_map_name,
                        name=spec.name,
                        default_mode=source.default_mode,
                        items=source.items,
                        optional=source.optional,
                    )
                case SecretVolumeSource() as source:
                    volume = Volume.from_secret(
                        source.secret_name,
                        name=spec.name,
                        default_mode=source.default_mode,
                        items=source.items,
                        optional=source.optional,
                    )
                case EmptyDirVolumeSource() as source:
                    volume = Volume.from_empty_dir(
                        spec.name,
                        medium=source.medium,
                        size_limit=source.size_limit,
                    )
                case HostPathVolumeSource() as source:
                    volume = Volume.from_host_path(
                        spec.name, source.path, type=source.host_path_type
                    )
                case NFSVolumeSource() as source:
                    volume = Volume.from_nfs(
                        spec.name,
                        source.server,
                        source.server_path,
                        read_only=source.read_only,
                    )
                case PVCVolumeSource() as source:
                    volume = Volume.from_persistent_volume_claim(
                        source.claim_name,
                        name=spec.name,
                        read_only=source.read_only,
                    )
            results.append(volume)
        return results

    def _build_container_options(
        self, spec: BaseContainerConfig, volumes: dict[str, Volume]
    ) -> ContainerOptions:
        """Translate container configuration into builder options.

        Only settings present in the configuration are included, so the
        builder defaults apply to the rest.
        """
        options: ContainerOptions = {
            "env": spec.env,
            "volume_mounts": [
                VolumeMount(
                    path=m.container_path,
                    volume=volumes[m.volume_name],
                    sub_path=m.sub_path,
                    read_only=m.read_only,
                )
                for m in spec.volume_mounts
            ],
        }
        if spec.name:
            options["name"] = spec.name
        if spec.command:
            options["command"] = spec.command
        if spec.args:
            options["args"] = spec.args
        if spec.working_dir:
            options["working_dir"] = spec.working_dir
        if spec.image_pull_policy:
            options["image_pull_policy"] = spec.image_pull_policy
        if spec.port is not None:
            options["port"] = spec.port
        if spec.resources:
            options["resources"] = spec.resources
        if spec.security_context:
            options["security_context"] = spec.security_context
        if isinstance(spec, ContainerConfig):
            if spec.liveness:
                options["liveness"] = self._build_probe(spec.liveness)
            if spec.readiness:
                options["readiness"] = self._build_probe(spec.readiness)
            if spec.startup:
                options["startup"] = self._build_probe(spec.startup)
        return options

    def _build_probe(
        self,
        spec: CommandProbeConfig | HttpGetProbeConfig | TcpSocketProbeConfig,
    ) -> Probe:
        """Construct a probe from its configuration."""
        match spec:
            case CommandProbeConfig():
                return Probe.from_command(
                    spec.command,
                    failure_threshold=spec.failure_threshold,
                    initial_delay=spec.initial_delay,
                    period=spec.period,
                    success_threshold=spec.success_threshold,
                    timeout=spec.timeout,
                )
            case HttpGetProbeConfig():
                return Probe.from_http_get(
                    spec.path,
                    port=spec.port,
                    scheme=spec.scheme,
                    failure_threshold=spec.failure_threshold,
                    initial_delay=spec.initial_delay,
                    period=spec.period,
                    success_threshold=spec.success_threshold,
                    timeout=spec.timeout,
                )
            case TcpSocketProbeConfig():
                return Probe.from_tcp_socket(
                    port=spec.port,
                    host=spec.host,
                    failure_threshold=spec.failure_threshold,
                    initial_delay=spec.initial_delay,
                    period=spec.period,
                    success_threshold=spec.success_threshold,
                    timeout=spec.timeout,
                )

    def _build_strategy(
        self, spec: DeploymentStrategyConfig
    ) -> DeploymentStrategy:
        """Construct the rollout strategy of a deployment.

        Raises
        ------
        StrategyConfigurationError
            Raised if a rolling update allows neither surge nor unavailable
            pods.
        """
        if spec.type == "Recreate":
            return DeploymentStrategy.recreate()
        return DeploymentStrategy.rolling_update(
            max_surge=self._build_bound(spec.max_surge),
            max_unavailable=self._build_bound(spec.max_unavailable),
        )

    def _build_bound(
        self, value: int | str | None
    ) -> PercentOrAbsolute | None:
        """Convert a configured surge or unavailability bound."""
        if value is None:
            return None
        if isinstance(value, str):
            return PercentOrAbsolute.percent(int(value.removesuffix("%")))
        return PercentOrAbsolute.absolute(value)

    def _build_template_options(
        self, config: BaseWorkloadConfig, volumes: list[Volume]
    ) -> PodTemplateOptions:
        """Translate pod-level configuration into pod template options."""
        options: PodTemplateOptions = {
            "volumes": volumes,
            "host_aliases": config.host_aliases,
            "image_pull_secrets": config.image_pull_secrets,
        }
        if config.security_context:
            options["security_context"] = config.security_context
        if config.restart_policy:
            options["restart_policy"] = config.restart_policy
        if config.service_account:
            options["service_account"] = config.service_account
        if isinstance(config, TemplatedWorkloadConfig):
            options["pod_metadata"] = ObjectMetadata(
                labels=dict(config.pod_labels),
                annotations=dict(config.pod_annotations),
            )
        return options
