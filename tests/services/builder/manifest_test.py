"""Tests for construction of charts from configuration."""

from __future__ import annotations

import pytest
from structlog.stdlib import BoundLogger

from podcraft.config import ManifestConfig
from podcraft.exceptions import (
    EmptyContainerSetError,
    MissingProbePortError,
    NameConflictError,
)
from podcraft.models.domain.deployment import DeploymentStrategyType
from podcraft.resources.deployment import Deployment
from podcraft.services.builder.manifest import ManifestBuilder

from ...support.data import data_path, read_output_data


def test_build(logger: BoundLogger) -> None:
    config = ManifestConfig.from_file(data_path("manifests/app.yaml"))
    chart = ManifestBuilder(logger).build(config)

    assert chart.name == "shop"
    assert [o.kind for o in chart.objects] == ["Deployment", "Job"]
    assert chart.synth() == read_output_data("manifests/app-output.yaml")


def test_build_workload(logger: BoundLogger) -> None:
    config = ManifestConfig.from_file(data_path("manifests/app.yaml"))
    builder = ManifestBuilder(logger)
    chart = builder.build(config)
    workload = config.workloads[0].model_copy(
        update={"id": "web-2", "name": None}
    )
    deployment = builder.build_workload(chart, workload)

    assert isinstance(deployment, Deployment)
    assert deployment.name.startswith("shop-web-2-")
    assert deployment.strategy.type == DeploymentStrategyType.ROLLING_UPDATE
    assert [v.name for v in deployment.volumes] == ["config", "cache"]
    assert [c.name for c in deployment.init_containers] == ["init-0"]
    mounts = deployment.init_containers[0].mounts
    assert mounts[0].volume is deployment.volumes[0]
    assert mounts[0].read_only
    assert len(chart) == 3


def test_job_restart_policy(logger: BoundLogger) -> None:
    config = ManifestConfig.model_validate(
        {
            "name": "test",
            "workloads": [
                {
                    "type": "Job",
                    "id": "retry",
                    "restartPolicy": "OnFailure",
                    "containers": [{"image": "worker"}],
                }
            ],
        }
    )
    chart = ManifestBuilder(logger).build(config)
    job = chart.synth()[0]
    assert job["spec"]["template"]["spec"]["restartPolicy"] == "OnFailure"


def test_duplicate_volume(logger: BoundLogger) -> None:
    config = ManifestConfig.from_file(
        data_path("manifests/duplicate-volume.yaml")
    )
    with pytest.raises(NameConflictError, match="data"):
        ManifestBuilder(logger).build(config)


def test_no_containers(logger: BoundLogger) -> None:
    path = data_path("manifests/no-containers.yaml")
    config = ManifestConfig.from_file(path)
    chart = ManifestBuilder(logger).build(config)
    with pytest.raises(EmptyContainerSetError):
        chart.synth()


def test_probe_without_port(logger: BoundLogger) -> None:
    config = ManifestConfig.model_validate(
        {
            "name": "test",
            "workloads": [
                {
                    "type": "Pod",
                    "id": "web",
                    "containers": [
                        {
                            "image": "nginx",
                            "liveness": {"type": "tcpSocket"},
                        }
                    ],
                }
            ],
        }
    )
    with pytest.raises(MissingProbePortError, match="has no port"):
        ManifestBuilder(logger).build(config)
