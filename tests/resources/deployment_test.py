"""Tests for the deployment resource."""

from __future__ import annotations

import pytest

from podcraft.chart import Chart
from podcraft.constants import DEFAULT_SELECTOR_LABEL
from podcraft.exceptions import (
    EmptyContainerSetError,
    StrategyConfigurationError,
    TemplateResolvedError,
)
from podcraft.models.domain.deployment import (
    DeploymentStrategy,
    DeploymentStrategyType,
    PercentOrAbsolute,
)
from podcraft.models.domain.kubernetes import ObjectMetadata
from podcraft.resources.deployment import Deployment


def test_defaults(chart: Chart) -> None:
    deployment = Deployment(chart, "web", name="web")
    deployment.add_container("nginx", port=80)

    assert deployment.replicas == 1
    assert deployment.label_selector == {DEFAULT_SELECTOR_LABEL: "web"}
    assert deployment.to_dict() == {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": "web"},
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": {DEFAULT_SELECTOR_LABEL: "web"}},
            "strategy": {
                "rollingUpdate": {"maxSurge": "25%", "maxUnavailable": "25%"},
                "type": "RollingUpdate",
            },
            "template": {
                "metadata": {"labels": {DEFAULT_SELECTOR_LABEL: "web"}},
                "spec": {
                    "containers": [
                        {
                            "image": "nginx",
                            "name": "main-0",
                            "ports": [{"containerPort": 80}],
                        }
                    ],
                    "securityContext": {
                        "fsGroupChangePolicy": "Always",
                        "runAsNonRoot": False,
                        "sysctls": [],
                    },
                },
            },
        },
    }


def test_selector(chart: Chart) -> None:
    deployment = Deployment(
        chart,
        "web",
        default_selector=False,
        pod_metadata=ObjectMetadata(labels={"version": "1"}),
    )
    deployment.add_container("nginx")
    assert deployment.label_selector == {}

    deployment.select_by_label("app", "web")
    selector = deployment.label_selector
    selector["other"] = "value"
    assert deployment.label_selector == {"app": "web"}
    assert deployment.pod_metadata.labels == {"version": "1", "app": "web"}

    spec = deployment.to_dict()["spec"]
    assert spec["selector"] == {"matchLabels": {"app": "web"}}
    assert spec["template"]["metadata"]["labels"] == {
        "version": "1",
        "app": "web",
    }

    with pytest.raises(TemplateResolvedError):
        deployment.select_by_label("tier", "frontend")


def test_strategy(chart: Chart) -> None:
    strategy = DeploymentStrategy.rolling_update(
        max_surge=PercentOrAbsolute.absolute(1),
        max_unavailable=PercentOrAbsolute.absolute(0),
    )
    deployment = Deployment(chart, "web", replicas=3, strategy=strategy)
    deployment.add_container("nginx")
    spec = deployment.to_dict()["spec"]
    assert spec["replicas"] == 3
    assert spec["strategy"] == {
        "rollingUpdate": {"maxSurge": 1, "maxUnavailable": 0},
        "type": "RollingUpdate",
    }

    recreate = Deployment(
        chart, "worker", strategy=DeploymentStrategy.recreate()
    )
    recreate.add_container("worker")
    assert recreate.to_dict()["spec"]["strategy"] == {"type": "Recreate"}


def test_strategy_zero() -> None:
    with pytest.raises(StrategyConfigurationError):
        DeploymentStrategy.rolling_update(
            max_surge=PercentOrAbsolute.percent(0),
            max_unavailable=PercentOrAbsolute.absolute(0),
        )

    strategy = DeploymentStrategy.rolling_update(
        max_unavailable=PercentOrAbsolute.absolute(0)
    )
    assert strategy.type == DeploymentStrategyType.ROLLING_UPDATE
    assert strategy.max_surge == PercentOrAbsolute.percent(25)


def test_empty(chart: Chart) -> None:
    Deployment(chart, "web")
    with pytest.raises(EmptyContainerSetError):
        chart.synth()


def test_modify_after_synth(chart: Chart) -> None:
    deployment = Deployment(chart, "web", name="web")
    deployment.add_container("nginx")
    deployment.replicas = 3
    deployment.strategy = DeploymentStrategy.recreate()
    spec = deployment.to_dict()["spec"]
    assert spec["replicas"] == 3
    assert spec["strategy"] == {"type": "Recreate"}

    with pytest.raises(TemplateResolvedError, match="replicas"):
        deployment.replicas = 5
    with pytest.raises(TemplateResolvedError, match="strategy"):
        deployment.strategy = DeploymentStrategy.rolling_update()
    assert deployment.replicas == 3
    assert chart.synth()[0]["spec"]["replicas"] == 3
