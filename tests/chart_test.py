"""Tests for charts and their serialization."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

import pytest
import yaml
from kubernetes_asyncio.client import V1PodSpec
from structlog.stdlib import BoundLogger

from podcraft.chart import ApiObject, Chart
from podcraft.constants import KUBERNETES_NAME_PATTERN
from podcraft.exceptions import DuplicateResourceError
from podcraft.lazy import Lazy
from podcraft.models.domain.kubernetes import ObjectMetadata
from podcraft.resources.deployment import Deployment
from podcraft.resources.job import Job
from podcraft.resources.pod import Pod


def test_generate_name(chart: Chart) -> None:
    digest = hashlib.sha256(b"test/web").hexdigest()[:8]
    assert chart.generate_name("web") == f"test-web-{digest}"
    assert chart.generate_name("web") == chart.generate_name("web")
    assert chart.generate_name("web") != chart.generate_name("api")

    name = chart.generate_name("Front_End/Server")
    assert name.startswith("test-front-end-server-")

    name = chart.generate_name("x" * 100)
    assert len(name) == 63
    assert re.match(KUBERNETES_NAME_PATTERN, name)


def test_duplicate(chart: Chart) -> None:
    Pod(chart, "web")
    with pytest.raises(DuplicateResourceError, match="web"):
        Job(chart, "web")
    assert len(chart) == 1
    assert "web" in chart


def test_namespace_and_labels(logger: BoundLogger) -> None:
    chart = Chart(
        "prod", namespace="apps", labels={"team": "web"}, logger=logger
    )
    pod = Pod(chart, "web", name="web", labels={"app": "web"})
    pod.add_container("nginx")
    assert pod.to_dict()["metadata"] == {
        "labels": {"app": "web", "team": "web"},
        "name": "web",
        "namespace": "apps",
    }


def test_synth_order(chart: Chart) -> None:
    Job(chart, "migrate").add_container("migrate")
    Deployment(chart, "web").add_container("nginx")
    Pod(chart, "debug").add_container("busybox")

    kinds = [d["kind"] for d in chart.synth()]
    assert kinds == ["Job", "Deployment", "Pod"]


def test_synth_repeatable(chart: Chart) -> None:
    calls = []
    pod = Pod(chart, "web")
    pod.add_container("nginx")
    original = pod.build_spec

    def build_spec() -> V1PodSpec:
        calls.append(True)
        return original()

    pod.build_spec = build_spec  # type: ignore[method-assign]
    first = chart.synth()
    second = chart.synth()
    assert first == second
    assert len(calls) == 1


def test_static_spec(chart: Chart) -> None:
    spec = V1PodSpec(containers=[])
    api_object = ApiObject(
        api_version="v1",
        kind="Pod",
        metadata=ObjectMetadata(name="static"),
        spec=spec,
    )
    chart.add("static", api_object)
    assert api_object.resolve_spec() is spec
    lazy_object = ApiObject(
        api_version="v1",
        kind="Pod",
        metadata=ObjectMetadata(name="lazy"),
        spec=Lazy(lambda: spec),
    )
    assert lazy_object.resolve_spec() is spec
    assert chart.synth() == [
        {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {"name": "static"},
            "spec": {"containers": []},
        }
    ]


def test_to_yaml(chart: Chart, tmp_path: Path) -> None:
    Deployment(chart, "web", name="web").add_container("nginx")
    Job(chart, "migrate", name="migrate").add_container("migrate")

    manifest = chart.to_yaml()
    documents = list(yaml.safe_load_all(manifest))
    assert documents == chart.synth()
    assert manifest.startswith("apiVersion: apps/v1\nkind: Deployment\n")

    path = tmp_path / "manifest.yaml"
    chart.write(path)
    assert path.read_text() == manifest
