"""Tests for the job resource."""

from __future__ import annotations

from datetime import timedelta

import pytest

from podcraft.chart import Chart
from podcraft.exceptions import TemplateResolvedError
from podcraft.models.domain.kubernetes import RestartPolicy
from podcraft.models.domain.volumes import Volume
from podcraft.resources.job import Job


def test_job(chart: Chart) -> None:
    job = Job(
        chart,
        "migrate",
        name="migrate",
        active_deadline=timedelta(hours=1),
        backoff_limit=2,
        ttl_after_finished=timedelta(days=1, seconds=0.5),
    )
    scratch = Volume.from_empty_dir("scratch")
    job.add_init_container("busybox", command=["true"]).mount("/tmp", scratch)
    job.add_container("migrate").mount("/tmp", scratch)

    assert job.restart_policy == RestartPolicy.NEVER
    spec = job.to_dict()["spec"]
    assert spec["activeDeadlineSeconds"] == 3600
    assert spec["backoffLimit"] == 2
    assert spec["ttlSecondsAfterFinished"] == 86400
    pod_spec = spec["template"]["spec"]
    assert pod_spec["restartPolicy"] == "Never"
    assert pod_spec["initContainers"] == [
        {
            "command": ["true"],
            "image": "busybox",
            "name": "init-0",
            "volumeMounts": [{"mountPath": "/tmp", "name": "scratch"}],
        }
    ]
    assert pod_spec["volumes"] == [{"emptyDir": {}, "name": "scratch"}]


def test_restart_policy(chart: Chart) -> None:
    job = Job(chart, "retry", restart_policy=RestartPolicy.ON_FAILURE)
    job.add_container("worker")
    assert job.restart_policy == RestartPolicy.ON_FAILURE
    pod_spec = job.to_dict()["spec"]["template"]["spec"]
    assert pod_spec["restartPolicy"] == "OnFailure"


def test_defaults(chart: Chart) -> None:
    job = Job(chart, "once")
    job.add_container("worker")
    spec = job.to_dict()["spec"]
    assert "activeDeadlineSeconds" not in spec
    assert "backoffLimit" not in spec
    assert "ttlSecondsAfterFinished" not in spec


def test_modify_after_synth(chart: Chart) -> None:
    job = Job(chart, "once")
    job.add_container("worker")
    job.backoff_limit = 4
    assert job.to_dict()["spec"]["backoffLimit"] == 4

    with pytest.raises(TemplateResolvedError, match="backoff limit"):
        job.backoff_limit = 1
    with pytest.raises(TemplateResolvedError, match="active deadline"):
        job.active_deadline = timedelta(minutes=5)
    with pytest.raises(TemplateResolvedError):
        job.ttl_after_finished = timedelta(hours=1)
    assert job.backoff_limit == 4
