"""Tests for pod template resolution."""

from __future__ import annotations

import pytest
from structlog.stdlib import BoundLogger

from podcraft.exceptions import (
    EmptyContainerSetError,
    NameConflictError,
    TemplateResolvedError,
    VolumeNameCollisionError,
)
from podcraft.models.domain.kubernetes import (
    FsGroupChangePolicy,
    ObjectMetadata,
    ResolutionPhase,
    RestartPolicy,
)
from podcraft.models.domain.pod import HostAlias, PodSecurityContext, Sysctl
from podcraft.models.domain.volumes import Volume
from podcraft.services.builder.pod import PodTemplate

from ...support.kubernetes import object_to_dict


def test_empty(template: PodTemplate) -> None:
    with pytest.raises(EmptyContainerSetError, match="at least 1 container"):
        template.resolve()
    assert template.phase == ResolutionPhase.BUILDING

    # Init containers alone are not enough.
    template.add_init_container("setup")
    with pytest.raises(EmptyContainerSetError):
        template.resolve()


def test_minimal(template: PodTemplate) -> None:
    template.add_container("app")
    assert object_to_dict(template.resolve()) == {
        "containers": [{"image": "app", "name": "main-0"}],
        "securityContext": {
            "fsGroupChangePolicy": "Always",
            "runAsNonRoot": False,
            "sysctls": [],
        },
    }
    assert template.phase == ResolutionPhase.RESOLVED


def test_container_names(template: PodTemplate) -> None:
    template.add_container("app")
    template.add_container("sidecar", name="proxy")
    template.add_container("worker")
    template.add_init_container("setup")
    template.add_init_container("migrate", name="migrate")
    template.add_init_container("warm")

    names = [c.name for c in template.containers]
    assert names == ["main-0", "proxy", "main-2"]
    init_names = [c.name for c in template.init_containers]
    assert init_names == ["init-0", "migrate", "init-2"]

    spec = template.resolve()
    assert [c.image for c in spec.containers] == ["app", "sidecar", "worker"]
    assert [c.name for c in spec.init_containers] == init_names


def test_shared_volume(template: PodTemplate) -> None:
    volume = Volume.from_empty_dir("v")
    container = template.add_container("app")
    container.mount("/data", volume)
    container.mount("/backup", volume, read_only=True)

    spec = template.resolve()
    assert [v.name for v in spec.volumes] == ["v"]
    assert [m.mount_path for m in spec.containers[0].volume_mounts] == [
        "/data",
        "/backup",
    ]


def test_volume_shared_across_containers(template: PodTemplate) -> None:
    volume = Volume.from_empty_dir("shared")
    template.add_container("app").mount("/shared", volume)
    template.add_container("sidecar").mount("/shared", volume)
    template.add_init_container("setup").mount("/shared", volume)

    assert template.volumes == [volume]
    spec = template.resolve()
    assert [v.name for v in spec.volumes] == ["shared"]


def test_volume_name_collision(template: PodTemplate) -> None:
    first = Volume.from_empty_dir("v")
    second = Volume.from_config_map("settings", name="v")
    template.add_container("a").mount("/a", first)
    template.add_container("b").mount("/b", second)

    with pytest.raises(VolumeNameCollisionError) as excinfo:
        template.resolve()
    assert excinfo.value.name == "v"
    assert "v" in str(excinfo.value)
    assert "configMap settings" in str(excinfo.value)
    assert template.phase == ResolutionPhase.BUILDING


def test_collision_with_init_container(template: PodTemplate) -> None:
    template.add_volume(Volume.from_empty_dir("v"))
    template.add_container("app")
    init_container = template.add_init_container("setup")
    init_container.mount("/v", Volume.from_empty_dir("v"))

    with pytest.raises(VolumeNameCollisionError, match="same name: v"):
        template.resolve()


def test_name_conflict(logger: BoundLogger) -> None:
    with pytest.raises(NameConflictError):
        PodTemplate(
            volumes=[Volume.from_empty_dir("v"), Volume.from_empty_dir("v")],
            logger=logger,
        )

    volume = Volume.from_empty_dir("v")
    template = PodTemplate(volumes=[volume], logger=logger)
    template.add_volume(volume)
    with pytest.raises(NameConflictError, match="Volume with name v"):
        template.add_volume(Volume.from_empty_dir("v"))
    assert template.volumes == [volume]


def test_volume_order(template: PodTemplate) -> None:
    config = Volume.from_config_map("settings")
    scratch = Volume.from_empty_dir("scratch")
    secret = Volume.from_secret("creds")
    template.add_volume(config)
    container = template.add_container("app")
    container.mount("/creds", secret)
    container.mount("/etc/app", config)
    template.add_volume(scratch)

    spec = template.resolve()
    names = [v.name for v in spec.volumes]
    assert names == ["configmap-settings", "secret-creds", "scratch"]


def test_unmounted_volume(template: PodTemplate) -> None:
    template.add_volume(Volume.from_empty_dir("unused"))
    template.add_container("app")
    spec = template.resolve()
    assert [v.name for v in spec.volumes] == ["unused"]


def test_pod_settings(logger: BoundLogger) -> None:
    security_context = PodSecurityContext(
        ensure_non_root=True,
        fs_group=5000,
        fs_group_change_policy=FsGroupChangePolicy.ON_ROOT_MISMATCH,
        user=1000,
        group=1000,
        sysctls=[Sysctl(name="net.core.somaxconn", value="1024")],
    )
    template = PodTemplate(
        host_aliases=[HostAlias(ip="10.0.0.1", hostnames=["db.local"])],
        security_context=security_context,
        restart_policy=RestartPolicy.ON_FAILURE,
        service_account="app",
        image_pull_secrets=["registry"],
        logger=logger,
    )
    template.add_host_alias(
        HostAlias(ip="10.0.0.2", hostnames=["cache.local", "queue.local"])
    )
    template.add_container("app")

    serialized = object_to_dict(template.resolve())
    assert serialized["hostAliases"] == [
        {"ip": "10.0.0.1", "hostnames": ["db.local"]},
        {"ip": "10.0.0.2", "hostnames": ["cache.local", "queue.local"]},
    ]
    assert serialized["securityContext"] == {
        "fsGroup": 5000,
        "fsGroupChangePolicy": "OnRootMismatch",
        "runAsGroup": 1000,
        "runAsNonRoot": True,
        "runAsUser": 1000,
        "sysctls": [{"name": "net.core.somaxconn", "value": "1024"}],
    }
    assert serialized["restartPolicy"] == "OnFailure"
    assert serialized["serviceAccountName"] == "app"
    assert serialized["imagePullSecrets"] == [{"name": "registry"}]


def test_idempotent(template: PodTemplate) -> None:
    volume = Volume.from_empty_dir("v")
    template.add_container("app").mount("/v", volume)
    template.add_init_container("setup").mount("/v", volume)

    first = object_to_dict(template.resolve())
    second = object_to_dict(template.resolve())
    assert first == second
    assert len(first["volumes"]) == 1


def test_modify_after_resolve(template: PodTemplate) -> None:
    template.add_container("app")
    expected = object_to_dict(template.resolve())

    with pytest.raises(TemplateResolvedError, match="add a container"):
        template.add_container("other")
    with pytest.raises(TemplateResolvedError):
        template.add_init_container("setup")
    with pytest.raises(TemplateResolvedError):
        template.add_volume(Volume.from_empty_dir("v"))
    with pytest.raises(TemplateResolvedError):
        template.add_host_alias(HostAlias(ip="10.0.0.1", hostnames=["a"]))
    with pytest.raises(TemplateResolvedError):
        template.add_image_pull_secret("registry")
    with pytest.raises(TemplateResolvedError, match="restart policy"):
        template.restart_policy = RestartPolicy.ALWAYS
    with pytest.raises(TemplateResolvedError):
        template.service_account = "other"
    with pytest.raises(TemplateResolvedError):
        template.security_context = PodSecurityContext(ensure_non_root=True)

    assert object_to_dict(template.resolve()) == expected


def test_modify_settings(template: PodTemplate) -> None:
    template.add_container("app")
    template.restart_policy = RestartPolicy.ON_FAILURE
    template.service_account = "app"
    template.security_context = PodSecurityContext(ensure_non_root=True)

    serialized = object_to_dict(template.resolve())
    assert serialized["restartPolicy"] == "OnFailure"
    assert serialized["serviceAccountName"] == "app"
    assert serialized["securityContext"]["runAsNonRoot"] is True


def test_pod_template_spec(logger: BoundLogger) -> None:
    metadata = ObjectMetadata(labels={"app": "web"})
    metadata.add_annotation("example.com/owner", "ops")
    template = PodTemplate(pod_metadata=metadata, logger=logger)
    template.add_container("app")

    serialized = object_to_dict(template.to_pod_template_spec())
    assert serialized["metadata"] == {
        "annotations": {"example.com/owner": "ops"},
        "labels": {"app": "web"},
    }
    assert serialized["spec"]["containers"] == [
        {"image": "app", "name": "main-0"}
    ]
