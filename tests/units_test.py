"""Test unit conversions."""

import pytest

from podcraft.models.domain.container import ContainerResources
from podcraft.units import (
    bytes_to_si,
    cores_to_cpu,
    cpu_to_cores,
    memory_to_bytes,
)


def test_memory_to_bytes() -> None:
    assert memory_to_bytes(123456789) == 123456789
    assert memory_to_bytes("123456789") == 123456789
    assert memory_to_bytes("12K") == 12 * 1000
    assert memory_to_bytes("12k") == 12 * 1000
    assert memory_to_bytes("12Ki") == 12 * 1024
    assert memory_to_bytes("500M") == 500 * 1000 * 1000
    assert memory_to_bytes("12Mi") == 12 * 1024 * 1024
    assert memory_to_bytes("2G") == 2 * 1000 * 1000 * 1000
    assert memory_to_bytes("1Gi") == 1024 * 1024 * 1024
    assert memory_to_bytes("1.5Gi") == 3 * 512 * 1024 * 1024

    for invalid in ("nope", "12KB", "12ki", "-1", "1.5.2M"):
        with pytest.raises(ValueError, match="not a valid"):
            memory_to_bytes(invalid)


def test_bytes_to_si() -> None:
    assert bytes_to_si(512) == "512"
    assert bytes_to_si(1500) == "1500"
    assert bytes_to_si(12 * 1024) == "12Ki"
    assert bytes_to_si(64 * 1024 * 1024) == "64Mi"
    assert bytes_to_si(1024 * 1024 * 1024) == "1Gi"
    assert bytes_to_si(2_000_000_000) == "1953125Ki"
    assert bytes_to_si(500_000_000) == "488281250Ki"


def test_memory_round_trip() -> None:
    for size in (1500, 500_000_000, 2_000_000_000, 3 * 1024 * 1024 + 1):
        assert memory_to_bytes(bytes_to_si(size)) == size

    resources = ContainerResources.model_validate(
        {"limits": {"memory": "2G"}, "requests": {"memory": "500M"}}
    )
    serialized = resources.to_kubernetes()
    assert memory_to_bytes(serialized.limits["memory"]) == 2_000_000_000
    assert memory_to_bytes(serialized.requests["memory"]) == 500_000_000


def test_cpu_to_cores() -> None:
    assert cpu_to_cores(1) == 1.0
    assert cpu_to_cores("1.234") == 1.234
    assert cpu_to_cores("450m") == 0.45

    with pytest.raises(ValueError, match="CPU must be specified"):
        cpu_to_cores(1.2345)

    with pytest.raises(ValueError, match="CPU must be specified"):
        cpu_to_cores("nope")


def test_cores_to_cpu() -> None:
    assert cores_to_cpu(2.0) == "2"
    assert cores_to_cpu(0.5) == "500m"
    assert cores_to_cpu(1.25) == "1250m"
