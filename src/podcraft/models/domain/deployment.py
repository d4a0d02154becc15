"""Models for deployment rollout strategies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Self

from kubernetes_asyncio.client import (
    V1DeploymentStrategy,
    V1RollingUpdateDeployment,
)

from ...constants import (
    DEFAULT_MAX_SURGE_PERCENT,
    DEFAULT_MAX_UNAVAILABLE_PERCENT,
)
from ...exceptions import StrategyConfigurationError

__all__ = [
    "DeploymentStrategy",
    "DeploymentStrategyType",
    "PercentOrAbsolute",
]


class DeploymentStrategyType(Enum):
    """How old pods are replaced by new ones."""

    RECREATE = "Recreate"
    ROLLING_UPDATE = "RollingUpdate"


@dataclass(frozen=True)
class PercentOrAbsolute:
    """Either a percentage of the desired pods or an absolute pod count.

    Use `percent` or `absolute` to construct.
    """

    value: int | str
    """Value in the form Kubernetes expects: an integer or ``"N%"``."""

    @classmethod
    def percent(cls, percent: int) -> Self:
        """Create a percentage of the desired number of pods."""
        return cls(value=f"{percent}%")

    @classmethod
    def absolute(cls, count: int) -> Self:
        """Create an absolute number of pods."""
        return cls(value=count)

    def is_zero(self) -> bool:
        """Whether this resolves to zero pods regardless of replica count."""
        return self.value in (0, "0%")


@dataclass(frozen=True)
class DeploymentStrategy:
    """Strategy used to replace the pods of a deployment.

    Use `recreate` or `rolling_update` to construct.
    """

    type: DeploymentStrategyType
    """Kind of strategy."""

    max_surge: PercentOrAbsolute | None = None
    """Pods that may be created above the desired count during an update."""

    max_unavailable: PercentOrAbsolute | None = None
    """Pods that may be unavailable during an update."""

    @classmethod
    def recreate(cls) -> Self:
        """Kill all existing pods before creating new ones."""
        return cls(type=DeploymentStrategyType.RECREATE)

    @classmethod
    def rolling_update(
        cls,
        *,
        max_surge: PercentOrAbsolute | None = None,
        max_unavailable: PercentOrAbsolute | None = None,
    ) -> Self:
        """Gradually replace old pods with new ones.

        Parameters
        ----------
        max_surge
            Maximum number of pods that can be scheduled above the desired
            number. Percentages are rounded up. Defaults to 25%.
        max_unavailable
            Maximum number of pods that can be unavailable during the update.
            Percentages are rounded down. Defaults to 25%.

        Raises
        ------
        StrategyConfigurationError
            Raised if both bounds are zero, since then the rollout could
            never make progress.
        """
        if max_surge is None:
            max_surge = PercentOrAbsolute.percent(DEFAULT_MAX_SURGE_PERCENT)
        if max_unavailable is None:
            max_unavailable = PercentOrAbsolute.percent(
                DEFAULT_MAX_UNAVAILABLE_PERCENT
            )
        if max_surge.is_zero() and max_unavailable.is_zero():
            raise StrategyConfigurationError
        return cls(
            type=DeploymentStrategyType.ROLLING_UPDATE,
            max_surge=max_surge,
            max_unavailable=max_unavailable,
        )

    def to_kubernetes(self) -> V1DeploymentStrategy:
        """Convert to the corresponding Kubernetes model."""
        rolling_update = None
        if self.type == DeploymentStrategyType.ROLLING_UPDATE:
            rolling_update = V1RollingUpdateDeployment(
                max_surge=self.max_surge.value if self.max_surge else None,
                max_unavailable=(
                    self.max_unavailable.value
                    if self.max_unavailable
                    else None
                ),
            )
        return V1DeploymentStrategy(
            type=self.type.value, rolling_update=rolling_update
        )
