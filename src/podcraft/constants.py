"""Global constants."""

__all__ = [
    "DEFAULT_MAX_SURGE_PERCENT",
    "DEFAULT_MAX_UNAVAILABLE_PERCENT",
    "DEFAULT_SELECTOR_LABEL",
    "INIT_CONTAINER_PREFIX",
    "KUBERNETES_NAME_PATTERN",
    "MAIN_CONTAINER_PREFIX",
    "MAX_NAME_LENGTH",
    "ROOT_LOGGER",
]

DEFAULT_MAX_SURGE_PERCENT = 25
"""Default ``maxSurge`` of a rolling update, as a percentage."""

DEFAULT_MAX_UNAVAILABLE_PERCENT = 25
"""Default ``maxUnavailable`` of a rolling update, as a percentage."""

DEFAULT_SELECTOR_LABEL = "podcraft.io/deployment"
"""Label used to match a deployment to its pods when none is configured."""

INIT_CONTAINER_PREFIX = "init"
"""Prefix of automatically assigned init container names."""

KUBERNETES_NAME_PATTERN = "^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"
"""Pattern matching valid Kubernetes names (DNS labels)."""

MAIN_CONTAINER_PREFIX = "main"
"""Prefix of automatically assigned regular container names."""

MAX_NAME_LENGTH = 63
"""Maximum length of a Kubernetes DNS label."""

ROOT_LOGGER = "podcraft"
"""Name of the root logger for the library and command-line interface."""
