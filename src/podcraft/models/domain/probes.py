"""Models for container health probes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Self

from kubernetes_asyncio.client import (
    V1ExecAction,
    V1HTTPGetAction,
    V1Probe,
    V1TCPSocketAction,
)

__all__ = [
    "CommandCheck",
    "HttpGetCheck",
    "Probe",
    "ProbeCheck",
    "TcpSocketCheck",
    "URIScheme",
]


class URIScheme(Enum):
    """Scheme used by an HTTP probe."""

    HTTP = "HTTP"
    HTTPS = "HTTPS"


@dataclass(frozen=True)
class CommandCheck:
    """Run a command inside the container."""

    command: tuple[str, ...]


@dataclass(frozen=True)
class HttpGetCheck:
    """Send an HTTP GET request to the container."""

    path: str
    port: int | None = None
    scheme: URIScheme = URIScheme.HTTP


@dataclass(frozen=True)
class TcpSocketCheck:
    """Open a TCP connection to the container."""

    port: int | None = None
    host: str | None = None


type ProbeCheck = CommandCheck | HttpGetCheck | TcpSocketCheck


def _seconds(duration: timedelta | None) -> int | None:
    return int(duration.total_seconds()) if duration is not None else None


@dataclass(frozen=True)
class Probe:
    """Health check to run against a container.

    A probe is only a description of the check. Whether it is used as a
    liveness, readiness, or startup probe is decided when it is attached to a
    container, which is also where the restriction against probes on init
    containers is enforced.

    Use the ``from_*`` class methods to construct probes.
    """

    check: ProbeCheck
    """How the container is checked."""

    failure_threshold: int | None = None
    """Consecutive failures after which the probe is considered failed."""

    initial_delay: timedelta | None = None
    """Delay after the container starts before probing."""

    period: timedelta | None = None
    """How often to probe."""

    success_threshold: int | None = None
    """Consecutive successes after a failure to be considered healthy."""

    timeout: timedelta | None = None
    """Timeout of each probe."""

    @classmethod
    def from_command(
        cls,
        command: list[str],
        *,
        failure_threshold: int | None = None,
        initial_delay: timedelta | None = None,
        period: timedelta | None = None,
        success_threshold: int | None = None,
        timeout: timedelta | None = None,
    ) -> Self:
        """Create a probe that runs a command inside the container.

        The container is healthy if the command exits with status 0.
        """
        return cls(
            check=CommandCheck(command=tuple(command)),
            failure_threshold=failure_threshold,
            initial_delay=initial_delay,
            period=period,
            success_threshold=success_threshold,
            timeout=timeout,
        )

    @classmethod
    def from_http_get(
        cls,
        path: str,
        *,
        port: int | None = None,
        scheme: URIScheme = URIScheme.HTTP,
        failure_threshold: int | None = None,
        initial_delay: timedelta | None = None,
        period: timedelta | None = None,
        success_threshold: int | None = None,
        timeout: timedelta | None = None,
    ) -> Self:
        """Create a probe that sends an HTTP GET request.

        Parameters
        ----------
        path
            Path of the URL to request.
        port
            Port to connect to. Defaults to the port of the container the
            probe is attached to.
        scheme
            Whether to use HTTP or HTTPS.

        Other parameters are described in the attributes of this class.
        """
        return cls(
            check=HttpGetCheck(path=path, port=port, scheme=scheme),
            failure_threshold=failure_threshold,
            initial_delay=initial_delay,
            period=period,
            success_threshold=success_threshold,
            timeout=timeout,
        )

    @classmethod
    def from_tcp_socket(
        cls,
        *,
        port: int | None = None,
        host: str | None = None,
        failure_threshold: int | None = None,
        initial_delay: timedelta | None = None,
        period: timedelta | None = None,
        success_threshold: int | None = None,
        timeout: timedelta | None = None,
    ) -> Self:
        """Create a probe that opens a TCP connection.

        The port defaults to the port of the container the probe is attached
        to, and the host defaults to the pod IP.
        """
        return cls(
            check=TcpSocketCheck(port=port, host=host),
            failure_threshold=failure_threshold,
            initial_delay=initial_delay,
            period=period,
            success_threshold=success_threshold,
            timeout=timeout,
        )

    @property
    def needs_container_port(self) -> bool:
        """Whether the probe relies on the port of its container."""
        match self.check:
            case HttpGetCheck(port=None) | TcpSocketCheck(port=None):
                return True
            case _:
                return False

    def to_kubernetes(self, container_port: int | None = None) -> V1Probe:
        """Convert to the corresponding Kubernetes model.

        Parameters
        ----------
        container_port
            Port of the container, used if the probe has no explicit port.
        """
        exec_action = None
        http_get = None
        tcp_socket = None
        match self.check:
            case CommandCheck(command=command):
                exec_action = V1ExecAction(command=list(command))
            case HttpGetCheck(path=path, port=port, scheme=scheme):
                http_get = V1HTTPGetAction(
                    path=path,
                    port=port if port is not None else container_port,
                    scheme=scheme.value,
                )
            case TcpSocketCheck(port=port, host=host):
                tcp_socket = V1TCPSocketAction(
                    host=host,
                    port=port if port is not None else container_port,
                )
        return V1Probe(
            _exec=exec_action,
            failure_threshold=self.failure_threshold,
            http_get=http_get,
            initial_delay_seconds=_seconds(self.initial_delay),
            period_seconds=_seconds(self.period),
            success_threshold=self.success_threshold,
            tcp_socket=tcp_socket,
            timeout_seconds=_seconds(self.timeout),
        )
