"""Conversions between Kubernetes resource quantities and numbers."""

from __future__ import annotations

import re
from typing import Any

import bitmath

__all__ = ["bytes_to_si", "cores_to_cpu", "cpu_to_cores", "memory_to_bytes"]

_MILLICORE_REGEX = re.compile(r"^\d+m$")
"""Pattern matching a CPU quantity expressed in millicores."""

_MEMORY_REGEX = re.compile(
    r"^(?P<value>\d+(\.\d+)?)(?P<suffix>[kKMGTPE]|[KMGTPE]i)?$"
)
"""Pattern matching a memory quantity with an optional unit suffix."""

_MEMORY_UNITS: dict[str, type[bitmath.Bitmath]] = {
    "k": bitmath.kB,
    "K": bitmath.kB,
    "M": bitmath.MB,
    "G": bitmath.GB,
    "T": bitmath.TB,
    "P": bitmath.PB,
    "E": bitmath.EB,
    "Ki": bitmath.KiB,
    "Mi": bitmath.MiB,
    "Gi": bitmath.GiB,
    "Ti": bitmath.TiB,
    "Pi": bitmath.PiB,
    "Ei": bitmath.EiB,
}
"""bitmath units for Kubernetes suffixes, decimal unless ending in i."""

_BINARY_SUFFIXES = ("Ei", "Pi", "Ti", "Gi", "Mi", "Ki")
"""Binary suffixes tried when formatting, largest first."""


def memory_to_bytes(memory: Any) -> int:
    """Convert an amount of memory or storage to a number of bytes.

    Parameters
    ----------
    memory
        Number of bytes or a quantity string such as ``512Mi`` or ``2G``.

    Returns
    -------
    int
        Equivalent number of bytes.

    Raises
    ------
    ValueError
        Raised if the input is not a valid byte specification.
    """
    match = _MEMORY_REGEX.match(str(memory).strip())
    if not match:
        raise ValueError(f"{memory} is not a valid memory quantity")
    value = match.group("value")
    suffix = match.group("suffix")
    if not suffix:
        return int(float(value)) if "." in value else int(value)
    return int(_MEMORY_UNITS[suffix](float(value)).bytes)


def bytes_to_si(val: int) -> str:
    """Convert a number of bytes to a Kubernetes quantity string.

    Parameters
    ----------
    val
        Number of bytes.

    Returns
    -------
    str
        Quantity using the largest binary prefix that divides the number
        of bytes exactly, such as ``3Gi``, or the plain number of bytes if
        there is none.
    """
    for suffix in _BINARY_SUFFIXES:
        unit = int(_MEMORY_UNITS[suffix](1).bytes)
        if val >= unit and val % unit == 0:
            return f"{val // unit}{suffix}"
    return str(val)


def cpu_to_cores(cpu: Any) -> float:
    """Convert a Kubernetes CPU quantity to a number of cores.

    Parameters
    ----------
    cpu
        Number of cores, or a string in either millicores (``500m``) or
        decimal cores with at most three decimal places (``1.25``).

    Returns
    -------
    float
        Equivalent number of cores.

    Raises
    ------
    ValueError
        Raised if the input is not a valid Kubernetes CPU quantity.
    """
    cpu = str(cpu)
    msg = (
        "CPU must be specified as a whole number of milli-cores, like 500m, or"
        " a decimal number with no more than three places of precision, like"
        " 1.234"
    )
    if _MILLICORE_REGEX.match(cpu):
        return float(cpu[:-1]) / 1000
    try:
        cores = float(cpu)
    except ValueError as exc:
        raise ValueError(msg) from exc
    if "." in cpu and len(cpu.split(".", 1)[1]) > 3:
        raise ValueError(msg)
    return cores


def cores_to_cpu(cores: float) -> str:
    """Convert a number of cores to a Kubernetes CPU quantity.

    Whole numbers of cores are rendered as integers and everything else as
    millicores.
    """
    millicores = round(cores * 1000)
    if millicores % 1000 == 0:
        return str(millicores // 1000)
    return f"{millicores}m"
