"""Utilities for reading test data."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

__all__ = [
    "data_path",
    "read_output_data",
]


def data_path(filename: str) -> Path:
    """Return the path to a file of test data.

    Parameters
    ----------
    filename
        Path of the file relative to the ``tests/data`` directory.
    """
    return Path(__file__).parent.parent / "data" / filename


def read_output_data(filename: str) -> list[Any]:
    """Read expected output as multi-document YAML.

    Parameters
    ----------
    filename
        Path of the file relative to the ``tests/data`` directory.

    Returns
    -------
    list
        Parsed documents of the file.
    """
    with data_path(filename).open("r") as f:
        return list(yaml.safe_load_all(f))
