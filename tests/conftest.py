"""Test fixtures for podcraft tests."""

from __future__ import annotations

import pytest
import structlog
from safir.logging import LogLevel, Profile, configure_logging
from structlog.stdlib import BoundLogger

from podcraft.chart import Chart
from podcraft.constants import ROOT_LOGGER
from podcraft.services.builder.pod import PodTemplate


@pytest.fixture
def logger() -> BoundLogger:
    configure_logging(
        name=ROOT_LOGGER, profile=Profile.development, log_level=LogLevel.DEBUG
    )
    return structlog.get_logger(ROOT_LOGGER)


@pytest.fixture
def chart(logger: BoundLogger) -> Chart:
    """Construct an empty chart for tests."""
    return Chart("test", logger=logger)


@pytest.fixture
def template(logger: BoundLogger) -> PodTemplate:
    """Construct an empty pod template for tests."""
    return PodTemplate(logger=logger)
