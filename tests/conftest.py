"""
Pytest configuration and fixtures for canonical_orient.

Provides:
- Orientation config sources (canonical, rotated, degenerate, oblique)
- Package logger cleanup
"""

import logging
from pathlib import Path
from typing import Dict

import pytest

from canonical_orient.logging_config import PACKAGE_LOGGER

PROJECT_ROOT = Path(__file__).parent.parent


def _source(ap: str, lr: str) -> Dict[str, str]:
    return {"AP_orientation": ap, "LR_orientation": lr}


# ============================================================================
# Config Source Fixtures
# ============================================================================

@pytest.fixture
def canonical_source() -> Dict[str, str]:
    """Dataset already in canonical orientation."""
    return _source("-1 0 0", "0 0 1")


@pytest.fixture
def quarter_turn_source() -> Dict[str, str]:
    """AP along +y, LR along +x: both need a 90 degree rotation."""
    return _source("0 1 0", "1 0 0")


@pytest.fixture
def antiparallel_source() -> Dict[str, str]:
    """Both axes point opposite to canonical (axis-aligned degenerate case)."""
    return _source("1 0 0", "0 0 -1")


@pytest.fixture
def oblique_source() -> Dict[str, str]:
    """Neither axis aligned with a coordinate axis."""
    return _source("1 1 1", "2 -1 3")


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture
def reset_package_logger():
    """Restore the package logger after a test reconfigures it."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield package_logger
    for handler in package_logger.handlers:
        if handler not in handlers:
            handler.close()
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate
