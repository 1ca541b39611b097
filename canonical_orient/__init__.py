"""
canonical_orient: rotation of dataset vectors into canonical orientation.

The command-line entry point is main.py.
"""

from canonical_orient.logging_config import (
    setup_logging,
    get_logger,
    configure_default_logging,
    log_timing,
    timed,
    LogContext,
)
from canonical_orient.orientation import (
    CanonicalAxisId,
    CanonicalTransform,
    TransformState,
    build,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_default_logging",
    "log_timing",
    "timed",
    "LogContext",
    "CanonicalAxisId",
    "CanonicalTransform",
    "TransformState",
    "build",
]
