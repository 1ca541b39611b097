"""
Round-trip validation of canonical rotations.

Each rotation is applied to its own normalized orientation vector; the
result, normalized and near-integer rounded, must equal the canonical
target exactly. The transform is activated only when every axis passes.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

import numpy as np
from numpy.typing import NDArray

from canonical_orient.logging_config import timed
from canonical_orient.orientation.axes import CANONICAL_DIRECTIONS, CanonicalAxisId
from canonical_orient.orientation.rotation import RotationOperator
from canonical_orient.orientation.vector import ZERO_THRESHOLD, normalize, round_near_integers

logger = logging.getLogger(__name__)


def _fmt(vec: NDArray[np.float64]) -> str:
    return "<" + ", ".join(f"{v:.6g}" for v in vec) + ">"


@dataclass
class AxisCheck:
    """Outcome of the round-trip check for one axis."""
    axis_id: CanonicalAxisId
    rotated: NDArray[np.float64]
    expected: NDArray[np.float64]
    passed: bool

    def __str__(self) -> str:
        status = "OK" if self.passed else "FAILED"
        return (
            f"[{status}] {self.axis_id.value}: rotated to {_fmt(self.rotated)}, "
            f"expected {_fmt(self.expected)}"
        )


@dataclass
class ValidationReport:
    """Round-trip results for all canonical axes."""
    checks: List[AxisCheck] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when there is at least one check and all of them passed."""
        return bool(self.checks) and all(c.passed for c in self.checks)

    @property
    def failures(self) -> List[AxisCheck]:
        return [c for c in self.checks if not c.passed]

    def by_axis(self) -> Dict[CanonicalAxisId, AxisCheck]:
        return {c.axis_id: c for c in self.checks}

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Canonical Rotation Check",
            "=" * 40,
        ]
        lines.extend(f"  - {c}" for c in self.checks)
        lines.append("")
        lines.append(f"Overall: {'VALID' if self.is_valid else 'INVALID'}")
        return "\n".join(lines)


def check_axis(
    axis_id: CanonicalAxisId,
    orientation: NDArray[np.float64],
    operator: RotationOperator,
    tolerance: float = ZERO_THRESHOLD,
) -> AxisCheck:
    """Apply ``operator`` to the normalized ``orientation`` and compare
    against the canonical target of ``axis_id``."""
    expected = CANONICAL_DIRECTIONS[axis_id]
    rotated = operator.apply(normalize(orientation))
    rotated = round_near_integers(normalize(rotated), tolerance)
    passed = bool(np.array_equal(rotated, expected))

    if not passed:
        logger.warning(
            "%s orientation incorrectly rotated to %s", axis_id.value, _fmt(rotated),
            extra={"expected": expected},
        )
    return AxisCheck(axis_id=axis_id, rotated=rotated, expected=expected.copy(), passed=passed)


@timed(operation="validate canonical rotations")
def validate_rotations(
    orientations: Mapping[CanonicalAxisId, NDArray[np.float64]],
    operators: Mapping[CanonicalAxisId, RotationOperator],
    tolerance: float = ZERO_THRESHOLD,
) -> ValidationReport:
    """Check every axis in ``orientations`` against its operator.

    Args:
        orientations: Orientation vector per axis
        operators: Rotation per axis
        tolerance: Near-integer rounding tolerance

    Returns:
        ValidationReport with one AxisCheck per axis
    """
    report = ValidationReport()
    for axis_id in CanonicalAxisId:
        if axis_id not in orientations or axis_id not in operators:
            continue
        report.checks.append(
            check_axis(axis_id, orientations[axis_id], operators[axis_id], tolerance)
        )

    logger.debug("Rotation check complete: %s", "VALID" if report.is_valid else "INVALID")
    return report
