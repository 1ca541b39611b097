"""
Axis-angle rotations that carry dataset axes onto canonical directions.

Provides:
- rotation_matrix / rotate_vector: pure axis-angle rotation primitive
- RotationOperator: immutable axis + angle (degrees) pair
- derive_rotation: builds the operator mapping an orientation vector
  onto its canonical target, including the degenerate-axis fallback

Rotations are about an axis through the origin; they never translate.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from canonical_orient.orientation.axes import CANONICAL_DIRECTIONS, CanonicalAxisId
from canonical_orient.orientation.vector import (
    ZERO_THRESHOLD,
    angle_between,
    is_zero,
    normalize,
    round_near_integers,
    unit_vector,
)

logger = logging.getLogger(__name__)

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])


class DegenerateStrategy(Enum):
    """How to pick a rotation axis when cross(input, target) vanishes."""
    AXIS_ALIGNED = "axis_aligned"    # only inputs lying exactly on a coordinate axis
    PERPENDICULAR = "perpendicular"  # unrounded axis; half turn when exactly anti-parallel


def rotation_matrix(axis: NDArray[np.float64], angle_deg: float) -> NDArray[np.float64]:
    """3x3 matrix for a rotation of ``angle_deg`` about ``axis`` (Rodrigues).

    The axis is normalized here. A zero axis yields the identity.
    """
    axis = np.asarray(axis, dtype=np.float64)
    length = float(np.linalg.norm(axis))
    if length == 0.0:
        return np.eye(3)

    x, y, z = axis / length
    angle_rad = math.radians(angle_deg)
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    t = 1 - c

    return np.array([
        [t*x*x + c,   t*x*y - s*z, t*x*z + s*y],
        [t*x*y + s*z, t*y*y + c,   t*y*z - s*x],
        [t*x*z - s*y, t*y*z + s*x, t*z*z + c],
    ])


def rotate_vector(
    axis: NDArray[np.float64],
    angle_deg: float,
    vector: Union[Sequence[float], NDArray[np.float64]],
) -> NDArray[np.float64]:
    """Rotate a direction vector. Returns a new array; the input is untouched."""
    vec = np.asarray(vector, dtype=np.float64)
    return rotation_matrix(axis, angle_deg) @ vec


@dataclass(frozen=True, eq=False)
class RotationOperator:
    """Rotation about a unit axis through the origin.

    Attributes:
        axis: rotation axis; unit length except for an unresolved
            degenerate case, where it is the zero vector
        angle_deg: rotation angle in degrees
    """
    axis: NDArray[np.float64]
    angle_deg: float

    def __post_init__(self):
        axis = np.array(self.axis, dtype=np.float64)
        if axis.shape != (3,):
            raise ValueError(f"Rotation axis must have 3 components, got {axis.shape}")
        axis.setflags(write=False)
        object.__setattr__(self, 'axis', axis)
        object.__setattr__(self, 'angle_deg', float(self.angle_deg))

    @property
    def angle_rad(self) -> float:
        """Rotation angle in radians."""
        return math.radians(self.angle_deg)

    @property
    def matrix(self) -> NDArray[np.float64]:
        """Equivalent 3x3 rotation matrix."""
        return rotation_matrix(self.axis, self.angle_deg)

    @property
    def has_axis(self) -> bool:
        return not is_zero(self.axis)

    def apply(self, vector: Union[Sequence[float], NDArray[np.float64]]) -> NDArray[np.float64]:
        """Rotate ``vector`` (direction only) and return the result."""
        return rotate_vector(self.axis, self.angle_deg, vector)

    def is_identity(self, tol: float = 1e-9) -> bool:
        """Check if the operator leaves every vector unchanged."""
        return np.allclose(self.matrix, np.eye(3), atol=tol)

    def __str__(self) -> str:
        x, y, z = self.axis
        return f"Rotate [angle={self.angle_deg:.6g}, axis=({x:.6g}, {y:.6g}, {z:.6g})]"


def derive_rotation(
    orientation: NDArray[np.float64],
    axis_id: CanonicalAxisId,
    tolerance: float = ZERO_THRESHOLD,
    strategy: DegenerateStrategy = DegenerateStrategy.AXIS_ALIGNED,
) -> RotationOperator:
    """Build the rotation that carries ``orientation`` onto the canonical
    direction of ``axis_id``.

    Algorithm:
      1. Normalize the orientation vector.
      2. Axis candidate = cross(orientation, target), near-integer rounded,
         then normalized (a zero candidate stays zero).
      3. Angle = acos of the normalized dot product; undefined -> 0.
      4. Non-zero angle with a zero axis is the degenerate case, resolved
         according to ``strategy``. ``PERPENDICULAR`` falls back to the
         unrounded cross product, or for an exactly anti-parallel input to a
         half turn about an axis perpendicular to it.

    Args:
        orientation: Orientation vector as given by the dataset
        axis_id: Which canonical axis the vector describes
        tolerance: Near-integer rounding tolerance for the axis candidate
        strategy: Degenerate-axis resolution strategy

    Returns:
        RotationOperator

    Raises:
        DegenerateInputError: if ``orientation`` has zero length
    """
    target = CANONICAL_DIRECTIONS[axis_id]
    source = unit_vector(orientation, axis_id.value)

    cross = np.cross(source, target)
    axis = normalize(round_near_integers(cross, tolerance))
    angle_rad = angle_between(source, target)

    if angle_rad != 0.0 and is_zero(axis):
        axis, angle_rad = _resolve_degenerate_axis(source, cross, angle_rad, axis_id, strategy)

    operator = RotationOperator(axis=axis, angle_deg=math.degrees(angle_rad))
    logger.debug("%s rotation: %s", axis_id.value, operator)
    return operator


def _resolve_degenerate_axis(
    source: NDArray[np.float64],
    cross: NDArray[np.float64],
    angle_rad: float,
    axis_id: CanonicalAxisId,
    strategy: DegenerateStrategy,
) -> Tuple[NDArray[np.float64], float]:
    """Pick a rotation axis when the rounded cross product vanished.

    Args:
        source: Normalized orientation vector
        cross: Unrounded cross(source, target)
        angle_rad: Angle between source and target
        axis_id: Which canonical axis is being derived
        strategy: Degenerate-axis resolution strategy

    Returns:
        (axis, angle_rad); the axis is zero when left unresolved
    """
    if strategy is DegenerateStrategy.PERPENDICULAR:
        if not is_zero(cross):
            # Rounding hid a short but well-defined axis
            logger.debug("Degenerate %s rotation: using unrounded axis", axis_id.value)
            return normalize(cross), angle_rad

        # Exactly anti-parallel: half turn about any perpendicular axis
        perp = X_AXIS if abs(source[0]) < 0.9 else Y_AXIS
        axis = normalize(np.cross(source, perp))
        logger.info(
            "Degenerate %s rotation: half turn about an axis perpendicular to the input",
            axis_id.value, extra={"axis": axis},
        )
        return axis, math.pi

    x, y, z = source
    if axis_id is CanonicalAxisId.AP and x != 0 and y == 0 and z == 0:
        logger.info("Degenerate AP rotation: input on x axis, rotating about z axis")
        return Z_AXIS.copy(), angle_rad
    if axis_id is CanonicalAxisId.LR and x == 0 and y == 0 and z != 0:
        logger.info("Degenerate LR rotation: input on z axis, rotating about x axis")
        return X_AXIS.copy(), angle_rad

    # Near-canonical inputs land here too and still pass the round-trip
    # check, so genuine failures are reported by the validator.
    logger.debug(
        "Degenerate %s rotation left unresolved: input is not axis aligned", axis_id.value,
        extra={"orientation": source},
    )
    return np.zeros(3), angle_rad
