"""Canonical orientation: rotate dataset axes onto fixed AP/LR directions."""

from canonical_orient.orientation.axes import (
    CanonicalAxisId,
    CANONICAL_DIRECTIONS,
)
from canonical_orient.orientation.errors import (
    OrientationError,
    FormatError,
    DegenerateInputError,
    ValidationFailure,
    NumericFailure,
)
from canonical_orient.orientation.rotation import (
    RotationOperator,
    DegenerateStrategy,
    rotate_vector,
    derive_rotation,
)
from canonical_orient.orientation.transform import (
    CanonicalTransform,
    TransformState,
    build,
)

__all__ = [
    "CanonicalAxisId",
    "CANONICAL_DIRECTIONS",
    "OrientationError",
    "FormatError",
    "DegenerateInputError",
    "ValidationFailure",
    "NumericFailure",
    "RotationOperator",
    "DegenerateStrategy",
    "rotate_vector",
    "derive_rotation",
    "CanonicalTransform",
    "TransformState",
    "build",
]
