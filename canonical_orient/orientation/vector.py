"""
Vector helpers for orientation work.

Provides:
- Parsing of "x y z" orientation strings
- Normalization (strict and lenient)
- Near-integer rounding used to suppress numeric noise
- Angle between two vectors
"""

import math
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from canonical_orient.orientation.errors import DegenerateInputError, FormatError

# Default distance to the nearest integer below which a coordinate is snapped
ZERO_THRESHOLD = 0.1

VECTOR_SIZE = 3


def parse_vector(text: Optional[str], name: str = "orientation") -> NDArray[np.float64]:
    """Parse a whitespace separated triple such as "-1 0 0".

    Args:
        text: Raw orientation string
        name: Label used in error messages

    Returns:
        Length-3 float64 array

    Raises:
        FormatError: if the string is missing, does not hold exactly three
            tokens, or a token is not a finite number
    """
    if text is None:
        raise FormatError(f"{name} vector is missing")

    tokens = str(text).split()
    if len(tokens) != VECTOR_SIZE:
        raise FormatError(
            f"{name} vector has {len(tokens)} components, expected {VECTOR_SIZE}: {text!r}"
        )

    values = []
    for token in tokens:
        try:
            value = float(token)
        except ValueError as exc:
            raise FormatError(f"{name} vector has non-numeric component {token!r}") from exc
        if not math.isfinite(value):
            raise FormatError(f"{name} vector has non-finite component {token!r}")
        values.append(value)

    return np.array(values, dtype=np.float64)


def as_vector(values: Sequence[float]) -> NDArray[np.float64]:
    """Copy a 3-component sequence into a fresh float64 array."""
    return np.array([values[0], values[1], values[2]], dtype=np.float64)


def normalize(vec: NDArray[np.float64]) -> NDArray[np.float64]:
    """Scale to unit length. The zero vector is returned unchanged."""
    vec = np.asarray(vec, dtype=np.float64)
    length = float(np.linalg.norm(vec))
    if length == 0.0:
        return np.zeros(VECTOR_SIZE)
    return vec / length


def unit_vector(vec: NDArray[np.float64], name: str = "orientation") -> NDArray[np.float64]:
    """Scale to unit length, refusing zero-length input.

    Raises:
        DegenerateInputError: if ``vec`` has zero length
    """
    length = float(np.linalg.norm(vec))
    if length == 0.0 or not math.isfinite(length):
        raise DegenerateInputError(f"{name} vector has zero length and cannot be normalized")
    return np.asarray(vec, dtype=np.float64) / length


def round_near_integers(
    vec: NDArray[np.float64],
    tolerance: float = ZERO_THRESHOLD,
) -> NDArray[np.float64]:
    """Snap each coordinate to the nearest integer when within ``tolerance``.

    Coordinates further away are left as computed.
    """
    vec = np.asarray(vec, dtype=np.float64)
    # math.floor(x + 0.5) rounds half up, matching the historical behaviour
    nearest = np.floor(vec + 0.5)
    snapped = np.where(np.abs(vec - nearest) <= tolerance, nearest, vec)
    # -0.0 and 0.0 compare equal, but keep printed vectors tidy
    return snapped + 0.0


def angle_between(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> float:
    """Angle in radians between two vectors.

    Computed as acos(v1 . v2 / (|v1| |v2|)). An undefined result (zero-length
    input or a cosine slightly outside [-1, 1]) is reported as 0.
    """
    denom = float(np.linalg.norm(v1)) * float(np.linalg.norm(v2))
    with np.errstate(divide='ignore', invalid='ignore'):
        cosine = float(np.dot(v1, v2)) / denom if denom != 0.0 else math.nan
        angle = float(np.arccos(cosine)) if math.isfinite(cosine) else math.nan
    if math.isnan(angle):
        return 0.0
    return angle


def is_zero(vec: NDArray[np.float64]) -> bool:
    """True when every coordinate is exactly zero."""
    return bool(np.all(np.asarray(vec) == 0.0))
