"""
Canonical anatomical axes.

In canonical orientation the anterior end points down the negative x axis
and the left side points out toward the viewer (+z). The dorsal-ventral
direction follows from the other two and is kept for diagnostics only.
"""

from enum import Enum

import numpy as np
from numpy.typing import NDArray


def _frozen(values) -> NDArray[np.float64]:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


class CanonicalAxisId(Enum):
    """Named reference axes of a dataset."""
    AP = "AP"   # anterior-posterior
    LR = "LR"   # left-right

    @property
    def target(self) -> NDArray[np.float64]:
        """Canonical direction for this axis (a fresh, writable copy)."""
        return CANONICAL_DIRECTIONS[self].copy()

    @classmethod
    def coerce(cls, value) -> 'CanonicalAxisId':
        """Accept an enum member or its tag string ("AP", "LR").

        Raises:
            ValueError: for anything else
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip().upper())
        raise ValueError(f"Not a canonical axis: {value!r}")


CANONICAL_DIRECTIONS = {
    CanonicalAxisId.AP: _frozen([-1.0, 0.0, 0.0]),
    CanonicalAxisId.LR: _frozen([0.0, 0.0, 1.0]),
}

# Not used by any transform; recorded alongside the diagnostic DV vector
DV_CANONICAL_DIRECTION = _frozen([0.0, -1.0, 0.0])
