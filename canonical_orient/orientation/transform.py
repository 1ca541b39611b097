"""
Canonical transform: rotates dataset vectors into canonical orientation.

The unit is built once from the two orientation strings of a dataset (the
AP and LR vectors). Two rotations are derived that carry those vectors onto
their canonical directions, checked by a round trip, and only then is the
unit activated. Any failure leaves the unit inactive and callers are expected
to fall back to the legacy orientation scheme.

Once built the unit never changes, so it can be shared between threads.
Applying it copies the caller's vector, rotates the copy, and writes the
three components back only when every one of them is a number.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, Mapping, MutableSequence, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from canonical_orient.logging_config import log_timing
from canonical_orient.orientation.axes import CanonicalAxisId
from canonical_orient.orientation.errors import (
    FormatError,
    NumericFailure,
    OrientationError,
    ValidationFailure,
)
from canonical_orient.orientation.rotation import RotationOperator, derive_rotation
from canonical_orient.orientation.validator import ValidationReport, validate_rotations
from canonical_orient.orientation.vector import as_vector, parse_vector, unit_vector
from canonical_orient.project_config import TransformConfig

logger = logging.getLogger(__name__)

AxisLike = Union[CanonicalAxisId, str]

# AP first, then LR; the rotations do not commute
PRODUCT_ORDER = (CanonicalAxisId.AP, CanonicalAxisId.LR)


class TransformState(Enum):
    """Lifecycle of a CanonicalTransform. Moves forward only."""
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    FAILED = "failed"


class CanonicalTransform:
    """Pair of validated rotations into canonical orientation.

    Args:
        config_source: Mapping holding the AP and LR orientation strings
            ("x y z") under the keys named in ``config``
        config: Key names, rounding tolerance and degenerate strategy

    Construction never raises for bad orientation data; check
    :meth:`is_active` and, when inactive, :attr:`failure`. An invalid
    ``config`` raises ValueError.
    """

    def __init__(
        self,
        config_source: Optional[Mapping[str, str]],
        config: Optional[TransformConfig] = None,
    ):
        self._config = config or TransformConfig()
        self._config.validate()
        self._state = TransformState.UNINITIALIZED
        self._failure: Optional[OrientationError] = None
        self._report: Optional[ValidationReport] = None
        self._operators: Dict[CanonicalAxisId, RotationOperator] = {}
        self._dv_orientation: Optional[NDArray[np.float64]] = None

        failure: Optional[OrientationError] = None
        with log_timing(logger, "canonical transform construction"):
            try:
                self._construct(config_source)
            except OrientationError as exc:
                failure = exc

        if failure is not None:
            self._fail(failure)
        else:
            self._activate()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _construct(self, config_source: Optional[Mapping[str, str]]) -> None:
        if config_source is None:
            raise FormatError("No orientation configuration supplied")

        cfg = self._config
        keys = {CanonicalAxisId.AP: cfg.ap_key, CanonicalAxisId.LR: cfg.lr_key}

        orientations = {}
        for axis_id, key in keys.items():
            raw = parse_vector(config_source.get(key), axis_id.value)
            orientations[axis_id] = unit_vector(raw, axis_id.value)

        ap, lr = orientations[CanonicalAxisId.AP], orientations[CanonicalAxisId.LR]
        self._dv_orientation = np.cross(ap, lr)

        operators = {
            axis_id: derive_rotation(vec, axis_id, cfg.rounding_tolerance, cfg.strategy)
            for axis_id, vec in orientations.items()
        }

        report = validate_rotations(orientations, operators, cfg.rounding_tolerance)
        self._report = report
        if not report.is_valid:
            failed = ", ".join(c.axis_id.value for c in report.failures)
            raise ValidationFailure(f"Rotation check failed for {failed}", report)

        self._operators = operators

    def _activate(self) -> None:
        self._advance(TransformState.ACTIVE)
        logger.info("Confirmed transforms rotate initial AP, LR to canonical orientation")
        for axis_id, operator in self._operators.items():
            logger.debug("  %s: %s", axis_id.value, operator)

    def _fail(self, exc: OrientationError) -> None:
        self._failure = exc
        self._operators = {}
        self._advance(TransformState.FAILED)
        logger.warning(
            "Canonical transform inactive (%s: %s); fall back to the legacy orientation scheme",
            type(exc).__name__, exc,
        )

    def _advance(self, state: TransformState) -> None:
        if self._state is not TransformState.UNINITIALIZED:
            raise RuntimeError(f"Transform state already set to {self._state.value}")
        self._state = state

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> TransformState:
        return self._state

    @property
    def config(self) -> TransformConfig:
        return self._config

    @property
    def failure(self) -> Optional[OrientationError]:
        """The error that kept the transform inactive, if any."""
        return self._failure

    @property
    def report(self) -> Optional[ValidationReport]:
        """Round-trip check results, once construction got that far."""
        return self._report

    @property
    def dv_orientation(self) -> Optional[NDArray[np.float64]]:
        """cross(AP, LR) of the normalized inputs. Diagnostic only."""
        if self._dv_orientation is None:
            return None
        return self._dv_orientation.copy()

    def is_active(self) -> bool:
        return self._state is TransformState.ACTIVE

    def rotation(self, axis: AxisLike) -> Optional[RotationOperator]:
        """Validated rotation for ``axis``; None while inactive."""
        return self._operators.get(CanonicalAxisId.coerce(axis))

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def _rotate(
        self,
        vector: Iterable[float],
        axes: Tuple[CanonicalAxisId, ...],
    ) -> NDArray[np.float64]:
        local = as_vector(vector)
        for axis_id in axes:
            local = self._operators[axis_id].apply(local)
        if np.any(np.isnan(local)):
            raise NumericFailure(
                f"Rotation through {'+'.join(a.value for a in axes)} produced NaN"
            )
        return local

    def _apply(self, vector: MutableSequence[float], axes: Tuple[CanonicalAxisId, ...]) -> bool:
        try:
            result = self._rotate(vector, axes)
        except NumericFailure as exc:
            logger.debug("Transform not applied: %s", exc)
            return False

        vector[0] = float(result[0])
        vector[1] = float(result[1])
        vector[2] = float(result[2])
        return True

    def apply_product_transform(self, vector: MutableSequence[float]) -> bool:
        """Rotate ``vector`` in place by the AP rotation, then the LR rotation.

        Args:
            vector: Caller-owned 3-component mutable sequence (list or array)

        Returns:
            True on success. False when the transform is inactive or the
            result contains NaN; ``vector`` is then left untouched.
        """
        if not self.is_active():
            return False
        return self._apply(vector, PRODUCT_ORDER)

    def apply_single_transform(self, vector: MutableSequence[float], axis: AxisLike) -> bool:
        """Rotate ``vector`` in place by the rotation of one axis.

        ``axis`` is a CanonicalAxisId or its tag ("AP", "LR"); any other value
        fails. Same failure semantics as :meth:`apply_product_transform`.
        """
        if not self.is_active():
            return False
        try:
            axis_id = CanonicalAxisId.coerce(axis)
        except ValueError:
            logger.debug("Transform not applied: unknown axis %r", axis)
            return False
        return self._apply(vector, (axis_id,))

    def transformed(
        self,
        vector: Iterable[float],
        axis: Optional[AxisLike] = None,
    ) -> Optional[NDArray[np.float64]]:
        """Rotated copy of ``vector`` (product transform when ``axis`` is None).

        Returns None where the in-place variants would return False.
        """
        if not self.is_active():
            return None
        if axis is None:
            axes = PRODUCT_ORDER
        else:
            try:
                axes = (CanonicalAxisId.coerce(axis),)
            except ValueError:
                return None
        try:
            return self._rotate(vector, axes)
        except NumericFailure:
            return None

    def __repr__(self) -> str:
        return f"CanonicalTransform(state={self._state.value})"


def build(
    config_source: Optional[Mapping[str, str]],
    config: Optional[TransformConfig] = None,
) -> Tuple[CanonicalTransform, bool]:
    """Build a canonical transform and report whether it is active."""
    unit = CanonicalTransform(config_source, config)
    return unit, unit.is_active()
