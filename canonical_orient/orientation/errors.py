"""Errors raised while building or applying the canonical transform."""


class OrientationError(Exception):
    """Base class for canonical orientation failures."""


class FormatError(OrientationError):
    """Orientation string is not exactly three numeric tokens."""


class DegenerateInputError(OrientationError):
    """Orientation vector has zero length and cannot be normalized."""


class ValidationFailure(OrientationError):
    """Derived rotation does not map its input onto the canonical target."""

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report


class NumericFailure(OrientationError):
    """Rotation produced a not-a-number component."""
