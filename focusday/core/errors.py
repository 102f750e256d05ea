"""Exception types raised by FocusDay."""


class FocusDayError(Exception):
    """Base class for FocusDay errors."""


class ValidationError(FocusDayError, ValueError):
    """Input rejected at a boundary before any state was changed."""


class SnapshotError(FocusDayError):
    """A persisted snapshot is missing fields or holds values of the wrong type."""
