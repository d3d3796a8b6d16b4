"""Exceptions raised by the selector healing package."""


class HealingError(RuntimeError):
    """Base class for selector healing failures."""


class SnapshotFormatError(HealingError):
    """Raised when a snapshot payload does not match the expected shape."""
