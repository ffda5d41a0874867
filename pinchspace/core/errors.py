from __future__ import annotations


class PinchSpaceError(Exception):
    """Base class for PinchSpace errors."""


class ConfigError(PinchSpaceError, ValueError):
    """Invalid static configuration. Raised once, at startup."""


class DetectorInitError(PinchSpaceError, RuntimeError):
    """
    Landmark detector could not be created.
    Fatal for the session: the model load is a one-time prerequisite.
    """


class CameraUnavailableError(PinchSpaceError, RuntimeError):
    """
    Camera could not be opened (missing device or permission denied).
    Recoverable: the user can fix it and retry.
    """
