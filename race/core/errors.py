"""Custom exceptions used across R.A.C.E."""


class RaceError(Exception):
    """Base error for the application."""


class ConfigError(RaceError):
    """Configuration related error."""


class SessionError(RaceError):
    """Raised when a window cannot be created or addressed."""


class DispatchError(RaceError):
    """Raised when a UI request cannot be routed."""


class UnknownRequestError(DispatchError):
    """Raised for request names no handler is registered for."""
