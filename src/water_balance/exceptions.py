from __future__ import annotations

from typing import Optional, Sequence, Tuple


class WaterBalanceError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(WaterBalanceError):
    pass


class RemoteCallError(WaterBalanceError):
    """
    The hosted backend rejected a call or could not be reached.

    ``status_code`` is ``None`` for transport failures (DNS, refused
    connection, timeout) where no HTTP response exists.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(RemoteCallError):
    pass


class TreeStructureError(WaterBalanceError):
    """Input hierarchy is cyclic or nested deeper than allowed."""

    def __init__(self, message: str, path: Sequence[str] = ()):
        super().__init__(message)
        self.path: Tuple[str, ...] = tuple(path)
