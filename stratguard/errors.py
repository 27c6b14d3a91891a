"""Exit-code contract and exception types for Stratguard."""
from __future__ import annotations

import enum


class ExitCode(enum.IntEnum):
    """Standardised CLI exit codes.

    0 — success
    1 — user error (bad arguments, unreadable plan or catalog file)
    3 — internal error
    """

    SUCCESS = 0
    USER_ERROR = 1
    INTERNAL_ERROR = 3


class StratguardError(Exception):
    """Base exception for Stratguard errors."""

    def __init__(self, message: str, exit_code: ExitCode = ExitCode.INTERNAL_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class CatalogUnavailableError(StratguardError):
    """Raised by catalog adapters when the shade catalog cannot be queried.

    The repair pipeline never lets this escape: an unreachable catalog is
    treated exactly like an empty one and resolved by the hard fallback.
    """


class ProtocolInputError(StratguardError):
    """Raised when a protocol or catalog document cannot be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, exit_code=ExitCode.USER_ERROR)
