"""Central exception hierarchy for the workshop tooling.

Every failure the tooling reports to a presenter derives from ``AppError``:
a malformed deck, an unknown dataset or cell label, a cell that fails to
evaluate, an unsupported output format, or bad configuration. Each carries
a stable machine-readable code and log-safe context.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'DECK_PARSE_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'})
    >>> str(e)
    'CODE: message'
    """

    __slots__ = ("code", "message", "context")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(AppError):
    """Raised for invalid or missing configuration."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("CONFIGURATION_ERROR", message, context=context)


class DeckParseError(AppError):
    """Raised when a deck document cannot be split into slides and cells."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("DECK_PARSE_ERROR", message, context=context)


class DatasetNotFoundError(AppError):
    """Raised when a cell or command names a dataset outside the catalog."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("DATASET_NOT_FOUND", message, context=context)


class CellNotFoundError(AppError):
    """Raised when no code cell carries the requested label."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("CELL_NOT_FOUND", message, context=context)


class CellEvaluationError(AppError):
    """Raised when a code cell fails and the caller asked to stop on errors."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("CELL_EVALUATION_ERROR", message, context=context)


class UnsupportedFormatError(AppError):
    """Raised for an output or image format the tooling cannot produce."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("UNSUPPORTED_FORMAT", message, context=context)
