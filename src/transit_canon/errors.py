"""
Error codes and types for transit-canon.

Every exception raised by the engine carries a typed code and audit
details so callers can log or persist failures without parsing messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Failure codes shared by exceptions and canonicality reports.
    """
    CYCLIC_REFERENCE = "CYCLIC_REFERENCE"
    NOT_CANONICALIZABLE = "NOT_CANONICALIZABLE"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    INVALID_FRAME = "INVALID_FRAME"


class TransitCanonError(Exception):
    """Base class for all transit-canon failures."""

    code: ErrorCode = ErrorCode.NOT_CANONICALIZABLE

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class CanonicalizationError(TransitCanonError):
    """Raised in strict mode when a value has no well-defined canonical form."""


class CyclicReferenceError(CanonicalizationError):
    """Raised when a container reappears on its own ancestor path."""

    code = ErrorCode.CYCLIC_REFERENCE


class EncodingError(TransitCanonError, TypeError):
    """Raised when the writer meets a value shape it cannot encode."""

    code = ErrorCode.UNSUPPORTED_TYPE


class DecodingError(TransitCanonError, ValueError):
    """Raised when input bytes are not valid Transit-JSON."""

    code = ErrorCode.MALFORMED_INPUT


class InvalidFrameError(TransitCanonError, ValueError):
    """Raised when a compressed frame is corrupt or has no usable size."""

    code = ErrorCode.INVALID_FRAME


@dataclass
class CanonicalityIssue:
    """
    A single reason a value cannot be canonicalized, with its location.
    """
    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class CanonicalityResult:
    """
    Result of a canonicality walk.
    """
    valid: bool
    issues: list[CanonicalityIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "issues": [i.to_dict() for i in self.issues],
        }

    def to_exception(self) -> CanonicalizationError:
        """Build the exception strict mode raises for this result."""
        details = {"issues": [i.to_dict() for i in self.issues]}
        for issue in self.issues:
            if issue.code == ErrorCode.CYCLIC_REFERENCE:
                return CyclicReferenceError(issue.message, details)
        message = self.issues[0].message if self.issues else "Value cannot be canonicalized"
        return CanonicalizationError(message, details)
