# agribiz/core/errors.py
# -----------------------------------------------------------------------------
# Error taxonomy shared by the calculators and the persistence adapter
# - ValidationError: malformed/out-of-range input, raised before computing
# - DomainError: well-formed input hitting an undefined operation
# - PersistenceError: the analysis store could not save/read a record
# Messages are plain text; the HTTP layer decides how to present them.
# -----------------------------------------------------------------------------
from __future__ import annotations


class AnalysisError(Exception):
    """Base class for every error raised by the agribiz core."""


class ValidationError(AnalysisError):
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"error": "validation", "field": self.field, "message": self.message}


class InsufficientDataError(ValidationError):
    """Not enough historical points for the requested window."""


class DomainError(AnalysisError):
    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def to_dict(self) -> dict:
        return {
            "error": "domain",
            "operation": self.operation,
            "message": self.message,
        }


class PersistenceError(AnalysisError):
    pass
