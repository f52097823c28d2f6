"""
Exception classes for schemasync.
"""

from typing import Any, Dict, Optional


class SchemaSyncError(Exception):
    """Base exception for all schemasync errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(SchemaSyncError):
    """Raised when there's an error in configuration."""

    pass


class ValidationError(SchemaSyncError):
    """Raised when there's a validation error."""

    pass


class DatamodelLoadError(ValidationError):
    """Raised when a model or column document cannot be loaded."""

    def __init__(
        self,
        path: str,
        reason: str,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            f"Could not load document '{path}': {reason}",
            {"path": path},
            cause,
        )
        self.path = path
        self.reason = reason


class SchemaError(SchemaSyncError):
    """Raised when there's an error with a schema model tree."""

    pass


class UnknownEntityError(SchemaError):
    """Raised when a strict lookup by name finds nothing."""

    def __init__(self, kind: str, name: str, container: Optional[str] = None) -> None:
        message = f"Unknown {kind} '{name}'"
        if container:
            message += f" in '{container}'"
        super().__init__(message, {"kind": kind, "name": name})
        self.kind = kind
        self.name = name
        self.container = container
