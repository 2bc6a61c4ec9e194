"""Structured error handling — error categories, classification, and tool error model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ValidationError


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    PATH_OUTSIDE_ROOTS = "PATH_OUTSIDE_ROOTS"
    PATH_READ_ONLY = "PATH_READ_ONLY"
    PATH_WRITE_ONLY = "PATH_WRITE_ONLY"
    PATH_INVALID = "PATH_INVALID"
    CONFIG_INVALID = "CONFIG_INVALID"
    UNKNOWN = "UNKNOWN"


class PathAccessDenied(PermissionError):
    """Raised by enforcement helpers when a path's access class forbids an operation."""

    def __init__(self, path: str, operation: str, access: str, message: str | None = None):
        self.path = path
        self.operation = operation
        self.access = access
        super().__init__(
            message or f"{operation.capitalize()} access denied for '{path}' (access: {access})"
        )


class ToolError(BaseModel):
    """Structured error returned to the tool-execution layer."""

    error: str
    category: str
    hint: str
    retryable: bool = False


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, PathAccessDenied):
        if not error.path:
            return (
                ErrorCategory.PATH_INVALID,
                "Empty or malformed path — pass a vault-relative or absolute path",
            )
        if error.access == "context":
            return (
                ErrorCategory.PATH_READ_ONLY,
                "Path is inside a read-only context root — write inside the vault or an export root",
            )
        if error.access == "export":
            return (
                ErrorCategory.PATH_WRITE_ONLY,
                "Path is inside a write-only export root — it cannot be read back",
            )
        return (
            ErrorCategory.PATH_OUTSIDE_ROOTS,
            "Path is outside the vault and every configured context/export root",
        )
    if isinstance(error, ValidationError):
        return (
            ErrorCategory.CONFIG_INVALID,
            "Root configuration is invalid — check VAULT_ROOT, VAULT_CONTEXT_ROOTS, VAULT_EXPORT_ROOTS",
        )
    if isinstance(error, PermissionError):
        return (
            ErrorCategory.PATH_OUTSIDE_ROOTS,
            "Operating system denied access to the path",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
    ).model_dump(mode="json")
