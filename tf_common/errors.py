"""Shared error taxonomy for termforms."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar


def _normalize_context_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return normalize_context(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_context_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def normalize_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of an error context mapping."""
    return {key: _normalize_context_value(val) for key, val in context.items()}


class TFError(Exception):
    """Base error type for typed failure handling."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.context = normalize_context(context or {})
        if cause is not None:
            self.__cause__ = cause

    @property
    def error_type(self) -> str:
        return self.__class__.__name__


class FieldValidationError(TFError):
    """A user-supplied validator rejected a field value."""


class SelectionLimitError(TFError):
    """Selecting another option would exceed the field's selection limit."""


class AccessorError(TFError):
    """A field was bound to storage it cannot read or write."""


class ConfigurationError(TFError):
    """Failure due to invalid form, group or field configuration."""


class DeferredEvaluationError(TFError):
    """A deferred title, description or options function failed."""


class FormAbortedError(TFError):
    """The user cancelled the form before submitting it."""


T = TypeVar("T", bound=TFError)


def wrap_error(
    error_cls: type[T],
    message: str,
    *,
    context: Mapping[str, Any] | None = None,
    cause: Exception | None = None,
) -> T:
    """Create a typed TFError with optional context and cause."""
    return error_cls(message, context=context, cause=cause)


def error_to_payload(error: TFError) -> dict[str, Any]:
    """Convert a TFError to a flat payload suitable for logging."""
    return {
        "error_type": error.error_type,
        "error": str(error),
        "error_context": error.context,
    }
