"""Shared helpers for termforms."""

from tf_common.errors import (
    AccessorError,
    ConfigurationError,
    DeferredEvaluationError,
    FieldValidationError,
    FormAbortedError,
    SelectionLimitError,
    TFError,
)
from tf_common.logging import configure_logging

__all__ = [
    "configure_logging",
    "TFError",
    "FieldValidationError",
    "SelectionLimitError",
    "AccessorError",
    "ConfigurationError",
    "DeferredEvaluationError",
    "FormAbortedError",
]
