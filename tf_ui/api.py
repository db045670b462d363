"""Stable form API surface."""

from __future__ import annotations

from tf_common.errors import (
    AccessorError,
    ConfigurationError,
    DeferredEvaluationError,
    FieldValidationError,
    FormAbortedError,
    SelectionLimitError,
)
from tf_ui.tui.adapters.prompt_toolkit_runtime import PromptToolkitRuntime
from tf_ui.tui.core.config import FormConfig
from tf_ui.tui.core.keymap import KeyMap
from tf_ui.tui.core.theme import Theme
from tf_ui.tui.system.components import (
    CursorMove,
    Form,
    FormState,
    Group,
    MultiSelect,
    Select,
    Text,
)
from tf_ui.tui.system.deferred import Deferred
from tf_ui.tui.system.headless import HeadlessDriver
from tf_ui.tui.system.models import AttributeAccessor, ItemAccessor, Option, Ref

__all__ = [
    "Form",
    "FormState",
    "Group",
    "MultiSelect",
    "Select",
    "Text",
    "Option",
    "Ref",
    "AttributeAccessor",
    "ItemAccessor",
    "Deferred",
    "CursorMove",
    "FormConfig",
    "KeyMap",
    "Theme",
    "HeadlessDriver",
    "PromptToolkitRuntime",
    "AccessorError",
    "ConfigurationError",
    "DeferredEvaluationError",
    "FieldValidationError",
    "FormAbortedError",
    "SelectionLimitError",
]
