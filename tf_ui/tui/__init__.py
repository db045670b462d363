"""
Terminal form engine: fields, groups and forms on top of prompt_toolkit.
"""

from tf_ui.tui.core.config import FormConfig
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
    "AttributeAccessor",
    "CursorMove",
    "Deferred",
    "Form",
    "FormConfig",
    "FormState",
    "Group",
    "HeadlessDriver",
    "ItemAccessor",
    "MultiSelect",
    "Option",
    "Ref",
    "Select",
    "Text",
]
