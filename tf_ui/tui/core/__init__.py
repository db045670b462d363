"""Shared vocabulary of the form engine: messages, key map, theme, config."""

from tf_ui.tui.core.config import FormConfig
from tf_ui.tui.core.keymap import Binding, KeyMap, MultiSelectKeyMap, SelectKeyMap, TextKeyMap
from tf_ui.tui.core.messages import Cmd, KeyPress, Msg, batch, tick
from tf_ui.tui.core.theme import FieldStyles, Theme

__all__ = [
    "Binding",
    "Cmd",
    "FieldStyles",
    "FormConfig",
    "KeyMap",
    "KeyPress",
    "Msg",
    "MultiSelectKeyMap",
    "SelectKeyMap",
    "TextKeyMap",
    "Theme",
    "batch",
    "tick",
]
