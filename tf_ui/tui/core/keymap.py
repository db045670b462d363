"""Key bindings for every field type and the form itself.

Key names follow prompt_toolkit (``c-a``, ``s-tab``, ``escape``...), with
``space`` for the space bar and ``a-enter`` for alt+enter. Each field gets
a deep copy of its section so toggling ``enabled`` on one field never
leaks into another.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tf_ui.tui.core.messages import KeyPress


class Binding(BaseModel):
    keys: tuple[str, ...]
    help_key: str = ""
    help_desc: str = ""
    enabled: bool = True

    def matches(self, press: KeyPress) -> bool:
        return self.enabled and press.key in self.keys

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled


def _binding(*keys: str, help_key: str, desc: str, enabled: bool = True) -> Binding:
    return Binding(keys=keys, help_key=help_key, help_desc=desc, enabled=enabled)


class MultiSelectKeyMap(BaseModel):
    next: Binding = Field(
        default_factory=lambda: _binding("enter", "tab", help_key="enter", desc="confirm")
    )
    prev: Binding = Field(
        default_factory=lambda: _binding("s-tab", help_key="shift+tab", desc="back")
    )
    submit: Binding = Field(
        default_factory=lambda: _binding("enter", help_key="enter", desc="submit")
    )
    toggle: Binding = Field(
        default_factory=lambda: _binding("space", "x", help_key="x", desc="toggle")
    )
    up: Binding = Field(
        default_factory=lambda: _binding("up", "k", "c-p", help_key="↑", desc="up")
    )
    down: Binding = Field(
        default_factory=lambda: _binding("down", "j", "c-n", help_key="↓", desc="down")
    )
    filter: Binding = Field(
        default_factory=lambda: _binding("/", help_key="/", desc="filter")
    )
    set_filter: Binding = Field(
        default_factory=lambda: _binding(
            "enter", "escape", help_key="esc", desc="set filter", enabled=False
        )
    )
    clear_filter: Binding = Field(
        default_factory=lambda: _binding(
            "escape", help_key="esc", desc="clear filter", enabled=False
        )
    )
    half_page_up: Binding = Field(
        default_factory=lambda: _binding("c-u", help_key="ctrl+u", desc="½ page up")
    )
    half_page_down: Binding = Field(
        default_factory=lambda: _binding("c-d", help_key="ctrl+d", desc="½ page down")
    )
    goto_top: Binding = Field(
        default_factory=lambda: _binding("home", "g", help_key="g/home", desc="go to start")
    )
    goto_bottom: Binding = Field(
        default_factory=lambda: _binding("end", "G", help_key="G/end", desc="go to end")
    )
    toggle_all: Binding = Field(
        default_factory=lambda: _binding("c-a", help_key="ctrl+a", desc="select all")
    )


class SelectKeyMap(BaseModel):
    next: Binding = Field(
        default_factory=lambda: _binding("enter", "tab", help_key="enter", desc="select")
    )
    prev: Binding = Field(
        default_factory=lambda: _binding("s-tab", help_key="shift+tab", desc="back")
    )
    submit: Binding = Field(
        default_factory=lambda: _binding("enter", help_key="enter", desc="submit")
    )
    up: Binding = Field(
        default_factory=lambda: _binding("up", "k", "c-p", help_key="↑", desc="up")
    )
    down: Binding = Field(
        default_factory=lambda: _binding("down", "j", "c-n", help_key="↓", desc="down")
    )
    filter: Binding = Field(
        default_factory=lambda: _binding("/", help_key="/", desc="filter")
    )
    set_filter: Binding = Field(
        default_factory=lambda: _binding(
            "escape", help_key="esc", desc="set filter", enabled=False
        )
    )
    clear_filter: Binding = Field(
        default_factory=lambda: _binding(
            "escape", help_key="esc", desc="clear filter", enabled=False
        )
    )
    half_page_up: Binding = Field(
        default_factory=lambda: _binding("c-u", help_key="ctrl+u", desc="½ page up")
    )
    half_page_down: Binding = Field(
        default_factory=lambda: _binding("c-d", help_key="ctrl+d", desc="½ page down")
    )
    goto_top: Binding = Field(
        default_factory=lambda: _binding("home", "g", help_key="g/home", desc="go to start")
    )
    goto_bottom: Binding = Field(
        default_factory=lambda: _binding("end", "G", help_key="G/end", desc="go to end")
    )


class TextKeyMap(BaseModel):
    next: Binding = Field(
        default_factory=lambda: _binding("tab", "enter", help_key="enter", desc="next")
    )
    prev: Binding = Field(
        default_factory=lambda: _binding("s-tab", help_key="shift+tab", desc="back")
    )
    submit: Binding = Field(
        default_factory=lambda: _binding("tab", "enter", help_key="enter", desc="submit")
    )
    new_line: Binding = Field(
        default_factory=lambda: _binding(
            "a-enter", "c-j", help_key="alt+enter / ctrl+j", desc="new line"
        )
    )


class KeyMap(BaseModel):
    quit: Binding = Field(
        default_factory=lambda: _binding("c-c", help_key="ctrl+c", desc="quit")
    )
    multi_select: MultiSelectKeyMap = Field(default_factory=MultiSelectKeyMap)
    select: SelectKeyMap = Field(default_factory=SelectKeyMap)
    text: TextKeyMap = Field(default_factory=TextKeyMap)
