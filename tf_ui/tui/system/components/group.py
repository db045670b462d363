"""A page of fields navigated together.

The group owns the field cursor. Fields never move focus themselves: they
return :func:`next_field` / :func:`prev_field` and the group decides,
after committing and validating, whether focus moves, stays, or the
request is handed on to the form as :func:`next_group` / :func:`prev_group`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Sequence

from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_common.errors import ConfigurationError
from tf_ui.tui.core import render
from tf_ui.tui.core.keymap import KeyMap
from tf_ui.tui.core.messages import (
    Cmd,
    KeyPress,
    Msg,
    NextFieldMsg,
    PrevFieldMsg,
    batch,
    next_group,
    prev_group,
)
from tf_ui.tui.core.protocols import Field
from tf_ui.tui.core.theme import Theme
from tf_ui.tui.system.components.help import short_help
from tf_ui.tui.system.viewport import Viewport

if TYPE_CHECKING:
    from tf_ui.tui.core.config import FormConfig

logger = logging.getLogger(__name__)

_DEFAULT_THEME = Theme()


class Group:
    def __init__(
        self,
        *fields: Field,
        title: str = "",
        description: str = "",
        hide: bool = False,
        hide_func: Callable[[], bool] | None = None,
        show_help: bool = True,
        show_errors: bool = True,
        height: int = 0,
    ) -> None:
        if not fields:
            raise ConfigurationError("A group needs at least one field")
        if height < 0:
            raise ConfigurationError(
                "Group height cannot be negative", context={"height": height}
            )
        self.fields: tuple[Field, ...] = tuple(fields)
        self.title = title
        self.description = description
        self._hide = hide
        self._hide_func = hide_func
        self.show_help = show_help
        self.show_errors = show_errors
        self.height = height
        self.viewport = Viewport(height)
        self.cursor = 0
        self.active = False
        self.theme: Theme | None = None
        self.width = 0

    @property
    def current(self) -> Field:
        return self.fields[self.cursor]

    # -- configuration -----------------------------------------------------

    def with_theme(self, theme: Theme) -> "Group":
        if self.theme is None:
            self.theme = theme
        for field in self.fields:
            field.with_theme(theme)
        return self

    def with_keymap(self, keymap: KeyMap) -> "Group":
        for field in self.fields:
            field.with_keymap(keymap)
        return self

    def with_width(self, width: int) -> "Group":
        self.width = width
        for field in self.fields:
            field.with_width(width)
        return self

    def with_height(self, height: int) -> "Group":
        self.height = height
        self.viewport.height = height
        return self

    def with_accessible(self, accessible: bool) -> "Group":
        for field in self.fields:
            field.with_accessible(accessible)
        return self

    def with_show_help(self, show: bool) -> "Group":
        self.show_help = show
        return self

    def with_show_errors(self, show: bool) -> "Group":
        self.show_errors = show
        return self

    def with_config(self, config: "FormConfig") -> "Group":
        """Thread form-wide configuration into the group and its fields.

        Group-level choices made at construction (an explicit height,
        hidden help or errors) win over the form's.
        """
        self.with_theme(config.theme)
        self.with_keymap(config.keymap)
        self.with_width(config.width)
        self.with_accessible(config.accessible)
        if not self.height and config.height:
            self.with_height(config.height)
        self.show_help = self.show_help and config.show_help
        self.show_errors = self.show_errors and config.show_errors
        return self

    # -- state -------------------------------------------------------------

    def hidden(self) -> bool:
        if self._hide_func is not None:
            return bool(self._hide_func())
        return self._hide

    def errors(self) -> list[Exception]:
        return [field.error for field in self.fields if field.error is not None]

    def _step(self, start: int, step: int) -> int | None:
        idx = start + step
        while 0 <= idx < len(self.fields):
            if not self.fields[idx].skip():
                return idx
            idx += step
        return None

    def first_index(self) -> int:
        idx = self._step(-1, 1)
        return 0 if idx is None else idx

    def last_index(self) -> int:
        idx = self._step(len(self.fields), -1)
        return len(self.fields) - 1 if idx is None else idx

    def init(self) -> Cmd | None:
        return batch(*(field.init() for field in self.fields))

    def set_current(self, index: int) -> Cmd | None:
        self.cursor = index
        self.active = True
        cmd = self.current.focus()
        self.scroll_to_current()
        return cmd

    def focus_first(self) -> Cmd | None:
        return self.set_current(self.first_index())

    def focus_last(self) -> Cmd | None:
        return self.set_current(self.last_index())

    def blur_current(self) -> Cmd | None:
        self.active = False
        return self.current.blur()

    # -- navigation --------------------------------------------------------

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, NextFieldMsg):
            return self._advance()
        if isinstance(msg, PrevFieldMsg):
            return self._retreat()
        if isinstance(msg, KeyPress):
            return self.current.update(msg)
        return batch(*(field.update(msg) for field in self.fields))

    def _advance(self) -> Cmd | None:
        # Only the current field and the fields before it gate a move within
        # the group. An error on a later field does not block it; every field
        # is re-committed and checked when advancing past the last one.
        field = self.current
        field.commit()
        blocking = [f for f in self.fields[: self.cursor + 1] if f.error is not None]
        if blocking:
            logger.debug("Advance blocked on field %s: %s", field.key or field.id, blocking[0].error)
            return None
        nxt = self._step(self.cursor, 1)
        if nxt is not None:
            blur_cmd = field.blur()
            return batch(blur_cmd, self.set_current(nxt))
        failing = [f for f in self.fields if f.commit() is not None or f.error is not None]
        if failing:
            logger.debug("Group %r has %d invalid field(s)", self.title, len(failing))
            return None
        return next_group

    def _retreat(self) -> Cmd | None:
        prv = self._step(self.cursor, -1)
        if prv is None:
            return prev_group
        blur_cmd = self.current.blur()
        return batch(blur_cmd, self.set_current(prv))

    # -- rendering ---------------------------------------------------------

    def _theme(self) -> Theme:
        return self.theme if self.theme is not None else _DEFAULT_THEME

    def _blocks(self) -> list[StyleAndTextTuples]:
        return [field.view() for field in self.fields]

    def scroll_to_current(self) -> None:
        """Bring the current field's rows into view with the smallest scroll."""
        if self.viewport.height <= 0:
            return
        gap = max(self._theme().field_separator.count("\n") - 1, 0)
        top = 0
        for idx, block in enumerate(self._blocks()):
            rows = max(render.height(block), 1)
            if idx == self.cursor:
                self.viewport.ensure_visible(top, top + rows - 1)
                return
            top += rows + gap

    def header_fragments(self) -> StyleAndTextTuples:
        theme = self._theme()
        out: StyleAndTextTuples = []
        if self.title:
            out.extend([(theme.group_title, self.title), render.NEWLINE])
        if self.description:
            out.extend([(theme.group_description, self.description), render.NEWLINE])
        if out:
            out.append(render.NEWLINE)
        return out

    def content_fragments(self) -> StyleAndTextTuples:
        body = render.join_blocks(self._blocks(), self._theme().field_separator)
        if self.viewport.height <= 0:
            return body
        self.viewport.set_content(body)
        self.viewport.set_y_offset(self.viewport.y_offset)
        return self.viewport.view()

    def footer_fragments(self) -> StyleAndTextTuples:
        """Error list when errors are present, otherwise the short help."""
        theme = self._theme()
        errors = self.errors()
        if errors:
            if not self.show_errors:
                return []
            styles = theme.styles(True)
            rows = [[(styles.error_message, f"* {err}")] for err in errors]
            return render.join_lines(rows)
        if self.show_help and self.active:
            return short_help(self.current.key_binds(), theme)
        return []

    def view(self) -> StyleAndTextTuples:
        out = self.header_fragments()
        out.extend(self.content_fragments())
        footer = self.footer_fragments()
        if footer:
            out.append(("", "\n\n"))
            out.extend(footer)
        return out

    def key_binds(self) -> Sequence:
        return self.current.key_binds()
