from __future__ import annotations

from typing import Any, Sequence

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_common.errors import ConfigurationError, FieldValidationError
from tf_ui.tui.core import render
from tf_ui.tui.core.keymap import Binding, KeyMap, TextKeyMap
from tf_ui.tui.core.messages import (
    Cmd,
    DeferredResultMsg,
    KeyPress,
    Msg,
    UpdateFieldsMsg,
    next_field,
    prev_field,
)
from tf_ui.tui.system.accessible import AccessiblePrompter
from tf_ui.tui.system.components.base import BaseField, Validator
from tf_ui.tui.system.components.editing import buffer_fragments, edit_buffer, insert_text
from tf_ui.tui.system.deferred import Deferred
from tf_ui.tui.system.models import FieldPosition
from tf_ui.tui.system.viewport import Viewport

DEFAULT_LINES = 5


class Text(BaseField):
    """Multi-line text input backed by a prompt_toolkit ``Buffer``.

    The buffer is the edit state; the bound value only changes on commit.
    """

    def __init__(
        self,
        *,
        title: str | Deferred[str] = "",
        description: str | Deferred[str] = "",
        value: Any = None,
        key: str = "",
        placeholder: str = "",
        char_limit: int = 0,
        lines: int = DEFAULT_LINES,
        validate: Validator | None = None,
    ) -> None:
        super().__init__(
            key=key,
            title=title,
            description=description,
            value=value,
            default="",
            validate=validate,
        )
        if char_limit < 0 or lines < 1:
            raise ConfigurationError(
                "Text fields need lines >= 1 and a non-negative char_limit",
                context={"lines": lines, "char_limit": char_limit},
            )
        self.keymap = TextKeyMap()
        self.placeholder = placeholder
        self.char_limit = char_limit
        self.lines = lines
        self.viewport = Viewport(lines)
        self.buffer = Buffer(multiline=True)
        initial = self.get_value()
        self.buffer.text = "" if initial is None else str(initial)
        self.buffer.cursor_position = len(self.buffer.text)
        self._sync_bindings()

    def commit(self) -> Exception | None:
        self.accessor.set(self.buffer.text)
        return self.validate()

    def validate(self) -> Exception | None:
        value = self.get_value() or ""
        if self.char_limit and len(value) > self.char_limit:
            self.err = FieldValidationError(
                f"Text is limited to {self.char_limit} characters",
                context={"field": self.key, "char_limit": self.char_limit},
            )
            return self.err
        return super().validate()

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, UpdateFieldsMsg):
            return self.refresh_labels()
        if isinstance(msg, DeferredResultMsg):
            if msg.field_id == self.id:
                self.deliver_label(msg)
            return None
        if not isinstance(msg, KeyPress) or not self.focused:
            return None
        self.err = None
        km = self.keymap
        if km.new_line.matches(msg):
            insert_text(self.buffer, "\n", char_limit=self.char_limit)
            return None
        if km.prev.matches(msg):
            return prev_field
        if km.next.matches(msg) or km.submit.matches(msg):
            return next_field
        edit_buffer(self.buffer, msg, multiline=True, char_limit=self.char_limit)
        return None

    def _sync_bindings(self) -> None:
        km = self.keymap
        km.prev.set_enabled(not self.position.is_first())
        km.next.set_enabled(not self.position.is_last())
        km.submit.set_enabled(self.position.is_last())

    def with_position(self, position: FieldPosition) -> "Text":
        self.position = position
        self._sync_bindings()
        return self

    def with_height(self, height: int) -> "Text":
        header_rows = render.plain_text(self.header_fragments()).count("\n")
        if height > header_rows:
            self.lines = height - header_rows
            self.viewport.height = self.lines
        return self

    def with_keymap(self, keymap: KeyMap) -> "Text":
        self.keymap = keymap.text.model_copy(deep=True)
        self._sync_bindings()
        return self

    def key_binds(self) -> Sequence[Binding]:
        km = self.keymap
        return [km.new_line, km.prev, km.submit, km.next]

    def body_fragments(self) -> StyleAndTextTuples:
        styles = self.active_styles()
        if not self.buffer.text and self.placeholder:
            body: StyleAndTextTuples = [(styles.placeholder, self.placeholder)]
            if self.focused:
                body = [(styles.cursor, self.placeholder[:1]), (styles.placeholder, self.placeholder[1:])]
        else:
            body = buffer_fragments(
                self.buffer,
                style=styles.text,
                cursor_style=styles.cursor,
                show_cursor=self.focused,
            )
        self.viewport.set_content(body)
        self.viewport.ensure_visible(self.buffer.document.cursor_position_row)
        return self.viewport.view()

    def view(self) -> StyleAndTextTuples:
        out = self.header_fragments()
        out.extend(self.body_fragments())
        return [(self.active_styles().base, "")] + out

    def run_accessible(self, prompter: AccessiblePrompter) -> None:
        self.resolve_labels()
        self.announce(prompter)

        def check(value: str) -> Exception | None:
            if self.char_limit and len(value) > self.char_limit:
                return FieldValidationError(
                    f"Text is limited to {self.char_limit} characters",
                    context={"field": self.key},
                )
            return self.run_validator(value)

        self.buffer.text = prompter.ask_text("Input", check, default=self.buffer.text or None)
        self.commit()
