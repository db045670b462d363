"""Keyboard editing on top of a prompt_toolkit ``Buffer``."""

from __future__ import annotations

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_ui.tui.core.messages import KeyPress


def edit_buffer(
    buffer: Buffer,
    press: KeyPress,
    *,
    multiline: bool = False,
    char_limit: int = 0,
) -> bool:
    """Apply an editing key to ``buffer``; False when the key is not an edit."""
    key = press.key
    document = buffer.document
    if key == "backspace":
        buffer.delete_before_cursor(1)
    elif key == "delete":
        buffer.delete(1)
    elif key == "left":
        buffer.cursor_left()
    elif key == "right":
        buffer.cursor_right()
    elif key == "home":
        if multiline:
            buffer.cursor_position += document.get_start_of_line_position()
        else:
            buffer.cursor_position = 0
    elif key == "end":
        if multiline:
            buffer.cursor_position += document.get_end_of_line_position()
        else:
            buffer.cursor_position = len(buffer.text)
    elif multiline and key == "up":
        buffer.cursor_up()
    elif multiline and key == "down":
        buffer.cursor_down()
    elif key == "c-w":
        start = document.find_previous_word_beginning()
        if start:
            buffer.delete_before_cursor(-start)
    elif press.text:
        insert_text(buffer, press.text, char_limit=char_limit)
    else:
        return False
    return True


def insert_text(buffer: Buffer, text: str, *, char_limit: int = 0) -> None:
    if char_limit > 0:
        room = char_limit - len(buffer.text)
        if room <= 0:
            return
        text = text[:room]
    buffer.insert_text(text)


def buffer_fragments(
    buffer: Buffer,
    *,
    style: str,
    cursor_style: str,
    show_cursor: bool,
) -> StyleAndTextTuples:
    """Render ``buffer`` with a block cursor when ``show_cursor`` is set."""
    text = buffer.text
    if not show_cursor:
        return [(style, text)]
    pos = buffer.cursor_position
    before, at, after = text[:pos], text[pos : pos + 1], text[pos + 1 :]
    if at in ("", "\n"):
        return [(style, before), (cursor_style, " "), (style, at + after)]
    return [(style, before), (cursor_style, at), (style, after)]
