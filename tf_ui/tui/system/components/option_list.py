"""Cursor, viewport, filter and deferred-option handling for option fields."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Generic, Sequence, TypeVar

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_common.errors import ConfigurationError
from tf_ui.tui.core import render
from tf_ui.tui.core.keymap import MultiSelectKeyMap, SelectKeyMap
from tf_ui.tui.core.messages import (
    Cmd,
    DeferredResultMsg,
    KeyPress,
    Msg,
    TickMsg,
    UpdateFieldsMsg,
    batch,
)
from tf_ui.tui.system.components.base import BaseField
from tf_ui.tui.system.components.editing import buffer_fragments, edit_buffer
from tf_ui.tui.system.deferred import Deferred, Eval
from tf_ui.tui.system.models import FieldPosition, Option
from tf_ui.tui.system.spinner import Spinner
from tf_ui.tui.system.viewport import Viewport

T = TypeVar("T")

DEFAULT_HEIGHT = 10
SPINNER_SHOW_THRESHOLD = 0.5

RowRenderer = Callable[[int, Option[Any], bool], StyleAndTextTuples]


class CursorMove(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    UP = "up"
    DOWN = "down"
    HALF_UP = "half_up"
    HALF_DOWN = "half_down"


class OptionCursor:
    """Cursor over ``count`` rows plus the viewport that keeps it visible."""

    def __init__(self, height: int = 0) -> None:
        self.cursor = 0
        self.viewport = Viewport(height)

    def move(self, direction: CursorMove, count: int) -> None:
        if count <= 0:
            return
        half = max(1, (self.viewport.height or count) // 2)
        if direction is CursorMove.TOP:
            self.cursor = 0
            self.viewport.goto_top()
            return
        if direction is CursorMove.BOTTOM:
            self.cursor = count - 1
            self.viewport.goto_bottom(count)
            return
        if direction is CursorMove.UP:
            self.cursor = max(self.cursor - 1, 0)
        elif direction is CursorMove.DOWN:
            self.cursor = min(self.cursor + 1, count - 1)
        elif direction is CursorMove.HALF_UP:
            self.cursor = max(self.cursor - half, 0)
        elif direction is CursorMove.HALF_DOWN:
            self.cursor = min(self.cursor + half, count - 1)
        self.viewport.ensure_visible(self.cursor)

    def clamp(self, count: int) -> None:
        """Pull the cursor back into range; an empty list leaves it alone."""
        if count <= 0:
            return
        self.cursor = max(0, min(self.cursor, count - 1))
        self.viewport.set_y_offset(self.viewport.y_offset, count)
        self.viewport.ensure_visible(self.cursor)

    def reset(self, cursor: int = 0) -> None:
        self.cursor = cursor
        self.viewport.goto_top()
        self.viewport.ensure_visible(cursor)


class OptionListField(BaseField, Generic[T]):
    """Base for fields that show a scrollable, filterable list of options."""

    keymap: SelectKeyMap | MultiSelectKeyMap

    def __init__(
        self,
        *,
        keymap: SelectKeyMap | MultiSelectKeyMap,
        options: Sequence[Option[T]] | Deferred[Sequence[Option[T]]] = (),
        height: int = 0,
        filterable: bool = True,
        filtering: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        if height < 0:
            raise ConfigurationError(
                "Field height cannot be negative", context={"height": height}
            )
        self.keymap = keymap
        self.options: Eval[list[Option[T]]] = Eval([])
        self._filtered: list[int] = []
        self.nav = OptionCursor()
        self.height = height
        self.filterable = filterable
        self.filtering = False
        self.filter = Buffer(multiline=False)
        self.filter.on_text_changed += lambda _: self._apply_filter()
        self.spinner = Spinner(self.id)

        if isinstance(options, Deferred):
            self.set_options_func(options)
        else:
            self.set_options(options)
        if filtering:
            self.set_filtering(True)
        self._sync_bindings()

    # -- options -----------------------------------------------------------

    @property
    def cursor(self) -> int:
        return self.nav.cursor

    @property
    def viewport(self) -> Viewport:
        return self.nav.viewport

    @property
    def filtered_options(self) -> list[Option[T]]:
        options = self.options.val
        return [options[pos] for pos in self._filtered]

    @property
    def filter_text(self) -> str:
        return self.filter.text

    @property
    def error(self) -> Exception | None:
        return super().error or self.options.error

    def set_options(self, options: Sequence[Option[T]]) -> None:
        """Replace the option set, clearing any filter."""
        self.options.set(list(options))
        self.filter.text = ""
        self.filtering = False
        self._apply_filter()
        self.on_options_replaced(initial=True, previous=[])
        self.update_viewport_height()
        self._sync_bindings()

    def set_options_func(self, options: Deferred[Sequence[Option[T]]]) -> None:
        self.options.set(options)  # type: ignore[arg-type]
        self._filtered = []
        # Dynamic option lists get a fixed height so the layout does not jump.
        if self.height <= 0:
            self.height = DEFAULT_HEIGHT
        self.update_viewport_height()

    def on_options_replaced(self, *, initial: bool, previous: list[Any]) -> None:
        """Hook run after the option list changed; ``previous`` holds the
        values selected before the change."""

    def selected_values(self) -> list[Any]:
        return []

    def _apply_filter(self) -> None:
        options = self.options.val
        query = self.filter.text
        if not query:
            self._filtered = list(range(len(options)))
        else:
            # Plain case-insensitive substring match; diacritics are not folded.
            needle = query.lower()
            self._filtered = [
                pos for pos, option in enumerate(options) if needle in str(option).lower()
            ]
        self.nav.clamp(len(self._filtered))

    def set_filter_text(self, text: str) -> None:
        self.filter.text = text
        self.filter.cursor_position = len(text)
        self._apply_filter()

    def set_filtering(self, enabled: bool) -> None:
        """Enter or leave filter mode.

        Leaving with an empty filter string shows every option again;
        otherwise the filtered view is kept.
        """
        self.filtering = enabled
        if not enabled and not self.filter.text:
            self._apply_filter()
        self._sync_bindings()

    def clear_filter(self) -> None:
        self.filter.text = ""
        self._apply_filter()
        self.set_filtering(False)

    def move_cursor(self, direction: CursorMove) -> None:
        self.nav.move(direction, len(self._filtered))

    # -- sizing ------------------------------------------------------------

    def update_viewport_height(self) -> None:
        if self.height <= 0:
            self.nav.viewport.height = len(self.options.val)
        else:
            header_rows = render.plain_text(self.header_fragments()).count("\n")
            self.nav.viewport.height = max(1, self.height - header_rows)
        self.nav.clamp(len(self._filtered))

    def with_height(self, height: int) -> "OptionListField[T]":
        self.height = height
        self.update_viewport_height()
        return self

    # -- bindings ----------------------------------------------------------

    def with_position(self, position: FieldPosition) -> "OptionListField[T]":
        self.position = position
        self._sync_bindings()
        return self

    def _sync_bindings(self) -> None:
        km = self.keymap
        filtering = self.filtering
        km.set_filter.set_enabled(filtering)
        km.filter.set_enabled(not filtering and self.filterable)
        km.clear_filter.set_enabled(not filtering and bool(self.filter.text))
        if filtering:
            km.next.set_enabled(False)
            km.prev.set_enabled(False)
            km.submit.set_enabled(False)
            return
        km.prev.set_enabled(not self.position.is_first())
        km.next.set_enabled(not self.position.is_last())
        km.submit.set_enabled(self.position.is_last())

    # -- messages ----------------------------------------------------------

    def refresh(self) -> Cmd | None:
        labels = self.refresh_labels()
        previous = self.selected_values()
        changed, cmd = self.options.refresh(self.id, "options")
        if changed:
            self._options_changed(previous)
        spin = self.spinner.start() if cmd is not None else None
        return batch(labels, cmd, spin)

    def resolve_now(self) -> None:
        """Evaluate every deferred attribute synchronously."""
        self.resolve_labels()
        previous = self.selected_values()
        changed, cmd = self.options.refresh(self.id, "options")
        if changed:
            self._options_changed(previous)
        elif cmd is not None:
            self._deliver(cmd())

    def _options_changed(self, previous: list[Any]) -> None:
        self._apply_filter()
        self.on_options_replaced(initial=False, previous=previous)
        self.update_viewport_height()

    def _deliver(self, msg: DeferredResultMsg) -> None:
        if msg.attr != "options":
            self.deliver_label(msg)
            return
        previous = self.selected_values()
        if not self.options.deliver(msg) or self.options.error is not None:
            return
        self._options_changed(previous)

    def handle_common(self, msg: Msg) -> tuple[bool, Cmd | None]:
        """Handle refresh, spinner and deferred-result messages."""
        if isinstance(msg, UpdateFieldsMsg):
            return True, self.refresh()
        if isinstance(msg, TickMsg):
            if msg.field_id != self.id or not self.options.loading:
                return True, None
            return True, self.spinner.update(msg)
        if isinstance(msg, DeferredResultMsg):
            if msg.field_id == self.id:
                self._deliver(msg)
            return True, None
        return False, None

    def handle_filter_key(self, press: KeyPress) -> bool:
        """Keys that drive filter mode; True when ``press`` was consumed."""
        km = self.keymap
        if self.filtering:
            if km.set_filter.matches(press):
                if not self._filtered:
                    self.filter.text = ""
                self.set_filtering(False)
                return True
            if edit_buffer(self.filter, press):
                return True
            return self.handle_cursor_key(press)
        if km.filter.matches(press):
            self.set_filtering(True)
            return True
        if km.clear_filter.matches(press):
            self.clear_filter()
            return True
        return False

    def handle_cursor_key(self, press: KeyPress) -> bool:
        km = self.keymap
        if self.filtering and press.text:
            return False
        moves = (
            (km.up, CursorMove.UP),
            (km.down, CursorMove.DOWN),
            (km.goto_top, CursorMove.TOP),
            (km.goto_bottom, CursorMove.BOTTOM),
            (km.half_page_up, CursorMove.HALF_UP),
            (km.half_page_down, CursorMove.HALF_DOWN),
        )
        for binding, direction in moves:
            if binding.matches(press):
                self.move_cursor(direction)
                return True
        return False

    # -- rendering ---------------------------------------------------------

    def filter_title_fragments(self) -> StyleAndTextTuples:
        styles = self.active_styles()
        if self.filtering:
            frags: StyleAndTextTuples = [(styles.filter_prompt, styles.filter_prompt_text)]
            frags.extend(
                buffer_fragments(
                    self.filter,
                    style=styles.text,
                    cursor_style=styles.cursor,
                    show_cursor=self.focused,
                )
            )
            return frags
        if self.filter.text:
            return self.title_fragments(
                suffix=[(styles.description, f"/{self.filter.text}")]
            )
        return self.title_fragments()

    def loading_fragments(self) -> StyleAndTextTuples | None:
        if not self.options.loading:
            return None
        if self.options.loading_for() <= SPINNER_SHOW_THRESHOLD:
            return None
        self.spinner.style = self.active_styles().spinner
        return [*self.spinner.view(), ("", " Loading...")]

    def options_fragments(self, row: RowRenderer) -> StyleAndTextTuples:
        loading = self.loading_fragments()
        if loading is not None:
            return loading
        options = self.options.val
        rows = [
            row(idx, options[pos], idx == self.nav.cursor)
            for idx, pos in enumerate(self._filtered)
        ]
        self.nav.viewport.set_content(render.join_lines(rows))
        return self.nav.viewport.view()

    def view(self) -> StyleAndTextTuples:
        self.update_viewport_height()
        out = self.header_fragments(self.filter_title_fragments())
        out.extend(self.options_fragments(self.render_row))
        return [(self.active_styles().base, "")] + out

    def render_row(self, idx: int, option: Option[Any], is_cursor: bool) -> StyleAndTextTuples:
        raise NotImplementedError
