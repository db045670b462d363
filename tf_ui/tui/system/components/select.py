from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from prompt_toolkit.formatted_text import StyleAndTextTuples
from rich.markup import escape

from tf_ui.tui.core.keymap import Binding, KeyMap, SelectKeyMap
from tf_ui.tui.core.messages import Cmd, KeyPress, Msg, next_field, prev_field
from tf_ui.tui.system.accessible import AccessiblePrompter
from tf_ui.tui.system.components.base import Validator
from tf_ui.tui.system.components.option_list import OptionListField
from tf_ui.tui.system.deferred import Deferred
from tf_ui.tui.system.models import Option

T = TypeVar("T")


class Select(OptionListField[T], Generic[T]):
    """Pick exactly one option from a scrollable, filterable list."""

    def __init__(
        self,
        options: Sequence[Option[T]] | Deferred[Sequence[Option[T]]] = (),
        *,
        title: str | Deferred[str] = "",
        description: str | Deferred[str] = "",
        value: Any = None,
        key: str = "",
        height: int = 0,
        filterable: bool = True,
        filtering: bool = False,
        validate: Validator | None = None,
    ) -> None:
        super().__init__(
            keymap=SelectKeyMap(),
            options=options,
            height=height,
            filterable=filterable,
            filtering=filtering,
            key=key,
            title=title,
            description=description,
            value=value,
            validate=validate,
            default=None,
        )

    @property
    def highlighted(self) -> Option[T] | None:
        if not self._filtered:
            return None
        return self.options.val[self._filtered[self.nav.cursor]]

    def selected_values(self) -> list[Any]:
        option = self.highlighted
        return [] if option is None else [option.value]

    def on_options_replaced(self, *, initial: bool, previous: list[Any]) -> None:
        options = self.options.val
        wanted = [self.get_value()] if initial else previous
        cursor = next(
            (pos for pos, option in enumerate(options) if wanted and option.value == wanted[0]),
            None,
        )
        if cursor is None:
            cursor = next((pos for pos, option in enumerate(options) if option.selected), 0)
        if initial:
            self.nav.reset(cursor)
        elif options:
            self.nav.cursor = self._filtered.index(cursor) if cursor in self._filtered else 0
            self.nav.clamp(len(self._filtered))

    def commit(self) -> Exception | None:
        option = self.highlighted
        if option is not None:
            self.accessor.set(option.value)
        return self.validate()

    def update(self, msg: Msg) -> Cmd | None:
        handled, cmd = self.handle_common(msg)
        if handled:
            return cmd
        if not isinstance(msg, KeyPress) or not self.focused:
            return None
        self.err = None
        km = self.keymap
        if self.filtering and msg.key == "enter":
            # Enter picks the highlighted match and leaves the filter.
            if not self._filtered:
                self.clear_filter()
                return None
            self.set_filtering(False)
            return next_field
        if self.handle_filter_key(msg) or self.handle_cursor_key(msg):
            return None
        if km.prev.matches(msg):
            return prev_field
        if km.next.matches(msg) or km.submit.matches(msg):
            return next_field
        return None

    def render_row(self, idx: int, option: Option[Any], is_cursor: bool) -> StyleAndTextTuples:
        styles = self.active_styles()
        selector = styles.select_selector
        if is_cursor:
            return [(styles.selected_option, f"{selector}{option.key}")]
        return [(styles.option, f"{' ' * len(selector)}{option.key}")]

    def key_binds(self) -> Sequence[Binding]:
        km = self.keymap
        return [
            km.up,
            km.down,
            km.filter,
            km.set_filter,
            km.clear_filter,
            km.prev,
            km.submit,
            km.next,
        ]

    def with_keymap(self, keymap: KeyMap) -> "Select[T]":
        self.keymap = keymap.select.model_copy(deep=True)
        self._sync_bindings()
        return self

    def run_accessible(self, prompter: AccessiblePrompter) -> None:
        self.resolve_now()
        self.clear_filter()
        self.announce(prompter)
        options = self.options.val
        if not options:
            self.commit()
            return
        for idx, option in enumerate(options, start=1):
            prompter.console.print(escape(f"{idx}. {option.key}"))
        while True:
            choice = prompter.ask_int(
                f"Input a number between 1 and {len(options)}", 1, len(options)
            )
            self.nav.cursor = choice - 1
            err = self.commit()
            if err is None:
                break
            prompter.say("error", str(err))
        prompter.say("selected", f"Selected: {options[self.nav.cursor].key}")
