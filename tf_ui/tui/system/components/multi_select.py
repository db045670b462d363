"""Multi-select field: bounded selection over a filterable option list."""

from __future__ import annotations

import logging
from typing import Any, Generic, Sequence, TypeVar

from prompt_toolkit.formatted_text import StyleAndTextTuples
from rich.markup import escape

from tf_common.errors import (
    ConfigurationError,
    SelectionLimitError,
    error_to_payload,
    wrap_error,
)
from tf_ui.tui.core import render
from tf_ui.tui.core.keymap import Binding, KeyMap, MultiSelectKeyMap
from tf_ui.tui.core.messages import Cmd, KeyPress, Msg, next_field, prev_field
from tf_ui.tui.system.accessible import AccessiblePrompter
from tf_ui.tui.system.components.base import Validator
from tf_ui.tui.system.components.option_list import OptionListField
from tf_ui.tui.system.deferred import Deferred
from tf_ui.tui.system.models import Option

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MultiSelect(OptionListField[T], Generic[T]):
    """Pick any number of options, optionally capped by ``limit``.

    Selection is tracked by position in the full option list, so duplicate
    keys are fine and a selection survives filtering. The bound value is a
    list of the selected options' values in display order, written on
    commit only.
    """

    def __init__(
        self,
        options: Sequence[Option[T]] | Deferred[Sequence[Option[T]]] = (),
        *,
        title: str | Deferred[str] = "",
        description: str | Deferred[str] = "",
        value: Any = None,
        key: str = "",
        limit: int = 0,
        height: int = 0,
        filterable: bool = True,
        filtering: bool = False,
        validate: Validator | None = None,
    ) -> None:
        if limit < 0:
            raise ConfigurationError(
                "Selection limit cannot be negative", context={"limit": limit}
            )
        self.limit = limit
        self._selected: set[int] = set()
        self._limit_error: SelectionLimitError | None = None
        super().__init__(
            keymap=MultiSelectKeyMap(),
            options=options,
            height=height,
            filterable=filterable,
            filtering=filtering,
            key=key,
            title=title,
            description=description,
            value=value,
            default=[],
            validate=validate,
        )

    # -- selection ---------------------------------------------------------

    @property
    def selected_positions(self) -> set[int]:
        return set(self._selected)

    @property
    def selected_options(self) -> list[Option[T]]:
        options = self.options.val
        return [options[pos] for pos in sorted(self._selected)]

    def selected_values(self) -> list[Any]:
        return [option.value for option in self.selected_options]

    def on_options_replaced(self, *, initial: bool, previous: list[Any]) -> None:
        if initial:
            bound = self.get_value()
            previous = list(bound) if isinstance(bound, (list, tuple, set, frozenset)) else []
        options = self.options.val
        chosen = sorted(
            pos
            for pos, option in enumerate(options)
            if option.selected or option.value in previous
        )
        if self.limit > 0:
            chosen = chosen[: self.limit]
        self._selected = set(chosen)
        if initial:
            self.nav.reset(chosen[0] if chosen else 0)

    def toggle_select(self, index: int) -> None:
        """Flip the option at filtered ``index``.

        Raises :class:`SelectionLimitError`, leaving the selection as it
        was, when selecting it would go past a positive limit.
        """
        pos = self._filtered[index]
        if pos in self._selected:
            self._selected.discard(pos)
            return
        if self.limit > 0 and len(self._selected) >= self.limit:
            err = wrap_error(
                SelectionLimitError,
                f"You can only select up to {self.limit} options",
                context={"field": self.key, "limit": self.limit},
            )
            logger.debug("Selection rejected: %s", error_to_payload(err))
            raise err
        self._selected.add(pos)

    def toggle_all(self) -> None:
        """Select every filtered option, or deselect them all if all are
        already selected."""
        if self.limit > 0:
            raise SelectionLimitError(
                "Select all is only available without a selection limit",
                context={"field": self.key, "limit": self.limit},
            )
        if any(pos not in self._selected for pos in self._filtered):
            self._selected.update(self._filtered)
        else:
            self._selected.difference_update(self._filtered)

    def commit(self) -> Exception | None:
        self.accessor.set(self.selected_values())
        return self.validate()

    # -- messages ----------------------------------------------------------

    def update(self, msg: Msg) -> Cmd | None:
        handled, cmd = self.handle_common(msg)
        if handled:
            return cmd
        if not isinstance(msg, KeyPress) or not self.focused:
            return None
        self._limit_error = None
        self.err = None
        return self._handle_key(msg)

    def _handle_key(self, press: KeyPress) -> Cmd | None:
        km = self.keymap
        assert isinstance(km, MultiSelectKeyMap)
        if self.handle_filter_key(press) or self.handle_cursor_key(press):
            return None
        if km.toggle.matches(press):
            if self._filtered:
                try:
                    self.toggle_select(self.nav.cursor)
                except SelectionLimitError as exc:
                    self._limit_error = exc
            return None
        if km.toggle_all.matches(press):
            self.toggle_all()
            return None
        if km.prev.matches(press):
            return prev_field
        if km.next.matches(press) or km.submit.matches(press):
            return next_field
        return None

    def _sync_bindings(self) -> None:
        super()._sync_bindings()
        km = self.keymap
        assert isinstance(km, MultiSelectKeyMap)
        km.toggle_all.set_enabled(self.limit == 0 and not self.filtering)

    # -- rendering ---------------------------------------------------------

    def render_row(self, idx: int, option: Option[Any], is_cursor: bool) -> StyleAndTextTuples:
        styles = self.active_styles()
        selector = styles.multi_select_selector
        frags: StyleAndTextTuples = [
            (styles.option, selector if is_cursor else " " * len(selector))
        ]
        if self._filtered[idx] in self._selected:
            frags.append((styles.selected_option, f"{styles.selected_prefix}{option.key}"))
        else:
            frags.append((styles.unselected_option, f"{styles.unselected_prefix}{option.key}"))
        return frags

    def title_fragments(self, *, suffix: StyleAndTextTuples = ()) -> StyleAndTextTuples:
        if self.limit > 0:
            counter = (self.active_styles().description, f" ({len(self._selected)}/{self.limit})")
            suffix = [*suffix, counter]
        return super().title_fragments(suffix=suffix)

    def view(self) -> StyleAndTextTuples:
        out = super().view()
        if self._limit_error is not None:
            out.append(render.NEWLINE)
            out.append((self.active_styles().error_message, f"* {self._limit_error}"))
        return out

    def key_binds(self) -> Sequence[Binding]:
        km = self.keymap
        assert isinstance(km, MultiSelectKeyMap)
        return [
            km.toggle,
            km.up,
            km.down,
            km.filter,
            km.set_filter,
            km.clear_filter,
            km.prev,
            km.submit,
            km.next,
            km.toggle_all,
        ]

    def with_keymap(self, keymap: KeyMap) -> "MultiSelect[T]":
        self.keymap = keymap.multi_select.model_copy(deep=True)
        self._sync_bindings()
        return self

    # -- accessible mode ---------------------------------------------------

    def run_accessible(self, prompter: AccessiblePrompter) -> None:
        self.resolve_now()
        self.clear_filter()
        self.announce(prompter)
        options = self.options.val
        while True:
            for idx, option in enumerate(options, start=1):
                mark = "x" if idx - 1 in self._selected else " "
                prompter.console.print(escape(f"{idx}. [{mark}] {option.key}"))
            choice = prompter.ask_int(
                f"Input a number between 0 and {len(options)} (0 to finish)",
                0,
                len(options),
            )
            if choice == 0:
                err = self.commit()
                if err is None:
                    break
                prompter.say("error", str(err))
                continue
            try:
                self.toggle_select(choice - 1)
            except SelectionLimitError as exc:
                prompter.say("error", str(exc))
        keys = ", ".join(option.key for option in self.selected_options)
        prompter.say("selected", f"Selected: {keys}")
