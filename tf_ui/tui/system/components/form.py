"""Multi-page form: a sequence of groups with a single active group."""

from __future__ import annotations

import logging
from enum import Enum
from typing import IO, Any, Callable

from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.styles import Style
from rich.console import Console

from tf_common.errors import ConfigurationError, FormAbortedError
from tf_ui.tui.adapters.prompt_toolkit_runtime import PromptToolkitRuntime
from tf_ui.tui.core import render
from tf_ui.tui.core.config import FormConfig
from tf_ui.tui.core.messages import (
    Cmd,
    FieldMsg,
    KeyPress,
    Msg,
    NextFieldMsg,
    NextGroupMsg,
    PrevFieldMsg,
    PrevGroupMsg,
    UpdateFieldsMsg,
    batch,
    quit_form,
    update_fields,
)
from tf_ui.tui.core.protocols import Field
from tf_ui.tui.system.accessible import AccessiblePrompter
from tf_ui.tui.system.components.group import Group
from tf_ui.tui.system.models import FieldPosition

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    NORMAL = "normal"
    COMPLETED = "completed"
    ABORTED = "aborted"


class Form:
    """Drives a sequence of groups to completion.

    The form only ever reacts to group-level navigation: ``NextGroupMsg``
    is ignored while the active group holds errors, otherwise it moves to
    the next visible group or completes the form.
    """

    def __init__(
        self,
        *groups: Group,
        config: FormConfig | None = None,
        on_submit: Callable[[], None] | None = None,
        on_cancel: Callable[[], None] | None = None,
    ) -> None:
        if not groups:
            raise ConfigurationError("A form needs at least one group")
        self.groups: tuple[Group, ...] = tuple(groups)
        self.config = config or FormConfig()
        self.on_submit = on_submit
        self.on_cancel = on_cancel
        self.state = FormState.NORMAL
        self.cursor = 0
        for group in self.groups:
            group.with_config(self.config)
        self._update_positions()

    @property
    def current(self) -> Group:
        return self.groups[self.cursor]

    @property
    def fields(self) -> list[Field]:
        return [field for group in self.groups for field in group.fields]

    def errors(self) -> list[Exception]:
        return self.current.errors()

    # -- positions ---------------------------------------------------------

    def _visible(self) -> list[int]:
        return [idx for idx, group in enumerate(self.groups) if not group.hidden()]

    def _next_visible(self, start: int) -> int | None:
        return next((idx for idx in self._visible() if idx > start), None)

    def _prev_visible(self, start: int) -> int | None:
        return next((idx for idx in reversed(self._visible()) if idx < start), None)

    def _update_positions(self) -> None:
        visible = self._visible() or [self.cursor]
        for g_idx, group in enumerate(self.groups):
            first, last = group.first_index(), group.last_index()
            for f_idx, field in enumerate(group.fields):
                field.with_position(
                    FieldPosition(
                        group=g_idx,
                        field=f_idx,
                        first_field=first,
                        last_field=last,
                        group_count=len(self.groups),
                        first_group=visible[0],
                        last_group=visible[-1],
                    )
                )

    # -- lifecycle ---------------------------------------------------------

    def init(self) -> Cmd | None:
        cmds = [group.init() for group in self.groups]
        visible = self._visible()
        if not visible:
            logger.debug("Every group is hidden; completing immediately")
            return batch(*cmds, self.submit())
        self.cursor = visible[0]
        self._update_positions()
        cmds.append(self.current.focus_first())
        cmds.append(update_fields)
        return batch(*cmds)

    def update(self, msg: Msg) -> Cmd | None:
        if self.state is not FormState.NORMAL:
            return None
        if isinstance(msg, KeyPress):
            if self.config.keymap.quit.matches(msg):
                return self.abort()
            return batch(self.current.update(msg), update_fields)
        if isinstance(msg, NextGroupMsg):
            return self.next_group()
        if isinstance(msg, PrevGroupMsg):
            return self.prev_group()
        if isinstance(msg, (NextFieldMsg, PrevFieldMsg)):
            return self.current.update(msg)
        if isinstance(msg, UpdateFieldsMsg):
            targets = self._refresh_targets()
            return batch(*(group.update(msg) for group in targets))
        if isinstance(msg, FieldMsg):
            return batch(*(group.update(msg) for group in self.groups))
        return None

    def _refresh_targets(self) -> list[Group]:
        if self.config.layout == "stack":
            return [self.groups[idx] for idx in self._visible()]
        return [self.current]

    def next_group(self) -> Cmd | None:
        group = self.current
        if group.errors():
            logger.debug("Next group ignored: group %d has errors", self.cursor)
            return None
        nxt = self._next_visible(self.cursor)
        if nxt is None:
            return self.submit()
        blur_cmd = group.blur_current()
        self.cursor = nxt
        self._update_positions()
        logger.debug("Moved to group %d", nxt)
        return batch(blur_cmd, self.current.focus_first(), update_fields)

    def prev_group(self) -> Cmd | None:
        prv = self._prev_visible(self.cursor)
        if prv is None:
            return None
        blur_cmd = self.current.blur_current()
        self.cursor = prv
        self._update_positions()
        logger.debug("Moved back to group %d", prv)
        return batch(blur_cmd, self.current.focus_last(), update_fields)

    def submit(self) -> Cmd:
        self.current.blur_current()
        self.state = FormState.COMPLETED
        if self.on_submit is not None:
            self.on_submit()
        return quit_form

    def abort(self) -> Cmd:
        self.state = FormState.ABORTED
        if self.on_cancel is not None:
            self.on_cancel()
        return quit_form

    # -- rendering ---------------------------------------------------------

    def view(self) -> StyleAndTextTuples:
        if self.config.layout == "stack":
            blocks = [self.groups[idx].view() for idx in self._visible()]
            return render.join_blocks(blocks, "\n\n")
        return self.current.view()

    # -- values ------------------------------------------------------------

    def _field(self, key: str) -> Field | None:
        return next((field for field in self.fields if field.key == key), None)

    def get(self, key: str, default: Any = None) -> Any:
        field = self._field(key)
        return default if field is None else field.get_value()

    def get_string(self, key: str) -> str:
        value = self.get(key)
        return value if isinstance(value, str) else ""

    def get_int(self, key: str) -> int:
        value = self.get(key)
        return value if isinstance(value, int) and not isinstance(value, bool) else 0

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        return value if isinstance(value, bool) else False

    def values(self) -> dict[str, Any]:
        return {field.key: field.get_value() for field in self.fields if field.key}

    # -- running -----------------------------------------------------------

    def run(self, *, console: Console | None = None, stream: IO[str] | None = None) -> None:
        """Run the form until it completes; raise if the user aborts it."""
        if self.config.accessible:
            self.run_accessible(console or Console(), stream)
        else:
            style = Style.from_dict(dict(self.config.theme.prompt_toolkit_style()))
            PromptToolkitRuntime(self, style=style).run()
        if self.state is FormState.ABORTED:
            raise FormAbortedError("Form was aborted by the user")

    def run_accessible(self, console: Console, stream: IO[str] | None = None) -> None:
        """Ask every visible field in turn with line-based prompts."""
        prompter = AccessiblePrompter(console, stream)
        for group in self.groups:
            if group.hidden():
                continue
            if group.title:
                prompter.say("title", group.title)
            if group.description:
                prompter.say("info", group.description)
            for field in group.fields:
                if not field.skip():
                    field.run_accessible(prompter)
        self.state = FormState.COMPLETED
        if self.on_submit is not None:
            self.on_submit()
