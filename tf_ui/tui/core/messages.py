"""Message and command vocabulary shared by fields, groups and forms.

Models never call each other's navigation methods directly. A field that
wants to move on returns the :func:`next_field` command; the runtime
executes it and feeds the resulting :class:`NextFieldMsg` back through the
form, which hands it to the active group. The group either moves its own
cursor or answers with :func:`next_group`, which the form consumes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeAlias

Msg: TypeAlias = Any
Cmd: TypeAlias = Callable[[], Optional[Msg]]

_KEY_ALIASES = {
    " ": "space",
    "c-i": "tab",
    "c-m": "enter",
    "c-h": "backspace",
    "c-@": "c-space",
}


@dataclass(frozen=True)
class KeyPress:
    """A single key press, named with prompt_toolkit key names."""

    key: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", _KEY_ALIASES.get(self.key, self.key))

    @property
    def text(self) -> str:
        """Printable text carried by the key, or an empty string."""
        if self.key == "space":
            return " "
        if len(self.key) == 1 and self.key.isprintable():
            return self.key
        return ""

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class NextFieldMsg:
    """Advance: move focus forward inside the active group."""


@dataclass(frozen=True)
class PrevFieldMsg:
    """Retreat: move focus backward inside the active group."""


@dataclass(frozen=True)
class NextGroupMsg:
    """Advance forwarded by a group from its last field."""


@dataclass(frozen=True)
class PrevGroupMsg:
    """Retreat forwarded by a group from its first field."""


@dataclass(frozen=True)
class QuitMsg:
    """The form reached a terminal state; the runtime should stop."""


@dataclass(frozen=True)
class UpdateFieldsMsg:
    """Ask fields to re-check their deferred values."""


@dataclass(frozen=True)
class BatchMsg:
    cmds: tuple[Cmd, ...]


@dataclass(frozen=True)
class FieldMsg:
    """Base for messages addressed to a single field."""

    field_id: int


@dataclass(frozen=True)
class DeferredResultMsg(FieldMsg):
    """Result of a deferred title/description/options evaluation."""

    attr: str
    hash: int
    value: Any = None
    error: Exception | None = None


@dataclass(frozen=True)
class TickMsg(FieldMsg):
    """Spinner animation tick."""

    tag: int


def next_field() -> NextFieldMsg:
    return NextFieldMsg()


def prev_field() -> PrevFieldMsg:
    return PrevFieldMsg()


def next_group() -> NextGroupMsg:
    return NextGroupMsg()


def prev_group() -> PrevGroupMsg:
    return PrevGroupMsg()


def quit_form() -> QuitMsg:
    return QuitMsg()


def update_fields() -> UpdateFieldsMsg:
    return UpdateFieldsMsg()


class Batch:
    """Command grouping several commands that run independently."""

    def __init__(self, cmds: tuple[Cmd, ...]) -> None:
        self.cmds = cmds

    def __call__(self) -> BatchMsg:
        return BatchMsg(self.cmds)


class Tick:
    """Command that sleeps for ``interval`` seconds and then yields a message."""

    def __init__(self, interval: float, make_msg: Callable[[], Msg]) -> None:
        self.interval = interval
        self._make_msg = make_msg

    def __call__(self) -> Msg:
        time.sleep(self.interval)
        return self._make_msg()


def batch(*cmds: Cmd | None) -> Cmd | None:
    valid = tuple(cmd for cmd in cmds if cmd is not None)
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return Batch(valid)


def tick(interval: float, make_msg: Callable[[], Msg]) -> Cmd:
    return Tick(interval, make_msg)


# Commands that do no work beyond building a message; runtimes run these
# inline so navigation is never reordered behind later key presses.
SYNC_COMMANDS: frozenset[Cmd] = frozenset(
    {next_field, prev_field, next_group, prev_group, quit_form, update_fields}
)


def is_sync(cmd: Cmd) -> bool:
    return isinstance(cmd, Batch) or cmd in SYNC_COMMANDS
