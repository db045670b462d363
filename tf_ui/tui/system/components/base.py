from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_common.errors import FieldValidationError
from tf_ui.tui.core import render
from tf_ui.tui.core.keymap import Binding, KeyMap
from tf_ui.tui.core.messages import Cmd, DeferredResultMsg, Msg, batch
from tf_ui.tui.core.theme import FieldStyles, Theme
from tf_ui.tui.system.accessible import AccessiblePrompter
from tf_ui.tui.system.deferred import Deferred, Eval
from tf_ui.tui.system.models import FieldPosition, next_id, resolve_accessor

Validator = Callable[[Any], Exception | str | None]


_DEFAULT_THEME = Theme()


def _no_validation(_value: Any) -> None:
    return None


class BaseField(ABC):
    """State and behaviour every field shares.

    Subclasses provide key handling, rendering, the key map section they
    use, and what "commit" means for their internal edit state.
    """

    def __init__(
        self,
        *,
        key: str = "",
        title: str | Deferred[str] = "",
        description: str | Deferred[str] = "",
        value: Any = None,
        default: Any = None,
        validate: Validator | None = None,
    ) -> None:
        self._id = next_id()
        self._key = key
        self.title: Eval[str] = Eval("")
        self.title.set(title)
        self.description: Eval[str] = Eval("")
        self.description.set(description)
        self.accessor = resolve_accessor(value, default)
        self._validate: Validator = validate or _no_validation
        self.err: Exception | None = None
        self.focused = False
        self.theme: Theme | None = None
        self.width = 0
        self.accessible = False
        self.position = FieldPosition()

    @property
    def id(self) -> int:
        return self._id

    @property
    def key(self) -> str:
        return self._key

    @property
    def error(self) -> Exception | None:
        """Validation error, else a failed deferred title or description."""
        return self.err or self.title.error or self.description.error

    def get_value(self) -> Any:
        return self.accessor.get()

    def skip(self) -> bool:
        return False

    def init(self) -> Cmd | None:
        return None

    def focus(self) -> Cmd | None:
        self.focused = True
        return None

    def blur(self) -> Cmd | None:
        self.focused = False
        self.commit()
        return None

    def run_validator(self, value: Any) -> Exception | None:
        """Run the user validator; a raised ``ValueError`` counts as a failure."""
        try:
            result = self._validate(value)
        except ValueError as exc:
            return FieldValidationError(str(exc), context={"field": self.key}, cause=exc)
        if result is None or isinstance(result, Exception):
            return result
        return FieldValidationError(str(result), context={"field": self.key})

    def validate(self) -> Exception | None:
        self.err = self.run_validator(self.get_value())
        return self.err

    @abstractmethod
    def commit(self) -> Exception | None:
        """Write the edit state to the bound value and validate it."""

    @abstractmethod
    def update(self, msg: Msg) -> Cmd | None: ...

    @abstractmethod
    def view(self) -> StyleAndTextTuples: ...

    @abstractmethod
    def key_binds(self) -> Sequence[Binding]: ...

    @abstractmethod
    def with_keymap(self, keymap: KeyMap) -> "BaseField": ...

    @abstractmethod
    def run_accessible(self, prompter: AccessiblePrompter) -> None:
        """Prompt for the value line by line, then commit it."""

    def with_theme(self, theme: Theme) -> "BaseField":
        if self.theme is None:
            self.theme = theme
        return self

    def with_width(self, width: int) -> "BaseField":
        self.width = width
        return self

    def with_height(self, height: int) -> "BaseField":
        return self

    def with_accessible(self, accessible: bool) -> "BaseField":
        self.accessible = accessible
        return self

    def with_position(self, position: FieldPosition) -> "BaseField":
        self.position = position
        return self

    def active_styles(self) -> FieldStyles:
        theme = self.theme if self.theme is not None else _DEFAULT_THEME
        return theme.styles(self.focused)

    def refresh_labels(self) -> Cmd | None:
        """Re-check deferred title and description bindings."""
        _, title_cmd = self.title.refresh(self.id, "title")
        _, desc_cmd = self.description.refresh(self.id, "description")
        return batch(title_cmd, desc_cmd)

    def resolve_labels(self) -> None:
        """Evaluate deferred title and description in place."""
        for attr, target in (("title", self.title), ("description", self.description)):
            _, cmd = target.refresh(self.id, attr)
            if cmd is not None:
                self.deliver_label(cmd())

    def announce(self, prompter: AccessiblePrompter) -> None:
        if self.title.val:
            prompter.say("title", self.title.val)
        if self.description.val:
            prompter.say("info", self.description.val)

    def deliver_label(self, msg: DeferredResultMsg) -> bool:
        target = {"title": self.title, "description": self.description}.get(msg.attr)
        if target is None:
            return False
        target.deliver(msg)
        return True

    def title_fragments(self, *, suffix: StyleAndTextTuples = ()) -> StyleAndTextTuples:
        styles = self.active_styles()
        frags: StyleAndTextTuples = [(styles.title, self.title.val)]
        frags.extend(suffix)
        if self.error is not None:
            frags.append((styles.error_indicator, styles.error_indicator_text))
        return frags

    def description_fragments(self) -> StyleAndTextTuples:
        if not self.description.val:
            return []
        return [(self.active_styles().description, self.description.val)]

    def header_fragments(self, title: StyleAndTextTuples | None = None) -> StyleAndTextTuples:
        """Title and description rows, each followed by a newline."""
        out: StyleAndTextTuples = []
        if self.title.val or self.title.is_dynamic or title:
            out.extend(title if title is not None else self.title_fragments())
            out.append(render.NEWLINE)
        if self.description.val or self.description.is_dynamic:
            out.extend(self.description_fragments())
            out.append(render.NEWLINE)
        return out
