from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Sequence

from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_ui.tui.core.keymap import Binding, KeyMap
from tf_ui.tui.core.messages import Cmd, Msg
from tf_ui.tui.core.theme import Theme

if TYPE_CHECKING:
    from tf_ui.tui.system.accessible import AccessiblePrompter
    from tf_ui.tui.system.models import FieldPosition


class Model(Protocol):
    def init(self) -> Cmd | None: ...

    def update(self, msg: Msg) -> Cmd | None: ...

    def view(self) -> StyleAndTextTuples: ...


class Field(Model, Protocol):
    @property
    def id(self) -> int: ...

    @property
    def key(self) -> str: ...

    @property
    def error(self) -> Exception | None: ...

    def focus(self) -> Cmd | None: ...

    def blur(self) -> Cmd | None: ...

    def commit(self) -> Exception | None: ...

    def validate(self) -> Exception | None: ...

    def get_value(self) -> Any: ...

    def key_binds(self) -> Sequence[Binding]: ...

    def skip(self) -> bool: ...

    def with_theme(self, theme: Theme) -> "Field": ...

    def with_keymap(self, keymap: KeyMap) -> "Field": ...

    def with_width(self, width: int) -> "Field": ...

    def with_height(self, height: int) -> "Field": ...

    def with_accessible(self, accessible: bool) -> "Field": ...

    def with_position(self, position: "FieldPosition") -> "Field": ...

    def run_accessible(self, prompter: "AccessiblePrompter") -> None: ...
