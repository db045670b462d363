"""prompt_toolkit event loop driving a form model."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.output import Output
from prompt_toolkit.styles import Style

from tf_ui.tui.core.messages import BatchMsg, Cmd, KeyPress, Msg, QuitMsg, is_sync
from tf_ui.tui.core.protocols import Model
from tf_ui.tui.core.theme import prompt_toolkit_form_style

logger = logging.getLogger(__name__)


def to_key_press(key: Any) -> KeyPress:
    """Translate a prompt_toolkit key (``Keys`` member or character)."""
    if isinstance(key, Keys):
        return KeyPress(key.value)
    return KeyPress(str(key))


class PromptToolkitRuntime:
    """Runs ``model`` inline in the terminal until it emits ``QuitMsg``.

    Key presses become :class:`KeyPress` messages. Commands listed as
    synchronous run inline on the event loop; everything else runs on a
    worker thread and its message is fed back on the loop.
    """

    def __init__(
        self,
        model: Model,
        *,
        style: Style | None = None,
        full_screen: bool = False,
        input: Input | None = None,
        output: Output | None = None,
    ) -> None:
        self.model = model
        self.control = FormattedTextControl(self._fragments, focusable=True, show_cursor=False)
        self.app: Application[None] = Application(
            layout=Layout(HSplit([Window(self.control, dont_extend_height=True)])),
            key_bindings=self._bindings(),
            style=style or Style.from_dict(dict(prompt_toolkit_form_style())),
            full_screen=full_screen,
            input=input,
            output=output,
        )

    def _fragments(self) -> StyleAndTextTuples:
        return self.model.view()

    def _bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("escape", "enter")
        def _(event: Any) -> None:
            self.dispatch(KeyPress("a-enter"))

        @kb.add(Keys.Any)
        def _(event: Any) -> None:
            for press in event.key_sequence:
                if press.key == Keys.BracketedPaste:
                    for char in press.data:
                        self.dispatch(KeyPress("enter" if char == "\n" else char))
                    continue
                self.dispatch(to_key_press(press.key))

        return kb

    def dispatch(self, msg: Msg) -> None:
        self.run_cmd(self.model.update(msg))
        self.app.invalidate()

    def run_cmd(self, cmd: Cmd | None) -> None:
        if cmd is None:
            return
        if not is_sync(cmd):
            self.app.create_background_task(self._run_async(cmd))
            return
        self._handle(cmd())

    async def _run_async(self, cmd: Cmd) -> None:
        msg = await asyncio.to_thread(cmd)
        self._handle(msg)
        self.app.invalidate()

    def _handle(self, msg: Msg | None) -> None:
        if msg is None:
            return
        if isinstance(msg, BatchMsg):
            for cmd in msg.cmds:
                self.run_cmd(cmd)
            return
        if isinstance(msg, QuitMsg):
            self._exit()
            return
        self.run_cmd(self.model.update(msg))

    def _exit(self) -> None:
        try:
            self.app.exit()
        except Exception as exc:  # pragma: no cover
            if "Return value already set" not in str(exc):
                raise

    def run(self) -> None:
        logger.debug("Starting prompt_toolkit runtime")
        self.app.run(pre_run=lambda: self.run_cmd(self.model.init()))
