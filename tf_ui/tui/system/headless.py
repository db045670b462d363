from __future__ import annotations

from dataclasses import dataclass, field

from tf_ui.tui.core import render
from tf_ui.tui.core.messages import BatchMsg, Cmd, KeyPress, Msg, QuitMsg, Tick, is_sync
from tf_ui.tui.core.protocols import Model


@dataclass
class HeadlessDriver:
    """Feeds scripted key presses to a model without a terminal.

    Commands run inline. Spinner ticks are dropped unless ``run_ticks`` is
    set, and with ``run_commands=False`` asynchronous commands are parked in
    ``pending`` so a test can run them in any order.
    """

    model: Model
    run_ticks: bool = False
    run_commands: bool = True
    pending: list[Cmd] = field(default_factory=list)
    delivered: list[Msg] = field(default_factory=list)
    quit: bool = False

    def start(self) -> "HeadlessDriver":
        self.run_cmd(self.model.init())
        return self

    def press(self, *keys: str) -> "HeadlessDriver":
        for key in keys:
            if self.quit:
                break
            self.send(KeyPress(key))
        return self

    def type(self, text: str) -> "HeadlessDriver":
        return self.press(*text)

    def send(self, msg: Msg) -> None:
        self.delivered.append(msg)
        self.run_cmd(self.model.update(msg))

    def run_cmd(self, cmd: Cmd | None) -> None:
        if cmd is None:
            return
        if isinstance(cmd, Tick) and not self.run_ticks:
            return
        if not is_sync(cmd) and not self.run_commands:
            self.pending.append(cmd)
            return
        self._handle(cmd())

    def run_pending(self, index: int = 0) -> Msg | None:
        """Run one parked command and deliver its message."""
        cmd = self.pending.pop(index)
        msg = cmd()
        self._handle(msg)
        return msg

    def flush(self) -> None:
        while self.pending:
            self.run_pending()

    def _handle(self, msg: Msg | None) -> None:
        if msg is None:
            return
        if isinstance(msg, BatchMsg):
            for cmd in msg.cmds:
                self.run_cmd(cmd)
            return
        if isinstance(msg, QuitMsg):
            self.quit = True
            return
        self.send(msg)

    def render(self) -> str:
        return render.plain_text(self.model.view())
