from __future__ import annotations

from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_ui.tui.core.messages import Cmd, TickMsg, tick

LINE_FRAMES: tuple[str, ...] = ("|", "/", "-", "\\")
LINE_INTERVAL = 0.1


class Spinner:
    """Frame spinner advanced by :class:`TickMsg` messages.

    Each spinner carries a tag that is bumped whenever a new tick chain is
    started, so ticks from an abandoned chain are ignored.
    """

    def __init__(
        self,
        field_id: int,
        frames: tuple[str, ...] = LINE_FRAMES,
        interval: float = LINE_INTERVAL,
    ) -> None:
        self.field_id = field_id
        self.frames = frames
        self.interval = interval
        self.frame = 0
        self.tag = 0
        self.style = ""

    def start(self) -> Cmd:
        self.tag += 1
        return self._tick_cmd()

    def _tick_cmd(self) -> Cmd:
        field_id, tag = self.field_id, self.tag
        return tick(self.interval, lambda: TickMsg(field_id=field_id, tag=tag))

    def update(self, msg: TickMsg) -> Cmd | None:
        if msg.field_id != self.field_id or msg.tag != self.tag:
            return None
        self.frame = (self.frame + 1) % len(self.frames)
        return self._tick_cmd()

    def view(self) -> StyleAndTextTuples:
        return [(self.style, self.frames[self.frame])]
