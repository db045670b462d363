from __future__ import annotations

from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_ui.tui.core import render


class Viewport:
    """A window of ``height`` rows over a list of rendered rows."""

    def __init__(self, height: int = 0) -> None:
        self.height = max(0, height)
        self.y_offset = 0
        self._rows: list[StyleAndTextTuples] = []

    @property
    def total_rows(self) -> int:
        return len(self._rows)

    def max_y_offset(self, total: int | None = None) -> int:
        rows = self.total_rows if total is None else total
        return max(0, rows - self.height)

    def set_content(self, fragments: StyleAndTextTuples) -> None:
        self._rows = render.lines(fragments)

    def set_y_offset(self, offset: int, total: int | None = None) -> None:
        self.y_offset = max(0, min(offset, self.max_y_offset(total)))

    def goto_top(self) -> None:
        self.y_offset = 0

    def goto_bottom(self, total: int | None = None) -> None:
        self.y_offset = self.max_y_offset(total)

    def ensure_visible(self, top: int, bottom: int | None = None) -> None:
        """Scroll by the smallest amount that shows rows ``top..bottom``.

        When the block is taller than the viewport its top row wins.
        """
        bottom = top if bottom is None else bottom
        if self.height <= 0:
            return
        if bottom >= self.y_offset + self.height:
            self.y_offset = bottom - self.height + 1
        if top < self.y_offset:
            self.y_offset = top
        self.y_offset = max(0, self.y_offset)

    def visible_rows(self) -> list[StyleAndTextTuples]:
        if self.height <= 0:
            return list(self._rows)
        window = self._rows[self.y_offset : self.y_offset + self.height]
        # Keep the rendered height stable when content is short.
        return window + [[] for _ in range(self.height - len(window))]

    def view(self) -> StyleAndTextTuples:
        return render.join_lines(self.visible_rows())
