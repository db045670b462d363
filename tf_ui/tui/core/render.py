"""Helpers for measuring and slicing prompt_toolkit formatted text."""

from __future__ import annotations

from typing import Iterable, Sequence

from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.formatted_text.utils import (
    fragment_list_to_text,
    split_lines,
)

NEWLINE: tuple[str, str] = ("", "\n")


def plain_text(fragments: StyleAndTextTuples) -> str:
    """Return the text of ``fragments`` without style information."""
    return fragment_list_to_text(fragments)


def height(fragments: StyleAndTextTuples) -> int:
    """Number of terminal rows ``fragments`` occupy (0 when empty)."""
    text = plain_text(fragments)
    if not text:
        return 0
    return text.count("\n") + 1


def lines(fragments: StyleAndTextTuples) -> list[StyleAndTextTuples]:
    """Split ``fragments`` into one fragment list per row."""
    if not fragments:
        return []
    return [list(line) for line in split_lines(fragments)]


def join_lines(rows: Iterable[StyleAndTextTuples]) -> StyleAndTextTuples:
    """Inverse of :func:`lines`."""
    out: StyleAndTextTuples = []
    for idx, row in enumerate(rows):
        if idx:
            out.append(NEWLINE)
        out.extend(row)
    return out


def join_blocks(
    blocks: Sequence[StyleAndTextTuples], separator: str = "\n"
) -> StyleAndTextTuples:
    """Concatenate rendered blocks, placing ``separator`` between them."""
    out: StyleAndTextTuples = []
    for idx, block in enumerate(blocks):
        if idx and separator:
            out.append(("", separator))
        out.extend(block)
    return out
