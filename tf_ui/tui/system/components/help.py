from __future__ import annotations

from typing import Sequence

from prompt_toolkit.formatted_text import StyleAndTextTuples

from tf_ui.tui.core.keymap import Binding
from tf_ui.tui.core.theme import Theme

SEPARATOR = " • "


def short_help(bindings: Sequence[Binding], theme: Theme) -> StyleAndTextTuples:
    """One-line help for the enabled ``bindings``; empty when none apply."""
    frags: StyleAndTextTuples = []
    for binding in bindings:
        if not binding.enabled or not (binding.help_key or binding.help_desc):
            continue
        if frags:
            frags.append((theme.help_separator, SEPARATOR))
        frags.append((theme.help_key, binding.help_key))
        frags.append((theme.help_desc, f" {binding.help_desc}"))
    return frags
