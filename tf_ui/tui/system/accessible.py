"""Line-based prompts used when a form runs in accessible mode."""

from __future__ import annotations

from typing import IO, Callable

from rich.console import Console
from rich.prompt import IntPrompt, Prompt

from tf_ui.tui.core.theme import accessible_message


class AccessiblePrompter:
    """Thin wrapper over ``rich.prompt`` bound to one console and stream."""

    def __init__(self, console: Console, stream: IO[str] | None = None) -> None:
        self._console = console
        self._stream = stream

    @property
    def console(self) -> Console:
        return self._console

    def say(self, level: str, message: str) -> None:
        self._console.print(accessible_message(level, message))

    def ask_int(self, prompt: str, low: int, high: int) -> int:
        """Ask until the answer is an integer within ``low..high``."""
        while True:
            value = IntPrompt.ask(prompt, console=self._console, stream=self._stream)
            if low <= value <= high:
                return value
            self.say("error", f"Please enter a number between {low} and {high}.")

    def ask_text(
        self,
        prompt: str,
        check: Callable[[str], Exception | None],
        default: str | None = None,
    ) -> str:
        """Ask until ``check`` accepts the answer."""
        kwargs = {}
        if default:
            kwargs["default"] = default
        while True:
            value = Prompt.ask(prompt, console=self._console, stream=self._stream, **kwargs)
            err = check(value)
            if err is None:
                return value
            self.say("error", str(err))
