import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import DummyOutput

from tf_ui.tui.adapters.prompt_toolkit_runtime import PromptToolkitRuntime, to_key_press
from tf_ui.tui.core.messages import (
    KeyPress,
    NextFieldMsg,
    UpdateFieldsMsg,
    batch,
    next_field,
    update_fields,
)
from tf_ui.tui.system.components.form import Form, FormState
from tf_ui.tui.system.components.group import Group
from tf_ui.tui.system.components.text import Text

pytestmark = pytest.mark.unit_ui


class RecordingModel:
    def __init__(self) -> None:
        self.seen = []

    def init(self):
        return None

    def update(self, msg):
        self.seen.append(msg)
        if msg == KeyPress("n"):
            return batch(next_field, update_fields)
        return None

    def view(self):
        return [("", "recording")]


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        (Keys.ControlM, "enter"),
        (Keys.ControlI, "tab"),
        (Keys.BackTab, "s-tab"),
        (Keys.Up, "up"),
        (" ", "space"),
        ("q", "q"),
    ],
)
def test_to_key_press(key, expected: str) -> None:
    assert to_key_press(key) == KeyPress(expected)


def test_dispatch_runs_sync_commands_inline() -> None:
    model = RecordingModel()
    with create_pipe_input() as pipe:
        runtime = PromptToolkitRuntime(model, input=pipe, output=DummyOutput())
        runtime.dispatch(KeyPress("n"))
    assert model.seen == [KeyPress("n"), NextFieldMsg(), UpdateFieldsMsg()]


def test_run_completes_form_from_piped_keys() -> None:
    form = Form(Group(Text(key="name")))
    with create_pipe_input() as pipe:
        pipe.send_text("Ada\r")
        PromptToolkitRuntime(form, input=pipe, output=DummyOutput()).run()
    assert form.state is FormState.COMPLETED
    assert form.get("name") == "Ada"
