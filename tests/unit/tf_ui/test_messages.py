import pytest

from tf_ui.tui.core.messages import (
    Batch,
    BatchMsg,
    KeyPress,
    NextFieldMsg,
    Tick,
    TickMsg,
    batch,
    is_sync,
    next_field,
    tick,
    update_fields,
)

pytestmark = pytest.mark.unit_ui


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(" ", "space"), ("c-i", "tab"), ("c-m", "enter"), ("c-h", "backspace"), ("a", "a")],
)
def test_key_press_normalizes_aliases(raw: str, expected: str) -> None:
    assert KeyPress(raw).key == expected


def test_key_press_text() -> None:
    assert KeyPress(" ").text == " "
    assert KeyPress("G").text == "G"
    assert KeyPress("up").text == ""
    assert KeyPress("c-a").text == ""


def test_batch_drops_empty_commands() -> None:
    assert batch() is None
    assert batch(None, None) is None
    assert batch(None, next_field) is next_field

    combined = batch(next_field, update_fields)
    assert isinstance(combined, Batch)
    msg = combined()
    assert isinstance(msg, BatchMsg)
    assert msg.cmds == (next_field, update_fields)
    assert next_field() == NextFieldMsg()


def test_is_sync_separates_work_from_navigation() -> None:
    assert is_sync(next_field)
    assert is_sync(batch(next_field, update_fields))
    assert not is_sync(lambda: None)
    assert not is_sync(tick(0.1, lambda: TickMsg(field_id=1, tag=1)))


def test_tick_yields_message() -> None:
    cmd = tick(0, lambda: TickMsg(field_id=3, tag=2))
    assert isinstance(cmd, Tick)
    assert cmd() == TickMsg(field_id=3, tag=2)
