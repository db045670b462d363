"""MultiSelect selection, filtering and scrolling behaviour."""

import pytest

from tf_common.errors import (
    ConfigurationError,
    DeferredEvaluationError,
    FieldValidationError,
    SelectionLimitError,
)
from tf_ui.tui.core.messages import UpdateFieldsMsg
from tf_ui.tui.system.components.form import Form, FormState
from tf_ui.tui.system.components.group import Group
from tf_ui.tui.system.components.multi_select import MultiSelect
from tf_ui.tui.system.components.option_list import CursorMove
from tf_ui.tui.system.deferred import Deferred
from tf_ui.tui.system.headless import HeadlessDriver
from tf_ui.tui.system.models import Option, Ref

pytestmark = pytest.mark.unit_ui


def _keys(field: MultiSelect) -> list[str]:
    return [option.key for option in field.filtered_options]


def _fruits(**kwargs) -> MultiSelect[str]:
    return MultiSelect(Option.of("Apple", "Banana", "Cherry"), **kwargs)


def test_limit_blocks_extra_selection() -> None:
    field = MultiSelect(Option.of("A", "B", "C"), limit=2)
    field.toggle_select(0)
    field.toggle_select(1)

    with pytest.raises(SelectionLimitError):
        field.toggle_select(2)

    assert [o.key for o in field.selected_options] == ["A", "B"]


def test_limit_rejection_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    field = MultiSelect(Option.of("A", "B"), key="picks", limit=1)
    field.toggle_select(0)
    caplog.set_level("DEBUG", logger="tf_ui.tui.system.components.multi_select")

    with pytest.raises(SelectionLimitError) as excinfo:
        field.toggle_select(1)

    assert excinfo.value.context == {"field": "picks", "limit": 1}
    assert "'error_type': 'SelectionLimitError'" in caplog.text


def test_deselect_never_fails_at_limit() -> None:
    field = MultiSelect(Option.of("A", "B"), limit=1)
    field.toggle_select(0)
    field.toggle_select(0)
    field.toggle_select(1)
    assert field.selected_values() == ["B"]


def test_negative_limit_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        MultiSelect(Option.of("A"), limit=-1)
    with pytest.raises(ConfigurationError):
        MultiSelect(Option.of("A"), height=-2)


def test_filter_round_trip_restores_order() -> None:
    field = _fruits()
    field.set_filtering(True)
    field.set_filter_text("an")
    assert _keys(field) == ["Banana"]

    field.clear_filter()
    assert _keys(field) == ["Apple", "Banana", "Cherry"]
    assert field.filtering is False


def test_filter_is_case_insensitive_substring() -> None:
    field = MultiSelect(Option.of("Éclair", "eclipse", "ECHO"))
    field.set_filter_text("EC")
    assert _keys(field) == ["eclipse", "ECHO"]


def test_leaving_filter_mode_keeps_applied_filter() -> None:
    field = _fruits()
    field.set_filtering(True)
    field.set_filter_text("err")
    field.set_filtering(False)
    assert _keys(field) == ["Cherry"]
    assert field.filter_text == "err"


def test_empty_filter_result_keeps_cursor() -> None:
    field = _fruits()
    field.move_cursor(CursorMove.BOTTOM)
    field.set_filter_text("zzz")
    assert field.filtered_options == []
    assert field.cursor == 2
    field.move_cursor(CursorMove.UP)
    assert field.cursor == 2


def test_cursor_is_clamped_after_filtering() -> None:
    field = _fruits()
    field.move_cursor(CursorMove.BOTTOM)
    field.set_filter_text("a")
    assert _keys(field) == ["Apple", "Banana"]
    assert field.cursor == 1


def test_selection_follows_options_through_filter() -> None:
    field = _fruits()
    field.set_filter_text("Cherry")
    field.toggle_select(0)
    field.clear_filter()
    assert field.selected_values() == ["Cherry"]


def test_toggle_all_uses_filtered_options() -> None:
    field = _fruits()
    field.set_filter_text("an")
    field.toggle_all()
    assert field.selected_values() == ["Banana"]

    field.clear_filter()
    field.toggle_all()
    assert field.selected_values() == ["Apple", "Banana", "Cherry"]
    field.toggle_all()
    assert field.selected_values() == []


def test_toggle_all_requires_unbounded_limit() -> None:
    field = _fruits(limit=2)
    with pytest.raises(SelectionLimitError):
        field.toggle_all()


@pytest.mark.parametrize(
    "moves",
    [
        [CursorMove.DOWN] * 7,
        [CursorMove.HALF_DOWN] * 3,
        [CursorMove.BOTTOM, CursorMove.UP, CursorMove.HALF_UP],
        [CursorMove.BOTTOM, CursorMove.TOP, CursorMove.DOWN],
    ],
)
def test_cursor_stays_visible(moves: list[CursorMove]) -> None:
    field = MultiSelect(Option.of(*range(20)), height=5)
    for move in moves:
        field.move_cursor(move)
        offset = field.viewport.y_offset
        assert offset <= field.cursor < offset + field.viewport.height


def test_scroll_is_minimal_and_edges_snap() -> None:
    field = MultiSelect(Option.of(*range(20)), height=5)
    for _ in range(7):
        field.move_cursor(CursorMove.DOWN)
    assert (field.cursor, field.viewport.y_offset) == (7, 3)

    field.move_cursor(CursorMove.HALF_DOWN)
    assert (field.cursor, field.viewport.y_offset) == (9, 5)

    field.move_cursor(CursorMove.BOTTOM)
    assert (field.cursor, field.viewport.y_offset) == (19, 15)

    field.move_cursor(CursorMove.UP)
    assert field.viewport.y_offset == 15

    field.move_cursor(CursorMove.TOP)
    assert (field.cursor, field.viewport.y_offset) == (0, 0)


def test_viewport_excludes_title_rows() -> None:
    field = MultiSelect(Option.of(*range(20)), title="Numbers", height=5)
    assert field.viewport.height == 4


def test_set_options_reseeds_selection_and_cursor() -> None:
    field = _fruits()
    field.set_filter_text("an")
    field.set_options(
        [Option("x", 1), Option("y", 2, selected=True), Option("z", 3, selected=True)]
    )
    assert field.filter_text == ""
    assert _keys(field) == ["x", "y", "z"]
    assert field.selected_values() == [2, 3]
    assert field.cursor == 1


def test_bound_value_seeds_selection() -> None:
    ref = Ref(["Cherry"])
    field = _fruits(value=ref)
    assert field.selected_values() == ["Cherry"]
    assert field.cursor == 2


def test_commit_is_idempotent_and_writes_only_on_commit() -> None:
    ref: Ref[list[str]] = Ref([])
    field = _fruits(value=ref, validate=lambda v: None if len(v) >= 2 else "pick two")
    field.toggle_select(2)
    field.toggle_select(0)
    assert ref.value == []

    first = field.commit()
    assert ref.value == ["Apple", "Cherry"]
    assert first is None
    assert field.commit() is None
    assert ref.value == ["Apple", "Cherry"]

    field.toggle_select(0)
    err = field.commit()
    assert isinstance(err, FieldValidationError)
    again = field.commit()
    assert str(again) == str(err)
    assert ref.value == ["Cherry"]


def test_duplicate_keys_are_tracked_by_position() -> None:
    field = MultiSelect([Option("same", 1), Option("same", 2)])
    field.toggle_select(1)
    assert field.selected_values() == [2]


class TestKeyHandling:
    def _drive(self, field: MultiSelect) -> HeadlessDriver:
        return HeadlessDriver(Form(Group(field))).start()

    def test_toggle_and_move_keys(self) -> None:
        field = _fruits(key="fruit")
        driver = self._drive(field)
        driver.press("x", "j", "j", "space", "k", "g")
        assert field.selected_values() == ["Apple", "Cherry"]
        assert field.cursor == 0

    def test_limit_error_is_inline_and_transient(self) -> None:
        field = _fruits(limit=1)
        driver = self._drive(field)
        driver.press("x", "j", "x")
        assert field.selected_values() == ["Apple"]
        assert "You can only select up to 1 options" in driver.render()

        driver.press("j")
        assert "You can only select up to 1 options" not in driver.render()

    def test_filter_keys(self) -> None:
        field = _fruits()
        driver = self._drive(field)
        driver.press("/")
        assert field.filtering
        driver.type("an")
        assert _keys(field) == ["Banana"]

        driver.press("enter")
        assert not field.filtering
        assert _keys(field) == ["Banana"]
        assert driver.quit is False

        driver.press("escape")
        assert field.filter_text == ""
        assert _keys(field) == ["Apple", "Banana", "Cherry"]

    def test_navigation_letters_go_to_filter_text(self) -> None:
        field = _fruits()
        driver = self._drive(field)
        driver.press("/", "j", "k", "x")
        assert field.filter_text == "jkx"
        assert field.selected_values() == []

    def test_leaving_filter_without_matches_clears_it(self) -> None:
        field = _fruits()
        driver = self._drive(field)
        driver.press("/")
        driver.type("zz")
        assert field.filtered_options == []
        driver.press("enter")
        assert field.filter_text == ""
        assert _keys(field) == ["Apple", "Banana", "Cherry"]

    def test_select_all_key(self) -> None:
        field = _fruits()
        driver = self._drive(field)
        driver.press("c-a")
        assert len(field.selected_values()) == 3

    def test_enter_submits_selection(self) -> None:
        field = _fruits(key="fruit")
        form = Form(Group(field))
        driver = HeadlessDriver(form).start()
        driver.press("j", "x", "enter")
        assert driver.quit
        assert form.get("fruit") == ["Banana"]

    def test_view_marks_cursor_and_selection(self) -> None:
        field = _fruits(title="Fruit")
        driver = self._drive(field)
        driver.press("x", "j")
        lines = driver.render().splitlines()
        assert lines[0] == "Fruit"
        assert lines[1] == "  [•] Apple"
        assert lines[2] == "> [ ] Banana"


class TestDeferredOptions:
    def _counting(self, ref: Ref[list[str]]):
        calls: list[tuple[str, ...]] = []

        def load() -> list[Option[str]]:
            calls.append(tuple(ref.value))
            return Option.of(*ref.value)

        return load, calls

    def test_options_load_through_commands(self) -> None:
        ref: Ref[list[str]] = Ref(["A", "B"])
        load, calls = self._counting(ref)
        field = MultiSelect(Deferred(load, ref))
        HeadlessDriver(Form(Group(field))).start()

        assert _keys(field) == ["A", "B"]
        assert calls == [("A", "B")]
        assert field.viewport.height == 10

    def test_spinner_shows_while_loading(self) -> None:
        ref: Ref[list[str]] = Ref(["A"])
        load, _ = self._counting(ref)
        field = MultiSelect(Deferred(load, ref))
        driver = HeadlessDriver(Form(Group(field)), run_commands=False).start()

        assert field.options.loading
        assert "Loading..." not in driver.render()
        field.options.loading_start -= 1.0
        assert "Loading..." in driver.render()

        driver.flush()
        assert "Loading..." not in driver.render()
        assert "[ ] A" in driver.render()

    def test_stale_result_is_dropped(self) -> None:
        ref: Ref[str] = Ref("old")
        calls: list[str] = []

        def load() -> list[Option[str]]:
            calls.append(ref.value)
            return Option.of(f"call {len(calls)}")

        field = MultiSelect(Deferred(load, ref))
        driver = HeadlessDriver(Form(Group(field)), run_commands=False).start()

        ref.value = "new"
        driver.send(UpdateFieldsMsg())
        assert len(driver.pending) == 2

        driver.run_pending(1)
        assert _keys(field) == ["call 1"]
        driver.run_pending(0)
        assert _keys(field) == ["call 1"]
        assert len(calls) == 2
        assert not field.options.loading

    def test_cached_bindings_skip_evaluation(self) -> None:
        ref: Ref[list[str]] = Ref(["A"])
        load, calls = self._counting(ref)
        field = MultiSelect(Deferred(load, ref))
        driver = HeadlessDriver(Form(Group(field))).start()

        ref.value = ["B"]
        driver.send(UpdateFieldsMsg())
        ref.value = ["A"]
        driver = HeadlessDriver(driver.model, run_commands=False)
        driver.send(UpdateFieldsMsg())

        assert driver.pending == []
        assert _keys(field) == ["A"]
        assert calls == [("A",), ("B",)]

    def test_selection_survives_reload(self) -> None:
        ref: Ref[list[str]] = Ref(["A", "B", "C"])
        load, _ = self._counting(ref)
        field = MultiSelect(Deferred(load, ref))
        driver = HeadlessDriver(Form(Group(field))).start()
        driver.press("j", "x")

        ref.value = ["B", "C", "D"]
        driver.send(UpdateFieldsMsg())
        assert _keys(field) == ["B", "C", "D"]
        assert field.selected_values() == ["B"]

    def test_failed_load_is_reported_on_the_field(self) -> None:
        def boom() -> list[Option[str]]:
            raise RuntimeError("backend down")

        field = MultiSelect(Deferred(boom, "static"), title="Pick")
        driver = HeadlessDriver(Form(Group(field))).start()

        assert isinstance(field.error, DeferredEvaluationError)
        assert "backend down" in str(field.error)
        assert field.filtered_options == []
        assert "* Could not load options" in driver.render()

    def test_failed_load_survives_key_presses(self) -> None:
        def boom() -> list[Option[str]]:
            raise RuntimeError("backend down")

        field = MultiSelect(Deferred(boom, "static"), title="Pick")
        driver = HeadlessDriver(Form(Group(field))).start()
        driver.press("j", "x")

        assert isinstance(field.error, DeferredEvaluationError)
        assert "* Could not load options" in driver.render()

    def test_failed_load_blocks_submit(self) -> None:
        def boom() -> list[Option[str]]:
            raise RuntimeError("backend down")

        field = MultiSelect(Deferred(boom, "static"), key="picks")
        form = Form(Group(field))
        driver = HeadlessDriver(form).start()
        driver.press("enter")

        assert not driver.quit
        assert form.state is FormState.NORMAL
        assert isinstance(field.error, DeferredEvaluationError)

    def test_error_clears_once_a_reload_succeeds(self) -> None:
        backend: Ref[str] = Ref("down")

        def load() -> list[Option[str]]:
            if backend.value == "down":
                raise RuntimeError("backend down")
            return Option.of("A", "B")

        field = MultiSelect(Deferred(load, backend))
        driver = HeadlessDriver(Form(Group(field))).start()
        assert field.error is not None

        backend.value = "up"
        driver.send(UpdateFieldsMsg())

        assert field.error is None
        assert _keys(field) == ["A", "B"]
        assert "Could not load" not in driver.render()
