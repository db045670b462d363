import pytest
from prompt_toolkit.styles import Style

from tf_common.errors import ConfigurationError
from tf_ui.tui.core import render
from tf_ui.tui.core.config import FormConfig
from tf_ui.tui.core.keymap import Binding, KeyMap
from tf_ui.tui.core.messages import KeyPress
from tf_ui.tui.core.theme import ERROR_COLOR, Theme, accessible_message, style_classes
from tf_ui.tui.system.components.help import short_help

pytestmark = pytest.mark.unit_ui


def test_short_help_skips_disabled_bindings() -> None:
    bindings = [
        Binding(keys=("x",), help_key="x", help_desc="toggle"),
        Binding(keys=("/",), help_key="/", help_desc="filter", enabled=False),
        Binding(keys=("enter",), help_key="enter", help_desc="submit"),
        Binding(keys=("c-z",)),
    ]
    text = render.plain_text(short_help(bindings, Theme()))
    assert text == "x toggle • enter submit"


def test_short_help_empty_when_nothing_enabled() -> None:
    assert short_help([Binding(keys=("x",), enabled=False)], Theme()) == []


def test_binding_matches_only_when_enabled() -> None:
    binding = Binding(keys=("space", "x"))
    assert binding.matches(KeyPress(" "))
    binding.set_enabled(False)
    assert not binding.matches(KeyPress("x"))


def test_keymap_sections_are_independent_copies() -> None:
    keymap = KeyMap()
    copy = keymap.text.model_copy(deep=True)
    copy.next.set_enabled(False)
    assert keymap.text.next.enabled


def test_theme_switches_on_focus() -> None:
    theme = Theme()
    assert theme.styles(True) is theme.focused
    assert theme.styles(False) is theme.blurred
    assert "focused.title" in theme.prompt_toolkit_style()


def test_default_theme_style_rules() -> None:
    rules = Theme().prompt_toolkit_style()
    assert rules["focused.title"] == "#5a56e0 bold"
    assert rules["blurred.error"] == ERROR_COLOR
    assert rules["help.key"] == "#909090"
    Style.from_dict(dict(rules))


def test_style_rules_follow_theme_fields() -> None:
    theme = Theme()
    theme.focused.title = "class:brand.heading"
    theme.focused.colors["title"] = "#ff0000 bold"
    theme.colors["group_title"] = "underline"

    rules = theme.prompt_toolkit_style()
    assert rules["brand.heading"] == "#ff0000 bold"
    assert "focused.title" not in rules
    assert rules["group.title"] == "underline"
    assert Theme().prompt_toolkit_style()["focused.title"] == "#5a56e0 bold"


def test_style_classes_reads_class_lists() -> None:
    assert style_classes("class:a,b bold class:c") == ["a", "b", "c"]
    assert style_classes("reverse") == []


def test_accessible_message_escapes_markup() -> None:
    assert accessible_message("error", "[bad]") == "[red]✖ \\[bad][/red]"
    assert accessible_message("unknown", "plain") == "plain"


def test_config_from_env() -> None:
    config = FormConfig.from_env(
        {"TF_ACCESSIBLE": "yes", "TF_FORM_WIDTH": "100", "TF_FORM_HEIGHT": "junk"}
    )
    assert config.accessible is True
    assert config.width == 100
    assert config.height == 0


def test_config_overrides_win_over_env() -> None:
    config = FormConfig.from_env({"TF_ACCESSIBLE": "1"}, accessible=False, layout="stack")
    assert config.accessible is False
    assert config.layout == "stack"


def test_config_rejects_negative_height() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        FormConfig.from_env({"TF_FORM_HEIGHT": "-3"})
    assert excinfo.value.context == {"fields": ["height"]}
