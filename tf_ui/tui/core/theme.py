from __future__ import annotations

from typing import Mapping

from pydantic import BaseModel, Field
from rich.markup import escape

ACCENT = "#5a56e0"
ACCENT_BOLD = f"{ACCENT} bold"
ERROR_COLOR = "#ff4672"
MUTED = "#777777"
SELECTED_COLOR = "#02bf87"

# Rich markup used by the line-based (accessible) renderer.
ACCESSIBLE_TEMPLATES: dict[str, str] = {
    "title": "[bold]{message}[/bold]",
    "selected": "[green]{message}[/green]",
    "error": "[red]✖ {message}[/red]",
    "info": "[dim]{message}[/dim]",
}


class FieldStyles(BaseModel):
    """Style classes and glyphs for one focus state of a field.

    ``colors`` maps a style attribute name (``title``, ``option``...) to the
    prompt_toolkit style applied to the class that attribute names.
    """

    base: str
    title: str
    description: str
    error_indicator: str
    error_indicator_text: str = " *"
    error_message: str
    select_selector: str = "> "
    option: str
    multi_select_selector: str = "> "
    selected_option: str
    selected_prefix: str = "[•] "
    unselected_option: str
    unselected_prefix: str = "[ ] "
    text: str
    placeholder: str
    cursor: str
    filter_prompt: str
    filter_prompt_text: str = "/"
    spinner: str
    colors: dict[str, str] = Field(default_factory=dict)


FIELD_STYLE_ROLES = (
    "base",
    "title",
    "description",
    "error_indicator",
    "error_message",
    "option",
    "selected_option",
    "unselected_option",
    "text",
    "placeholder",
    "cursor",
    "filter_prompt",
    "spinner",
)
THEME_STYLE_ROLES = ("help_key", "help_desc", "help_separator", "group_title", "group_description")

FOCUSED_COLORS: dict[str, str] = {
    "title": ACCENT_BOLD,
    "description": MUTED,
    "error_indicator": ERROR_COLOR,
    "error_message": ERROR_COLOR,
    "selected_option": SELECTED_COLOR,
    "placeholder": MUTED,
    "cursor": "reverse",
    "filter_prompt": ACCENT,
    "spinner": ACCENT,
}
BLURRED_COLORS: dict[str, str] = {
    "title": "bold",
    "description": MUTED,
    "error_indicator": ERROR_COLOR,
    "error_message": ERROR_COLOR,
    "option": MUTED,
    "selected_option": SELECTED_COLOR,
    "unselected_option": MUTED,
    "text": MUTED,
    "placeholder": MUTED,
    "filter_prompt": MUTED,
    "spinner": MUTED,
}
THEME_COLORS: dict[str, str] = {
    "help_key": "#909090",
    "help_desc": "#b2b2b2",
    "help_separator": "#dddada",
    "group_title": ACCENT_BOLD,
    "group_description": MUTED,
}


def _field_styles(scope: str, colors: dict[str, str]) -> FieldStyles:
    return FieldStyles(
        base=f"class:{scope}.base",
        title=f"class:{scope}.title",
        description=f"class:{scope}.description",
        error_indicator=f"class:{scope}.error",
        error_message=f"class:{scope}.error",
        option=f"class:{scope}.option",
        selected_option=f"class:{scope}.selected",
        unselected_option=f"class:{scope}.option",
        text=f"class:{scope}.text",
        placeholder=f"class:{scope}.placeholder",
        cursor=f"class:{scope}.cursor",
        filter_prompt=f"class:{scope}.filter",
        spinner=f"class:{scope}.spinner",
        colors=dict(colors),
    )


def style_classes(style: str) -> list[str]:
    """Class names referenced by a fragment style such as ``class:a,b bold``."""
    names: list[str] = []
    for part in style.split():
        if part.startswith("class:"):
            names.extend(name for name in part[len("class:"):].split(",") if name)
    return names


class Theme(BaseModel):
    focused: FieldStyles = Field(default_factory=lambda: _field_styles("focused", FOCUSED_COLORS))
    blurred: FieldStyles = Field(default_factory=lambda: _field_styles("blurred", BLURRED_COLORS))
    field_separator: str = "\n\n"
    help_key: str = "class:help.key"
    help_desc: str = "class:help.desc"
    help_separator: str = "class:help.separator"
    group_title: str = "class:group.title"
    group_description: str = "class:group.description"
    colors: dict[str, str] = Field(default_factory=lambda: dict(THEME_COLORS))

    def styles(self, focused: bool) -> FieldStyles:
        return self.focused if focused else self.blurred

    def prompt_toolkit_style(self) -> Mapping[str, str]:
        """Style rules for ``prompt_toolkit.styles.Style.from_dict``.

        Every class the theme's styles reference gets a rule. When two roles
        share a class, the first non-empty colour wins.
        """
        rules: dict[str, str] = {}
        entries = [(getattr(self, role), self.colors.get(role, "")) for role in THEME_STYLE_ROLES]
        for styles in (self.focused, self.blurred):
            entries.extend(
                (getattr(styles, role), styles.colors.get(role, "")) for role in FIELD_STYLE_ROLES
            )
        for style, color in entries:
            for name in style_classes(style):
                if not rules.get(name):
                    rules[name] = color
        return rules


def prompt_toolkit_form_style() -> Mapping[str, str]:
    """Rules for the default theme."""
    return Theme().prompt_toolkit_style()


def accessible_message(level: str, message: str) -> str:
    template = ACCESSIBLE_TEMPLATES.get(level, "{message}")
    return template.format(message=escape(message))
