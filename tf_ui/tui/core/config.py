"""Form-wide configuration threaded from the form down to every field."""

from __future__ import annotations

import os
from typing import Literal, Mapping

from pydantic import BaseModel, Field, ValidationError

from tf_common.config.env import parse_bool_env, parse_int_env
from tf_common.errors import ConfigurationError
from tf_ui.tui.core.keymap import KeyMap
from tf_ui.tui.core.theme import Theme


class FormConfig(BaseModel):
    """Theme, key map and sizing shared by a form, its groups and fields."""

    theme: Theme = Field(default_factory=Theme)
    keymap: KeyMap = Field(default_factory=KeyMap)
    width: int = Field(default=80, ge=0, description="Render width in cells")
    height: int = Field(
        default=0,
        ge=0,
        description="Group height in rows; 0 sizes each group to its content",
    )
    show_help: bool = True
    show_errors: bool = True
    accessible: bool = False
    layout: Literal["default", "stack"] = "default"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> "FormConfig":
        """Build a config honouring ``TF_ACCESSIBLE``, ``TF_FORM_WIDTH`` and
        ``TF_FORM_HEIGHT``; keyword overrides win over the environment."""
        env = os.environ if environ is None else environ
        data: dict[str, object] = {}
        accessible = parse_bool_env(env.get("TF_ACCESSIBLE"))
        if accessible is not None:
            data["accessible"] = accessible
        width = parse_int_env(env.get("TF_FORM_WIDTH"))
        if width is not None:
            data["width"] = width
        height = parse_int_env(env.get("TF_FORM_HEIGHT"))
        if height is not None:
            data["height"] = height
        data.update(overrides)
        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid form configuration",
                context={"fields": sorted(data)},
                cause=exc,
            ) from exc
