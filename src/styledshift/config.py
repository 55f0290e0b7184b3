"""Configuration for a lowering run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any


class ConfigError(Exception):
    """Raised when a configuration file is malformed."""


@dataclass(frozen=True)
class LoweringConfig:
    """Settings for the value adapter and the source scanner.

    Attributes:
        theme_tokens: Theme path (``"colors.primary"``) to output expression.
        theme_fallback: ``{"object": "vars", "import": "./tokens.stylex"}``;
            unknown theme paths resolve to ``object.path`` when set.
        imported_values: ``"source#name.path"`` to output expression.
        helper_calls: Imported helper name to
            ``{"usage": "props"|"create", "expr": "...{0}..."}``.
        selectors: ``"source#name.path"`` to a media expression.
        css_variables: Custom property name (``"--gap"``) to an output expression,
            or to ``{"expr": "...", "import": "..."}``.
        css_helper_names: Tag names that create ``css`` helpers.
        styled_names: Default-import names bound to styled-components.
        keyframes_names: Tag names that create ``keyframes`` animations.
        style_object_name: Name of the emitted ``stylex.create`` binding.
    """

    theme_tokens: dict[str, str] = field(default_factory=dict)
    theme_fallback: dict[str, str] = field(default_factory=dict)
    imported_values: dict[str, str] = field(default_factory=dict)
    helper_calls: dict[str, dict[str, str]] = field(default_factory=dict)
    selectors: dict[str, str] = field(default_factory=dict)
    css_variables: dict[str, Any] = field(default_factory=dict)
    css_helper_names: tuple[str, ...] = ("css",)
    styled_names: tuple[str, ...] = ("styled",)
    keyframes_names: tuple[str, ...] = ("keyframes",)
    style_object_name: str = "styles"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoweringConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("css_helper_names", "styled_names", "keyframes_names"):
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"'{key}' must be a list of strings")
                value = tuple(value)
            elif key == "style_object_name":
                if not isinstance(value, str):
                    raise ConfigError(f"'{key}' must be a string")
            elif not isinstance(value, dict):
                raise ConfigError(f"'{key}' must be an object")
            kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | Path) -> LoweringConfig:
        try:
            data = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be an object")
        return cls.from_dict(data)
