"""Tests for the configuration loader and the mapping value adapter."""

import json
from pathlib import Path

import pytest

from styledshift.adapter import (
    CallArg,
    CallContext,
    CallResolveResult,
    CssVariableContext,
    ImportedValueContext,
    MappingAdapter,
    ResolveValueResult,
    SelectorContext,
    SelectorResolveResult,
    ThemeValueContext,
)
from styledshift.config import ConfigError, LoweringConfig
from styledshift.model.result import ImportName, ImportSpec

FIXTURES = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestLoweringConfig:
    def test_defaults(self):
        config = LoweringConfig()
        assert config.css_helper_names == ("css",)
        assert config.styled_names == ("styled",)
        assert config.style_object_name == "styles"
        assert config.keyframes_names == ("keyframes",)
        assert config.css_variables == {}
        assert config.theme_tokens == {}

    def test_from_dict(self):
        config = LoweringConfig.from_dict(
            {"theme_tokens": {"colors.text": "vars.text"}, "styled_names": ["sc"]}
        )
        assert config.theme_tokens == {"colors.text": "vars.text"}
        assert config.styled_names == ("sc",)

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="Unknown configuration keys: bogus"):
            LoweringConfig.from_dict({"bogus": 1})

    def test_list_must_hold_strings(self):
        with pytest.raises(ConfigError, match="list of strings"):
            LoweringConfig.from_dict({"css_helper_names": ["css", 3]})
        with pytest.raises(ConfigError, match="'keyframes_names' must be a list of strings"):
            LoweringConfig.from_dict({"keyframes_names": "kf"})

    def test_table_must_be_object(self):
        with pytest.raises(ConfigError, match="must be an object"):
            LoweringConfig.from_dict({"selectors": ["a"]})

    def test_style_object_name_must_be_string(self):
        with pytest.raises(ConfigError, match="must be a string"):
            LoweringConfig.from_dict({"style_object_name": 1})

    def test_from_file(self):
        config = LoweringConfig.from_file(FIXTURES / "theme.json")
        assert config.theme_fallback == {"object": "tokens", "import": "./tokens.stylex"}

    def test_from_file_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Cannot read config"):
            LoweringConfig.from_file(path)

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(ConfigError):
            LoweringConfig.from_file(tmp_path / "missing.json")

    def test_from_file_non_object_root(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2]))
        with pytest.raises(ConfigError, match="root must be an object"):
            LoweringConfig.from_file(path)


# ---------------------------------------------------------------------------
# Value resolution
# ---------------------------------------------------------------------------


def _adapter(**kwargs) -> MappingAdapter:
    return MappingAdapter(LoweringConfig(**kwargs))


class TestResolveValue:
    def test_theme_token(self):
        adapter = _adapter(theme_tokens={"colors.text": "vars.text"})
        assert adapter.resolve_value(ThemeValueContext("colors.text")) == ResolveValueResult(
            "vars.text"
        )

    def test_theme_fallback_object_with_import(self):
        adapter = _adapter(theme_fallback={"object": "tokens", "import": "./tokens.stylex"})
        result = adapter.resolve_value(ThemeValueContext("space.md"))
        assert result == ResolveValueResult(
            "tokens.space.md",
            (ImportSpec("./tokens.stylex", (ImportName("tokens", "tokens"),)),),
        )

    def test_absolute_import(self):
        adapter = _adapter(theme_fallback={"object": "t", "import": "/abs/tokens.stylex"})
        result = adapter.resolve_value(ThemeValueContext("a"))
        assert result is not None
        assert result.imports[0].absolute

    def test_theme_declines(self):
        assert _adapter().resolve_value(ThemeValueContext("colors.text")) is None

    def test_css_variable(self):
        adapter = _adapter(css_variables={"--gap": "spacing.gap"})
        assert adapter.resolve_value(CssVariableContext("--gap")) == ResolveValueResult(
            "spacing.gap"
        )
        assert adapter.resolve_value(
            CssVariableContext("--gap", "4px")
        ) == ResolveValueResult("spacing.gap")

    def test_css_variable_with_import(self):
        adapter = _adapter(
            css_variables={"--gap": {"expr": "spacing.gap", "import": "./tokens.stylex"}}
        )
        result = adapter.resolve_value(CssVariableContext("--gap"))
        assert result == ResolveValueResult(
            "spacing.gap",
            (ImportSpec("./tokens.stylex", (ImportName("spacing", "spacing"),)),),
        )

    def test_css_variable_declines(self):
        assert _adapter().resolve_value(CssVariableContext("--gap")) is None

    def test_imported_value(self):
        adapter = _adapter(imported_values={"./tokens#space.s": "spaceVars.s"})
        context = ImportedValueContext("space", "./tokens", "s")
        assert adapter.resolve_value(context) == ResolveValueResult("spaceVars.s")

    def test_imported_value_declines(self):
        context = ImportedValueContext("space", "./tokens")
        assert _adapter().resolve_value(context) is None


class TestResolveCall:
    def _adapter(self, **entry):
        return _adapter(helper_calls={"spacing": {"usage": "props", "expr": "space.{0}", **entry}})

    def test_literal_argument(self):
        context = CallContext("spacing", "./helpers", (CallArg("literal", "md"),))
        assert self._adapter().resolve_call(context) == CallResolveResult("props", "space.md")

    def test_theme_argument(self):
        adapter = _adapter(
            helper_calls={"shade": {"usage": "props", "expr": "shade({0})"}},
            theme_tokens={"colors.primary": "vars.primary"},
        )
        context = CallContext("shade", "./helpers", (CallArg("theme", path="colors.primary"),))
        assert adapter.resolve_call(context) == CallResolveResult("props", "shade(vars.primary)")

    def test_create_usage_with_import(self):
        adapter = self._adapter(usage="create", expr="helpers.{0}", **{"import": "./helpers.stylex"})
        context = CallContext("spacing", "./helpers", (CallArg("literal", "md"),))
        result = adapter.resolve_call(context)
        assert result is not None
        assert result.usage == "create"
        assert result.imports == (
            ImportSpec("./helpers.stylex", (ImportName("helpers", "helpers"),)),
        )

    def test_unknown_helper(self):
        context = CallContext("other", "./helpers")
        assert self._adapter().resolve_call(context) is None

    def test_unknown_argument(self):
        context = CallContext("spacing", "./helpers", (CallArg("unknown"),))
        assert self._adapter().resolve_call(context) is None

    def test_missing_argument(self):
        context = CallContext("spacing", "./helpers")
        assert self._adapter().resolve_call(context) is None

    def test_bad_usage(self):
        context = CallContext("spacing", "./helpers", (CallArg("literal", "md"),))
        assert self._adapter(usage="inline").resolve_call(context) is None


class TestResolveSelector:
    def test_media(self):
        adapter = _adapter(selectors={"./breakpoints#bp.phone": "breakpoints.phone"})
        context = SelectorContext("bp", "./breakpoints", "phone")
        assert adapter.resolve_selector(context) == SelectorResolveResult(
            "media", "breakpoints.phone"
        )

    def test_declines(self):
        assert _adapter().resolve_selector(SelectorContext("bp", "./breakpoints")) is None
