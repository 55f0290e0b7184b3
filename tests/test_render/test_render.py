"""Tests for StyleX source and JSON rendering."""

import json
from pathlib import Path

from styledshift.config import LoweringConfig
from styledshift.lowering import lower_source
from styledshift.render import STYLEX_IMPORT, render_js, render_json, to_dict

FIXTURES = Path(__file__).parent.parent / "fixtures"

HEADER = 'import styled from "styled-components";\n'


def _lower(body: str, config: LoweringConfig | None = None):
    return lower_source(HEADER + body, config=config)


def _fixture(name: str, config: LoweringConfig | None = None):
    path = FIXTURES / name
    return lower_source(path.read_text(), str(path), config)


# ---------------------------------------------------------------------------
# JS text
# ---------------------------------------------------------------------------


class TestRenderJs:
    def test_single_style_object(self):
        text = render_js(_lower("const Box = styled.div`color: red;`;"))
        assert text == (
            f"{STYLEX_IMPORT}\n"
            "\n"
            "const styles = stylex.create({\n"
            "  box: {\n"
            '    color: "red",\n'
            "  },\n"
            "});\n"
        )

    def test_numbers_and_quoted_keys(self):
        text = render_js(_lower("const Box = styled.div`margin: 0;\n&:hover { color: red; }`;"))
        assert "    margin: 0," in text
        assert '      ":hover": "red",' in text
        assert "      default: null," in text

    def test_style_function(self):
        text = render_js(_lower("const Box = styled.div`width: ${(p) => p.$w};`;"))
        assert "  boxW: (w) => ({\n    width: w,\n  }),\n" in text

    def test_custom_style_object_name(self):
        config = LoweringConfig(style_object_name="sx")
        text = render_js(_lower("const Box = styled.div`color: red;`;", config), config)
        assert "const sx = stylex.create({" in text

    def test_button_fixture(self):
        text = render_js(_fixture("button.tsx"))
        lines = text.splitlines()
        assert lines[0] == STYLEX_IMPORT
        assert "const styles = stylex.create({" in lines
        assert "const buttonSizeVariants = stylex.create({" in lines
        assert '      [stylex.when.ancestor(":hover")]: "white",' in lines
        assert "  medium: {}," in lines

    def test_dimension_renders_after_main_object(self):
        text = render_js(_fixture("button.tsx"))
        assert text.index("const styles") < text.index("const buttonSizeVariants")
        assert "buttonSizeVariants: " not in text

    def test_theme_imports(self):
        result = _fixture("theme.tsx", LoweringConfig.from_file(FIXTURES / "theme.json"))
        lines = render_js(result).splitlines()
        assert lines[:2] == [STYLEX_IMPORT, 'import { tokens } from "./tokens.stylex";']
        assert "    color: tokens.colors.text," in lines

    def test_keyframes_render_before_styles(self):
        text = render_js(
            _lower(
                "const fadeIn = keyframes`from { opacity: 0; }`;\n"
                "const Box = styled.div`animation-name: ${fadeIn};`;"
            )
        )
        assert text == (
            f"{STYLEX_IMPORT}\n"
            "\n"
            "const fadeIn = stylex.keyframes({\n"
            "  from: {\n"
            "    opacity: 0,\n"
            "  },\n"
            "});\n"
            "\n"
            "const styles = stylex.create({\n"
            "  box: {\n"
            "    animationName: fadeIn,\n"
            "  },\n"
            "});\n"
        )

    def test_bailed_components_are_not_rendered(self):
        text = render_js(_fixture("unsupported.tsx"))
        assert "card" not in text
        assert "  plain: {" in text


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class TestToDict:
    def test_expressions(self):
        result = _fixture("theme.tsx", LoweringConfig.from_file(FIXTURES / "theme.json"))
        data = to_dict(result)
        assert data["styles"]["panel"]["color"] == {"expr": "tokens.colors.text"}
        assert data["bailed"] == []
        assert data["diagnostics"] == []

    def test_style_function(self):
        data = to_dict(_lower("const Box = styled.div`width: ${(p) => p.$w};`;"))
        assert data["styles"]["boxW"] == {"params": ["w"], "body": {"width": {"expr": "w"}}}

    def test_dimension(self):
        data = to_dict(_fixture("button.tsx"))
        dimension = data["styles"]["buttonSizeVariants"]
        assert dimension["prop"] == "$size"
        assert dimension["entries"]["medium"] == {}

    def test_bails_and_diagnostics(self):
        data = to_dict(_fixture("unsupported.tsx"))
        assert data["bailed"] == ["Card"]
        [diag] = data["diagnostics"]
        assert diag["severity"] == "WARNING"
        assert diag["category"] == "unsupported-selector"
        assert diag["component"] == "Card"
        assert diag["location"].endswith("unsupported.tsx:3:1")
        assert diag["context"] == {"selector": "& .child"}

    def test_keyframes(self):
        data = to_dict(_lower("const spin = keyframes`to { transform: rotate(360deg); }`;"))
        assert data["styles"]["spin"] == {"frames": {"to": {"transform": "rotate(360deg)"}}}


class TestRenderJson:
    def test_parses(self):
        data = json.loads(render_json(_fixture("button.tsx")))
        assert data["styles"]["truncate"] == {"overflow": "hidden", "textOverflow": "ellipsis"}
        assert sorted(data["components"]["Button"]["should_forward_prop_drop"]) == [
            "$primary",
            "$size",
        ]
        assert data["components"]["Toolbar"]["ancestor_marker"] is True
