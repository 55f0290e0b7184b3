"""Tests for the selector classifier."""

import pytest

from styledshift.selectors import (
    AdjacentSibling,
    AncestorOf,
    Attribute,
    Base,
    DescendantOf,
    GeneralSiblingAfterClass,
    PseudoClasses,
    PseudoElement,
    Unsupported,
    classify,
    component_marker,
    normalize,
)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_specificity_hack(self):
        assert normalize("&&:hover") == "&:hover"
        assert normalize("&&&") == "&"

    def test_attribute_pseudos(self):
        assert normalize("&[disabled]") == "&:disabled"
        assert normalize("&[readonly]") == "&:read-only"

    def test_whitespace_collapses(self):
        assert normalize("&:hover,\n   &:focus") == "&:hover, &:focus"


# ---------------------------------------------------------------------------
# Supported shapes
# ---------------------------------------------------------------------------


class TestSupportedShapes:
    def test_base(self):
        assert classify("&") == Base()

    def test_single_pseudo(self):
        assert classify("&:hover") == PseudoClasses((":hover",))

    def test_chained_pseudos_form_one_key(self):
        assert classify("&:hover:focus") == PseudoClasses((":hover:focus",))

    def test_comma_list(self):
        assert classify("&:hover, &:focus-visible") == PseudoClasses((":hover", ":focus-visible"))

    def test_simple_not(self):
        assert classify("&:not(:disabled)") == PseudoClasses((":not(:disabled)",))

    def test_disabled_attribute_becomes_pseudo(self):
        assert classify("&[disabled]") == PseudoClasses((":disabled",))

    def test_double_ampersand_pseudo(self):
        assert classify("&&:hover") == PseudoClasses((":hover",))

    def test_pseudo_element(self):
        assert classify("&::before") == PseudoElement("::before")

    def test_checkbox_attribute(self):
        assert classify('&[type="checkbox"]') == Attribute("typeCheckbox", "Checkbox")

    def test_radio_attribute_unquoted(self):
        assert classify("&[type=radio]") == Attribute("typeRadio", "Radio")

    def test_href_prefix(self):
        assert classify('&[href^="https"]') == Attribute("hrefStartsWith", "Https")

    def test_href_suffix(self):
        assert classify('&[href$=".pdf"]') == Attribute("hrefEndsWith", "Pdf")

    def test_target_blank_after(self):
        assert classify('&[target="_blank"]::after') == Attribute(
            "targetBlankAfter", "External", "::after"
        )

    def test_adjacent_sibling(self):
        assert classify("& + &") == AdjacentSibling()

    def test_general_sibling_after_class(self):
        assert classify(".active ~ &") == GeneralSiblingAfterClass("active")

    def test_descendant_of_component(self):
        marker = component_marker("Card")
        assert classify(f"{marker}:hover &") == DescendantOf("Card", ":hover")

    def test_descendant_of_component_without_pseudo(self):
        marker = component_marker("Card")
        assert classify(f"{marker} &") == DescendantOf("Card", None)

    def test_ancestor_of_component(self):
        marker = component_marker("Icon")
        assert classify(f"&:hover {marker}") == AncestorOf("Icon", ":hover")


# ---------------------------------------------------------------------------
# Unsupported shapes
# ---------------------------------------------------------------------------


class TestUnsupportedShapes:
    @pytest.mark.parametrize(
        "selector, reason",
        [
            ("& .child", "descendant/child/sibling selector"),
            ("& > div", "descendant/child/sibling selector"),
            ("& ~ &", "descendant/child/sibling selector"),
            ("& :hover", "descendant pseudo selector (space before pseudo)"),
            ("&.active", "class selector"),
            ("&#main", "id selector"),
            ("span", "descendant/child/sibling selector"),
            ("*", "universal selector"),
            ("&:not(.a .b)", "complex :not() selector"),
            ('&[data-state="open"]', "attribute selector"),
            ("&::before:hover", "pseudo-element combined with other selectors"),
            ('&[target="_blank"]', "attribute selector"),
            ("&:hover, & .child", "comma-separated selectors must all be simple pseudos"),
            ("&:hover __SLOT_0__", "interpolated selector"),
        ],
    )
    def test_reason(self, selector, reason):
        assert classify(selector) == Unsupported(reason)

    def test_component_sibling(self):
        marker = component_marker("Item")
        assert classify(f"{marker} + &") == Unsupported(
            "sibling combinator with component reference"
        )
