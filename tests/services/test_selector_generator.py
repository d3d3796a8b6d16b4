"""Unit tests for locator synthesis."""

import pytest

from selector_healing.core.models.document_tree import DocumentTree
from selector_healing.core.models.healing_models import GeneratedSelector, HealingStrategy
from selector_healing.services.selector_generator import (
    SelectorGenerator,
    estimate_specificity,
    generate_selectors,
    is_common_class,
    is_selector_attribute
)

from conftest import make_node


def node_from(mapping):
    return DocumentTree.from_dict(mapping).root


def as_tuples(selectors):
    return [(s.value, s.strategy, pytest.approx(s.specificity)) for s in selectors]


class TestEstimateSpecificity:
    """Test the pattern-based specificity heuristic."""

    @pytest.mark.parametrize("selector,expected", [
        ("#submit", 1.0),
        ('[data-testid="save"]', 0.95),
        ('button[data-cy="save"]', 0.95),
        ('[data-row="3"]', 0.9),
        ('[name="email"]', 0.85),
        ('[role="dialog"]', 0.85),
        ('//button[@id="x"]', 0.8),
        ('a.nav[href="/"]', 0.85),
        ('[href="/home.html"]', 0.85),
        ('p:contains("Hello")', 0.75),
        (".btn.primary", 0.8),
        ('[type="email"]', 0.75),
        ("ul > li", 0.7),
        ("ul li", 0.65),
        (".btn", 0.6),
        ("button.btn", 0.6),
        ("button", 0.5),
    ])
    def test_rules(self, selector, expected):
        """Test each rule, first match winning."""
        assert estimate_specificity(selector) == expected


class TestSelectorGenerator:
    """Test cases for SelectorGenerator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.generator = SelectorGenerator()

    def test_button_with_id_classes_and_text(self):
        """Test the full ranked output for a typical button."""
        node = node_from(make_node("button", id="submit-button", class_name="btn primary", text="Submit"))

        selectors = self.generator.generate_selectors(node)

        assert as_tuples(selectors) == [
            ("#submit-button", HealingStrategy.ID_BASED, 1.0),
            (".btn.primary", HealingStrategy.CLASS_BASED, 0.8),
            ("button#submit-button", HealingStrategy.CSS_PATH, 0.7),
            ('button:contains("Submit")', HealingStrategy.TEXT_BASED, 0.675),
            ("button.btn", HealingStrategy.CLASS_BASED, 0.6),
            ('//button[@id="submit-button"]', HealingStrategy.XPATH, 0.6),
        ]

    def test_input_with_attributes(self):
        """Test attribute rules, single classes and duplicate removal."""
        node = node_from(make_node(
            "input", class_name="form-control input",
            attributes={"name": "email", "type": "email", "placeholder": "Your email"},
        ))

        selectors = self.generator.generate_selectors(node)

        assert as_tuples(selectors) == [
            ('[name="email"]', HealingStrategy.ATTRIBUTE, 0.85),
            ('input[name="email"]', HealingStrategy.ATTRIBUTE, 0.85),
            (".form-control.input", HealingStrategy.CLASS_BASED, 0.8),
            ('[type="email"]', HealingStrategy.ATTRIBUTE, 0.75),
            ('[placeholder="Your email"]', HealingStrategy.ATTRIBUTE, 0.75),
            # The css path equals the tag-qualified class; the more specific entry is kept
            ("input.form-control", HealingStrategy.CSS_PATH, 0.7),
            (".form-control", HealingStrategy.CLASS_BASED, 0.6),
            ('//input[contains(@class, "form-control")]', HealingStrategy.XPATH, 0.6),
        ]

    def test_test_id_attributes(self):
        """Test that testing hooks produce the most specific attribute locators."""
        node = node_from(make_node("button", attributes={"data-testid": "save"}))

        selectors = self.generator.generate_selectors(node)

        assert selectors[0] == GeneratedSelector('[data-testid="save"]', HealingStrategy.ATTRIBUTE, 0.95)
        assert selectors[1] == GeneratedSelector('button[data-testid="save"]', HealingStrategy.ATTRIBUTE, 0.95)

    def test_disallowed_attributes_are_ignored(self):
        """Test that attributes outside the allow-list produce no locator."""
        node = node_from(make_node("div", attributes={"style": "color: red", "onclick": "go()"}))

        values = [s.value for s in self.generator.generate_selectors(node)]

        assert values == ["div:nth-child(2)", "//div"]

    def test_long_text_is_truncated(self):
        """Test text locators for text of 30 to 99 characters."""
        text = "Read the full terms and conditions before continuing"
        node = node_from(make_node("p", text=text))

        text_selectors = [s for s in self.generator.generate_selectors(node)
                          if s.strategy == HealingStrategy.TEXT_BASED]

        assert len(text_selectors) == 1
        assert text_selectors[0].value == f'p:contains("{text[:30]}")'
        assert text_selectors[0].specificity == pytest.approx(0.75 * 0.8)

    def test_very_long_text_is_skipped(self):
        """Test that text of 100 characters or more gives no text locator."""
        node = node_from(make_node("p", text="word " * 20))

        strategies = [s.strategy for s in self.generator.generate_selectors(node)]

        assert HealingStrategy.TEXT_BASED not in strategies

    def test_text_is_trimmed(self):
        """Test that surrounding whitespace is dropped from text locators."""
        node = node_from(make_node("span", text="  Save  "))

        values = [s.value for s in self.generator.generate_selectors(node)]

        assert 'span:contains("Save")' in values
        assert '//span[text()="Save"]' in values

    def test_blank_text_is_skipped(self):
        """Test that whitespace-only text gives no text locator."""
        node = node_from(make_node("span", text="   "))

        strategies = [s.strategy for s in self.generator.generate_selectors(node)]

        assert HealingStrategy.TEXT_BASED not in strategies

    def test_common_single_classes_are_skipped(self):
        """Test the common class deny-list."""
        node = node_from(make_node("div", class_name="card product-tile active"))

        singles = [s.value for s in self.generator.generate_selectors(node)
                   if s.strategy == HealingStrategy.CLASS_BASED and s.value.startswith(".")
                   and s.value.count(".") == 1]

        assert singles == [".product-tile"]

    def test_single_class_node(self):
        """Test that one class yields the combined and tag-qualified forms only."""
        node = node_from(make_node("nav", class_name="sidebar"))

        values = [s.value for s in self.generator.generate_selectors(node)]

        assert values == [
            "nav.sidebar",
            ".sidebar",
            '//nav[contains(@class, "sidebar")]',
        ]

    def test_no_duplicate_values(self):
        """Test that no two locators share a value for one node."""
        nodes = [
            node_from(make_node("button", id="go", class_name="btn go", text="Go", attributes={"name": "go", "type": "submit"})),
            node_from(make_node("input", class_name="field", attributes={"name": "q", "data-cy": "q"})),
            node_from(make_node("a", text="Home", attributes={"href": "/", "title": "Home"})),
            node_from(make_node("div")),
        ]
        for node in nodes:
            values = [s.value for s in self.generator.generate_selectors(node)]
            assert len(values) == len(set(values))

    def test_output_sorted_by_specificity(self):
        """Test descending specificity order."""
        node = node_from(make_node("a", id="home", class_name="nav-link", text="Home",
                                   attributes={"href": "/", "role": "link"}))

        specificities = [s.specificity for s in self.generator.generate_selectors(node)]

        assert specificities == sorted(specificities, reverse=True)

    def test_tree_is_accepted(self):
        """Test that passing the containing tree does not change the output."""
        tree = DocumentTree.from_dict(make_node("body", children=[make_node("b", id="x")]))
        node = tree[1]

        assert generate_selectors(node, tree) == self.generator.generate_selectors(node)


class TestFallbackPaths:
    """Test the css path and xpath fallbacks."""

    def test_css_path(self):
        """Test id, class and position forms."""
        assert SelectorGenerator.generate_css_path(node_from(make_node("a", id="x", class_name="c"))) == "a#x"
        assert SelectorGenerator.generate_css_path(node_from(make_node("a", class_name="c d"))) == "a.c"
        assert SelectorGenerator.generate_css_path(node_from(make_node("a"))) == "a:nth-child(2)"

    def test_xpath(self):
        """Test id, class and text predicates."""
        long_text = "A rather long link text that goes on"
        assert SelectorGenerator.generate_xpath(node_from(make_node("a", id="x", class_name="c"))) == '//a[@id="x"]'
        assert SelectorGenerator.generate_xpath(node_from(make_node("a", class_name="c d"))) == '//a[contains(@class, "c")]'
        assert SelectorGenerator.generate_xpath(node_from(make_node("a", text="Hi"))) == '//a[text()="Hi"]'
        assert SelectorGenerator.generate_xpath(node_from(make_node("a", text=long_text))) == \
            f'//a[contains(text(), "{long_text[:30]}")]'
        assert SelectorGenerator.generate_xpath(node_from(make_node("a"))) == "//a"


class TestHelpers:
    """Test allow-list and deny-list helpers."""

    def test_is_selector_attribute(self):
        """Test the attribute allow-list."""
        assert is_selector_attribute("for")
        assert is_selector_attribute("data-anything")
        assert not is_selector_attribute("style")

    def test_is_common_class(self):
        """Test the common class deny-list."""
        assert is_common_class("Primary")
        assert not is_common_class("checkout-button")
