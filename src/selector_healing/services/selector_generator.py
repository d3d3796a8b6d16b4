"""
Locator synthesis for a re-identified node.

Generates alternative locators in preference order:
1. ID (``#id``)
2. Class combinations and distinctive single classes
3. Stable attributes, bare and tag-qualified
4. Tag with its most distinctive class
5. Text (``tag:contains("...")``)
6. CSS path fallback
7. XPath fallback (least preferred)

Specificity is a pattern heuristic on the generated string; locators are
never evaluated against the tree.
"""

import logging
from typing import Dict, List, Optional

from ..core.models.document_tree import DocumentTree, Node
from ..core.models.healing_models import GeneratedSelector, HealingStrategy


logger = logging.getLogger(__name__)


SELECTOR_ATTRIBUTES = {
    'name', 'data-testid', 'data-cy', 'data-test', 'data-automation',
    'aria-label', 'role', 'title', 'alt', 'href', 'src', 'type',
    'placeholder', 'value', 'for'
}

COMMON_CLASSES = {
    'active', 'disabled', 'selected', 'hidden', 'visible',
    'container', 'wrapper', 'row', 'col', 'item',
    'btn', 'button', 'input', 'form', 'header', 'footer',
    'content', 'panel', 'card', 'modal', 'dialog',
    'text', 'title', 'label', 'icon', 'image',
    'large', 'small', 'medium', 'primary', 'secondary',
    'success', 'error', 'warning', 'info'
}

MAX_TEXT_LENGTH = 100
SHORT_TEXT_LENGTH = 30
SHORT_TEXT_FACTOR = 0.9
TRUNCATED_TEXT_FACTOR = 0.8

CSS_PATH_SPECIFICITY = 0.7
XPATH_SPECIFICITY = 0.6
POSITION_PLACEHOLDER = ':nth-child(2)'


def is_selector_attribute(attribute_name: str) -> bool:
    """Check if an attribute is stable enough to build a locator from."""
    return attribute_name in SELECTOR_ATTRIBUTES or attribute_name.startswith('data-')


def is_common_class(class_name: str) -> bool:
    """Check if a class is too common to identify an element on its own."""
    return class_name.lower() in COMMON_CLASSES


def estimate_specificity(selector: str) -> float:
    """
    Estimate how uniquely a locator identifies one element.

    First matching pattern wins.

    Args:
        selector: Generated locator string

    Returns:
        Estimated specificity in [0, 1]
    """
    if selector.startswith('#'):
        return 1.0
    if '[data-testid=' in selector or '[data-cy=' in selector:
        return 0.95
    if '[data-' in selector:
        return 0.9
    if '[name=' in selector or '[role=' in selector:
        return 0.85
    if selector.startswith('//'):
        return 0.8
    if '.' in selector and '[' in selector:
        return 0.85
    if ':contains(' in selector:
        return 0.75
    if selector.count('.') > 1:
        return 0.8
    if '[' in selector and '=' in selector:
        return 0.75
    if ' > ' in selector:
        return 0.7
    if ' ' in selector:
        return 0.65
    if '.' in selector:
        return 0.6
    return 0.5


class SelectorGenerator:
    """Synthesizes ranked, deduplicated locators for a node."""

    def generate_selectors(self, node: Node, tree: Optional[DocumentTree] = None) -> List[GeneratedSelector]:
        """
        Generate alternative locators for ``node``.

        Args:
            node: Node to build locators for
            tree: Tree containing the node; accepted for symmetry with the
                finder, never walked

        Returns:
            Unique locators sorted by specificity (descending), ties broken
            by strategy priority and then generation order
        """
        selectors: List[GeneratedSelector] = []
        tag = node.tag_name
        classes = node.class_tokens

        # 1. ID-based
        if node.id:
            selectors.append(GeneratedSelector(f"#{node.id}", HealingStrategy.ID_BASED, 1.0))

        # 2. Class-based
        if classes:
            combined = "." + ".".join(classes)
            selectors.append(GeneratedSelector(
                combined, HealingStrategy.CLASS_BASED, estimate_specificity(combined)))

            if len(classes) > 1:
                for cls in classes:
                    if is_common_class(cls):
                        continue
                    single = f".{cls}"
                    specificity = estimate_specificity(single)
                    if specificity > 0.5:
                        selectors.append(GeneratedSelector(single, HealingStrategy.CLASS_BASED, specificity))

        # 3. Attribute-based
        for name, value in node.attributes.items():
            if name in ('id', 'class') or not is_selector_attribute(name):
                continue
            attribute_selector = f'[{name}="{value}"]'
            specificity = estimate_specificity(attribute_selector)
            if specificity > 0.7:
                selectors.append(GeneratedSelector(attribute_selector, HealingStrategy.ATTRIBUTE, specificity))

        for name, value in node.attributes.items():
            if name in ('id', 'class') or not is_selector_attribute(name):
                continue
            tag_attribute_selector = f'{tag}[{name}="{value}"]'
            specificity = estimate_specificity(tag_attribute_selector)
            if specificity > 0.8:
                selectors.append(GeneratedSelector(tag_attribute_selector, HealingStrategy.ATTRIBUTE, specificity))

        # 4. Tag with its most distinctive class
        if classes:
            best_class = classes[0]
            best_specificity = 0.0
            for cls in classes:
                specificity = estimate_specificity(f".{cls}")
                if specificity > best_specificity:
                    best_specificity = specificity
                    best_class = cls
            tag_class_selector = f"{tag}.{best_class}"
            selectors.append(GeneratedSelector(
                tag_class_selector, HealingStrategy.CLASS_BASED, estimate_specificity(tag_class_selector)))

        # 5. Text-based
        text_selector = self._text_selector(node)
        if text_selector:
            selectors.append(text_selector)

        # 6. CSS path and 7. XPath fallbacks, always present
        selectors.append(GeneratedSelector(
            self.generate_css_path(node), HealingStrategy.CSS_PATH, CSS_PATH_SPECIFICITY))
        selectors.append(GeneratedSelector(
            self.generate_xpath(node), HealingStrategy.XPATH, XPATH_SPECIFICITY))

        unique = self.remove_duplicates(selectors)
        unique.sort(key=lambda item: (-item.specificity, item.strategy.priority))

        logger.debug(f"Generated {len(unique)} locators for <{tag}> #{node.index}")
        return unique

    def _text_selector(self, node: Node) -> Optional[GeneratedSelector]:
        if not node.text_content or len(node.text_content) >= MAX_TEXT_LENGTH:
            return None
        text = node.text_content.strip()
        if not text:
            return None

        if len(text) < SHORT_TEXT_LENGTH:
            value = f'{node.tag_name}:contains("{text}")'
            factor = SHORT_TEXT_FACTOR
        else:
            value = f'{node.tag_name}:contains("{text[:SHORT_TEXT_LENGTH]}")'
            factor = TRUNCATED_TEXT_FACTOR
        return GeneratedSelector(value, HealingStrategy.TEXT_BASED, estimate_specificity(value) * factor)

    @staticmethod
    def generate_css_path(node: Node) -> str:
        """Tag plus id, else first class, else a child-position marker."""
        selector = node.tag_name
        classes = node.class_tokens
        if node.id:
            selector += f"#{node.id}"
        elif classes:
            selector += f".{classes[0]}"
        else:
            selector += POSITION_PLACEHOLDER
        return selector

    @staticmethod
    def generate_xpath(node: Node) -> str:
        """``//tag`` with an id, class or text predicate when one is available."""
        xpath = f"//{node.tag_name}"
        classes = node.class_tokens
        if node.id:
            xpath += f'[@id="{node.id}"]'
        elif node.class_name:
            if classes:
                xpath += f'[contains(@class, "{classes[0]}")]'
        elif node.text_content and node.text_content.strip():
            text = node.text_content.strip()
            if len(text) < SHORT_TEXT_LENGTH:
                xpath += f'[text()="{text}"]'
            else:
                xpath += f'[contains(text(), "{text[:SHORT_TEXT_LENGTH]}")]'
        return xpath

    @staticmethod
    def remove_duplicates(selectors: List[GeneratedSelector]) -> List[GeneratedSelector]:
        """Keep the most specific entry per locator string, at its first position."""
        unique: Dict[str, GeneratedSelector] = {}
        for selector in selectors:
            existing = unique.get(selector.value)
            if existing is None or existing.specificity < selector.specificity:
                unique[selector.value] = selector
        return list(unique.values())


def generate_selectors(node: Node, tree: Optional[DocumentTree] = None) -> List[GeneratedSelector]:
    """Module-level shortcut for SelectorGenerator().generate_selectors."""
    return SelectorGenerator().generate_selectors(node, tree)
