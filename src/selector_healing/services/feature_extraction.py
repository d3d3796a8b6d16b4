"""Feature extraction for candidate matching."""

from typing import List

from ..core.models.document_tree import Node
from ..core.models.healing_models import ElementFeature, FeatureType


ID_WEIGHT = 1.0
CLASS_WEIGHT = 0.7
TEXT_WEIGHT = 0.6

# Attribute weights by (lower-cased) name; testing hooks are the most reliable
ATTRIBUTE_WEIGHTS = {
    'name': 0.8,
    'data-testid': 0.8,
    'data-cy': 0.8,
    'data-test': 0.8,
    'href': 0.7,
    'src': 0.7,
    'alt': 0.7,
    'title': 0.7,
    'aria-label': 0.7,
    'type': 0.6,
    'role': 0.6,
    'placeholder': 0.6,
    'value': 0.6,
}
DATA_ATTRIBUTE_WEIGHT = 0.5
DEFAULT_ATTRIBUTE_WEIGHT = 0.3


def get_attribute_weight(attribute_name: str) -> float:
    """Weight of an attribute feature; names compare case-insensitively."""
    name = attribute_name.lower()
    if name in ATTRIBUTE_WEIGHTS:
        return ATTRIBUTE_WEIGHTS[name]
    if name.startswith('data-'):
        return DATA_ATTRIBUTE_WEIGHT
    return DEFAULT_ATTRIBUTE_WEIGHT


def extract_features(node: Node) -> List[ElementFeature]:
    """Extract weighted features from a node.

    Order is fixed: id, one feature per class token, text, then every
    attribute other than ``id``/``class`` in mapping order.
    """
    features: List[ElementFeature] = []

    if node.id:
        features.append(ElementFeature(FeatureType.ID, node.id, ID_WEIGHT))

    for token in node.class_tokens:
        features.append(ElementFeature(FeatureType.CLASS, token, CLASS_WEIGHT))

    if node.text_content:
        text = node.text_content.strip()
        # Whitespace-only text would match every node that has any text
        if text:
            features.append(ElementFeature(FeatureType.TEXT, text, TEXT_WEIGHT))

    for name, value in node.attributes.items():
        if name in ('id', 'class'):
            continue
        features.append(ElementFeature(
            FeatureType.ATTRIBUTE,
            f'{name}="{value}"',
            get_attribute_weight(name),
            attribute_name=name,
            attribute_value=value,
        ))

    return features
