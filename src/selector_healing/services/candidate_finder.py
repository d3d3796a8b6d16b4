"""Candidate search: nodes in the current tree that may succeed a reference node."""

import logging
from typing import List, Sequence

from ..core.models.document_tree import DocumentTree, Node
from ..core.models.healing_models import ElementFeature, FeatureType
from .feature_extraction import extract_features


logger = logging.getLogger(__name__)


class CandidateFinder:
    """Scans a target tree for nodes sharing the reference tag and at least one feature."""

    def find_candidates(self, reference: Node, target: DocumentTree) -> List[Node]:
        """Find candidate nodes in ``target`` for ``reference``.

        Every node is visited exactly once in depth-first pre-order and the
        result keeps that order.

        Args:
            reference: Node resolved in the baseline tree
            target: Current document tree

        Returns:
            Candidate nodes in traversal order
        """
        features = extract_features(reference)
        candidates = [
            node for node in target.iter_preorder()
            if node.tag_name == reference.tag_name and self.match_weight(node, features) > 0
        ]
        logger.debug(f"Found {len(candidates)} <{reference.tag_name}> candidates "
                     f"from {len(features)} features")
        return candidates

    @staticmethod
    def match_weight(node: Node, features: Sequence[ElementFeature]) -> float:
        """Sum of the weights of ``features`` that ``node`` satisfies."""
        total = 0.0
        class_tokens = None

        for feature in features:
            if feature.type == FeatureType.ID:
                if node.id == feature.value:
                    total += feature.weight
            elif feature.type == FeatureType.CLASS:
                if class_tokens is None:
                    class_tokens = set(node.class_tokens)
                if feature.value in class_tokens:
                    total += feature.weight
            elif feature.type == FeatureType.TEXT:
                if node.text_content and feature.value in node.text_content:
                    total += feature.weight
            elif feature.type == FeatureType.ATTRIBUTE:
                if (feature.attribute_name in node.attributes
                        and node.attributes[feature.attribute_name] == feature.attribute_value):
                    total += feature.weight

        return total


def find_candidate_elements(reference: Node, target: DocumentTree) -> List[Node]:
    """Module-level shortcut for CandidateFinder().find_candidates."""
    return CandidateFinder().find_candidates(reference, target)
