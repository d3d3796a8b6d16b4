"""
Similarity Scoring for Element Re-identification

Scores how likely a candidate node from the current document is the successor
of the reference node from the baseline document. The score is additive: each
property the reference carries raises the maximum attainable score, each
property the candidate reproduces raises the running total, and the result is
total / maximum in [0, 1].

Points per property:
- tag (mandatory, a mismatch vetoes the candidate): 10
- id: 30
- classes: 20, scaled by the share of reference tokens present
- text: 15, by word-set Jaccard similarity (full credit above 0.8, reduced above 0.5)
- important attributes: 10 each
- other attributes: 5 each
- structure (child counts within 2): 5 out of 10
"""

import logging
from typing import Dict, List, Sequence, Tuple

from ..core.models.document_tree import Node
from ..core.models.healing_models import ScoredCandidate


logger = logging.getLogger(__name__)


IMPORTANT_ATTRIBUTES = (
    'name', 'data-testid', 'data-cy', 'data-test', 'href', 'src',
    'alt', 'title', 'aria-label', 'type', 'role', 'placeholder', 'value'
)


class SimilarityScorer:
    """
    Additive similarity scorer comparing a reference node with candidates.

    Point values can be overridden per property, which changes both the
    credit given and the maximum, so scores remain normalized.
    """

    DEFAULT_POINTS = {
        'tag': 10.0,
        'id': 30.0,
        'classes': 20.0,
        'text': 15.0,
        'text_partial': 10.0,
        'important_attribute': 10.0,
        'other_attribute': 5.0,
        'structure': 10.0,
        'structure_credit': 5.0,
    }

    STRONG_TEXT_SIMILARITY = 0.8
    PARTIAL_TEXT_SIMILARITY = 0.5
    STRUCTURE_CHILD_TOLERANCE = 2

    def __init__(self, custom_points: Dict[str, float] = None):
        """
        Initialize the similarity scorer.

        Args:
            custom_points: Optional dictionary to override default points
        """
        self.points = self.DEFAULT_POINTS.copy()
        if custom_points:
            self.points.update(custom_points)

    def calculate_similarity(self, reference: Node, candidate: Node) -> Tuple[float, List[str]]:
        """
        Calculate the similarity score between the reference and a candidate.

        Args:
            reference: Node from the baseline document
            candidate: Node from the current document

        Returns:
            Tuple of (score in [0, 1], matched feature tags)
        """
        if reference.tag_name != candidate.tag_name:
            return 0.0, []

        matched: List[str] = [f"tag:{reference.tag_name}"]
        total = self.points['tag']
        max_possible = self.points['tag']

        # Id
        if reference.id:
            max_possible += self.points['id']
            if reference.id == candidate.id:
                matched.append(f"id:{reference.id}")
                total += self.points['id']

        # Classes, counted as a set so repeated tokens do not weigh twice
        reference_classes = list(dict.fromkeys(reference.class_tokens))
        if reference_classes:
            max_possible += self.points['classes']
            candidate_classes = set(candidate.class_tokens)
            matched_count = 0
            for token in reference_classes:
                if token in candidate_classes:
                    matched_count += 1
                    matched.append(f"class:{token}")
            total += self.points['classes'] * (matched_count / len(reference_classes))

        # Text
        if reference.text_content:
            max_possible += self.points['text']
            if candidate.text_content:
                similarity = self.text_similarity(reference.text_content, candidate.text_content)
                if similarity > self.STRONG_TEXT_SIMILARITY:
                    matched.append('text:similar')
                    total += self.points['text'] * similarity
                elif similarity > self.PARTIAL_TEXT_SIMILARITY:
                    matched.append('text:partial')
                    total += self.points['text_partial'] * similarity

        # Attributes
        reference_attrs = reference.attributes
        candidate_attrs = candidate.attributes

        for attr in IMPORTANT_ATTRIBUTES:
            if reference_attrs.get(attr):
                max_possible += self.points['important_attribute']
                if candidate_attrs.get(attr) == reference_attrs[attr]:
                    matched.append(f"attr:{attr}")
                    total += self.points['important_attribute']

        for key, value in reference_attrs.items():
            if key in IMPORTANT_ATTRIBUTES or key in ('id', 'class'):
                continue
            max_possible += self.points['other_attribute']
            if key in candidate_attrs and candidate_attrs[key] == value:
                matched.append(f"attr:{key}")
                total += self.points['other_attribute']

        # Structure
        max_possible += self.points['structure']
        if abs(reference.child_count - candidate.child_count) <= self.STRUCTURE_CHILD_TOLERANCE:
            matched.append('structure:similar-children-count')
            total += self.points['structure_credit']

        if max_possible <= 0:
            return 0.0, matched
        return min(1.0, max(0.0, total / max_possible)), matched

    def score_candidates(self, reference: Node, candidates: Sequence[Node]) -> List[ScoredCandidate]:
        """
        Score every candidate and rank them.

        Args:
            reference: Node from the baseline document
            candidates: Candidate nodes in traversal order

        Returns:
            ScoredCandidate list sorted by score (descending); equal scores keep traversal order
        """
        scored = []
        for candidate in candidates:
            score, matched = self.calculate_similarity(reference, candidate)
            scored.append(ScoredCandidate(node=candidate, score=score, matched_features=matched))

        scored.sort(key=lambda item: item.score, reverse=True)

        if scored:
            logger.debug(f"Best candidate #{scored[0].node.index} scored {scored[0].score:.3f} "
                         f"({', '.join(scored[0].matched_features)})")
        return scored

    # =================== Similarity Functions ===================

    @staticmethod
    def text_similarity(a: str, b: str) -> float:
        """
        Jaccard similarity on lower-cased word sets.

        J(A,B) = |A ∩ B| / |A ∪ B|, 0 when both sets are empty.
        """
        words_a = set(a.lower().split())
        words_b = set(b.lower().split())

        union = len(words_a | words_b)
        if union == 0:
            return 0.0
        return len(words_a & words_b) / union


def score_elements(reference: Node, candidates: Sequence[Node]) -> List[ScoredCandidate]:
    """Module-level shortcut for SimilarityScorer().score_candidates."""
    return SimilarityScorer().score_candidates(reference, candidates)
