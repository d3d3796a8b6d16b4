"""
Services module for the selector healing pipeline and the store-first healing flow.
"""

from .candidate_finder import CandidateFinder, find_candidate_elements
from .feature_extraction import extract_features, get_attribute_weight
from .healing_orchestrator import HealingOrchestrator, heal_selector, rank_results
from .healing_service import HealingService
from .healing_store import HealingStore, InMemoryHealingStore, JsonFileHealingStore
from .html_snapshot_builder import build_snapshot_from_html
from .selector_generator import SelectorGenerator, estimate_specificity, generate_selectors
from .similarity_scorer import SimilarityScorer, score_elements

__all__ = [
    "CandidateFinder",
    "find_candidate_elements",
    "extract_features",
    "get_attribute_weight",
    "HealingOrchestrator",
    "heal_selector",
    "rank_results",
    "HealingService",
    "HealingStore",
    "InMemoryHealingStore",
    "JsonFileHealingStore",
    "build_snapshot_from_html",
    "SelectorGenerator",
    "estimate_specificity",
    "generate_selectors",
    "SimilarityScorer",
    "score_elements"
]
