"""
Healing Orchestrator for selector healing.

Runs the single-pass healing pipeline for one broken locator:
resolve the element in the baseline snapshot, find candidates in the current
snapshot, score them, synthesize locators for the survivors and rank the
combined results. Nothing is retried and nothing is cached between calls.
"""

import logging
import time
from typing import Any, List, Mapping, Optional, Union

from ..core.healing_events import HealingEventType, HealingObserver, LoggingHealingObserver, emit
from ..core.logging_config import get_healing_logger
from ..core.models.document_tree import DocumentTree, Node, Snapshot
from ..core.models.healing_models import HealingResult, ResultSource
from .candidate_finder import CandidateFinder
from .selector_generator import SelectorGenerator
from .similarity_scorer import SimilarityScorer


logger = logging.getLogger(__name__)

SnapshotLike = Union[Snapshot, Mapping[str, Any]]

DEFAULT_SCORE_THRESHOLD = 0.3


class HealingOrchestrator:
    """Composes candidate search, scoring and locator synthesis."""

    def __init__(
        self,
        score_threshold: float = DEFAULT_SCORE_THRESHOLD,
        observer: Optional[HealingObserver] = None,
        finder: Optional[CandidateFinder] = None,
        scorer: Optional[SimilarityScorer] = None,
        generator: Optional[SelectorGenerator] = None,
    ):
        """Initialize the healing orchestrator.

        Args:
            score_threshold: Candidates scoring below this are discarded
            observer: Receives trace events; defaults to logging them
            finder: Candidate finder (a default one when omitted)
            scorer: Similarity scorer (a default one when omitted)
            generator: Locator generator (a default one when omitted)
        """
        self.score_threshold = score_threshold
        self.observer = observer if observer is not None else LoggingHealingObserver()
        self.finder = finder or CandidateFinder()
        self.scorer = scorer or SimilarityScorer()
        self.generator = generator or SelectorGenerator()

    def heal(self, original_locator: str, baseline: SnapshotLike, current: SnapshotLike) -> List[HealingResult]:
        """Find replacement locators for ``original_locator``.

        Args:
            original_locator: Locator that no longer resolves (only ``#id`` is resolved)
            baseline: Snapshot in which the locator still worked
            current: Snapshot in which it fails

        Returns:
            HealingResults sorted by score (descending); empty when there is
            nothing to heal or when an internal error occurred
        """
        healing_logger = get_healing_logger("orchestrator", original_locator)
        started = time.perf_counter()
        healing_logger.log_operation_start("heal_selector")

        try:
            results = self._run_pipeline(original_locator, baseline, current)
        except Exception as e:
            duration = time.perf_counter() - started
            healing_logger.log_operation_failure("heal_selector", duration, str(e), error_code=type(e).__name__)
            logger.debug(f"Traceback for failed healing of {original_locator!r}", exc_info=True)
            emit(self.observer, HealingEventType.HEALING_FAILED, original_locator,
                 f"Internal error while healing: {e}",
                 error_type=type(e).__name__, duration=duration)
            return []

        duration = time.perf_counter() - started
        if results:
            healing_logger.log_operation_success("heal_selector", duration, result_count=len(results))
        return results

    def resolve_baseline_element(self, original_locator: str, baseline: DocumentTree) -> Optional[Node]:
        """Resolve the locator in the baseline tree. Only ``#id`` locators are supported."""
        if not self.is_supported_locator(original_locator):
            emit(self.observer, HealingEventType.LOCATOR_UNSUPPORTED, original_locator,
                 f"Locator syntax not supported for baseline lookup: {original_locator!r}")
            return None

        element = baseline.find_by_id(original_locator[1:])
        if element is None:
            emit(self.observer, HealingEventType.BASELINE_ELEMENT_NOT_FOUND, original_locator,
                 f"Could not find element matching {original_locator!r} in baseline snapshot")
        return element

    @staticmethod
    def is_supported_locator(locator: str) -> bool:
        return len(locator) > 1 and locator.startswith('#')

    def _run_pipeline(self, original_locator: str, baseline: SnapshotLike,
                      current: SnapshotLike) -> List[HealingResult]:
        baseline_snapshot = self._as_snapshot(baseline)
        current_snapshot = self._as_snapshot(current)

        # 1-2. Resolve
        reference = self.resolve_baseline_element(original_locator, baseline_snapshot.tree)
        if reference is None:
            return []

        # 3. Find
        candidates = self.finder.find_candidates(reference, current_snapshot.tree)
        if not candidates:
            emit(self.observer, HealingEventType.NO_CANDIDATES, original_locator,
                 f"No candidate elements found for {original_locator!r}",
                 tag_name=reference.tag_name)
            return []
        emit(self.observer, HealingEventType.CANDIDATES_FOUND, original_locator,
             f"Found {len(candidates)} candidate elements",
             count=len(candidates), tag_name=reference.tag_name)

        # 4. Score
        scored = self.scorer.score_candidates(reference, candidates)
        surviving = [candidate for candidate in scored if candidate.score >= self.score_threshold]
        emit(self.observer, HealingEventType.CANDIDATES_SCORED, original_locator,
             f"{len(surviving)} of {len(scored)} candidates scored at least {self.score_threshold}",
             scores=[round(candidate.score, 4) for candidate in scored],
             threshold=self.score_threshold)

        # 5. Synthesize
        results: List[HealingResult] = []
        for candidate in surviving:
            selectors = self.generator.generate_selectors(candidate.node, current_snapshot.tree)
            emit(self.observer, HealingEventType.SELECTORS_GENERATED, original_locator,
                 f"Generated {len(selectors)} locators for candidate #{candidate.node.index}",
                 node_index=candidate.node.index, candidate_score=candidate.score,
                 matched_features=candidate.matched_features)
            for selector in selectors:
                results.append(HealingResult(
                    selector=selector.value,
                    score=candidate.score * selector.specificity,
                    strategy=selector.strategy,
                    source=ResultSource.LOCAL,
                ))

        # 6. Rank
        results = rank_results(results)
        emit(self.observer, HealingEventType.HEALING_COMPLETED, original_locator,
             f"Produced {len(results)} healing results",
             count=len(results), best=results[0].selector if results else None)
        return results

    @staticmethod
    def _as_snapshot(snapshot: SnapshotLike) -> Snapshot:
        if isinstance(snapshot, Snapshot):
            return snapshot
        return Snapshot.from_dict(snapshot)


def rank_results(results: List[HealingResult]) -> List[HealingResult]:
    """Sort by score (descending), then strategy priority, then emission order."""
    return sorted(results, key=lambda result: (-result.score, result.strategy.priority))


def heal_selector(original_locator: str, baseline: SnapshotLike, current: SnapshotLike,
                  observer: Optional[HealingObserver] = None) -> List[HealingResult]:
    """Heal one locator with the default pipeline."""
    return HealingOrchestrator(observer=observer).heal(original_locator, baseline, current)
