"""
Store-first healing service.

Wraps the orchestrator the way a healing server uses it:
1. Previously successful healings for the same locator and url win outright
2. Otherwise the pipeline runs against the supplied or stored baseline
3. As a last resort the current snapshot is used as its own baseline, with
   scores reduced by the configured fallback factor
"""

import logging
import time
from dataclasses import replace
from typing import List, Optional

from ..core.config_loader import get_healing_config
from ..core.healing_events import HealingEventType, HealingObserver, LoggingHealingObserver, emit
from ..core.logging_config import get_healing_logger
from ..core.models.document_tree import Snapshot
from ..core.models.healing_models import (
    HealingConfiguration,
    HealingRecord,
    HealingResult,
    HealingStrategy,
    ResultSource
)
from .healing_orchestrator import HealingOrchestrator, SnapshotLike
from .healing_store import HealingStore, InMemoryHealingStore


logger = logging.getLogger(__name__)


class HealingService:
    """Heals locators using stored outcomes first and the pipeline second."""

    def __init__(
        self,
        store: Optional[HealingStore] = None,
        config: Optional[HealingConfiguration] = None,
        orchestrator: Optional[HealingOrchestrator] = None,
        observer: Optional[HealingObserver] = None,
    ):
        """Initialize the healing service.

        Args:
            store: Persistence collaborator (in-memory when omitted)
            config: Healing configuration; loaded from YAML when omitted
            orchestrator: Pipeline to run; built from ``config`` when omitted
            observer: Trace event observer shared with the default orchestrator
        """
        self.store = store if store is not None else InMemoryHealingStore()
        self.config = config if config is not None else get_healing_config()
        self.observer = observer if observer is not None else LoggingHealingObserver("service")
        self.orchestrator = orchestrator or HealingOrchestrator(
            score_threshold=self.config.score_threshold,
            observer=self.observer,
        )

    def heal(
        self,
        original_locator: str,
        current: SnapshotLike,
        url: Optional[str] = None,
        test_id: Optional[str] = None,
        baseline: Optional[SnapshotLike] = None,
    ) -> List[HealingResult]:
        """Heal ``original_locator`` against the current snapshot.

        Args:
            original_locator: Locator that failed to resolve
            current: Current snapshot (object or JSON mapping)
            url: Page url used to look up stored healings; defaults to the
                url of ``current`` when it is a Snapshot
            test_id: Test whose stored baseline is used when ``baseline`` is omitted
            baseline: Explicit baseline snapshot

        Returns:
            Ranked HealingResults, truncated to ``max_results`` when configured
        """
        if not self.config.enabled:
            logger.info(f"Selector healing disabled, skipping {original_locator}")
            return []

        healing_logger = get_healing_logger("service", original_locator)
        started = time.perf_counter()

        if url is None and isinstance(current, Snapshot):
            url = current.url

        results = self._stored_results(original_locator, url)

        if not results:
            if baseline is None and test_id:
                baseline = self.store.get_baseline(test_id)
                if baseline is None:
                    logger.debug(f"No stored baseline for test {test_id}")
            if baseline is not None:
                results = self.orchestrator.heal(original_locator, baseline, current)

        if not results:
            results = self._self_baseline_results(original_locator, current)

        if self.config.max_results is not None:
            results = results[:self.config.max_results]

        healing_logger.log_operation_success(
            "heal", time.perf_counter() - started,
            result_count=len(results),
            source=results[0].source.value if results else None,
        )
        return results

    def report(
        self,
        original_locator: str,
        healed_selector: str,
        score: float,
        strategy: str,
        success: bool,
        url: str,
        test_id: Optional[str] = None,
    ) -> int:
        """Store the outcome of trying a healed locator and return its record id."""
        if isinstance(strategy, HealingStrategy):
            strategy = strategy.value

        record = HealingRecord(
            original_selector=original_locator,
            healed_selector=healed_selector,
            score=score,
            strategy=strategy,
            success=success,
            url=url,
            test_id=test_id,
        )
        record_id = self.store.store_record(record)
        logger.info(f"Recorded {'successful' if success else 'failed'} healing "
                    f"{original_locator} -> {healed_selector} (record {record_id})")
        return record_id

    def _stored_results(self, original_locator: str, url: Optional[str]) -> List[HealingResult]:
        if not self.config.consult_store or not url:
            return []

        results = []
        for record in self.store.get_suggestions(original_locator, url):
            try:
                strategy = HealingStrategy(record.strategy)
            except ValueError:
                logger.warning(f"Skipping stored healing with unknown strategy '{record.strategy}'")
                continue
            results.append(HealingResult(
                selector=record.healed_selector,
                score=record.score,
                strategy=strategy,
                source=ResultSource.SERVER,
            ))

        if results:
            emit(self.observer, HealingEventType.STORE_HIT, original_locator,
                 f"Reusing {len(results)} stored healings for {url}",
                 url=url, count=len(results))
        return results

    def _self_baseline_results(self, original_locator: str, current: SnapshotLike) -> List[HealingResult]:
        results = self.orchestrator.heal(original_locator, current, current)
        factor = self.config.fallback_score_factor
        if results:
            logger.debug(f"Self-baseline fallback produced {len(results)} results, "
                         f"scores scaled by {factor}")
        return [replace(result, score=result.score * factor) for result in results]
