"""Persistence collaborator for healing outcomes and baseline snapshots."""

import json
import logging
from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..core.models.document_tree import Snapshot
from ..core.models.healing_models import HealingRecord


logger = logging.getLogger(__name__)


class HealingStore(ABC):
    """Stores healing outcomes and per-test baseline snapshots."""

    @abstractmethod
    def store_record(self, record: HealingRecord) -> int:
        """Persist a healing outcome and return its id."""

    @abstractmethod
    def get_suggestions(self, original_selector: str, url: Optional[str] = None) -> List[HealingRecord]:
        """Successful healings of ``original_selector``, best score first, then most recent."""

    @abstractmethod
    def get_baseline(self, test_id: str) -> Optional[Snapshot]:
        """Latest baseline snapshot stored for ``test_id``."""

    @abstractmethod
    def store_baseline(self, test_id: str, snapshot: Snapshot) -> None:
        """Store ``snapshot`` as the latest baseline for ``test_id``."""

    @abstractmethod
    def all_records(self) -> List[HealingRecord]:
        """Every stored record in insertion order."""

    def get_stats(self) -> Dict[str, Any]:
        """Summarize stored outcomes: totals, success rate and per-strategy/per-test counts."""
        records = self.all_records()
        successful = [record for record in records if record.success]

        by_strategy = Counter(record.strategy for record in successful)
        by_test = Counter(record.test_id for record in records)

        return {
            "total": len(records),
            "successful": len(successful),
            "success_rate": len(successful) / len(records) if records else 0.0,
            "by_strategy": [{"strategy": strategy, "count": count}
                            for strategy, count in by_strategy.most_common()],
            "by_test": [{"test_id": test_id, "count": count}
                        for test_id, count in by_test.most_common(10)],
        }

    @staticmethod
    def _rank_suggestions(records: List[HealingRecord], original_selector: str,
                          url: Optional[str]) -> List[HealingRecord]:
        matching = [
            record for record in records
            if record.success
            and record.original_selector == original_selector
            and (url is None or record.url == url)
        ]
        matching.sort(key=lambda record: (-record.score, -record.timestamp))
        return matching


class InMemoryHealingStore(HealingStore):
    """Process-local store, used by tests and the command line."""

    def __init__(self):
        self._records: List[HealingRecord] = []
        self._baselines: Dict[str, Snapshot] = {}

    def store_record(self, record: HealingRecord) -> int:
        record.record_id = len(self._records) + 1
        self._records.append(record)
        logger.debug(f"Stored healing record {record.record_id} for {record.original_selector}")
        return record.record_id

    def get_suggestions(self, original_selector: str, url: Optional[str] = None) -> List[HealingRecord]:
        return self._rank_suggestions(self._records, original_selector, url)

    def get_baseline(self, test_id: str) -> Optional[Snapshot]:
        return self._baselines.get(test_id)

    def store_baseline(self, test_id: str, snapshot: Snapshot) -> None:
        self._baselines[test_id] = snapshot

    def all_records(self) -> List[HealingRecord]:
        return list(self._records)


class JsonFileHealingStore(HealingStore):
    """Store backed by JSON files in a directory.

    Records are kept in ``records.json``; each test's baseline snapshot is
    written to ``baselines/<test_id>.json`` (test id percent-encoded) in the snapshot JSON shape.
    """

    def __init__(self, storage_path: Optional[str] = None):
        """Initialize the file store.

        Args:
            storage_path: Directory for the store's files. If None, uses default.
        """
        self.storage_path = Path(storage_path or "data/healing")
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.records_file = self.storage_path / "records.json"
        self.baselines_path = self.storage_path / "baselines"
        self.baselines_path.mkdir(exist_ok=True)
        self._baseline_cache: Dict[str, Snapshot] = {}

    def store_record(self, record: HealingRecord) -> int:
        records = self.all_records()
        record.record_id = max((item.record_id or 0 for item in records), default=0) + 1
        records.append(record)

        try:
            with open(self.records_file, 'w', encoding='utf-8') as f:
                json.dump([item.to_dict() for item in records], f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to store healing record: {e}")
            raise

        logger.debug(f"Stored healing record {record.record_id} for {record.original_selector}")
        return record.record_id

    def get_suggestions(self, original_selector: str, url: Optional[str] = None) -> List[HealingRecord]:
        return self._rank_suggestions(self.all_records(), original_selector, url)

    def get_baseline(self, test_id: str) -> Optional[Snapshot]:
        if test_id in self._baseline_cache:
            return self._baseline_cache[test_id]

        baseline_file = self._baseline_file(test_id)
        if not baseline_file.exists():
            return None

        with open(baseline_file, 'r', encoding='utf-8') as f:
            snapshot = Snapshot.from_dict(json.load(f))

        self._baseline_cache[test_id] = snapshot
        logger.debug(f"Retrieved baseline for {test_id}")
        return snapshot

    def store_baseline(self, test_id: str, snapshot: Snapshot) -> None:
        try:
            with open(self._baseline_file(test_id), 'w', encoding='utf-8') as f:
                json.dump(snapshot.to_dict(), f, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to store baseline for {test_id}: {e}")
            raise

        self._baseline_cache[test_id] = snapshot
        logger.debug(f"Stored baseline for {test_id}")

    def all_records(self) -> List[HealingRecord]:
        if not self.records_file.exists():
            return []

        with open(self.records_file, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return [
            HealingRecord(
                original_selector=item["original_selector"],
                healed_selector=item["healed_selector"],
                score=float(item["score"]),
                strategy=item["strategy"],
                success=bool(item["success"]),
                url=item["url"],
                test_id=item.get("test_id"),
                timestamp=int(item["timestamp"]),
                record_id=item.get("id"),
            )
            for item in data
        ]

    def _baseline_file(self, test_id: str) -> Path:
        safe_name = quote(test_id, safe='')
        return self.baselines_path / f"{safe_name}.json"
