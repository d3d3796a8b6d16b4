"""Data models for the selector healing pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .document_tree import Node


class HealingStrategy(Enum):
    """Strategies used to build a generated locator, in preference order."""
    ID_BASED = "id-based"
    CLASS_BASED = "class-based"
    ATTRIBUTE = "attribute"
    TEXT_BASED = "text-based"
    CSS_PATH = "css-path"
    XPATH = "xpath"

    @property
    def priority(self) -> int:
        """Rank used to break score ties (lower wins)."""
        return _STRATEGY_PRIORITY[self]


_STRATEGY_PRIORITY = {
    HealingStrategy.ID_BASED: 0,
    HealingStrategy.CLASS_BASED: 1,
    HealingStrategy.ATTRIBUTE: 2,
    HealingStrategy.TEXT_BASED: 3,
    HealingStrategy.CSS_PATH: 4,
    HealingStrategy.XPATH: 5,
}


class ResultSource(Enum):
    """Where a healing result came from."""
    LOCAL = "local"
    SERVER = "server"


class FeatureType(Enum):
    """Kinds of facts extracted from a node for candidate matching."""
    ID = "id"
    CLASS = "class"
    TEXT = "text"
    ATTRIBUTE = "attribute"


@dataclass(frozen=True)
class ElementFeature:
    """A weighted, typed fact about a reference node.

    For attribute features ``value`` is encoded as ``name="value"``; the raw
    name and value are kept alongside so matching never has to re-parse it.
    """
    type: FeatureType
    value: str
    weight: float
    attribute_name: Optional[str] = None
    attribute_value: Optional[str] = None


@dataclass
class ScoredCandidate:
    """A candidate node from the current tree with its similarity score."""
    node: "Node"
    score: float
    matched_features: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class GeneratedSelector:
    """A locator string synthesized for one node."""
    value: str
    strategy: HealingStrategy
    specificity: float


@dataclass(frozen=True)
class HealingResult:
    """One ranked replacement locator."""
    selector: str
    score: float
    strategy: HealingStrategy
    source: ResultSource = ResultSource.LOCAL

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to its JSON boundary shape."""
        return {
            "selector": self.selector,
            "score": self.score,
            "strategy": self.strategy.value,
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HealingResult':
        """Create result from its JSON boundary shape."""
        return cls(
            selector=data["selector"],
            score=float(data["score"]),
            strategy=HealingStrategy(data["strategy"]),
            source=ResultSource(data.get("source", ResultSource.LOCAL.value)),
        )


@dataclass
class HealingRecord:
    """Outcome of trying a healed selector, as kept by a healing store."""
    original_selector: str
    healed_selector: str
    score: float
    strategy: str
    success: bool
    url: str
    test_id: Optional[str] = None
    timestamp: int = field(default_factory=lambda: int(datetime.now().timestamp() * 1000))
    record_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary for storage."""
        return {
            "id": self.record_id,
            "original_selector": self.original_selector,
            "healed_selector": self.healed_selector,
            "score": self.score,
            "strategy": self.strategy,
            "success": self.success,
            "url": self.url,
            "test_id": self.test_id,
            "timestamp": self.timestamp,
        }


@dataclass
class HealingConfiguration:
    """Configuration settings for the selector healing service."""
    enabled: bool = True
    score_threshold: float = 0.3
    fallback_score_factor: float = 0.8
    max_results: Optional[int] = None
    consult_store: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "enabled": self.enabled,
            "score_threshold": self.score_threshold,
            "fallback_score_factor": self.fallback_score_factor,
            "max_results": self.max_results,
            "consult_store": self.consult_store,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HealingConfiguration':
        """Create configuration from dictionary."""
        return cls(**data)
