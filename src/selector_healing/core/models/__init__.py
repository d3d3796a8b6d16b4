"""Core data models for the selector healing system."""

from .healing_models import (
    ElementFeature,
    FeatureType,
    GeneratedSelector,
    HealingConfiguration,
    HealingRecord,
    HealingResult,
    HealingStrategy,
    ResultSource,
    ScoredCandidate
)
from .document_tree import DocumentTree, Node, Snapshot
from .snapshot_models import NodePayload, SnapshotPayload

__all__ = [
    "ElementFeature",
    "FeatureType",
    "GeneratedSelector",
    "HealingConfiguration",
    "HealingRecord",
    "HealingResult",
    "HealingStrategy",
    "ResultSource",
    "ScoredCandidate",
    "DocumentTree",
    "Node",
    "Snapshot",
    "NodePayload",
    "SnapshotPayload"
]
