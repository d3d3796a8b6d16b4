"""Re-identify changed elements across document snapshots and synthesize new locators for them."""

from .core.exceptions import HealingError, SnapshotFormatError
from .core.models import (
    DocumentTree,
    HealingResult,
    HealingStrategy,
    Node,
    ResultSource,
    Snapshot
)
from .services import HealingOrchestrator, HealingService, heal_selector

__version__ = "0.1.0"

__all__ = [
    "HealingError",
    "SnapshotFormatError",
    "DocumentTree",
    "HealingResult",
    "HealingStrategy",
    "Node",
    "ResultSource",
    "Snapshot",
    "HealingOrchestrator",
    "HealingService",
    "heal_selector"
]
