"""
Trace events emitted while healing a locator.

The orchestrator never prints diagnostics itself. It reports what happened at
each pipeline step to an injected HealingObserver; the default observer routes
events to the healing logger, and RecordingHealingObserver keeps them for
callers that want a diagnostic channel next to the (possibly empty) results.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .logging_config import get_healing_logger


logger = logging.getLogger(__name__)


class HealingEventType(Enum):
    """Types of trace events."""
    LOCATOR_UNSUPPORTED = "locator_unsupported"
    BASELINE_ELEMENT_NOT_FOUND = "baseline_element_not_found"
    CANDIDATES_FOUND = "candidates_found"
    NO_CANDIDATES = "no_candidates"
    CANDIDATES_SCORED = "candidates_scored"
    SELECTORS_GENERATED = "selectors_generated"
    HEALING_COMPLETED = "healing_completed"
    HEALING_FAILED = "healing_failed"
    STORE_HIT = "store_hit"


@dataclass
class HealingEvent:
    """A single trace event."""
    event_type: HealingEventType
    locator: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert trace event to dictionary."""
        return {
            "event_type": self.event_type.value,
            "locator": self.locator,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class HealingObserver:
    """Receives trace events from the healing pipeline. The base class ignores them."""

    def on_event(self, event: HealingEvent) -> None:
        pass


class LoggingHealingObserver(HealingObserver):
    """Forwards trace events to the ``healing.<component>`` logger."""

    # Terminal "nothing to heal" outcomes are worth a warning, the rest is tracing
    WARNING_EVENTS = {
        HealingEventType.LOCATOR_UNSUPPORTED,
        HealingEventType.BASELINE_ELEMENT_NOT_FOUND,
        HealingEventType.NO_CANDIDATES,
    }

    def __init__(self, component: str = "orchestrator"):
        self.component = component

    def on_event(self, event: HealingEvent) -> None:
        healing_logger = get_healing_logger(self.component, event.locator)
        extra = {'operation': event.event_type.value, 'metadata': event.details}

        if event.event_type == HealingEventType.HEALING_FAILED:
            healing_logger.error(event.message, extra=extra)
        elif event.event_type in self.WARNING_EVENTS:
            healing_logger.warning(event.message, extra=extra)
        elif event.event_type in (HealingEventType.HEALING_COMPLETED, HealingEventType.STORE_HIT):
            healing_logger.info(event.message, extra=extra)
        else:
            healing_logger.debug(event.message, extra=extra)


class RecordingHealingObserver(HealingObserver):
    """Keeps every event in memory, optionally forwarding to another observer."""

    def __init__(self, forward_to: Optional[HealingObserver] = None):
        self.events: List[HealingEvent] = []
        self.forward_to = forward_to

    def on_event(self, event: HealingEvent) -> None:
        self.events.append(event)
        if self.forward_to is not None:
            self.forward_to.on_event(event)

    def event_types(self) -> List[HealingEventType]:
        return [event.event_type for event in self.events]

    def clear(self) -> None:
        self.events.clear()


def emit(observer: Optional[HealingObserver], event_type: HealingEventType, locator: str,
         message: str, **details) -> None:
    """Deliver an event, never letting an observer failure escape."""
    if observer is None:
        return
    try:
        observer.on_event(HealingEvent(
            event_type=event_type,
            locator=locator,
            message=message,
            details=details,
        ))
    except Exception as e:
        logger.warning(f"Healing observer failed on {event_type.value}: {e}")
