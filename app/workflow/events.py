"""
Clearance events and the in-process event bus

The engine never notifies anyone itself. Each successful mutation returns
the events it produced; the service publishes them once the change is
committed. Subscriber failures are logged and never undo the transition.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    SUBMITTED = 'submitted'
    UPLOADED = 'uploaded'
    VOTE_RECORDED = 'vote_recorded'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    UNLOCKED = 'unlocked'


@dataclass(frozen=True)
class ClearanceEvent:
    case_id: str
    item_kind: str
    item_type: str
    kind: EventKind
    new_status: str
    actor_id: Optional[str]
    timestamp: datetime
    role: Optional[str] = None
    comments: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'case_id': self.case_id,
            'item_kind': self.item_kind,
            'item_type': self.item_type,
            'kind': self.kind.value,
            'new_status': self.new_status,
            'actor_id': self.actor_id,
            'role': self.role,
            'comments': self.comments,
            'timestamp': self.timestamp.isoformat(),
        }


Subscriber = Callable[[ClearanceEvent], None]


class EventBus:
    """Fire-and-forget fan-out of clearance events"""

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        if subscriber not in self._subscribers:
            self._subscribers.append(subscriber)

    def publish(self, events: Iterable[ClearanceEvent]) -> int:
        """
        Deliver events to every subscriber

        Returns:
            Number of failed deliveries
        """
        failures = 0
        for event in events:
            for subscriber in list(self._subscribers):
                try:
                    subscriber(event)
                except Exception:
                    failures += 1
                    logger.exception(
                        "Delivery of %s event for %s %s failed",
                        event.kind.value, event.item_kind, event.item_type
                    )
        return failures
