"""
Patient queue for the doctor dashboard.

Cases are served most-urgent first; among equal urgency, first come first
served. Wait estimates are fixed when a patient checks in.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Optional

from medicrew.models.enums import QueueStatus, UrgencyLevel
from medicrew.models.portal import QueueItem


logger = logging.getLogger(__name__)

# Minutes before a doctor is expected to see a new patient, by urgency
BASE_WAIT_MINUTES = {
    UrgencyLevel.CRITICAL: 0,
    UrgencyLevel.HIGH: 15,
    UrgencyLevel.MEDIUM: 30,
    UrgencyLevel.LOW: 60,
}

# Extra minutes per patient already waiting
PER_WAITING_PATIENT_MINUTES = 10


def estimate_wait_time(urgency: UrgencyLevel, waiting_count: int) -> int:
    """Estimated wait in minutes for a new patient."""
    return BASE_WAIT_MINUTES[urgency] + PER_WAITING_PATIENT_MINUTES * waiting_count


class PatientQueue:
    """
    In-memory, thread-safe patient queue.

    Items are kept in check-in order in the injected storage mapping;
    ordering by urgency happens on read.
    """

    def __init__(self, storage: Optional[dict[str, QueueItem]] = None):
        self._items: dict[str, QueueItem] = storage if storage is not None else {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._items)

    def enqueue(
        self,
        patient_id: str,
        patient_name: str,
        urgency_level: UrgencyLevel,
        symptom_check_id: str,
        check_in_time: Optional[datetime] = None,
    ) -> QueueItem:
        """
        Add a patient to the queue.

        The wait estimate and the append happen under one lock, so two
        concurrent check-ins never see the same waiting count.

        Returns:
            The new QueueItem, status waiting
        """
        urgency_level = UrgencyLevel.parse(urgency_level)
        with self._lock:
            item = QueueItem(
                id=f"q-{uuid.uuid4().hex[:12]}",
                patient_id=patient_id,
                patient_name=patient_name,
                urgency_level=urgency_level,
                estimated_wait_time=estimate_wait_time(urgency_level, self._waiting_count()),
                status=QueueStatus.WAITING,
                symptom_check_id=symptom_check_id,
                check_in_time=check_in_time or datetime.now(),
            )
            self._items[item.id] = item

        logger.info(
            f"Queued {item.id} for check {symptom_check_id}: "
            f"{urgency_level.value}, ~{item.estimated_wait_time} min"
        )
        return item

    def get(self, item_id: str) -> Optional[QueueItem]:
        return self._items.get(item_id)

    def find_by_symptom_check(self, symptom_check_id: str) -> Optional[QueueItem]:
        with self._lock:
            for item in self._items.values():
                if item.symptom_check_id == symptom_check_id:
                    return item
        return None

    def list_ordered_by_urgency(self) -> list[QueueItem]:
        """All items, most severe first; ties keep check-in order."""
        with self._lock:
            items = list(self._items.values())
        # sorted() is stable, so insertion order survives within a level
        return sorted(items, key=lambda item: item.urgency_level.sort_key)

    def update_status(self, item_id: str, status: QueueStatus) -> Optional[QueueItem]:
        """
        Set an item's status in place.

        Any transition is allowed, including moving a completed item back
        to waiting.

        Returns:
            The updated item, or None if the id is unknown
        """
        status = QueueStatus(status)
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return None
            item.status = status
        logger.info(f"Queue item {item_id} -> {status.value}")
        return item

    def remove(self, item_id: str) -> bool:
        """Remove an item. Returns False if it wasn't there."""
        with self._lock:
            removed = self._items.pop(item_id, None)
        return removed is not None

    def waiting_count(self) -> int:
        with self._lock:
            return self._waiting_count()

    def _waiting_count(self) -> int:
        # Caller holds the lock
        return sum(1 for item in self._items.values() if item.status == QueueStatus.WAITING)

    def average_wait_time(self) -> int:
        """Mean estimated wait over all items, rounded; 0 for an empty queue."""
        with self._lock:
            waits = [item.estimated_wait_time for item in self._items.values()]
        if not waits:
            return 0
        return round(sum(waits) / len(waits))
