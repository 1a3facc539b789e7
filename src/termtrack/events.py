"""Change events emitted by the version control service.

Events are published only after the transaction that produced them has
committed, so a published event always describes persisted state.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BranchChanged:
    """A branch's working terms or history changed.

    Attributes:
        project_id: Project owning the branch.
        branch_name: The branch that changed.
        actor_id: User who caused the change, if known.
        timestamp: When the change was committed.
    """

    project_id: str
    branch_name: str
    actor_id: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NullPublisher:
    """Default publisher: drops events."""

    def publish(self, event: BranchChanged) -> None:
        logger.debug(
            "branch_changed %s/%s (no publisher configured)",
            event.project_id,
            event.branch_name,
        )


class InMemoryPublisher:
    """Records published events in order. Safe to share across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[BranchChanged] = []

    def publish(self, event: BranchChanged) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[BranchChanged]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
