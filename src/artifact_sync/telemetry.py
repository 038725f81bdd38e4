"""Outbound event bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List

from artifact_sync.schemas import ArtifactSynced, OutboundEvent, SyncComplete, SyncedFile, SyncError

logger = logging.getLogger(__name__)

Subscriber = Callable[[OutboundEvent], None]


@dataclass
class EventBus:
    events: List[OutboundEvent] = field(default_factory=list)
    strict: bool = False

    def __post_init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register ``subscriber``; returns a callable that unsubscribes it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def emit(self, event: OutboundEvent) -> None:
        """Record the event and deliver it to every subscriber.

        Args:
            event: Event to emit
        """
        self.events.append(event)
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                if self.strict:
                    raise
                logger.exception("Event subscriber failed for %s", event.action)

    def artifact_synced(self, filename: str) -> None:
        self.emit(ArtifactSynced(data=SyncedFile(filename=filename)))

    def sync_error(self, message: str) -> None:
        self.emit(SyncError(error=message))

    def sync_complete(self, count: int) -> None:
        self.emit(SyncComplete(count=count))
