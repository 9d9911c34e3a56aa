"""Audit progress events and their fan-out to subscribers."""

import asyncio
import enum
import logging
from typing import Protocol

from analyzers.models import FrozenModel

logger = logging.getLogger(__name__)


class AuditStage(str, enum.Enum):
    """Stages an audit reports while it runs."""

    INITIAL = "initial"
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    PAGESPEED = "pagespeed"
    AI = "ai"
    COMPLETE = "complete"
    ERROR = "error"
    # Handed to a worker; further progress is polled, not streamed
    QUEUED = "queued"

    @property
    def is_terminal(self) -> bool:
        return self in (AuditStage.COMPLETE, AuditStage.ERROR, AuditStage.QUEUED)


class ProgressEvent(FrozenModel):
    stage: AuditStage
    message: str


INITIAL_EVENT = ProgressEvent(stage=AuditStage.INITIAL, message="Starting analysis...")


class ProgressSink(Protocol):
    """Receives progress for one audit. Emitting never blocks or fails."""

    def emit(self, stage: AuditStage, message: str) -> None: ...


class NullProgressSink:
    """Sink used when nobody is listening."""

    def emit(self, stage: AuditStage, message: str) -> None:
        pass


class ProgressBroker:
    """
    Fans progress events out to subscribers, keyed by audited URL.

    Each subscriber owns a bounded asyncio.Queue. Subscribers that fall
    behind lose events rather than slowing the audit down. While a URL has
    subscribers its latest non-terminal event is kept, so later subscribers
    start from the current stage. Nothing is kept for unwatched URLs.
    Must be used from a single event loop.
    """

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: dict[str, set[asyncio.Queue]] = {}
        self._latest: dict[str, ProgressEvent] = {}

    def subscribe(self, url: str) -> asyncio.Queue:
        """Register a subscriber; the queue is primed with the latest event."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        queue.put_nowait(self._latest.get(url, INITIAL_EVENT))
        self._subscribers.setdefault(url, set()).add(queue)
        return queue

    def unsubscribe(self, url: str, queue: asyncio.Queue) -> None:
        """Remove a subscriber. Forgets the URL once nobody listens."""
        subscribers = self._subscribers.get(url)
        if subscribers is None:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[url]
            self._latest.pop(url, None)

    def publish(self, url: str, event: ProgressEvent) -> None:
        """Deliver an event to every subscriber of url."""
        subscribers = self._subscribers.get(url)
        if not subscribers:
            return

        if event.stage.is_terminal:
            self._latest.pop(url, None)
        else:
            self._latest[url] = event
        for queue in subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Dropping progress event for slow subscriber of {url}")

    def subscriber_count(self, url: str) -> int:
        return len(self._subscribers.get(url, ()))

    def __len__(self) -> int:
        """Number of URLs the broker holds any state for."""
        return len(self._subscribers.keys() | self._latest.keys())

    def sink(self, url: str) -> "BrokerProgressSink":
        """A ProgressSink that publishes to this broker under url."""
        return BrokerProgressSink(self, url)


class BrokerProgressSink:
    def __init__(self, broker: ProgressBroker, url: str):
        self.broker = broker
        self.url = url

    def emit(self, stage: AuditStage, message: str) -> None:
        self.broker.publish(self.url, ProgressEvent(stage=stage, message=message))
