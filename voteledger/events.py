# voteledger/events.py
# Append-only log of committed state transitions.
import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .clock import SystemClock

logger = logging.getLogger(__name__)


class Event(BaseModel):
    seq: int = Field(..., ge=1)
    kind: str
    timestamp: int
    data: Dict[str, Any] = Field(default_factory=dict)


class EventLog:
    """
    Events recorded inside a transaction stay pending until the outermost
    transaction commits. Rolled back transactions discard theirs, so
    readers and sinks only ever see committed transitions.

    Sequence numbers never repeat: a sink that keeps events across
    restarts (one with a ``last_seq()`` method) moves the next number past
    the highest one it already holds.
    """

    def __init__(self, clock=None, sinks=None):
        self.clock = clock if clock is not None else SystemClock()
        self.sinks = []
        self._committed: List[Event] = []
        self._pending: List[Event] = []
        self._next_seq = 1
        for sink in sinks or []:
            self.add_sink(sink)

    def record(self, kind: str, **data) -> Event:
        event = Event(seq=self._next_seq, kind=kind, timestamp=self.clock.now(), data=data)
        self._next_seq += 1
        self._pending.append(event)
        return event

    def mark(self) -> int:
        return len(self._pending)

    def discard(self, mark: int):
        if mark < len(self._pending):
            # numbers of dropped events are handed out again
            self._next_seq = self._pending[mark].seq
        del self._pending[mark:]

    def commit(self):
        if not self._pending:
            return
        published, self._pending = self._pending, []
        self._committed.extend(published)
        for sink in self.sinks:
            for event in published:
                try:
                    sink.publish(event)
                except Exception as e:
                    # state is already committed; a broken sink must not undo it
                    logger.error(f"Event sink {type(sink).__name__} failed on event {event.seq}: {e}")

    def add_sink(self, sink):
        last_seq = getattr(sink, "last_seq", None)
        if last_seq is not None:
            stored = last_seq()
            if stored >= self._next_seq:
                logger.info(f"{type(sink).__name__} already holds events up to {stored}; continuing from {stored + 1}")
                self._next_seq = stored + 1
        self.sinks.append(sink)

    def events(self, since: int = 0) -> List[Event]:
        return [e for e in self._committed if e.seq > since]

    @property
    def next_seq(self) -> int:
        return self._next_seq

    def __len__(self):
        return len(self._committed)

    def dump(self) -> List[Dict[str, Any]]:
        return [e.model_dump() for e in self._committed]

    def load(self, records: List[Dict[str, Any]]):
        self._committed = [Event.model_validate(r) for r in records]
        self._pending = []
        if self._committed:
            self._next_seq = max(self._next_seq, self._committed[-1].seq + 1)
