"""
HuffIndex Diagnostics
=====================
Trace sinks for observing code building and tree rebalancing.

Components emit TraceEvent objects to an explicitly passed sink.
Sinks are purely observational: an index built with NullSink behaves
exactly like one built with any other sink.

Event kinds:
  huffman.merge        one merge of the two lowest-ordered candidates
  rbtree.insert        structural insertion of a new red node
  rbtree.duplicate     posting appended to an existing key
  rbtree.case1/2/3     fix-up case applied (mirror=True for right side)
  rbtree.rotate_left   rotation around a node
  rbtree.rotate_right
  rbtree.snapshot      tree state after a fix-up (payload: tree)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TraceEvent:
    """A single diagnostic event."""
    kind: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


class TraceSink:
    """Base sink. Subclasses override emit()."""

    def emit(self, event: TraceEvent) -> None:
        raise NotImplementedError


class NullSink(TraceSink):
    """Discards every event."""

    def emit(self, event: TraceEvent) -> None:
        pass


NULL_SINK = NullSink()


class RecordingSink(TraceSink):
    """Keeps events in memory, in emission order."""

    def __init__(self):
        self.events: List[TraceEvent] = []

    def emit(self, event: TraceEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[str]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: str) -> List[TraceEvent]:
        return [e for e in self.events if e.kind == kind]

    def clear(self) -> None:
        self.events.clear()


class LoggingSink(TraceSink):
    """
    Forwards event messages to a logger.
    Snapshot events are skipped (their payload is a live tree, not text).
    """

    def __init__(self, log: Optional[logging.Logger] = None,
                 level: int = logging.DEBUG):
        self.log = log or logger
        self.level = level

    def emit(self, event: TraceEvent) -> None:
        if event.kind == "rbtree.snapshot":
            return
        self.log.log(self.level, "[%s] %s", event.kind, event.message)


class FanoutSink(TraceSink):
    """Delivers each event to several sinks, in order."""

    def __init__(self, *sinks: TraceSink):
        self.sinks = [s for s in sinks if s is not None]

    def emit(self, event: TraceEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)
