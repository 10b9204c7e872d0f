"""
HuffIndex Diagnostics Tests
===========================
Tests for the trace sinks.
"""

import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from indexing.diagnostics import (
    NULL_SINK, FanoutSink, LoggingSink, RecordingSink, TraceEvent,
)


class TestSinks:

    def test_null_sink_accepts_events(self):
        NULL_SINK.emit(TraceEvent("huffman.merge", "ignored"))

    def test_recording_sink(self):
        sink = RecordingSink()
        sink.emit(TraceEvent("a", "one"))
        sink.emit(TraceEvent("b", "two", {"x": 1}))
        sink.emit(TraceEvent("a", "three"))
        assert sink.kinds() == ["a", "b", "a"]
        assert [e.message for e in sink.of_kind("a")] == ["one", "three"]
        sink.clear()
        assert sink.events == []

    def test_logging_sink(self, caplog):
        log = logging.getLogger("huffidx.test")
        with caplog.at_level(logging.DEBUG, logger="huffidx.test"):
            sink = LoggingSink(log)
            sink.emit(TraceEvent("rbtree.case1", "recolor"))
            sink.emit(TraceEvent("rbtree.snapshot", "tree", {"tree": None}))
        assert "[rbtree.case1] recolor" in caplog.text
        assert "snapshot" not in caplog.text

    def test_fanout_skips_none(self):
        a, b = RecordingSink(), RecordingSink()
        sink = FanoutSink(a, None, b)
        sink.emit(TraceEvent("k", "m"))
        assert a.kinds() == b.kinds() == ["k"]
        FanoutSink().emit(TraceEvent("k", "m"))
