"""
Tests for trace IDs in formatted log records
"""
import logging

from adherence_engine.logging_config import LOGGING_CONFIG
from adherence_engine.utils.logger import TraceAwareFormatter, trace_context


def record(**extra):
    rec = logging.LogRecord("adherence_engine.test", logging.INFO, __file__, 1, "hello", None, None)
    for key, value in extra.items():
        setattr(rec, key, value)
    return rec


class TestTraceAwareFormatter:
    formatter = TraceAwareFormatter("[%(trace_id)s] %(message)s")

    def test_configured_for_every_formatter(self):
        for formatter in LOGGING_CONFIG["formatters"].values():
            assert formatter["()"] is TraceAwareFormatter

    def test_record_without_trace(self):
        assert self.formatter.format(record()) == "[no-trace-id] hello"

    def test_plain_logger_record_picks_up_open_trace(self):
        with trace_context("sweep", trace_id="sweep-status-abc"):
            assert self.formatter.format(record()) == "[sweep-status-abc] hello"

    def test_explicit_trace_id_wins(self):
        with trace_context("sweep", trace_id="sweep-status-abc"):
            assert self.formatter.format(record(trace_id="log-u1-2024-06-15")) == "[log-u1-2024-06-15] hello"
