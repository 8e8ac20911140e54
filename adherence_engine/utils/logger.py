import logging
import contextvars
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

# Context variable carrying the trace ID of the current scoring pass or sweep
trace_id_context = contextvars.ContextVar('trace_id', default=None)


class TraceAwareFormatter(logging.Formatter):
    """
    Formatter that includes the trace ID in log messages.

    Falls back to the context variable when the record was emitted through
    a plain ``logging.Logger`` rather than ``TraceAwareLogger``.
    """

    def format(self, record: logging.LogRecord) -> str:
        trace_id = getattr(record, 'trace_id', None)
        if not trace_id:
            trace_id = trace_id_context.get()

        record.trace_id = trace_id or "no-trace-id"
        return super().format(record)


class TraceAwareLogger:
    """
    A logger wrapper that automatically includes the current trace ID.

    Every engine entry point (log trigger, sweep, query) opens a trace so
    that all records of one pass can be correlated.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _log_with_context(self, level: int, msg: str, *args, **kwargs):
        trace_id = kwargs.pop('trace_id', None)
        if not trace_id:
            trace_id = trace_id_context.get()

        if trace_id:
            extra = kwargs.get('extra', {})
            extra['trace_id'] = trace_id
            kwargs['extra'] = extra

        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.ERROR, msg, *args, **kwargs, exc_info=True)


def get_logger(name: str) -> TraceAwareLogger:
    """
    Get a trace-aware logger for the specified name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        TraceAwareLogger: A logger that automatically includes the trace ID
    """
    return TraceAwareLogger(name)


@contextmanager
def trace_context(prefix: str, trace_id: Optional[str] = None) -> Iterator[str]:
    """
    Open a trace for the duration of a block.

    A nested trace keeps the outer trace ID so a sweep that calls into
    per-user code still logs under a single ID.
    """
    outer = trace_id_context.get()
    if outer:
        yield outer
        return

    trace_id = trace_id or f"{prefix}-{uuid.uuid4().hex[:12]}"
    token = trace_id_context.set(trace_id)
    try:
        yield trace_id
    finally:
        trace_id_context.reset(token)
