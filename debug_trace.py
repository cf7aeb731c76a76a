"""
debug_trace.py

Trace instrumentation for the shape engine.
Enable by setting the SHAPEKIT_TRACE environment variable.

Lines look like ``[12:01:02.345] [ADOPT] message`` and go to stderr and,
when SHAPEKIT_TRACE_FILE names a file, to that file as well. Calls wrapped
with ``trace_call`` are indented by nesting depth and report their duration.
"""

import os
import sys
import time
import traceback
from datetime import datetime
from functools import wraps


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() not in ("", "0", "false", "no")


# Set SHAPEKIT_TRACE=1 to enable tracing
DEBUG_TRACE = _env_flag("SHAPEKIT_TRACE")

# Set SHAPEKIT_TRACE_DRAG=1 to trace every knob drag step (very verbose)
TRACE_DRAG = _env_flag("SHAPEKIT_TRACE_DRAG")

# Log file (None for stderr only)
LOG_FILE = os.environ.get("SHAPEKIT_TRACE_FILE") or None

_log_file = None
_call_depth = 0


def _wanted(category: str) -> bool:
    if not DEBUG_TRACE:
        return False
    return TRACE_DRAG or category != "DRAG"


def _sink():
    """Open the log file on first use. A file that cannot be opened is skipped."""
    global _log_file
    if _log_file is None and LOG_FILE:
        try:
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError as e:
            print(f"debug_trace: cannot open {LOG_FILE}: {e}", file=sys.stderr)
    return _log_file


def _emit(line: str):
    sys.stderr.write(line + "\n")
    sys.stderr.flush()
    sink = _sink()
    if sink is not None:
        try:
            sink.write(line + "\n")
            sink.flush()
        except OSError as e:
            print(f"debug_trace: log write failed: {e}", file=sys.stderr)


def trace(msg: str, category: str = "INFO"):
    """Emit *msg* under *category* when tracing is on."""
    if not _wanted(category):
        return
    stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    _emit(f"[{stamp}] [{category}] {'  ' * _call_depth}{msg}")


def trace_exception(msg: str = "Exception", category: str = "ERROR"):
    """Trace *msg* followed by the traceback of the exception being handled."""
    if not _wanted(category):
        return
    trace(f"{msg}\n{traceback.format_exc().rstrip()}", category)


def trace_call(category: str = "CALL"):
    """Decorator tracing entry, exit (with elapsed time) and failure of a call.

    Tracing is decided at decoration time: with it off the function is
    returned untouched.
    """
    def decorator(func):
        if not DEBUG_TRACE:
            return func
        name = func.__qualname__

        @wraps(func)
        def wrapper(*args, **kwargs):
            global _call_depth
            trace(f"-> {name}", category)
            started = time.perf_counter()
            _call_depth += 1
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _call_depth -= 1
                trace(f"x  {name} failed: {type(e).__name__}: {e}", "ERROR")
                raise
            _call_depth -= 1
            elapsed = (time.perf_counter() - started) * 1000.0
            trace(f"<- {name} ({elapsed:.2f} ms)", category)
            return result
        return wrapper
    return decorator


def close_log():
    """Close the log file, if one was opened. Tracing reopens it on demand."""
    global _log_file
    sink, _log_file = _log_file, None
    if sink is not None:
        sink.close()
