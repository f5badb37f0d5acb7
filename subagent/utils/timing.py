# subagent/utils/timing.py
"""Elapsed-time helpers used to stamp `processingTimeMs` on envelopes."""
import time


def start_timer() -> float:
    """Monotonic start mark; pair with `elapsed_ms`."""
    return time.perf_counter()


def elapsed_ms(started: float) -> float:
    """Milliseconds since `started`, never negative, rounded to microseconds."""
    return max(0.0, round((time.perf_counter() - started) * 1000.0, 3))
