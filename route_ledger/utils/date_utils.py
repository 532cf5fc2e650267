"""Date and clock utilities"""

import time
from datetime import date


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is before start)"""
    return (end - start).days


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds"""
    return int(time.time() * 1000)
