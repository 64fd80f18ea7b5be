"""
Reporting layer for check runs.

Main exports:
- CheckMetrics: Tracks counts and rule firing for a check run
- CheckReporter: Generates Markdown reports
- formatter: Console markup for per-file status, failures and summary
"""
from .metrics import CheckMetrics
from .reporter import CheckReporter
from . import formatter

__all__ = [
    "CheckMetrics",
    "CheckReporter",
    "formatter",
]
