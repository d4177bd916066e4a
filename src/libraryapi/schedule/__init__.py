"""Scheduling module.

Runs the overdue notification job on a fixed interval.
"""

from .job import JobRun, OverdueNotificationJob
from .scheduler import PeriodicScheduler

__all__ = [
    "JobRun",
    "OverdueNotificationJob",
    "PeriodicScheduler",
]
