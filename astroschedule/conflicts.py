"""
Conflict detection.

Given a candidate task and the tasks already scheduled, decide whether the
candidate may be stored. Intervals are half-open, so touching endpoints
(end == other_start) are NOT a conflict.

Overlap rule:
    start < other_end AND end > other_start
"""

from __future__ import annotations

from typing import Iterable, Optional

from astroschedule.model import Task
from astroschedule.timeutil import overlaps


def check_overlap(candidate: Task, existing: Iterable[Task]) -> Optional[Task]:
    """
    Return the first task in `existing` whose interval overlaps the candidate,
    or None.

    Tasks with the candidate's own id are skipped, so an edited task never
    conflicts with its stored version. "First" follows the caller's
    iteration order.
    """
    c_start = candidate.start_minutes
    c_end = candidate.end_minutes
    for other in existing:
        if other.id == candidate.id:
            continue
        if overlaps(c_start, c_end, other.start_minutes, other.end_minutes):
            return other
    return None


def find_conflicts(tasks: list[Task]) -> list[tuple[Task, Task]]:
    """
    Find overlapping task pairs (A,B), each pair appears once (i<j).
    """
    conflicts: list[tuple[Task, Task]] = []

    # Pre-parse times once
    parsed = [(t.start_minutes, t.end_minutes, t) for t in tasks]

    # O(n^2) is fine for a single day's schedule
    for i in range(len(parsed)):
        s1, e1, t1 = parsed[i]
        for j in range(i + 1, len(parsed)):
            s2, e2, t2 = parsed[j]
            if overlaps(s1, e1, s2, e2):
                conflicts.append((t1, t2))

    return conflicts
