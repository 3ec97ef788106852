from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_TOTAL_SESSIONS, SESSION_FINISHED_LABEL, SESSION_UPCOMING_LABEL


def calculate_session_number(
    week_number: int,
    cycle: Optional[int] = None,
    total_sessions: int = DEFAULT_TOTAL_SESSIONS,
) -> str:
    """Label the session shown for a 1-based week index.

    Without a cycle the label counts linearly ("3/12"). With a cycle the
    count wraps, e.g. cycle=4 gives 1/4, 2/4, 3/4, 4/4, 1/4, ...
    Weeks before the start are "upcoming", weeks after the last session are
    "finished".
    """

    if not cycle or cycle <= 0:
        if week_number > total_sessions:
            return SESSION_FINISHED_LABEL
        if week_number <= 0:
            return SESSION_UPCOMING_LABEL
        return f"{week_number}/{total_sessions}"

    if week_number <= 0:
        return SESSION_UPCOMING_LABEL
    if week_number > total_sessions:
        return SESSION_FINISHED_LABEL

    session_in_cycle = ((week_number - 1) % cycle) + 1
    return f"{session_in_cycle}/{cycle}"
