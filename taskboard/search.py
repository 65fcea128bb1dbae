"""
Task search.

Pure, read-only filtering. Safe to call on every render.
"""
from typing import Any, Dict, Optional, Sequence

from .schema import Board, Task


def is_filter_active(query: Optional[str]) -> bool:
    """An empty or whitespace-only query means no filter."""
    return bool(query and query.strip())


def matches(task: Task, query: str) -> bool:
    """Case-insensitive substring match against title or description."""
    needle = query.lower()
    if needle in task.title.lower():
        return True
    return bool(task.description) and needle in task.description.lower()


def filter_tasks(tasks: Sequence[Task], query: Optional[str]) -> Sequence[Task]:
    """
    Return the tasks whose title or description contains the query.

    With no active filter the input is returned as-is, so callers can tell
    "no filter" apart from "filter that matched everything".
    """
    if not is_filter_active(query):
        return tasks
    return [t for t in tasks if matches(t, query)]


def search_summary(board: Board, query: Optional[str]) -> Dict[str, Any]:
    """
    Counts for the 'Showing X of Y tasks matching ...' line.

    `active` follows the raw query, so a whitespace-only query still shows
    the line (with shown == total, since filtering ignores it).
    """
    total = 0
    shown = 0
    for section in board.sections:
        tasks = board.tasks_for(section.id)
        total += len(tasks)
        shown += len(filter_tasks(tasks, query))
    return {
        "query": query or "",
        "active": bool(query),
        "shown": shown,
        "total": total,
    }
