"""
Heuristic section classification.

Sections carry no stored category. Whether a section counts as "done" or
"in progress" is derived from its title by keyword matching, so a renamed
section may be misclassified.
"""
from enum import Enum
from typing import Dict

from .schema import Board


class SectionCategory(Enum):
    TODO = "todo"
    IN_PROGRESS = "inprogress"
    DONE = "done"


DONE_WORDS = ("done", "complete")
IN_PROGRESS_WORDS = ("progress", "doing")


def classify_section(title: str) -> SectionCategory:
    """Best-effort category for a section title."""
    text = (title or "").lower()
    if any(w in text for w in DONE_WORDS):
        return SectionCategory.DONE
    if any(w in text for w in IN_PROGRESS_WORDS):
        return SectionCategory.IN_PROGRESS
    return SectionCategory.TODO


def board_stats(board: Board) -> Dict[str, int]:
    """Total, completed and in-progress task counts."""
    stats = {"total": 0, "completed": 0, "in_progress": 0}
    for section in board.sections:
        count = len(board.tasks_for(section.id))
        stats["total"] += count
        category = classify_section(section.title)
        if category is SectionCategory.DONE:
            stats["completed"] += count
        elif category is SectionCategory.IN_PROGRESS:
            stats["in_progress"] += count
    return stats
