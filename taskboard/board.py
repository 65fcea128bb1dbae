"""
Board transitions.

Every function takes the current Board and returns a new Board. Nothing is
mutated in place and nothing partially applies: either the full new Board is
returned or an exception is raised and the caller keeps the old one.

Raises:
    ValidationError - empty or non-string title, non-string description,
                      unknown patch field
    NotFound        - unknown section or task id
    OutOfRange      - move_task source index outside the source list
"""
from collections import Counter
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import InvariantViolation, NotFound, OutOfRange, ValidationError
from .schema import Board, Section, Task, make_id

# Task fields a patch may touch; id and status are owned by the board
PATCHABLE_TASK_FIELDS = ("title", "description")


# ── Helpers ──────────────────────────────────────────────────────────────────


def clean_title(title: Optional[str]) -> str:
    """Strip a title; raise ValidationError if nothing is left."""
    if title is not None and not isinstance(title, str):
        raise ValidationError(f"title must be a string, got {type(title).__name__}")
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title must not be empty")
    return cleaned


def clean_description(description: Optional[str]) -> str:
    """None becomes ""; anything other than a string raises ValidationError."""
    if description is None:
        return ""
    if not isinstance(description, str):
        raise ValidationError(
            f"description must be a string, got {type(description).__name__}"
        )
    return description


def _ids(items: Iterable[Any]) -> List[str]:
    # Accept ids or Section/Task objects
    return [getattr(item, "id", item) for item in items]


def _require_section(board: Board, section_id: str) -> Section:
    section = board.section(section_id)
    if section is None:
        raise NotFound("section", section_id)
    return section


def _task_index(board: Board, section_id: str, task_id: str) -> int:
    for i, task in enumerate(board.tasks_for(section_id)):
        if task.id == task_id:
            return i
    raise NotFound("task", task_id)


def _with_tasks(board: Board, updates: Mapping[str, Tuple[Task, ...]]) -> Board:
    tasks = dict(board.tasks)
    tasks.update(updates)
    return replace(board, tasks=tasks)


# ── Sections ─────────────────────────────────────────────────────────────────


def add_section(board: Board, title: str, section_id: Optional[str] = None) -> Board:
    """Append a section with order = max existing + 1 (or 0) and an empty list."""
    title = clean_title(title)
    section_id = section_id or make_id("section")
    if board.has_section(section_id):
        raise InvariantViolation(f"section id '{section_id}' already exists")
    order = max((s.order for s in board.sections), default=-1) + 1
    section = Section(id=section_id, title=title, order=order)
    tasks = dict(board.tasks)
    tasks[section_id] = ()
    return Board(sections=board.sections + (section,), tasks=tasks)


def update_section(board: Board, section_id: str, title: str) -> Board:
    """Rename a section; `order` is left unchanged."""
    _require_section(board, section_id)
    title = clean_title(title)
    sections = tuple(
        replace(s, title=title) if s.id == section_id else s
        for s in board.sections
    )
    return replace(board, sections=sections)


def delete_section(board: Board, section_id: str) -> Board:
    """Remove a section together with its entire task list."""
    _require_section(board, section_id)
    sections = tuple(s for s in board.sections if s.id != section_id)
    tasks = {sid: ts for sid, ts in board.tasks.items() if sid != section_id}
    return Board(sections=sections, tasks=tasks)


def reorder_sections(board: Board, new_order: Iterable[Any]) -> Board:
    """
    Apply a full permutation of the existing sections.

    `order` is rewritten to the positional index. The ids given must match
    the current section ids exactly; no silent drops or additions.
    """
    ids = _ids(new_order)
    current = [s.id for s in board.sections]
    if len(ids) != len(set(ids)) or set(ids) != set(current):
        raise ValidationError(
            f"section reorder must be a permutation of {current}, got {ids}"
        )
    by_id = {s.id: s for s in board.sections}
    sections = tuple(
        replace(by_id[section_id], order=index)
        for index, section_id in enumerate(ids)
    )
    return replace(board, sections=sections)


# ── Tasks ────────────────────────────────────────────────────────────────────


def add_task(board: Board, section_id: str, task: Task) -> Board:
    """Append a task to a section's list, stamping status = section_id."""
    _require_section(board, section_id)
    for tasks in board.tasks.values():
        if any(t.id == task.id for t in tasks):
            raise InvariantViolation(f"task id '{task.id}' already exists")
    task = replace(task, description=clean_description(task.description), status=section_id)
    return _with_tasks(board, {section_id: board.tasks_for(section_id) + (task,)})


def update_task(
    board: Board, section_id: str, task_id: str, patch: Mapping[str, Any]
) -> Board:
    """Merge patch fields into a task, preserving its id and status."""
    _require_section(board, section_id)
    index = _task_index(board, section_id, task_id)

    changes: Dict[str, Any] = {}
    for key, value in patch.items():
        if key in ("id", "status"):
            continue
        if key not in PATCHABLE_TASK_FIELDS:
            raise ValidationError(f"unknown task field: {key}")
        if key == "title":
            value = clean_title(value)
        else:
            value = clean_description(value)
        changes[key] = value

    tasks = list(board.tasks_for(section_id))
    tasks[index] = replace(tasks[index], **changes)
    return _with_tasks(board, {section_id: tuple(tasks)})


def delete_task(board: Board, section_id: str, task_id: str) -> Board:
    _require_section(board, section_id)
    index = _task_index(board, section_id, task_id)
    tasks = list(board.tasks_for(section_id))
    del tasks[index]
    return _with_tasks(board, {section_id: tuple(tasks)})


def move_task(
    board: Board,
    source_section_id: str,
    dest_section_id: str,
    source_index: int,
    dest_index: int,
) -> Board:
    """
    Splice the task at source_index out of the source list and into the
    destination list at dest_index (clamped to [0, len(dest)]).

    Source and destination may be the same section.
    """
    _require_section(board, source_section_id)
    _require_section(board, dest_section_id)

    source = list(board.tasks_for(source_section_id))
    if not 0 <= source_index < len(source):
        raise OutOfRange(source_section_id, source_index, len(source))
    task = source.pop(source_index)

    if source_section_id == dest_section_id:
        dest = source
    else:
        dest = list(board.tasks_for(dest_section_id))
    dest_index = max(0, min(dest_index, len(dest)))
    dest.insert(dest_index, replace(task, status=dest_section_id))

    updates = {dest_section_id: tuple(dest)}
    if source_section_id != dest_section_id:
        updates[source_section_id] = tuple(source)
    return _with_tasks(board, updates)


def reorder_tasks(board: Board, section_id: str, new_order: Iterable[Any]) -> Board:
    """
    Replace a section's list with the given order.

    Tasks are substituted by id, so each keeps its current fields regardless
    of what the caller passed. The multiset of ids must match the current list.
    """
    _require_section(board, section_id)
    ids = _ids(new_order)
    current = board.tasks_for(section_id)
    if Counter(ids) != Counter(t.id for t in current):
        raise ValidationError(
            f"task reorder for section '{section_id}' must be a permutation "
            f"of its current tasks"
        )
    by_id = {t.id: t for t in current}
    return _with_tasks(board, {section_id: tuple(by_id[tid] for tid in ids)})


# ── Invariants ───────────────────────────────────────────────────────────────


def check_invariants(board: Board) -> None:
    """
    Raise InvariantViolation on the first broken board invariant.

    Checks: unique section ids, one task list per section and none for
    unknown sections, task status equals owning section, each task id
    appears exactly once across the board.
    """
    section_ids = [s.id for s in board.sections]
    duplicates = [sid for sid, n in Counter(section_ids).items() if n > 1]
    if duplicates:
        raise InvariantViolation(f"duplicate section ids: {duplicates}")

    orphaned = set(board.tasks) - set(section_ids)
    if orphaned:
        raise InvariantViolation(f"task lists for unknown sections: {sorted(orphaned)}")

    seen: Dict[str, str] = {}
    for section_id in section_ids:
        if section_id not in board.tasks:
            raise InvariantViolation(f"section '{section_id}' has no task list")
        for task in board.tasks[section_id]:
            if task.status != section_id:
                raise InvariantViolation(
                    f"task '{task.id}' has status '{task.status}' "
                    f"but lives in section '{section_id}'"
                )
            if task.id in seen:
                raise InvariantViolation(
                    f"task '{task.id}' appears in '{seen[task.id]}' and '{section_id}'"
                )
            seen[task.id] = section_id
