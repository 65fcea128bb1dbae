"""
Board data model.

A Board is an immutable value: an ordered tuple of Sections plus a mapping
from section id to an ordered tuple of Tasks. Transitions in board.py build
new Boards; nothing here mutates in place.

Persistence blob (load/save wholesale):

    {
      "sections": [{"id", "title", "order"}, ...],
      "tasks": {"<section_id>": [{"id", "title", "description", "status"}, ...]}
    }
"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


def make_id(prefix: str) -> str:
    """Generate a sortable unique id (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"{prefix}-{ts}-{rand}"


@dataclass(frozen=True)
class Section:
    """A named column. `order` is a sort key, not necessarily contiguous."""
    id: str
    title: str
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "order": self.order}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Section":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            order=int(data.get("order", 0)),
        )


@dataclass(frozen=True)
class Task:
    """A card. `status` mirrors the id of the section currently holding it."""
    id: str
    title: str
    description: str = ""
    status: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            description=str(data.get("description") or ""),
            status=str(data.get("status", "")),
        )


@dataclass(frozen=True)
class Board:
    """Sections plus per-section task lists. Treat `tasks` as read-only."""
    sections: Tuple[Section, ...] = ()
    tasks: Dict[str, Tuple[Task, ...]] = field(default_factory=dict)

    def ordered_sections(self) -> List[Section]:
        """Sections in display order (ascending `order`, ties by stored position)."""
        return sorted(self.sections, key=lambda s: s.order)

    def section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def has_section(self, section_id: str) -> bool:
        return self.section(section_id) is not None

    def tasks_for(self, section_id: str) -> Tuple[Task, ...]:
        return self.tasks.get(section_id, ())

    def task_count(self) -> int:
        return sum(len(tasks) for tasks in self.tasks.values())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persistence blob."""
        return {
            "sections": [s.to_dict() for s in self.sections],
            "tasks": {
                s.id: [t.to_dict() for t in self.tasks_for(s.id)]
                for s in self.sections
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Board":
        """
        Deserialize from the persistence blob.

        Sections without a task list get an empty one, task lists for unknown
        sections are dropped, and every task's status is rewritten to the id
        of the section whose list contains it.
        """
        sections = tuple(Section.from_dict(s) for s in data.get("sections") or [])
        raw_tasks = data.get("tasks") or {}
        tasks: Dict[str, Tuple[Task, ...]] = {}
        for section in sections:
            tasks[section.id] = tuple(
                Task.from_dict({**raw, "status": section.id})
                for raw in raw_tasks.get(section.id) or []
            )
        return cls(sections=sections, tasks=tasks)


# Default layout when no persisted board exists
DEFAULT_SECTIONS: Tuple[Section, ...] = (
    Section(id="section-1", title="To Do", order=0),
    Section(id="section-2", title="In Progress", order=1),
    Section(id="section-3", title="Done", order=2),
)


def default_board() -> Board:
    """Three empty sections: To Do, In Progress, Done."""
    return Board(
        sections=DEFAULT_SECTIONS,
        tasks={s.id: () for s in DEFAULT_SECTIONS},
    )
