"""
Drag-and-drop resolution.

A DragResult describes one gesture: where the item came from and where it
was dropped. resolve_drag() turns it into exactly one BoardCommand (or None
for the two no-op cases), which the controller dispatches through the
mutation protocol.

    section                    -> reorder_sections(full permuted id list)
    task, same container       -> reorder_tasks(section, permuted id list)
    task, different container  -> move_task(src, dst, src_index, dst_index)
"""
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional

from . import board as board_ops
from .errors import NotFound, OutOfRange, ValidationError
from .schema import Board


class ItemType(Enum):
    """What was dragged."""
    SECTION = "section"
    TASK = "task"

    @classmethod
    def from_str(cls, value: str) -> "ItemType":
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(f"unknown drag item type: {value}")


@dataclass(frozen=True)
class DragResult:
    """One drag gesture. Destination fields are None when dropped outside a target."""
    source_container_id: str
    source_index: int
    item_type: ItemType
    dest_container_id: Optional[str] = None
    dest_index: Optional[int] = None

    @property
    def has_destination(self) -> bool:
        return self.dest_container_id is not None and self.dest_index is not None

    @property
    def is_same_position(self) -> bool:
        return (
            self.source_container_id == self.dest_container_id
            and self.source_index == self.dest_index
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DragResult":
        """
        Build from a drag-library style payload:

            {"type": "task",
             "source": {"droppableId": "section-1", "index": 0},
             "destination": {"droppableId": "section-2", "index": 1} | null}
        """
        source = data.get("source") or {}
        destination = data.get("destination") or {}
        if "droppableId" not in source or "index" not in source:
            raise ValidationError("drag result needs source.droppableId and source.index")
        return cls(
            source_container_id=str(source["droppableId"]),
            source_index=int(source["index"]),
            item_type=ItemType.from_str(data.get("type", "task")),
            dest_container_id=(
                str(destination["droppableId"]) if "droppableId" in destination else None
            ),
            dest_index=int(destination["index"]) if "index" in destination else None,
        )


@dataclass(frozen=True)
class BoardCommand:
    """A named board transition with its arguments bound."""
    name: str
    kwargs: Dict[str, Any] = field(default_factory=dict)

    @property
    def transition(self) -> Callable[[Board], Board]:
        return partial(getattr(board_ops, self.name), **self.kwargs)

    def apply(self, board: Board) -> Board:
        return self.transition(board)


def _moved(ids: List[str], source_index: int, dest_index: int) -> List[str]:
    # Remove at source_index, insert at dest_index
    if not 0 <= source_index < len(ids):
        raise IndexError(source_index)
    items = list(ids)
    moved = items.pop(source_index)
    items.insert(max(0, min(dest_index, len(items))), moved)
    return items


def resolve_drag(board: Board, result: DragResult) -> Optional[BoardCommand]:
    """Translate a drag gesture into a single board command, or None for a no-op."""
    if not result.has_destination or result.is_same_position:
        return None

    if result.item_type is ItemType.SECTION:
        ids = [s.id for s in board.ordered_sections()]
        try:
            new_order = _moved(ids, result.source_index, result.dest_index)
        except IndexError:
            raise OutOfRange("board", result.source_index, len(ids))
        return BoardCommand("reorder_sections", {"new_order": new_order})

    if result.source_container_id == result.dest_container_id:
        section_id = result.source_container_id
        if not board.has_section(section_id):
            raise NotFound("section", section_id)
        ids = [t.id for t in board.tasks_for(section_id)]
        try:
            new_order = _moved(ids, result.source_index, result.dest_index)
        except IndexError:
            raise OutOfRange(section_id, result.source_index, len(ids))
        return BoardCommand(
            "reorder_tasks", {"section_id": section_id, "new_order": new_order}
        )

    # Cross-container: the board performs the splice
    return BoardCommand(
        "move_task",
        {
            "source_section_id": result.source_container_id,
            "dest_section_id": result.dest_container_id,
            "source_index": result.source_index,
            "dest_index": result.dest_index,
        },
    )
