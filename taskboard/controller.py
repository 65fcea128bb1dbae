"""
Board controller: the single dispatcher behind the UI-facing command surface.

Commands (add/update/delete/reorder/move, drag results) are turned into
BoardCommands, run through the mutation protocol, and persisted. Reads
(sections, tasks, filtered tasks, is_saving, error) come straight from the
current board.

Validation and contract errors raise to the caller. Only persistence
failures become stored error state.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from . import board as board_ops
from .categorizer import board_stats
from .drag import BoardCommand, DragResult, resolve_drag
from .errors import PersistenceError
from .mutations import MutationProtocol
from .schema import Board, Section, Task, default_board, make_id
from .search import filter_tasks, search_summary
from .store import BoardPersistence

logger = logging.getLogger(__name__)


class BoardController:
    """Owns the board, the persistence backend and the search query."""

    def __init__(self, persistence: BoardPersistence, board: Optional[Board] = None):
        self.persistence = persistence
        self.mutations = MutationProtocol(board if board is not None else default_board())
        self.search_query = ""
        self.is_loading = False
        self.subscribers: Dict[str, list] = {}  # event name -> list of callbacks

    # ── Events ───────────────────────────────────────────────────────────────

    def subscribe(self, event: str, callback: Callable) -> None:
        """Register a callback for board_changed / save_failed / board_loaded."""
        self.subscribers.setdefault(event, []).append(callback)

    def _emit(self, event: str, **kwargs) -> None:
        for callback in self.subscribers.get(event, []):
            try:
                callback(**kwargs)
            except Exception as e:
                logger.warning(f"Error in {event} callback: {e}")

    # ── Reads ────────────────────────────────────────────────────────────────

    @property
    def board(self) -> Board:
        return self.mutations.board

    @property
    def is_saving(self) -> bool:
        return self.mutations.is_saving

    @property
    def error(self) -> Optional[str]:
        return self.mutations.error

    @property
    def sections(self) -> List[Section]:
        return self.board.ordered_sections()

    def tasks_for(self, section_id: str) -> Sequence[Task]:
        return self.board.tasks_for(section_id)

    def filtered_tasks_for(self, section_id: str) -> Sequence[Task]:
        return filter_tasks(self.board.tasks_for(section_id), self.search_query)

    def stats(self) -> Dict[str, int]:
        return board_stats(self.board)

    def search_summary(self) -> Dict[str, Any]:
        return search_summary(self.board, self.search_query)

    # ── Loading ──────────────────────────────────────────────────────────────

    def load(self) -> bool:
        """Load the persisted board; fall back to the defaults when none exists."""
        self.is_loading = True
        self.mutations.error = None
        try:
            board = self.persistence.load()
        except PersistenceError as e:
            self.mutations.error = str(e)
            logger.error(f"Failed to load board: {e}")
            return False
        finally:
            self.is_loading = False
        self.mutations.board = board if board is not None else default_board()
        logger.info(
            f"Board loaded: {len(self.board.sections)} sections, "
            f"{self.board.task_count()} tasks"
        )
        self._emit("board_loaded")
        return True

    # ── Dispatch ─────────────────────────────────────────────────────────────

    def dispatch(self, command: BoardCommand) -> bool:
        """
        Run one command through request -> persist -> success/failure.

        Returns True once the change is applied, False if persistence failed
        (the board is then unchanged and `error` holds the reason).

        Any other exception from the backend also resolves the request as a
        failure, then propagates to the caller.
        """
        pending = self.mutations.request(command.name, command.transition)
        try:
            self.persistence.save(pending.candidate)
        except Exception as e:
            self.mutations.fail(pending, e)
            self._emit("save_failed", name=command.name, error=str(e))
            if not isinstance(e, PersistenceError):
                raise
            return False
        applied = self.mutations.succeed(pending)
        if applied:
            self._emit("board_changed", name=command.name)
        return applied

    # ── Sections ─────────────────────────────────────────────────────────────

    def add_section(self, title: str) -> bool:
        title = board_ops.clean_title(title)
        return self.dispatch(BoardCommand(
            "add_section", {"title": title, "section_id": make_id("section")}
        ))

    def update_section(self, section_id: str, title: str) -> bool:
        title = board_ops.clean_title(title)
        return self.dispatch(BoardCommand(
            "update_section", {"section_id": section_id, "title": title}
        ))

    def delete_section(self, section_id: str) -> bool:
        return self.dispatch(BoardCommand("delete_section", {"section_id": section_id}))

    def reorder_sections(self, new_order: Iterable[Any]) -> bool:
        return self.dispatch(BoardCommand(
            "reorder_sections", {"new_order": list(new_order)}
        ))

    # ── Tasks ────────────────────────────────────────────────────────────────

    def add_task(self, section_id: str, title: str, description: str = "") -> bool:
        title = board_ops.clean_title(title)
        description = board_ops.clean_description(description)
        task = Task(id=make_id("task"), title=title, description=description)
        return self.dispatch(BoardCommand(
            "add_task", {"section_id": section_id, "task": task}
        ))

    def update_task(self, section_id: str, task_id: str, patch: Mapping[str, Any]) -> bool:
        if "title" in patch:
            patch = {**patch, "title": board_ops.clean_title(patch["title"])}
        return self.dispatch(BoardCommand(
            "update_task", {"section_id": section_id, "task_id": task_id, "patch": dict(patch)}
        ))

    def delete_task(self, section_id: str, task_id: str) -> bool:
        return self.dispatch(BoardCommand(
            "delete_task", {"section_id": section_id, "task_id": task_id}
        ))

    def move_task(
        self, source_section_id: str, dest_section_id: str, source_index: int, dest_index: int
    ) -> bool:
        return self.dispatch(BoardCommand("move_task", {
            "source_section_id": source_section_id,
            "dest_section_id": dest_section_id,
            "source_index": source_index,
            "dest_index": dest_index,
        }))

    def reorder_tasks(self, section_id: str, new_order: Iterable[Any]) -> bool:
        return self.dispatch(BoardCommand(
            "reorder_tasks", {"section_id": section_id, "new_order": list(new_order)}
        ))

    def handle_drag(self, result: DragResult) -> bool:
        """Resolve a drag gesture; the no-op cases dispatch nothing and return False."""
        command = resolve_drag(self.board, result)
        if command is None:
            return False
        return self.dispatch(command)

    # ── Search ───────────────────────────────────────────────────────────────

    def set_search_query(self, query: Optional[str]) -> None:
        self.search_query = query or ""
