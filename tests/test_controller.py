"""
Tests for BoardController: command dispatch, persistence outcomes, events.
"""
import pytest

from taskboard.controller import BoardController
from taskboard.drag import DragResult, ItemType
from taskboard.errors import NotFound, OutOfRange, ValidationError
from taskboard.schema import default_board
from taskboard.store import MemoryBoardStore


class TestCommands:

    @pytest.fixture(autouse=True)
    def _controller(self, board):
        self.store = MemoryBoardStore()
        self.controller = BoardController(self.store, board)

    def test_add_section_generates_id_and_order(self):
        assert self.controller.add_section("  Review  ")
        section = self.controller.sections[-1]
        assert section.title == "Review"
        assert section.id.startswith("section-")
        assert section.order == 2
        assert self.controller.tasks_for(section.id) == ()
        assert self.store.load() == self.controller.board

    def test_add_section_empty_title_rejected_before_request(self):
        with pytest.raises(ValidationError):
            self.controller.add_section("   ")
        assert not self.controller.is_saving
        assert self.store.saves == 0

    def test_update_and_delete_section(self):
        assert self.controller.update_section("B", "Doing")
        assert self.controller.board.section("B").title == "Doing"
        assert self.controller.delete_section("A")
        assert [s.id for s in self.controller.sections] == ["B"]
        assert self.controller.tasks_for("A") == ()

    def test_reorder_sections(self):
        assert self.controller.reorder_sections(["B", "A"])
        assert [s.id for s in self.controller.sections] == ["B", "A"]

    def test_add_task(self):
        assert self.controller.add_task("B", " Ship it ", "release notes")
        task = self.controller.tasks_for("B")[-1]
        assert task.title == "Ship it"
        assert task.description == "release notes"
        assert task.status == "B"
        assert task.id.startswith("task-")

    def test_add_task_unknown_section(self):
        with pytest.raises(NotFound):
            self.controller.add_task("Z", "orphan")

    def test_update_task_cleans_title(self):
        assert self.controller.update_task("A", "t2", {"title": "  Fix SSO bug "})
        assert self.controller.tasks_for("A")[1].title == "Fix SSO bug"

    def test_update_task_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            self.controller.update_task("A", "t2", {"priority": "high"})

    def test_delete_task(self):
        assert self.controller.delete_task("A", "t1")
        assert [t.id for t in self.controller.tasks_for("A")] == ["t2", "t3"]

    def test_move_task(self):
        assert self.controller.move_task("A", "B", 2, 5)
        assert [t.id for t in self.controller.tasks_for("B")] == ["u1", "t3"]

    def test_move_task_bad_index(self):
        with pytest.raises(OutOfRange):
            self.controller.move_task("B", "A", 4, 0)

    def test_reorder_tasks(self):
        assert self.controller.reorder_tasks("A", ["t3", "t1", "t2"])
        assert [t.id for t in self.controller.tasks_for("A")] == ["t3", "t1", "t2"]

    def test_handle_drag_noop_dispatches_nothing(self):
        assert not self.controller.handle_drag(DragResult("A", 0, ItemType.TASK))
        assert self.store.saves == 0

    def test_handle_drag_moves_task(self):
        assert self.controller.handle_drag(DragResult("A", 0, ItemType.TASK, "B", 1))
        assert [t.id for t in self.controller.tasks_for("B")] == ["u1", "t1"]
        assert self.store.saves == 1

    def test_handle_drag_section(self):
        drag = DragResult("board", 1, ItemType.SECTION, "board", 0)
        assert self.controller.handle_drag(drag)
        assert [s.id for s in self.controller.sections] == ["B", "A"]


class TestPersistenceFailure:

    def test_failed_save_keeps_board_and_records_error(self, board):
        store = MemoryBoardStore()
        controller = BoardController(store, board)
        store.fail_next_save("disk full")

        assert not controller.delete_section("A")
        assert controller.board is board
        assert controller.error == "disk full"
        assert not controller.is_saving

    def test_next_request_clears_error(self, board):
        store = MemoryBoardStore()
        controller = BoardController(store, board)
        store.fail_next_save("disk full")
        controller.add_section("Backlog")
        assert controller.add_section("Backlog")
        assert controller.error is None


class TestLoad:

    def test_empty_store_gives_default_board(self):
        controller = BoardController(MemoryBoardStore())
        assert controller.load()
        assert controller.board == default_board()
        assert not controller.is_loading

    def test_loads_persisted_board(self, board):
        controller = BoardController(MemoryBoardStore(board))
        assert controller.load()
        assert controller.board == board

    def test_load_failure_keeps_current_board(self, board):
        class BrokenStore(MemoryBoardStore):
            def load(self):
                from taskboard.errors import PersistenceError
                raise PersistenceError("database is locked")

        controller = BoardController(BrokenStore(), board)
        assert not controller.load()
        assert controller.error == "database is locked"
        assert controller.board is board
        assert not controller.is_loading


class TestEvents:

    def test_board_changed_and_save_failed(self, board):
        store = MemoryBoardStore()
        controller = BoardController(store, board)
        events = []
        controller.subscribe("board_changed", lambda name: events.append(("changed", name)))
        controller.subscribe("save_failed", lambda name, error: events.append(("failed", name, error)))

        controller.delete_task("A", "t1")
        store.fail_next_save("quota")
        controller.delete_task("A", "t2")

        assert events == [("changed", "delete_task"), ("failed", "delete_task", "quota")]

    def test_board_loaded(self):
        controller = BoardController(MemoryBoardStore())
        loaded = []
        controller.subscribe("board_loaded", lambda: loaded.append(True))
        controller.load()
        assert loaded == [True]

    def test_callback_error_does_not_break_dispatch(self, board):
        controller = BoardController(MemoryBoardStore(), board)

        def broken(name):
            raise RuntimeError("toast service down")

        controller.subscribe("board_changed", broken)
        assert controller.delete_task("A", "t1")
        assert [t.id for t in controller.tasks_for("A")] == ["t2", "t3"]


class TestReads:

    def test_filtered_tasks_follow_query(self, board):
        controller = BoardController(MemoryBoardStore(), board)
        assert controller.filtered_tasks_for("A") is controller.tasks_for("A")

        controller.set_search_query("docs")
        assert [t.id for t in controller.filtered_tasks_for("A")] == ["t1"]
        assert list(controller.filtered_tasks_for("B")) == []
        assert controller.search_summary()["shown"] == 1

        controller.set_search_query(None)
        assert controller.search_query == ""

    def test_stats(self, board):
        controller = BoardController(MemoryBoardStore(), board)
        assert controller.stats() == {"total": 4, "completed": 0, "in_progress": 1}


class TestUnexpectedBackendError:

    class ExplodingStore(MemoryBoardStore):
        def save(self, board):
            raise OSError("disk gone")

    def test_non_persistence_error_resolves_request_and_propagates(self, board):
        controller = BoardController(self.ExplodingStore(), board)
        failures = []
        controller.subscribe("save_failed", lambda name, error: failures.append((name, error)))

        with pytest.raises(OSError):
            controller.delete_task("A", "t1")

        assert controller.is_saving is False
        assert controller.mutations.in_flight == 0
        assert controller.error == "disk gone"
        assert controller.board is board
        assert failures == [("delete_task", "disk gone")]

    def test_add_task_rejects_non_string_description(self, board):
        controller = BoardController(MemoryBoardStore(), board)
        with pytest.raises(ValidationError):
            controller.add_task("A", "Title", 42)
        assert not controller.is_saving
