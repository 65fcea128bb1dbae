"""
Tests for board persistence backends (in-memory fake and SQLite).
"""
import json
import sqlite3

import pytest

from taskboard import board as ops
from taskboard.errors import PersistenceError
from taskboard.schema import Board, default_board
from taskboard.store import MemoryBoardStore, SQLiteBoardStore, decode_board, encode_board


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Blob format
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_encoded_blob_shape(board):
    data = json.loads(encode_board(board))
    assert data["sections"][0] == {"id": "A", "title": "To Do", "order": 0}
    assert [t["id"] for t in data["tasks"]["A"]] == ["t1", "t2", "t3"]
    assert data["tasks"]["B"][0] == {
        "id": "u1", "title": "Deploy staging", "description": "docker compose", "status": "B",
    }


def test_decode_rejects_garbage():
    with pytest.raises(PersistenceError):
        decode_board("{not json")


def test_decode_coerces_numeric_strings():
    raw = json.dumps({
        "sections": [{"id": "A", "title": "A", "order": "1"}, {"id": "B", "title": "B", "order": 0}],
        "tasks": {"A": [{"id": "t", "title": "x", "description": 5}], "B": []},
    })
    board = decode_board(raw)
    assert board.section("A").order == 1
    assert [s.id for s in board.ordered_sections()] == ["B", "A"]
    assert board.tasks_for("A")[0].description == "5"


@pytest.mark.parametrize("order", ["first", None, [1]])
def test_decode_rejects_non_numeric_order(order):
    raw = json.dumps({"sections": [{"id": "A", "title": "A", "order": order}], "tasks": {"A": []}})
    with pytest.raises(PersistenceError):
        decode_board(raw)


def test_decode_rejects_duplicate_tasks():
    raw = json.dumps({
        "sections": [{"id": "A", "title": "A", "order": 0}, {"id": "B", "title": "B", "order": 1}],
        "tasks": {"A": [{"id": "t", "title": "x"}], "B": [{"id": "t", "title": "y"}]},
    })
    with pytest.raises(PersistenceError):
        decode_board(raw)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MemoryBoardStore
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestMemoryBoardStore:

    def test_empty_load_returns_none(self):
        assert MemoryBoardStore().load() is None

    def test_save_and_load(self, board):
        store = MemoryBoardStore()
        store.save(board)
        assert store.load() == board
        assert store.saves == 1

    def test_fail_next_save_only_once(self, board):
        store = MemoryBoardStore(default_board())
        store.fail_next_save("quota exceeded")
        with pytest.raises(PersistenceError, match="quota exceeded"):
            store.save(board)
        assert store.load() == default_board()
        store.save(board)
        assert store.load() == board


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SQLiteBoardStore
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestSQLiteBoardStore:

    def test_empty_database_loads_none(self, tmp_path):
        store = SQLiteBoardStore(str(tmp_path / "board.db"))
        assert store.load() is None

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "board.db"
        SQLiteBoardStore(str(db_path))
        assert db_path.parent.exists()

    def test_save_and_get(self, tmp_path, board):
        store = SQLiteBoardStore(str(tmp_path / "board.db"))
        store.save(board)
        assert store.load() == board

    def test_save_overwrites(self, tmp_path, board):
        store = SQLiteBoardStore(str(tmp_path / "board.db"))
        store.save(board)
        changed = ops.move_task(board, "A", "B", 1, 0)
        store.save(changed)
        loaded = store.load()
        assert [t.id for t in loaded.tasks_for("B")] == ["t2", "u1"]
        assert loaded.tasks_for("B")[0].status == "B"

    def test_survives_reopen(self, tmp_path, board):
        db_path = str(tmp_path / "board.db")
        SQLiteBoardStore(db_path).save(board)
        assert SQLiteBoardStore(db_path).load() == board

    def test_single_row(self, tmp_path, board):
        db_path = str(tmp_path / "board.db")
        store = SQLiteBoardStore(db_path)
        store.save(board)
        store.save(default_board())
        with sqlite3.connect(db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM board_state").fetchone()[0]
        assert count == 1

    def test_malformed_row_raises(self, tmp_path):
        db_path = str(tmp_path / "board.db")
        store = SQLiteBoardStore(db_path)
        with sqlite3.connect(db_path) as conn:
            conn.execute(
                "INSERT INTO board_state (key, value, updated_at) VALUES ('board', 'oops', 'now')"
            )
            conn.commit()
        with pytest.raises(PersistenceError):
            store.load()

    def test_section_order_round_trips(self, tmp_path):
        store = SQLiteBoardStore(str(tmp_path / "board.db"))
        board = ops.reorder_sections(default_board(), ["section-3", "section-1", "section-2"])
        store.save(board)
        loaded = store.load()
        assert [s.title for s in loaded.ordered_sections()] == ["Done", "To Do", "In Progress"]
        assert isinstance(loaded, Board)
