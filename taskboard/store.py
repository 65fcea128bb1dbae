"""
Board persistence backends.

The whole board is loaded and saved as one JSON blob (see schema.py).
Backends raise PersistenceError on failure; they never retry.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from .board import check_invariants
from .errors import BoardError, PersistenceError
from .schema import Board

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".local" / "share" / "taskboard" / "board.db"
BOARD_KEY = "board"


class BoardPersistence(Protocol):
    """Key-value persistence for the whole board."""

    def load(self) -> Optional[Board]:
        """Return the stored board, or None if nothing has been saved yet."""
        ...

    def save(self, board: Board) -> None:
        """Durably write the board. Raises PersistenceError on failure."""
        ...


def decode_board(raw: str) -> Board:
    """Parse a stored blob and verify the board invariants."""
    try:
        data = json.loads(raw)
        board = Board.from_dict(data)
        check_invariants(board)
    except (ValueError, TypeError, KeyError, BoardError) as e:
        raise PersistenceError(f"stored board is malformed: {e}") from e
    return board


def encode_board(board: Board) -> str:
    return json.dumps(board.to_dict())


# ── In-memory ────────────────────────────────────────────────────────────────


class MemoryBoardStore:
    """In-memory backend for tests. Round-trips through JSON like a real store."""

    def __init__(self, board: Optional[Board] = None):
        self._raw: Optional[str] = encode_board(board) if board is not None else None
        self._fail_next: Optional[str] = None
        self.saves = 0

    def fail_next_save(self, message: str = "simulated save failure") -> None:
        """Make the next save() raise PersistenceError."""
        self._fail_next = message

    def load(self) -> Optional[Board]:
        if self._raw is None:
            return None
        return decode_board(self._raw)

    def save(self, board: Board) -> None:
        if self._fail_next is not None:
            message, self._fail_next = self._fail_next, None
            raise PersistenceError(message)
        self._raw = encode_board(board)
        self.saves += 1


# ── SQLite ───────────────────────────────────────────────────────────────────


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection in WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class SQLiteBoardStore:
    """SQLite-backed store keeping the board blob in a key/value table."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store and create the table if needed."""
        if db_path is None:
            db_path = str(DEFAULT_DB_PATH)
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        try:
            with _connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS board_state (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot initialise {self.db_path}: {e}") from e

    def load(self) -> Optional[Board]:
        try:
            with _connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM board_state WHERE key = ?", (BOARD_KEY,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error loading board from {self.db_path}: {e}")
            raise PersistenceError(f"load failed: {e}") from e
        if row is None:
            return None
        return decode_board(row["value"])

    def save(self, board: Board) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with _connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO board_state (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """, (BOARD_KEY, encode_board(board), now))
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error saving board to {self.db_path}: {e}")
            raise PersistenceError(f"save failed: {e}") from e

