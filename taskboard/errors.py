"""
Board error taxonomy.

ValidationError  - bad user input (empty title); rejected before any request
NotFound         - unknown section/task id (contract violation)
OutOfRange       - invalid move index (contract violation)
PersistenceError - reported by the storage backend; stored as board error state
"""


class BoardError(Exception):
    """Base class for every error raised by the board engine."""
    pass


class ValidationError(BoardError):
    """Raised when a title or patch fails validation."""
    pass


class NotFound(BoardError):
    """Raised when a section or task id is absent from the board."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} '{item_id}' not found")


class OutOfRange(BoardError):
    """Raised when a move references an index outside the source list."""

    def __init__(self, section_id: str, index: int, length: int):
        self.section_id = section_id
        self.index = index
        self.length = length
        super().__init__(
            f"index {index} out of range for section '{section_id}' "
            f"(length {length})"
        )


class InvariantViolation(BoardError):
    """Raised when a board breaks a structural invariant (e.g. duplicate task id)."""
    pass


class PersistenceError(BoardError):
    """Raised by a persistence backend when a load or save fails."""
    pass
