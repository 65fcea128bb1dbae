"""
Mutation protocol: request -> (success | failure).

    request  - is_saving = True, error cleared; board data untouched
    (caller hands the candidate board to persistence)
    succeed  - transition applied to the current board, is_saving = False
    fail     - is_saving = False, error recorded; board exactly as before

The board only ever reflects confirmed writes. is_saving is advisory: it does
not queue or reject overlapping requests, and any completion clears it even
while other requests are still in flight.
"""
import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import BoardError
from .schema import Board

logger = logging.getLogger(__name__)

Transition = Callable[[Board], Board]


@dataclass(frozen=True)
class PendingMutation:
    """An in-flight request awaiting its persistence outcome."""
    seq: int
    name: str
    transition: Transition
    candidate: Board  # what persistence is asked to write


class MutationProtocol:
    """Owns the board plus the is_saving / error flags and sequences every write."""

    def __init__(self, board: Board):
        self.board = board
        self.is_saving = False
        self.error: Optional[str] = None
        self._in_flight: set = set()
        self._seq = itertools.count(1)

    @property
    def in_flight(self) -> int:
        """Unresolved requests (observability only; nothing waits on this)."""
        return len(self._in_flight)

    def request(self, name: str, transition: Transition) -> PendingMutation:
        """
        Start a mutation.

        The transition is computed against the current board first so that
        NotFound / OutOfRange / ValidationError surface to the caller before
        any flag changes.
        """
        candidate = transition(self.board)
        pending = PendingMutation(
            seq=next(self._seq), name=name, transition=transition, candidate=candidate
        )
        self.is_saving = True
        self.error = None
        self._in_flight.add(pending.seq)
        logger.debug(f"Mutation #{pending.seq} {name} requested")
        return pending

    def succeed(self, pending: PendingMutation) -> bool:
        """
        Persistence confirmed: apply the transition to the board as it is now.

        If an interleaved mutation already changed the board so that this
        transition no longer applies, the failure is recorded and the board
        is left unchanged. Returns True when the transition was applied.
        """
        self._in_flight.discard(pending.seq)
        self.is_saving = False
        try:
            self.board = pending.transition(self.board)
        except BoardError as e:
            self.error = str(e)
            logger.warning(
                f"Mutation #{pending.seq} {pending.name} saved but no longer applies: {e}"
            )
            return False
        logger.info(f"Mutation #{pending.seq} {pending.name} applied")
        return True

    def fail(self, pending: PendingMutation, error: object) -> None:
        """Persistence failed: record the error, leave the board alone."""
        self._in_flight.discard(pending.seq)
        self.is_saving = False
        self.error = str(error)
        logger.error(f"Mutation #{pending.seq} {pending.name} failed: {error}")
