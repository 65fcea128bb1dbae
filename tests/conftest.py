"""Shared test fixtures for task board tests."""

import pytest

from taskboard.schema import Board, Section, Task


def make_board() -> Board:
    """A = [t1, t2, t3], B = [u1], both with explicit ids."""
    sections = (
        Section(id="A", title="To Do", order=0),
        Section(id="B", title="In Progress", order=1),
    )
    tasks = {
        "A": (
            Task(id="t1", title="Write docs", description="API reference", status="A"),
            Task(id="t2", title="Fix login bug", description="", status="A"),
            Task(id="t3", title="Refactor store", description="split SQL helpers", status="A"),
        ),
        "B": (
            Task(id="u1", title="Deploy staging", description="docker compose", status="B"),
        ),
    }
    return Board(sections=sections, tasks=tasks)


@pytest.fixture
def board() -> Board:
    return make_board()
