"""Tests for the undo/redo store."""
from beadboard.grid import EMPTY
from beadboard.history import HistoryStore


def g(c):
    return [[c]]


class TestHistoryStore:
    def test_seeded_with_initial(self):
        h = HistoryStore(g(EMPTY))
        assert len(h) == 1
        assert h.cursor == 0
        assert not h.can_undo and not h.can_redo
        assert h.undo() is None
        assert h.redo() is None

    def test_undo_redo(self):
        h = HistoryStore(g("a"))
        h.push(g("b"))
        h.push(g("c"))
        assert h.undo() == g("b")
        assert h.undo() == g("a")
        assert h.undo() is None
        assert h.redo() == g("b")
        assert h.current == g("b")

    def test_push_truncates_redo_branch(self):
        h = HistoryStore(g("a"))
        h.push(g("b"))
        h.push(g("c"))
        h.undo()
        h.undo()
        h.push(g("d"))
        assert len(h) == 2
        assert not h.can_redo
        assert h.undo() == g("a")
        assert h.redo() == g("d")

    def test_cursor_stays_in_bounds(self):
        h = HistoryStore(g("a"))
        for c in "bcd":
            h.push(g(c))
        for _ in range(10):
            h.undo()
            assert 0 <= h.cursor < len(h)
        for _ in range(10):
            h.redo()
            assert 0 <= h.cursor < len(h)
        assert h.cursor == len(h) - 1

    def test_snapshots_are_copied(self):
        grid = g("a")
        h = HistoryStore(grid)
        grid[0][0] = "mutated"
        assert h.current == g("a")
        out = h.current
        out[0][0] = "mutated"
        assert h.current == g("a")

    def test_reset(self):
        h = HistoryStore(g("a"))
        h.push(g("b"))
        h.reset(g("z"))
        assert len(h) == 1 and h.current == g("z")
