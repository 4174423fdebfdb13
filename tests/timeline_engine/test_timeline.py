"""Tests for the patch-based timeline."""

import pytest
from src.patch_engine import PatchPair, compute_patches
from src.timeline_engine import (
    Merge,
    Mutate,
    NoopTimeline,
    Replace,
    Timeline,
    TimelineConfig,
    create_timeline,
)


def increment(state):
    state["count"] += 1


@pytest.fixture
def timeline():
    """Timeline with three increments recorded: count 0 -> 3."""
    tl = Timeline({"count": 0})
    for _ in range(3):
        tl.mutate(Mutate(fn=increment, name="increment"))
    return tl


class TestMutate:
    """Tests for recording mutations."""

    def test_records_entry(self):
        tl = Timeline({"count": 0})
        pair = tl.mutate(Merge(partial={"count": 1}))
        assert isinstance(pair, PatchPair)
        assert tl.position == 1
        assert tl.length == 1
        assert tl.state == {"count": 1}

    def test_no_change_records_nothing(self):
        """A mutation that leaves the state equal is not recorded."""
        tl = Timeline({"count": 0})
        assert tl.mutate(Merge(partial={"count": 0})) is None
        assert tl.length == 0
        assert not tl.can_back()

    def test_replace(self):
        tl = Timeline({"count": 0, "label": "x"})
        tl.mutate(Replace(state={"count": 5}))
        assert tl.state == {"count": 5}
        tl.back()
        assert tl.state == {"count": 0, "label": "x"}

    def test_mutator_returning_dict(self):
        """A mutator may return a new dict instead of editing in place."""
        tl = Timeline({"count": 1})
        tl.mutate(Mutate(fn=lambda s: {"count": s["count"] * 10}))
        assert tl.state == {"count": 10}

    def test_mutator_returning_garbage_raises(self):
        tl = Timeline({"count": 1})
        with pytest.raises(TypeError):
            tl.mutate(Mutate(fn=lambda s: 42))
        assert tl.state == {"count": 1}
        assert tl.length == 0

    def test_mutation_after_undo_discards_redo(self, timeline):
        """Recording after an undo truncates the redo tail."""
        timeline.back(2)
        timeline.mutate(Merge(partial={"count": 100}))
        assert timeline.length == 2
        assert timeline.position == 2
        assert not timeline.can_forward()

    def test_state_view_is_a_copy(self, timeline):
        snapshot = timeline.state
        snapshot["count"] = -1
        assert timeline.state == {"count": 3}


class TestNavigation:
    """Tests for back/forward/go/reset."""

    def test_back_and_forward(self, timeline):
        timeline.back()
        assert timeline.state == {"count": 2}
        timeline.forward()
        assert timeline.state == {"count": 3}

    def test_go_absolute(self, timeline):
        """go(0) restores the initial state and go(2) redoes two entries."""
        timeline.go(0)
        assert timeline.state == {"count": 0}
        assert timeline.position == 0
        timeline.go(2)
        assert timeline.state == {"count": 2}
        assert timeline.position == 2

    def test_go_clamps(self, timeline):
        timeline.go(-5)
        assert timeline.position == 0
        timeline.go(99)
        assert timeline.position == 3
        assert timeline.state == {"count": 3}

    def test_back_more_than_available(self, timeline):
        timeline.back(10)
        assert timeline.position == 0
        assert timeline.state == {"count": 0}

    def test_negative_steps_are_noop(self, timeline):
        timeline.back(-2)
        assert timeline.position == 3

    def test_reset(self, timeline):
        timeline.reset()
        assert timeline.state == {"count": 0}
        assert timeline.can_forward()
        assert not timeline.can_back()

    def test_navigation_keeps_log(self, timeline):
        """Undo and redo never change the log itself."""
        log_before = timeline.log
        timeline.go(1)
        timeline.go(3)
        assert timeline.log == log_before


class TestMaxHistory:
    """Tests for history eviction."""

    def test_oldest_entries_evicted(self):
        tl = Timeline({"count": 0}, TimelineConfig(max_history=3))
        for _ in range(5):
            tl.mutate(Mutate(fn=increment))
        assert tl.length == 3
        assert tl.position == 3
        tl.reset()
        assert tl.state == {"count": 2}

    def test_max_history_must_be_positive(self):
        with pytest.raises(ValueError):
            TimelineConfig(max_history=0)


class TestManualArchive:
    """Tests for auto_archive=False."""

    @pytest.fixture
    def manual(self):
        return Timeline({"count": 0}, TimelineConfig(auto_archive=False))

    def test_pending_until_archived(self, manual):
        manual.mutate(Mutate(fn=increment))
        manual.mutate(Mutate(fn=increment))
        assert manual.state == {"count": 2}
        assert manual.length == 0
        assert manual.can_archive()
        assert manual.can_back()

        manual.archive()
        assert manual.length == 1
        assert manual.position == 1
        assert not manual.can_archive()

    def test_back_commits_pending_first(self, manual):
        """Pending changes are committed as one entry, then undone together."""
        manual.mutate(Merge(partial={"count": 1}))
        manual.mutate(Merge(partial={"count": 2, "label": "x"}))
        manual.back()
        assert manual.state == {"count": 0}
        manual.forward()
        assert manual.state == {"count": 2, "label": "x"}

    def test_archive_without_pending_is_noop(self, manual):
        manual.archive()
        assert manual.length == 0

    def test_navigation_with_pending_notifies_once(self, manual):
        """Committing and moving in one call is a single notification."""
        calls = []
        manual.subscribe(lambda state: calls.append(state["count"]))
        manual.mutate(Mutate(fn=increment))
        assert calls == [1]

        manual.back()
        assert calls == [1, 0]

    def test_go_to_current_position_with_pending(self, manual):
        """Archiving without moving still notifies once."""
        calls = []
        manual.subscribe(lambda state: calls.append(manual.position))
        manual.mutate(Mutate(fn=increment))
        manual.go(1)
        assert calls == [0, 1]
        assert manual.length == 1


class TestHistoryAndViews:
    """Tests for diagnostics views."""

    def test_get_history(self, timeline):
        timeline.back()
        history = list(timeline.get_history())
        assert history == [{"count": n} for n in range(4)]

    def test_get_history_is_lazy(self, timeline):
        history = timeline.get_history()
        assert next(history) == {"count": 0}

    def test_patches_view(self, timeline):
        view = timeline.patches
        assert len(view.patches) == 3
        assert len(view.inverse_patches) == 3
        assert view.patches[0][0].path == "/count"

    def test_initial_log_and_position(self):
        """A timeline can be rebuilt from a saved log and cursor."""
        pairs = [
            compute_patches({"count": 0}, {"count": 1}),
            compute_patches({"count": 1}, {"count": 2}),
        ]
        tl = Timeline({"count": 1}, initial_log=pairs, initial_position=1)
        assert tl.position == 1
        assert tl.can_back()
        assert tl.can_forward()
        tl.forward()
        assert tl.state == {"count": 2}
        tl.reset()
        assert tl.state == {"count": 0}


class TestSubscription:
    """Tests for listeners and re-entrancy."""

    def test_listener_receives_state(self):
        tl = Timeline({"count": 0})
        seen = []
        tl.subscribe(lambda state: seen.append(state["count"]))
        tl.mutate(Mutate(fn=increment))
        tl.back()
        assert seen == [1, 0]

    def test_unsubscribe(self):
        tl = Timeline({"count": 0})
        seen = []
        unsubscribe = tl.subscribe(lambda state: seen.append(state))
        unsubscribe()
        tl.mutate(Mutate(fn=increment))
        assert seen == []

    def test_listener_mutation_runs_depth_first(self):
        """A mutation made from a listener completes before later listeners run."""
        tl = Timeline({"count": 0})
        seen = []

        def clamp(state):
            if state["count"] > 1:
                tl.mutate(Merge(partial={"count": 1}))

        tl.subscribe(clamp)
        tl.subscribe(lambda state: seen.append(state["count"]))

        tl.mutate(Merge(partial={"count": 5}))
        assert tl.state == {"count": 1}
        assert tl.length == 2
        assert seen == [1, 1]


class TestDisabledTimeline:
    """Tests for the no-op timeline."""

    def test_create_timeline_disabled(self):
        tl = create_timeline({"count": 0}, TimelineConfig(enabled=False))
        assert isinstance(tl, NoopTimeline)
        assert tl.mutate(Merge(partial={"count": 1})) is None
        tl.back()
        assert tl.position == 0
        assert tl.length == 0
        assert not tl.can_back()
        assert list(tl.get_history()) == []
