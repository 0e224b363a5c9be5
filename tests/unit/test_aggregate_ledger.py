"""
Unit tests for AggregateLedger.

Tests cover:
- Optimistic adds and deletes against a baseline
- Delete lifecycle (optimistic, confirmed, reverted)
- Reconciliation with fresh and stale snapshots
- Current-window counting and window rollover
- Baseline validation
"""

from datetime import timedelta

import pytest

from statsync.core.exceptions import ValidationError
from statsync.domain.models import DeleteMode, Item
from statsync.services import AggregateLedger, WindowClassifier


@pytest.fixture
def ledger(classifier: WindowClassifier) -> AggregateLedger:
    ledger = AggregateLedger("quotes", classifier)
    ledger.seed(total=10, window=3)
    return ledger


class TestLocalMutations:
    """Tests for applying local mutations on top of a baseline."""

    def test_add_increments_total_and_window(self, ledger: AggregateLedger, item_factory):
        """
        GIVEN baseline total 10 and window 3
        WHEN an item from today is added
        THEN the effective values are 11 and 4
        """
        ledger.apply_local_add(item_factory())

        assert ledger.effective_total() == 11
        assert ledger.effective_window() == 4
        assert ledger.baseline_total == 10

    def test_add_outside_window_only_touches_total(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_add(item_factory(days_ago=14))

        assert ledger.effective_total() == 11
        assert ledger.effective_window() == 3

    def test_add_without_timestamp_counts_in_window(self, ledger: AggregateLedger):
        ledger.apply_local_add(Item(item_id="new"))

        assert ledger.effective_window() == 4

    def test_optimistic_delete(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_delete(item_factory(), DeleteMode.OPTIMISTIC)

        assert ledger.effective_total() == 9
        assert ledger.effective_window() == 2

    def test_delete_without_timestamp_only_touches_total(self, ledger: AggregateLedger):
        ledger.apply_local_delete(Item(item_id="old"))

        assert ledger.effective_total() == 9
        assert ledger.effective_window() == 3

    def test_confirmed_delete_changes_nothing(self, ledger: AggregateLedger, item_factory):
        """
        GIVEN an optimistic delete already counted
        WHEN the server confirms it
        THEN counters do not move a second time
        """
        item = item_factory()
        ledger.apply_local_delete(item, DeleteMode.OPTIMISTIC)
        ledger.apply_local_delete(item, DeleteMode.CONFIRMED)

        assert ledger.effective_total() == 9
        assert ledger.pending_deletes == 1

    def test_reverted_delete_restores_values(self, ledger: AggregateLedger, item_factory):
        """
        GIVEN an optimistic delete
        WHEN it is reverted
        THEN values return to their previous state
        """
        item = item_factory()
        ledger.apply_local_delete(item, DeleteMode.OPTIMISTIC)
        ledger.apply_local_delete(item, DeleteMode.REVERTED)

        assert ledger.effective_total() == 10
        assert ledger.effective_window() == 3
        assert (ledger.pending_deletes, ledger.pending_window_deletes) == (0, 0)

    def test_revert_without_pending_delete_floors_at_zero(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_delete(item_factory(), DeleteMode.REVERTED)

        assert ledger.pending_deletes == 0
        assert ledger.effective_total() == 10

    def test_mode_accepts_string(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_delete(item_factory(), "optimistic")

        assert ledger.effective_total() == 9

    def test_effective_values_never_negative(self, classifier: WindowClassifier, item_factory):
        """
        GIVEN an empty baseline
        WHEN more deletes than items are applied
        THEN displayed values stay at zero
        """
        ledger = AggregateLedger("quotes", classifier)
        for _ in range(3):
            ledger.apply_local_delete(item_factory())

        assert ledger.effective_total() == 0
        assert ledger.effective_window() == 0


class TestReconcile:
    """Tests for folding in authoritative snapshots."""

    def test_confirmed_add_converges(self, ledger: AggregateLedger, item_factory):
        """
        GIVEN a local add on baseline 10
        WHEN the server reports 11
        THEN the effective value stays 11 with nothing pending
        """
        ledger.apply_local_add(item_factory())

        ledger.reconcile(11, 4)

        assert ledger.effective_total() == 11
        assert ledger.effective_window() == 4
        assert (ledger.pending_adds, ledger.pending_window_adds) == (0, 0)

    def test_stale_snapshot_keeps_optimistic_value(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_add(item_factory())

        ledger.reconcile(10, 3)

        assert ledger.effective_total() == 11
        assert ledger.pending_adds == 1

    def test_confirmed_delete_converges(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_delete(item_factory())

        ledger.reconcile(9, 2)

        assert ledger.effective_total() == 9
        assert ledger.pending_deletes == 0

    def test_reconcile_twice_is_idempotent(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_add(item_factory())
        ledger.apply_local_add(item_factory())

        ledger.reconcile(11, 4)
        first = (ledger.effective_total(), ledger.pending_adds)
        ledger.reconcile(11, 4)

        assert (ledger.effective_total(), ledger.pending_adds) == first == (12, 1)

    def test_remote_activity_is_picked_up(self, ledger: AggregateLedger):
        ledger.reconcile(15, 5)

        assert ledger.effective_total() == 15
        assert ledger.effective_window() == 5

    def test_first_reconcile_sets_baseline(self, classifier: WindowClassifier):
        ledger = AggregateLedger("quotes", classifier)
        assert not ledger.has_baseline

        ledger.reconcile(7, 2)

        assert ledger.has_baseline
        assert ledger.effective_total() == 7

    def test_reconcile_for_other_window_drops_pending_window_deltas(
        self, ledger: AggregateLedger, item_factory
    ):
        """
        GIVEN a pending in-window add
        WHEN a snapshot for a different window arrives
        THEN the window pending counter is reset to the new window
        """
        ledger.apply_local_add(item_factory())
        next_window = ledger.window_key + timedelta(days=7)

        ledger.reconcile(11, 0, window_key=next_window)

        assert ledger.window_key == next_window
        assert ledger.pending_window_adds == 0
        assert ledger.effective_window() == 0

    @pytest.mark.parametrize("total,window", [(-1, 0), (0, -1)])
    def test_negative_baseline_rejected(self, ledger: AggregateLedger, total, window):
        with pytest.raises(ValidationError):
            ledger.reconcile(total, window)


class TestWindowRollover:
    """Tests for the calendar moving into a new window."""

    def test_add_after_week_change_starts_new_window(self, ledger: AggregateLedger, clock):
        """
        GIVEN window count 3 in the week of 2024-06-10
        WHEN the clock reaches the next week and an item is added
        THEN the window count restarts at 1
        """
        clock.advance(days=6)

        ledger.apply_local_add(Item(item_id="new", timestamp=clock()))

        assert ledger.effective_window() == 1
        assert ledger.effective_total() == 11
        assert ledger.window_key.isoformat() == "2024-06-17"

    def test_seed_resets_pending(self, ledger: AggregateLedger, item_factory):
        ledger.apply_local_add(item_factory())

        ledger.seed(total=20, window=5)

        assert ledger.pending_adds == 0
        assert ledger.effective_total() == 20
        assert ledger.effective_window() == 5

    def test_seed_rejects_negative(self, ledger: AggregateLedger):
        with pytest.raises(ValidationError):
            ledger.seed(total=-5, window=0)
