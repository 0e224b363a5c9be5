"""Baseline + delta ledger for optimistic count aggregates."""

import logging
from datetime import date
from typing import Optional

from statsync.core.exceptions import ValidationError
from statsync.domain.models import DeleteMode, Item
from statsync.services.reconciliation import PendingCounts, absorb
from statsync.services.window_classifier import WindowClassifier

logger = logging.getLogger(__name__)


class AggregateLedger:
    """
    Displayed counts for one metric family (e.g. "quotes").

    Each count is the last authoritative baseline plus local mutations the
    server has not confirmed yet:

        effective = baseline + pending_adds - pending_deletes   (floored at 0)

    The effective value is only ever this arithmetic result; it is never
    compared against a second computation. Local mutations touch pending
    counters only; baselines change only through reconcile() or seed().

    Window counters cover items whose timestamp is in the current window.
    The ledger remembers which window its window baseline belongs to and
    starts a fresh window (zero baseline, zero pending) when the calendar
    moves on.
    """

    def __init__(self, family: str, classifier: WindowClassifier):
        self.family = family
        self._classifier = classifier

        self.baseline_total = 0
        self.pending_adds = 0
        self.pending_deletes = 0

        self.baseline_window = 0
        self.pending_window_adds = 0
        self.pending_window_deletes = 0
        self.window_key: date = classifier.current_window_key()

        self.has_baseline = False

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def effective_total(self) -> int:
        return max(self.baseline_total + self.pending_adds - self.pending_deletes, 0)

    def effective_window(self) -> int:
        return max(
            self.baseline_window + self.pending_window_adds - self.pending_window_deletes,
            0,
        )

    # ------------------------------------------------------------------
    # Local mutations
    # ------------------------------------------------------------------

    def apply_local_add(self, item: Item) -> None:
        """
        Count a locally added item.

        An item without a timestamp was just created, so it counts toward
        the current window.
        """
        self._roll_window()
        self.pending_adds += 1
        if item.timestamp is None or self._classifier.is_current(item.timestamp):
            self.pending_window_adds += 1
        logger.debug(
            "[%s] local add %s -> total=%d window=%d",
            self.family, item.item_id, self.effective_total(), self.effective_window(),
        )

    def apply_local_delete(self, item: Item, mode: DeleteMode = DeleteMode.OPTIMISTIC) -> None:
        """
        Count a local delete according to its lifecycle stage.

        OPTIMISTIC increments pending deletes, REVERTED undoes that (floored
        at zero), CONFIRMED changes nothing because the next authoritative
        baseline already reflects the delete. An item without a timestamp
        cannot be placed in a window and only affects the total.
        """
        mode = DeleteMode(mode)
        if mode is DeleteMode.CONFIRMED:
            return

        self._roll_window()
        in_window = item.timestamp is not None and self._classifier.is_current(item.timestamp)

        if mode is DeleteMode.OPTIMISTIC:
            self.pending_deletes += 1
            if in_window:
                self.pending_window_deletes += 1
        else:
            self.pending_deletes = max(self.pending_deletes - 1, 0)
            if in_window:
                self.pending_window_deletes = max(self.pending_window_deletes - 1, 0)

        logger.debug(
            "[%s] local delete (%s) %s -> total=%d window=%d",
            self.family, mode.value, item.item_id, self.effective_total(), self.effective_window(),
        )

    # ------------------------------------------------------------------
    # Baselines
    # ------------------------------------------------------------------

    def seed(self, total: int, window: int) -> None:
        """Install an initial baseline with no pending mutations."""
        self._check_baseline(total, window)
        self.baseline_total = total
        self.baseline_window = window
        self.pending_adds = self.pending_deletes = 0
        self.pending_window_adds = self.pending_window_deletes = 0
        self.window_key = self._classifier.current_window_key()
        self.has_baseline = True

    def reconcile(
        self,
        new_baseline_total: int,
        new_baseline_window: int,
        window_key: Optional[date] = None,
    ) -> None:
        """
        Fold a fresh authoritative snapshot into the ledger.

        Pending counters shrink by however much the baseline moved, then the
        new baselines are installed. Always compares against the baseline
        stored right now, so a late-arriving snapshot is still safe.
        `window_key` names the window the snapshot's window count belongs
        to (defaults to the current window).
        """
        self._check_baseline(new_baseline_total, new_baseline_window)
        window_key = window_key or self._classifier.current_window_key()

        total = absorb(
            PendingCounts(self.pending_adds, self.pending_deletes),
            self.baseline_total,
            new_baseline_total,
        )
        self.pending_adds, self.pending_deletes = total.adds, total.deletes
        self.baseline_total = new_baseline_total

        if window_key != self.window_key:
            # Pending window deltas belong to a window that is over
            logger.debug("[%s] window rolled over %s -> %s", self.family, self.window_key, window_key)
            self.pending_window_adds = self.pending_window_deletes = 0
            self.window_key = window_key
        else:
            window = absorb(
                PendingCounts(self.pending_window_adds, self.pending_window_deletes),
                self.baseline_window,
                new_baseline_window,
            )
            self.pending_window_adds, self.pending_window_deletes = window.adds, window.deletes
        self.baseline_window = new_baseline_window
        self.has_baseline = True

        logger.debug(
            "[%s] reconciled baseline total=%d window=%d pending=+%d/-%d window pending=+%d/-%d",
            self.family,
            self.baseline_total,
            self.baseline_window,
            self.pending_adds,
            self.pending_deletes,
            self.pending_window_adds,
            self.pending_window_deletes,
        )

    def _roll_window(self) -> None:
        current = self._classifier.current_window_key()
        if current != self.window_key:
            logger.debug("[%s] starting window %s", self.family, current)
            self.window_key = current
            self.baseline_window = 0
            self.pending_window_adds = self.pending_window_deletes = 0

    @staticmethod
    def _check_baseline(total: int, window: int) -> None:
        if total < 0 or window < 0:
            raise ValidationError(f"Baselines must be non-negative (total={total}, window={window})")
