"""Reconciliation of pending local deltas against a new authoritative baseline."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PendingCounts:
    """Unconfirmed local adds and deletes for one counter."""

    adds: int = 0
    deletes: int = 0


def absorb(pending: PendingCounts, old_baseline: int, new_baseline: int) -> PendingCounts:
    """
    Shrink pending counters by what the server has already absorbed.

    A baseline that grew by N absorbs up to N pending adds; one that shrank
    by N absorbs up to N pending deletes. Counters never go below zero and
    an unchanged baseline leaves them as they are, so running this twice
    against the same baseline is a no-op the second time.
    """
    diff = new_baseline - old_baseline
    if diff > 0:
        return PendingCounts(adds=max(pending.adds - diff, 0), deletes=pending.deletes)
    if diff < 0:
        return PendingCounts(adds=pending.adds, deletes=max(pending.deletes + diff, 0))
    return pending
