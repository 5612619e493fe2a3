"""Appeal dashboard metrics."""

from collections import Counter
from collections.abc import Iterable

from ..schemas.appeal import AppealRecord, AppealSummary
from ..schemas.common import AppealStatus


def summarize_appeals(records: Iterable[AppealRecord]) -> AppealSummary:
    """Counts per status and category, win rate of decided appeals."""
    records = list(records)
    if not records:
        return AppealSummary()

    by_status = Counter(r.status.value for r in records)
    won = by_status.get(AppealStatus.COMPLETED.value, 0)
    decided = won + by_status.get(AppealStatus.FAILED.value, 0)

    return AppealSummary(
        total=len(records),
        by_status=dict(by_status),
        by_category=dict(Counter(r.category for r in records)),
        win_rate=round(won / decided, 2) if decided else None,
        average_success_probability=round(
            sum(r.success_probability for r in records) / len(records), 1
        ),
    )
