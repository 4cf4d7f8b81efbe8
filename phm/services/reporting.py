# phm/services/reporting.py
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from phm.core.clock import as_utc, utcnow
from phm.services.quote_totals import qmoney

GroupBy = Literal["month", "week"]


def period_key(moment: datetime, group_by: GroupBy = "month") -> str:
    """2025-03-14 -> '2025-03' (month) or '2025-W11' (ISO week)."""
    moment = as_utc(moment)
    if group_by == "week":
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    return moment.strftime("%Y-%m")


def resolve_window(
    start: Optional[datetime],
    end: Optional[datetime],
    default_days: int,
) -> Tuple[datetime, datetime]:
    end = as_utc(end) or utcnow()
    start = as_utc(start) or end - timedelta(days=default_days)
    return start, end


def group_revenue(
    rows: Iterable[Tuple[Optional[datetime], Optional[Decimal]]],
    group_by: GroupBy = "month",
) -> List[Dict[str, object]]:
    """
    Bucket (accepted_at, total) pairs per period, oldest period first.
    Rows without an acceptance date are skipped.
    """
    buckets: Dict[str, Dict[str, object]] = {}
    for accepted_at, total in rows:
        if accepted_at is None:
            continue
        key = period_key(accepted_at, group_by)
        bucket = buckets.setdefault(key, {"total": Decimal("0"), "count": 0})
        bucket["total"] += total or Decimal("0")
        bucket["count"] += 1

    return [
        {"period": key, "total": str(qmoney(buckets[key]["total"])), "count": buckets[key]["count"]}
        for key in sorted(buckets)
    ]
