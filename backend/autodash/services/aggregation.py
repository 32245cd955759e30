"""
Aggregation Engine

Derived chart views over a profiled dataset: the primary metric summed per
primary category group, and the primary metric laid out along the date
column.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import pandas as pd
from dateutil import parser as date_parser

from ..models.profile import (
    CategoryBreakdown,
    CategoryTotal,
    DatasetProfile,
    Record,
    TrendPoint,
)
from .coercion import stringify, to_number

logger = logging.getLogger("autodash.aggregation")

BAR_TOP_N = 10
PIE_TOP_N = 6


def group_totals(records: Sequence[Record], category: str, metric: str) -> List[CategoryTotal]:
    """
    Sum ``metric`` per distinct ``category`` value, largest total first.

    Records with no category value are left out of every group. Equal totals
    keep the order in which their groups were first seen.
    """
    keyed = [r for r in records if r.get(category) is not None]
    if not keyed:
        return []

    frame = pd.DataFrame({
        "group": [stringify(r[category]) for r in keyed],
        "value": [to_number(r.get(metric)) for r in keyed],
    })
    totals = (
        frame.groupby("group", sort=False)["value"]
        .sum()
        .sort_values(ascending=False, kind="stable")
    )
    return [CategoryTotal(name=str(name), value=float(value)) for name, value in totals.items()]


def build_category_breakdown(
    records: Sequence[Record],
    profile: DatasetProfile,
    bar_limit: int = BAR_TOP_N,
    pie_limit: int = PIE_TOP_N,
) -> CategoryBreakdown:
    category, metric = profile.primary_category, profile.primary_metric
    if not category or not metric:
        return CategoryBreakdown(category=category, metric=metric)

    totals = tuple(group_totals(records, category, metric))
    logger.debug("breakdown %s by %s: %d groups", metric, category, len(totals))
    return CategoryBreakdown(
        category=category,
        metric=metric,
        totals=totals,
        bar=totals[:bar_limit],
        pie=totals[:pie_limit],
    )


def _parse_date(value) -> Optional[datetime]:
    try:
        parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError):
        return None
    # Mixed naive/aware values cannot be compared, so compare wall-clock time.
    return parsed.replace(tzinfo=None)


def build_trend_series(records: Sequence[Record], profile: DatasetProfile) -> List[TrendPoint]:
    """Primary metric per record, ordered by the date column (unparsable dates last)."""
    date_column, metric = profile.date_column, profile.primary_metric
    if not date_column or not metric:
        return []

    keyed: List[Tuple[Tuple[int, datetime], TrendPoint]] = []
    for record in records:
        raw = record.get(date_column)
        if raw is None:
            continue
        parsed = _parse_date(raw)
        sort_key = (0, parsed) if parsed is not None else (1, datetime.min)
        keyed.append((sort_key, TrendPoint(date=stringify(raw), value=to_number(record.get(metric)))))

    keyed.sort(key=lambda item: item[0])
    return [point for _, point in keyed]
