"""
KPI Reducer

Headline numbers for the top-ranked numeric columns. Rates, prices and
scores are averaged; everything else is totalled.
"""

import math
from typing import List, Sequence

from ..models.profile import DatasetProfile, KpiEntry, Record
from .coercion import to_number

MAX_KPIS = 4

AVERAGE_KEYWORDS = ("price", "rate", "avg", "percent", "rating", "score")
CURRENCY_KEYWORDS = ("price", "revenue", "cost", "sales")


def is_average_column(name: str) -> bool:
    lower = name.lower()
    return any(k in lower for k in AVERAGE_KEYWORDS)


def is_currency_column(name: str) -> bool:
    lower = name.lower()
    return any(k in lower for k in CURRENCY_KEYWORDS)


def _format_non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "-∞" if value < 0 else "∞"


def format_currency(value: float) -> str:
    """US-dollar style: ``$1,234.50``."""
    sign = "-" if value < 0 else ""
    if not math.isfinite(value):
        return f"{sign}${_format_non_finite(abs(value))}"
    return f"{sign}${abs(value):,.2f}"


def format_decimal(value: float) -> str:
    """Grouped decimal with at most two fraction digits: ``1,234.5``."""
    if not math.isfinite(value):
        return _format_non_finite(value)
    text = f"{value:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def compute_kpis(
    records: Sequence[Record],
    profile: DatasetProfile,
    limit: int = MAX_KPIS,
) -> List[KpiEntry]:
    row_count = len(records)
    if not profile.numeric_columns or row_count == 0:
        return []

    entries: List[KpiEntry] = []
    for name in profile.numeric_columns[:limit]:
        total = sum(to_number(r.get(name)) for r in records)
        if is_average_column(name):
            mode, label, value = "average", f"Avg {name}", total / row_count
        else:
            mode, label, value = "sum", f"Total {name}", total

        formatted = format_currency(value) if is_currency_column(name) else format_decimal(value)
        entries.append(KpiEntry(column=name, label=label, mode=mode, value=float(value), formatted=formatted))

    return entries
