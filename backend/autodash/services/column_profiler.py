"""
Column Profiler

Infers a type (number / date / text) and a distinct-value count for every
field of the first record. Both are computed over a bounded prefix of the
dataset, so cardinality on large datasets is an estimate capped at the
sample size.
"""

import logging
from typing import List, Optional, Sequence

from dateutil import parser as date_parser

from ..core.config import settings
from ..models.profile import ColumnProfile, ColumnType, Record, Value
from .coercion import stringify

logger = logging.getLogger("autodash.profiler")

MIN_DATE_TEXT_LENGTH = 6


def is_numeric_value(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def looks_like_date(value: Value) -> bool:
    """
    Date-text heuristic.

    Requires at least six characters, a ``-`` or ``/`` separator, at least
    one digit, and a successful parse. The separator check keeps bare
    integers such as ``20240101`` or ``123456`` from being read as
    timestamps. The digit check rejects name-only text such as ``Mon-Fri``
    that dateutil would resolve against the current week.
    """
    if not isinstance(value, str) or len(value) < MIN_DATE_TEXT_LENGTH:
        return False
    if "-" not in value and "/" not in value:
        return False
    if not any(ch.isdigit() for ch in value):
        return False
    try:
        date_parser.parse(value)
    except (ValueError, OverflowError):
        return False
    return True


def infer_column_type(values: Sequence[Value]) -> ColumnType:
    if any(is_numeric_value(v) for v in values):
        return ColumnType.NUMBER
    first = next((v for v in values if v is not None), None)
    if looks_like_date(first):
        return ColumnType.DATE
    return ColumnType.TEXT


def profile_columns(
    records: Sequence[Record],
    sample_rows: Optional[int] = None,
) -> List[ColumnProfile]:
    """
    Profile every field of ``records[0]``.

    The first record fixes the schema. A field missing from a later record
    reads as None there.
    """
    if not records:
        return []

    if sample_rows is None:
        sample_rows = settings.CARDINALITY_SAMPLE_ROWS
    sample = records[:sample_rows]

    profiles: List[ColumnProfile] = []
    for name in records[0].keys():
        values = [rec.get(name) for rec in sample]
        inferred = infer_column_type(values)
        cardinality = len({stringify(v) for v in values})
        profiles.append(ColumnProfile(name=name, inferred_type=inferred, cardinality=cardinality))
        logger.debug("  profiled '%s' -> type=%s, cardinality=%d", name, inferred.value, cardinality)

    return profiles
