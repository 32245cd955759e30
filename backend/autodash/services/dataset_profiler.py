"""
Dataset Profiler

Builds the DatasetProfile that every dashboard view is derived from: the
column profiles plus the timeline column and the ranked metric and category
columns. Pure function of the record sequence; call it again whenever the
records change.
"""

import logging
from typing import Optional, Sequence

from ..models.profile import ColumnType, DatasetProfile, Record
from .column_profiler import profile_columns
from .scoring import (
    score_categories,
    score_metrics,
    select_numeric_columns,
    select_primary_category,
    select_primary_metric,
)

logger = logging.getLogger("autodash.profiler")


def build_dataset_profile(
    records: Sequence[Record],
    sample_rows: Optional[int] = None,
) -> DatasetProfile:
    row_count = len(records)
    if row_count == 0:
        logger.info("build_dataset_profile: no records - returning empty profile")
        return DatasetProfile()

    columns = profile_columns(records, sample_rows=sample_rows)
    date_column = next((c.name for c in columns if c.inferred_type is ColumnType.DATE), None)

    ranked_metrics = score_metrics(columns, row_count)
    ranked_categories = score_categories(columns)

    profile = DatasetProfile(
        columns=tuple(columns),
        date_column=date_column,
        category_columns=tuple(s.name for s in ranked_categories),
        numeric_columns=tuple(select_numeric_columns(ranked_metrics)),
        primary_metric=select_primary_metric(ranked_metrics),
        primary_category=select_primary_category(ranked_categories),
        row_count=row_count,
    )
    logger.info(
        "build_dataset_profile: %d rows, %d cols, date=%s, metric=%s, category=%s",
        row_count, len(columns), profile.date_column,
        profile.primary_metric, profile.primary_category,
    )
    return profile
