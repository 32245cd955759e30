"""
Semantic role scoring for profiled columns.

Two competing heuristics pick the columns that drive the dashboard:

* the metric scorer ranks numeric columns by how much they look like a
  business measure (revenue, price, volume) rather than an identifier or code;
* the category scorer ranks low/medium-cardinality text columns by how much
  they look like a grouping dimension (sector, region, product).

Keyword weights are plain data. Each rule fires at most once per column and
the deltas of all firing rules are added up.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.profile import ColumnProfile, ColumnType, ScoredColumn

logger = logging.getLogger("autodash.scoring")


@dataclass(frozen=True)
class KeywordRule:
    """Adds ``weight`` when the lower-cased name contains any keyword or matches ``predicate``."""
    keywords: Tuple[str, ...]
    weight: int
    predicate: Optional[Callable[[str], bool]] = None

    def matches(self, lower_name: str) -> bool:
        if any(k in lower_name for k in self.keywords):
            return True
        return self.predicate is not None and self.predicate(lower_name)


def is_identifier_name(lower_name: str) -> bool:
    """Whole-token ``id`` checks, so "paid", "width" or "valid" are not caught."""
    return (
        lower_name == "id"
        or lower_name.endswith("_id")
        or lower_name.endswith(" id")
        or lower_name.startswith("id_")
        or lower_name.startswith("id ")
    )


METRIC_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("revenue", "sales", "profit", "turnover"), 25),
    KeywordRule(("price", "cost", "close", "open", "high", "low"), 20),
    KeywordRule(("volume", "quantity", "qty", "amount", "count"), 15),
    KeywordRule(("rating", "score", "value", "balance"), 10),
    # Identifiers, metadata and dates stored as numbers
    KeywordRule(
        ("index", "code", "zip", "year", "phone", "mobile", "lat", "lon"),
        -50,
        predicate=is_identifier_name,
    ),
)

CATEGORY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("category", "dept", "department", "sector", "segment"), 20),
    KeywordRule(("status", "region", "type", "class", "zone"), 15),
    KeywordRule(("product", "brand", "item", "symbol", "city", "state"), 10),
    KeywordRule(("name", "title", "group"), 5),
)

# Unique numbers that no strong keyword vouched for are probably row ids.
UNIQUE_PENALTY = -30
UNIQUE_PENALTY_BELOW = 10
# Metrics at or under this score are dropped from the numeric list entirely.
METRIC_SCORE_FLOOR = -20

CATEGORY_MAX_CARDINALITY = 100
HIGH_CARDINALITY = 50
HIGH_CARDINALITY_PENALTY = -10


def keyword_score(name: str, rules: Sequence[KeywordRule]) -> int:
    lower = name.lower()
    return sum(rule.weight for rule in rules if rule.matches(lower))


def rank(scored: List[ScoredColumn]) -> List[ScoredColumn]:
    """Highest score first; ties keep column order."""
    return sorted(scored, key=lambda s: -s.score)


# ─── Metric scorer ───────────────────────────────────────────────────────


def score_metric(column: ColumnProfile, row_count: int) -> int:
    score = keyword_score(column.name, METRIC_RULES)
    if column.cardinality == row_count and score < UNIQUE_PENALTY_BELOW:
        score += UNIQUE_PENALTY
    return score


def score_metrics(columns: Sequence[ColumnProfile], row_count: int) -> List[ScoredColumn]:
    """Rank the numeric columns, best metric first."""
    scored = [
        ScoredColumn(name=c.name, score=score_metric(c, row_count))
        for c in columns
        if c.inferred_type is ColumnType.NUMBER
    ]
    ranked = rank(scored)
    logger.debug("metric ranking: %s", [(s.name, s.score) for s in ranked])
    return ranked


def select_numeric_columns(ranked: Sequence[ScoredColumn]) -> List[str]:
    return [s.name for s in ranked if s.score > METRIC_SCORE_FLOOR]


def select_primary_metric(ranked: Sequence[ScoredColumn]) -> Optional[str]:
    """Top metric, unless even the best one looks like an identifier."""
    if ranked and ranked[0].score > METRIC_SCORE_FLOOR:
        return ranked[0].name
    return None


# ─── Category scorer ─────────────────────────────────────────────────────


def score_category(column: ColumnProfile) -> int:
    score = keyword_score(column.name, CATEGORY_RULES)
    if column.cardinality > HIGH_CARDINALITY:
        score += HIGH_CARDINALITY_PENALTY
    return score


def score_categories(columns: Sequence[ColumnProfile]) -> List[ScoredColumn]:
    """Rank the eligible text columns, best grouping dimension first."""
    scored = [
        ScoredColumn(name=c.name, score=score_category(c))
        for c in columns
        if c.inferred_type is ColumnType.TEXT and c.cardinality < CATEGORY_MAX_CARDINALITY
    ]
    ranked = rank(scored)
    logger.debug("category ranking: %s", [(s.name, s.score) for s in ranked])
    return ranked


def select_primary_category(ranked: Sequence[ScoredColumn]) -> Optional[str]:
    # No score floor here, unlike metrics: any eligible text column can lead.
    return ranked[0].name if ranked else None
