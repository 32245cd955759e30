"""
Dataset profile value types.

Everything here is a frozen value: a profile is recomputed from the record
sequence whenever the data changes and is never patched in place.
"""

import enum
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple, Union

# A record value after coercion: number, text, or absent.
Value = Union[int, float, str, None]
Record = Dict[str, Value]


def json_number(value: float) -> Optional[float]:
    """JSON has no inf or NaN; those go out as null."""
    return value if math.isfinite(value) else None


class ColumnType(str, enum.Enum):
    """Inferred column types."""
    NUMBER = "number"
    DATE = "date"
    TEXT = "text"


@dataclass(frozen=True)
class ColumnProfile:
    """Inferred type and sampled cardinality of one field."""
    name: str
    inferred_type: ColumnType
    cardinality: int

    @property
    def is_metric(self) -> bool:
        return self.inferred_type is ColumnType.NUMBER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.inferred_type.value,
            "cardinality": self.cardinality,
            "is_metric": self.is_metric,
        }


@dataclass(frozen=True)
class ScoredColumn:
    name: str
    score: int


@dataclass(frozen=True)
class DatasetProfile:
    """Inferred schema plus ranked semantic roles for one dataset snapshot."""
    columns: Tuple[ColumnProfile, ...] = ()
    date_column: Optional[str] = None
    category_columns: Tuple[str, ...] = ()
    numeric_columns: Tuple[str, ...] = ()
    primary_metric: Optional[str] = None
    primary_category: Optional[str] = None
    row_count: int = 0

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "date_column": self.date_column,
            "category_columns": list(self.category_columns),
            "numeric_columns": list(self.numeric_columns),
            "primary_metric": self.primary_metric,
            "primary_category": self.primary_category,
            "row_count": self.row_count,
        }


@dataclass(frozen=True)
class KpiEntry:
    """A single headline number derived from one numeric column."""
    column: str
    label: str
    mode: str  # "sum" or "average"
    value: float
    formatted: str

    def to_dict(self) -> Dict[str, Any]:
        return {**asdict(self), "value": json_number(self.value)}


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": json_number(self.value)}


@dataclass(frozen=True)
class CategoryBreakdown:
    """Primary metric summed per primary category group, sorted descending."""
    category: Optional[str] = None
    metric: Optional[str] = None
    totals: Tuple[CategoryTotal, ...] = ()
    bar: Tuple[CategoryTotal, ...] = ()
    pie: Tuple[CategoryTotal, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.totals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "metric": self.metric,
            "bar": [t.to_dict() for t in self.bar],
            "pie": [t.to_dict() for t in self.pie],
            "group_count": len(self.totals),
        }


@dataclass(frozen=True)
class TrendPoint:
    date: str
    value: float

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": json_number(self.value)}

