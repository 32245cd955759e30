"""CSV export of a record sequence."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from ..models.profile import Record, Value
from .coercion import stringify


def _quote(value: Value) -> str:
    text = "" if value is None else stringify(value)
    return '"' + text.replace('"', '""') + '"'


def records_to_csv(records: Sequence[Record]) -> str:
    """
    Header from the first record's keys, then one fully quoted line per record.

    Later records are written against the same header, so a key they lack
    comes out as an empty field and a key they add is not written.
    """
    if not records:
        return ""

    headers = list(records[0].keys())
    lines = [",".join(headers)]
    for record in records:
        lines.append(",".join(_quote(record.get(h)) for h in headers))
    return "\n".join(lines)


def export_filename(today: Optional[datetime] = None) -> str:
    today = today or datetime.now(timezone.utc)
    return f"autodash_export_{today.strftime('%Y-%m-%d')}.csv"
