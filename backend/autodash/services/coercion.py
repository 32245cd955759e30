"""
Value Coercion - raw upload text to flat records

Turns either delimited text with a header line or a JSON array of flat
objects into a list of records whose values are one of: number, text, None.

The delimited-text path splits on the delimiter without honouring quotes, so
a quoted field containing the delimiter will be split.

Nothing in this module raises on bad input. A source that cannot be turned
into at least one record with at least one field comes back as ``[]`` and the
caller treats that as "no usable data".
"""

import json
import logging
import math
import re
from typing import Any, List, Optional, Union

from ..models.profile import Record, Value

logger = logging.getLogger("autodash.ingestion")

DEFAULT_DELIMITER = ","

# Whole-string numeric literal: sign, digits, optional fraction, optional exponent.
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def _strip_quotes(token: str) -> str:
    """Trim whitespace and a leading and/or trailing double quote."""
    token = token.strip()
    if token.startswith('"'):
        token = token[1:]
    if token.endswith('"'):
        token = token[:-1]
    return token


def parse_number(text: str) -> Optional[Union[int, float]]:
    """Return the number ``text`` spells out in full, or None."""
    text = text.strip()
    if not _NUMBER_PATTERN.match(text):
        return None
    if _INTEGER_PATTERN.match(text):
        try:
            return int(text)
        except ValueError:
            # Past the interpreter's integer digit limit; read as a float.
            pass
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def coerce_text_value(raw: Optional[str]) -> Value:
    """Coerce one delimited-text cell."""
    if raw is None:
        return None
    token = _strip_quotes(raw)
    if token == "":
        return None
    number = parse_number(token)
    if number is not None:
        return number
    return token


def parse_delimited_text(text: str, delimiter: str = DEFAULT_DELIMITER) -> List[Record]:
    """
    Parse header-first delimited text into records.

    Rows with fewer cells than the header get None for the missing
    positions; extra cells are dropped.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        return []

    headers = [_strip_quotes(h) for h in lines[0].split(delimiter)]

    records: List[Record] = []
    for line in lines[1:]:
        cells = line.split(delimiter)
        record: Record = {}
        for index, header in enumerate(headers):
            raw = cells[index] if index < len(cells) else None
            record[header] = coerce_text_value(raw)
        records.append(record)

    logger.debug("parse_delimited_text: %d columns, %d records", len(headers), len(records))
    return records


def coerce_json_value(value: Any) -> Value:
    """Map a decoded JSON value onto the record value domain."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value
    if isinstance(value, str):
        return value
    # Nested structures are not flat values; keep them readable as text.
    return json.dumps(value, separators=(",", ":"), default=str)


def coerce_json_records(items: Any) -> List[Record]:
    """Turn a decoded JSON array of flat objects into records."""
    if not isinstance(items, list):
        logger.warning("JSON source is %s, expected an array", type(items).__name__)
        return []

    records: List[Record] = []
    skipped = 0
    for item in items:
        if not isinstance(item, dict):
            skipped += 1
            continue
        records.append({str(k): coerce_json_value(v) for k, v in item.items()})

    if skipped:
        logger.warning("Skipped %d non-object elements in JSON source", skipped)
    return records


def _json_int(literal: str) -> Union[int, str]:
    try:
        return int(literal)
    except ValueError:
        # Past the interpreter's integer digit limit; keep the digits as text.
        return literal


def parse_json_text(text: str) -> List[Record]:
    try:
        items = json.loads(text, parse_int=_json_int)
    except json.JSONDecodeError as e:
        logger.warning("JSON source could not be decoded: %s", e)
        return []
    return coerce_json_records(items)


def _decode(content: Union[str, bytes]) -> Optional[str]:
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning("Upload is not valid UTF-8: %s", e)
        return None


def parse_source(
    content: Union[str, bytes],
    filename: Optional[str] = None,
    delimiter: str = DEFAULT_DELIMITER,
) -> List[Record]:
    """
    Parse an uploaded source into records.

    ``.json`` files are read as a JSON array of objects; every other name
    (or no name at all) falls through to delimited text.
    """
    text = _decode(content)
    if text is None:
        return []

    if filename and filename.lower().endswith(".json"):
        records = parse_json_text(text)
    else:
        records = parse_delimited_text(text, delimiter=delimiter)

    if not records or not records[0]:
        logger.warning("No usable records in source %r", filename or "<inline>")
        return []

    logger.info("Parsed %d records from %r", len(records), filename or "<inline>")
    return records


# ─── Shared value helpers ────────────────────────────────────────────────


def to_number(value: Any) -> float:
    """
    Numeric view of a value for summing: anything non-numeric counts as 0.

    Always a float. Integers too large for a float become ``inf``.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, str):
        if value.strip() == "":
            return 0.0
        value = parse_number(value)
        if value is None:
            return 0.0
    if not isinstance(value, (int, float)):
        return 0.0
    try:
        number = float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf
    return 0.0 if math.isnan(number) else number


def stringify(value: Any) -> str:
    """Canonical text form used for distinct-value counting and group keys."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)
