"""Built-in demonstration dataset (daily stock quotes)."""

from typing import List

from ..models.profile import Record
from .coercion import parse_delimited_text

SAMPLE_DATASET_ID = "sample"
SAMPLE_DATASET_NAME = "Sample stock quotes"

SAMPLE_CSV = """Date,Symbol,Open,Close,Volume,Sector
2024-01-01,AAPL,185.20,188.50,15000000,Tech
2024-01-02,AAPL,188.50,186.40,12000000,Tech
2024-01-03,AAPL,186.40,184.20,14500000,Tech
2024-01-01,GOOGL,138.50,140.20,8000000,Tech
2024-01-02,GOOGL,140.20,139.50,7500000,Tech
2024-01-03,GOOGL,139.50,142.10,8200000,Tech
2024-01-01,MSFT,370.00,375.50,9000000,Tech
2024-01-02,MSFT,375.50,372.80,8500000,Tech
2024-01-03,MSFT,372.80,374.00,8800000,Tech
2024-01-01,TSLA,240.00,245.50,25000000,Auto
2024-01-02,TSLA,245.50,238.20,28000000,Auto
2024-01-03,TSLA,238.20,235.10,26500000,Auto"""


def sample_records() -> List[Record]:
    """A fresh copy of the sample records."""
    return parse_delimited_text(SAMPLE_CSV)
