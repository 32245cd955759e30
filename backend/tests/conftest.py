"""
Shared pytest fixtures for the AutoDash test suite.
"""

import os
import tempfile

# The app-level stores write under DATA_DIR at import time; keep that out of
# the source tree. Must run before anything from autodash is imported.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="autodash-test-"))

import pytest
from pathlib import Path
from typing import AsyncGenerator, Dict, List

from httpx import AsyncClient, ASGITransport
from autodash.main import app
from autodash.services.data_store import DataStore


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test data."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir(exist_ok=True)
    return data_dir


@pytest.fixture
def data_store_instance(temp_data_dir: Path) -> DataStore:
    """Provide a DataStore instance with temporary directory."""
    return DataStore(data_dir=str(temp_data_dir))


@pytest.fixture
def sales_records() -> List[Dict]:
    """Small retail dataset with an id column, a date, metrics and categories."""
    return [
        {"order_id": 1, "Date": "2024-01-03", "Region": "East", "Product": "Widget", "Sales": 120.0, "Quantity": 3},
        {"order_id": 2, "Date": "2024-01-01", "Region": "West", "Product": "Gadget", "Sales": 80.5, "Quantity": 1},
        {"order_id": 3, "Date": "2024-01-02", "Region": "East", "Product": "Gadget", "Sales": 200.0, "Quantity": 4},
        {"order_id": 4, "Date": "2024-01-04", "Region": "North", "Product": "Widget", "Sales": None, "Quantity": 2},
        {"order_id": 5, "Date": "2024-01-05", "Region": None, "Product": "Widget", "Sales": 50.0, "Quantity": 1},
    ]


@pytest.fixture
def sales_csv() -> str:
    return (
        "Date,Region,Sales,Units\n"
        "2024-01-01,East,100,2\n"
        "2024-01-02,West,150,3\n"
        "2024-01-03,East,50,1\n"
    )


@pytest.fixture
async def test_client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
