"""
Tests for the datasets API endpoints.
"""

import json

import pytest
from httpx import AsyncClient

from autodash.services.sample_data import SAMPLE_DATASET_ID


async def upload(client: AsyncClient, filename: str, content: str, content_type: str = "text/csv"):
    return await client.post(
        "/api/v1/datasets/upload",
        files={"file": (filename, content.encode("utf-8"), content_type)},
    )


@pytest.fixture
async def uploaded_id(test_client: AsyncClient, sales_csv: str) -> str:
    response = await upload(test_client, "sales.csv", sales_csv)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_upload_csv_returns_profile(test_client: AsyncClient, sales_csv: str):
    response = await upload(test_client, "sales.csv", sales_csv)

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "sales.csv"
    assert data["source_format"] == "csv"
    assert data["row_count"] == 3
    assert data["columns"] == ["Date", "Region", "Sales", "Units"]
    assert data["profile"]["date_column"] == "Date"
    assert data["profile"]["primary_metric"] == "Sales"
    assert data["profile"]["primary_category"] == "Region"
    # Units is unique per row and has no keyword, so it reads as an identifier
    assert data["profile"]["numeric_columns"] == ["Sales"]


@pytest.mark.asyncio
async def test_upload_json(test_client: AsyncClient):
    payload = json.dumps([
        {"Product": "Widget", "Revenue": 10, "Date": "2024-01-01"},
        {"Product": "Gadget", "Revenue": 20, "Date": "2024-01-02"},
    ])
    response = await upload(test_client, "orders.json", payload, "application/json")

    assert response.status_code == 201
    data = response.json()
    assert data["source_format"] == "json"
    assert data["profile"]["primary_metric"] == "Revenue"
    assert data["profile"]["primary_category"] == "Product"


@pytest.mark.asyncio
@pytest.mark.parametrize("filename,content", [
    ("empty.csv", ""),
    ("header_only.csv", "a,b,c\n"),
    ("broken.json", "{not json"),
    ("object.json", '{"a": 1}'),
])
async def test_upload_without_usable_data_is_rejected(test_client: AsyncClient, filename: str, content: str):
    response = await upload(test_client, filename, content)

    assert response.status_code == 400
    assert response.json()["detail"] == "Could not parse valid data from file"


@pytest.mark.asyncio
async def test_list_datasets_starts_with_sample(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get("/api/v1/datasets/")

    assert response.status_code == 200
    datasets = response.json()
    assert datasets[0]["id"] == SAMPLE_DATASET_ID
    assert any(d["id"] == uploaded_id for d in datasets)
    assert all("records" not in d for d in datasets)


@pytest.mark.asyncio
async def test_get_dataset_summary(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}")

    assert response.status_code == 200
    assert response.json()["row_count"] == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("suffix", ["", "/profile", "/kpis", "/breakdown", "/trend", "/rows", "/export"])
async def test_unknown_dataset_is_404(test_client: AsyncClient, suffix: str):
    response = await test_client.get(f"/api/v1/datasets/does-not-exist{suffix}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_profile_endpoint(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/profile")

    assert response.status_code == 200
    profile = response.json()
    assert profile["row_count"] == 3
    assert [c["type"] for c in profile["columns"]] == ["date", "text", "number", "number"]
    assert profile["category_columns"] == ["Region"]


@pytest.mark.asyncio
async def test_kpis_endpoint(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/kpis")

    assert response.status_code == 200
    assert response.json() == [{
        "column": "Sales",
        "label": "Total Sales",
        "mode": "sum",
        "value": 300.0,
        "formatted": "$300.00",
    }]


@pytest.mark.asyncio
async def test_breakdown_endpoint(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/breakdown")

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "Region"
    assert data["metric"] == "Sales"
    # East and West tie at 150; first-seen order wins
    assert data["bar"] == [{"name": "East", "value": 150.0}, {"name": "West", "value": 150.0}]
    assert data["pie"] == data["bar"]
    assert data["group_count"] == 2


@pytest.mark.asyncio
async def test_trend_endpoint(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/trend")

    assert response.status_code == 200
    data = response.json()
    assert data["date_column"] == "Date"
    assert data["metric"] == "Sales"
    assert [p["value"] for p in data["points"]] == [100, 150, 50]


@pytest.mark.asyncio
async def test_rows_endpoint_limits_preview(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/rows", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["row_count"] == 3
    assert data["rows"] == [
        {"Date": "2024-01-01", "Region": "East", "Sales": 100, "Units": 2},
        {"Date": "2024-01-02", "Region": "West", "Sales": 150, "Units": 3},
    ]


@pytest.mark.asyncio
async def test_rows_limit_is_validated(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/rows", params={"limit": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_export_endpoint(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.get(f"/api/v1/datasets/{uploaded_id}/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "autodash_export_" in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "Date,Region,Sales,Units"
    assert lines[1] == '"2024-01-01","East","100","2"'
    assert len(lines) == 4


@pytest.mark.asyncio
async def test_replace_records(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.put(
        f"/api/v1/datasets/{uploaded_id}/records",
        files={"file": ("prices.csv", b"Item,Price\nA,10\nB,20\nC,30\n", "text/csv")},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == uploaded_id
    assert data["name"] == "prices.csv"
    assert data["profile"]["primary_metric"] == "Price"

    kpis = (await test_client.get(f"/api/v1/datasets/{uploaded_id}/kpis")).json()
    assert kpis[0]["label"] == "Avg Price"
    assert kpis[0]["formatted"] == "$20.00"


@pytest.mark.asyncio
async def test_replace_records_of_unknown_dataset(test_client: AsyncClient, sales_csv: str):
    response = await test_client.put(
        "/api/v1/datasets/does-not-exist/records",
        files={"file": ("sales.csv", sales_csv.encode("utf-8"), "text/csv")},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reset_to_sample(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.post(f"/api/v1/datasets/{uploaded_id}/reset")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == uploaded_id
    assert data["row_count"] == 12
    assert data["columns"] == ["Date", "Symbol", "Open", "Close", "Volume", "Sector"]


@pytest.mark.asyncio
async def test_delete_dataset(test_client: AsyncClient, uploaded_id: str):
    response = await test_client.delete(f"/api/v1/datasets/{uploaded_id}")

    assert response.status_code == 200
    assert response.json() == {"status": "deleted", "dataset_id": uploaded_id}
    assert (await test_client.get(f"/api/v1/datasets/{uploaded_id}")).status_code == 404


@pytest.mark.asyncio
async def test_sample_dataset_cannot_be_deleted(test_client: AsyncClient):
    response = await test_client.delete(f"/api/v1/datasets/{SAMPLE_DATASET_ID}")

    assert response.status_code == 400
    assert (await test_client.get(f"/api/v1/datasets/{SAMPLE_DATASET_ID}")).status_code == 200
