"""
Datasets API Endpoints

Upload, inspect and export datasets, and serve the derived dashboard views
(profile, KPIs, category breakdown, trend). Every view is recomputed from the
dataset's current records on each request.
"""

from fastapi import APIRouter, HTTPException, UploadFile, File, Query
from fastapi.responses import Response
from typing import Any, Dict, List, Optional, Tuple
from pathlib import Path
import logging

from ..core.config import settings
from ..models.profile import DatasetProfile, Record
from ..services.aggregation import build_category_breakdown, build_trend_series
from ..services.coercion import parse_source
from ..services.data_store import data_store
from ..services.dataset_profiler import build_dataset_profile
from ..services.export import export_filename, records_to_csv
from ..services.kpi import compute_kpis

router = APIRouter(prefix="/datasets", tags=["Datasets"])

logger = logging.getLogger("autodash.api.datasets")


def _load(dataset_id: str) -> Tuple[Dict[str, Any], List[Record]]:
    dataset = data_store.get_dataset(dataset_id)
    if not dataset:
        raise HTTPException(status_code=404, detail="Dataset not found")
    return dataset, dataset["records"]


def _load_profiled(dataset_id: str) -> Tuple[List[Record], DatasetProfile]:
    _, records = _load(dataset_id)
    return records, build_dataset_profile(records)


def _summary(dataset: Dict[str, Any], profile: DatasetProfile) -> Dict[str, Any]:
    return {
        "id": dataset["id"],
        "name": dataset["name"],
        "source_format": dataset["source_format"],
        "is_sample": dataset.get("is_sample", False),
        "row_count": profile.row_count,
        "columns": profile.column_names,
        "updated_at": dataset.get("updated_at"),
    }


async def _read_upload(file: UploadFile) -> Tuple[str, str, List[Record]]:
    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    name = Path(file.filename).name
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.MAX_UPLOAD_MB}MB limit")

    records = parse_source(content, filename=name)
    if not records:
        raise HTTPException(status_code=400, detail="Could not parse valid data from file")

    source_format = "json" if name.lower().endswith(".json") else "csv"
    return name, source_format, records


@router.get("/")
async def list_datasets():
    """List stored datasets (metadata only)."""
    return data_store.list_datasets()


@router.post("/upload", status_code=201)
async def upload_dataset(file: UploadFile = File(...)):
    """
    Upload a CSV or JSON file as a new dataset.

    Files ending in ``.json`` must hold an array of flat objects; anything
    else is read as comma-separated text with a header row.
    """
    name, source_format, records = await _read_upload(file)
    dataset = data_store.create_dataset(name, records, source_format=source_format)
    profile = build_dataset_profile(dataset["records"])
    return {**_summary(dataset, profile), "profile": profile.to_dict()}


@router.put("/{dataset_id}/records")
async def replace_dataset(dataset_id: str, file: UploadFile = File(...)):
    """Replace a dataset's records with a newly uploaded file."""
    _load(dataset_id)
    name, source_format, records = await _read_upload(file)
    dataset = data_store.replace_records(dataset_id, records, name=name, source_format=source_format)
    profile = build_dataset_profile(dataset["records"])
    return {**_summary(dataset, profile), "profile": profile.to_dict()}


@router.get("/{dataset_id}")
async def get_dataset(dataset_id: str):
    dataset, records = _load(dataset_id)
    return _summary(dataset, build_dataset_profile(records))


@router.delete("/{dataset_id}")
async def delete_dataset(dataset_id: str):
    """Delete a dataset. The built-in sample cannot be deleted."""
    dataset, _ = _load(dataset_id)
    if dataset.get("is_sample"):
        raise HTTPException(status_code=400, detail="The sample dataset cannot be deleted")
    data_store.delete_dataset(dataset_id)
    return {"status": "deleted", "dataset_id": dataset_id}


@router.post("/{dataset_id}/reset")
async def reset_dataset(dataset_id: str):
    """Replace the dataset's records with the built-in sample data."""
    _load(dataset_id)
    dataset = data_store.reset_to_sample(dataset_id)
    return _summary(dataset, build_dataset_profile(dataset["records"]))


@router.get("/{dataset_id}/profile")
async def get_profile(dataset_id: str):
    """Inferred column types and semantic roles."""
    _, profile = _load_profiled(dataset_id)
    return profile.to_dict()


@router.get("/{dataset_id}/kpis")
async def get_kpis(dataset_id: str):
    """Up to four headline numbers for the best-ranked metrics."""
    records, profile = _load_profiled(dataset_id)
    return [k.to_dict() for k in compute_kpis(records, profile)]


@router.get("/{dataset_id}/breakdown")
async def get_breakdown(dataset_id: str):
    """Primary metric totalled per primary category (bar and pie slices)."""
    records, profile = _load_profiled(dataset_id)
    return build_category_breakdown(records, profile).to_dict()


@router.get("/{dataset_id}/trend")
async def get_trend(dataset_id: str):
    """Primary metric ordered along the date column."""
    records, profile = _load_profiled(dataset_id)
    points = build_trend_series(records, profile)
    return {
        "date_column": profile.date_column,
        "metric": profile.primary_metric,
        "points": [p.to_dict() for p in points],
    }


@router.get("/{dataset_id}/rows")
async def get_rows(
    dataset_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=10000),
):
    """First rows of the raw record sequence."""
    _, records = _load(dataset_id)
    limit = limit or settings.ROW_PREVIEW_LIMIT
    return {"row_count": len(records), "rows": records[:limit]}


@router.get("/{dataset_id}/export")
async def export_dataset(dataset_id: str):
    """Download the dataset as CSV."""
    _, records = _load(dataset_id)
    filename = export_filename()
    return Response(
        content=records_to_csv(records),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
