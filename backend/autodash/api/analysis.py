"""
Analysis API Endpoints

Natural-language Q&A and trend forecasts over a dataset, delegated to the
AI data analyst. When the analyst cannot answer, the route responds with 503
and a retryable error body instead of failing the dashboard.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..services.ai_analyst import AnalystUnavailable, analyst
from ..services.data_store import data_store
from ..services.dataset_profiler import build_dataset_profile

router = APIRouter(prefix="/datasets", tags=["Analysis"])


class AnalysisQuery(BaseModel):
    query: str = Field(..., min_length=1, description="Question about the dataset")


def _unavailable(exc: AnalystUnavailable) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "error": "analysis_unavailable",
            "message": str(exc),
            "retryable": True,
        },
    )


def _records(dataset_id: str):
    records = data_store.get_records(dataset_id)
    if records is None:
        raise HTTPException(status_code=404, detail="Dataset not found")
    if not records:
        raise HTTPException(status_code=400, detail="Dataset has no usable data")
    return records


@router.post("/{dataset_id}/analysis")
async def analyze_dataset(dataset_id: str, body: AnalysisQuery):
    """Answer a free-text question about the dataset (markdown)."""
    records = _records(dataset_id)
    columns = build_dataset_profile(records).column_names
    try:
        text = await analyst.analyze(records, columns, body.query)
    except AnalystUnavailable as e:
        return _unavailable(e)
    return {"analysis": text}


@router.post("/{dataset_id}/forecast")
async def forecast_dataset(dataset_id: str):
    """Structured trend forecast for the dataset's main entities."""
    records = _records(dataset_id)
    try:
        forecast = await analyst.forecast(records)
    except AnalystUnavailable as e:
        return _unavailable(e)
    return forecast.model_dump(by_alias=True)
