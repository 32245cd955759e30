"""Structured forecast document returned by the data analyst."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ForecastItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entity_name: str = Field(..., alias="entityName", description="The item, stock or entity forecast")
    predicted_trend: str = Field(..., alias="predictedTrend", description="e.g. 'Bullish', '+15%', 'Increasing'")
    reasoning: str = Field(..., description="Brief explanation based on data patterns")


class Forecast(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    top_entities: List[ForecastItem] = Field(default_factory=list, alias="topEntities")
    market_outlook: str = Field(..., alias="marketOutlook", description="General summary of the dataset trend")
    recommendation: str = Field(..., description="Actionable advice based on the data")
