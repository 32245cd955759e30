"""
AI Data Analyst - external analysis collaborator

Sends a bounded sample of the dataset to Claude and returns either free-form
markdown (answers to user questions) or a structured forecast document.

The dashboard never depends on this call succeeding. Every failure (no key,
analysis switched off, timeout, transport error, unusable reply) is raised
as ``AnalystUnavailable`` so the API layer can show a retryable error.
"""

import asyncio
import json
import logging
import re
import time
from typing import Any, List, Optional, Sequence

import anthropic
from pydantic import ValidationError

from ..api.app_settings import get_ai_model, get_anthropic_api_key, is_ai_enabled
from ..core.config import settings
from ..models.forecast import Forecast
from ..models.profile import Record

logger = logging.getLogger("autodash.ai_analyst")


class AnalystUnavailable(Exception):
    """The analysis service could not produce a usable answer."""


ANALYSIS_SYSTEM_PROMPT = "You are a versatile data analyst capable of interpreting any dataset."

FORECAST_SYSTEM_PROMPT = (
    "You are an expert forecaster. Analyze the pattern and predict the future state.\n\n"
    "You must output your forecast as a single JSON object:\n"
    '{"topEntities":[{"entityName":"the item/stock/entity",'
    '"predictedTrend":"e.g. Bullish, +15%, Increasing",'
    '"reasoning":"brief explanation based on data patterns"}],'
    '"marketOutlook":"general summary of the dataset trend",'
    '"recommendation":"actionable advice based on the data"}\n'
    "Output ONLY the JSON object, nothing else."
)


class DataAnalyst:
    """Thin client around the Anthropic Messages API."""

    name = "Data Analyst"

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        # An injected client is kept as-is; otherwise one is built per call so
        # a key changed through the settings API takes effect immediately.
        self._fixed_client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model or get_ai_model()

    def _get_client(self):
        if self._fixed_client is not None:
            return self._fixed_client
        api_key = get_anthropic_api_key()
        if not api_key:
            return None
        return anthropic.AsyncAnthropic(api_key=api_key)

    @staticmethod
    def _sample_context(records: Sequence[Record], sample_rows: Optional[int] = None) -> str:
        if sample_rows is None:
            sample_rows = settings.AI_SAMPLE_ROWS
        return json.dumps(list(records[:sample_rows]), default=str)

    async def _complete(self, system: str, prompt: str) -> str:
        if not is_ai_enabled():
            raise AnalystUnavailable("AI analysis is disabled in settings")
        client = self._get_client()
        if client is None:
            logger.warning("[%s] No API client (no key?)", self.name)
            raise AnalystUnavailable("No Anthropic API key configured")

        logger.info("[%s] Sending LLM request (model=%s, prompt=%d chars)...", self.name, self.model, len(prompt))
        t_start = time.time()
        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self.model,
                    max_tokens=settings.AI_MAX_TOKENS,
                    system=system,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=settings.AI_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            t_elapsed = round(time.time() - t_start, 2)
            logger.error("[%s] TIMEOUT after %.2fs (limit=%ds)", self.name, t_elapsed, settings.AI_TIMEOUT_SECONDS)
            raise AnalystUnavailable("The analysis service timed out")
        except anthropic.APIError as e:
            t_elapsed = round(time.time() - t_start, 2)
            logger.error("[%s] LLM call FAILED after %.2fs: %s: %s", self.name, t_elapsed, type(e).__name__, e)
            raise AnalystUnavailable("The analysis service returned an error") from e

        t_elapsed = round(time.time() - t_start, 2)
        usage = getattr(response, "usage", None)
        logger.info(
            "[%s] LLM response in %.2fs: stop=%s, usage=%s", self.name, t_elapsed,
            getattr(response, "stop_reason", "?"),
            {"input": usage.input_tokens, "output": usage.output_tokens} if usage else "?",
        )

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        ).strip()
        if not text:
            raise AnalystUnavailable("The analysis service returned an empty reply")
        return text

    # ─── Open questions ───────────────────────────────────────────

    def _build_analysis_prompt(self, records: Sequence[Record], columns: List[str], query: str) -> str:
        sample_rows = settings.AI_SAMPLE_ROWS
        return (
            "You are a senior data analyst. Analyze the following dataset.\n\n"
            f"The dataset contains the following columns: {', '.join(columns)}.\n\n"
            f"Sample Data (first {sample_rows} rows in JSON):\n"
            f"{self._sample_context(records, sample_rows)}\n\n"
            f"User Query: {query}\n\n"
            "Provide a concise, professional, and insightful answer. Format the answer with Markdown.\n"
            "Identify the type of data (e.g., Financial, Retail, Weather) and tailor your language accordingly.\n"
            "If the data looks like stock data, talk about trends, volatility, and volume.\n"
            "If the data looks like sales data, talk about revenue, growth, and products.\n"
        )

    async def analyze(self, records: Sequence[Record], columns: List[str], query: str) -> str:
        """Answer a free-text question about the dataset; returns markdown."""
        prompt = self._build_analysis_prompt(records, columns, query)
        return await self._complete(ANALYSIS_SYSTEM_PROMPT, prompt)

    # ─── Forecast ─────────────────────────────────────────────────

    def _build_forecast_prompt(self, records: Sequence[Record]) -> str:
        return (
            "Based on the historical data provided below, predict future trends.\n"
            "First, identify the main entity (e.g., Product Name, Stock Symbol, City) "
            "and the main metric (e.g., Sales, Close Price, Temperature).\n"
            "Then, provide a forecast.\n\n"
            f"Dataset Sample:\n{self._sample_context(records)}\n"
        )

    def _parse_forecast(self, text: str) -> Forecast:
        """Parse the forecast JSON object out of the reply text."""
        json_match = re.search(r"\{[\s\S]*\}", text)
        if not json_match:
            logger.warning("[%s] No JSON object in forecast reply", self.name)
            raise AnalystUnavailable("The forecast reply was not structured")
        try:
            return Forecast.model_validate(json.loads(json_match.group(0)))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("[%s] Invalid forecast document: %s", self.name, e)
            raise AnalystUnavailable("The forecast reply was not structured") from e

    async def forecast(self, records: Sequence[Record]) -> Forecast:
        text = await self._complete(FORECAST_SYSTEM_PROMPT, self._build_forecast_prompt(records))
        forecast = self._parse_forecast(text)
        logger.info("[%s] Parsed forecast with %d entities", self.name, len(forecast.top_entities))
        return forecast


analyst = DataAnalyst()
