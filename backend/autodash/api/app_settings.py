"""
Application Settings API

Runtime AI configuration (API key, model, on/off switch). Values are
persisted to disk so they survive restarts; anything not set here falls back
to the environment-driven defaults in ``core.config``.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
import json
import logging
from pathlib import Path
import threading

from ..core.config import settings

router = APIRouter(prefix="/settings", tags=["Settings"])

logger = logging.getLogger("autodash.settings")


# ─── Persistent settings store ───────────────────────────────────────

class _SettingsStore:
    """Simple file-based settings persistence."""

    def __init__(self, data_dir: str = None):
        self._path = Path(data_dir or settings.DATA_DIR) / "app_settings.json"
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._cache: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if self._path.exists():
            try:
                return json.loads(self._path.read_text())
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable settings file %s: %s", self._path, e)
                return {}
        return {}

    def _save(self):
        self._path.write_text(json.dumps(self._cache, indent=2))

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._cache.get(key, default)

    def set(self, key: str, value: Any):
        with self._lock:
            self._cache[key] = value
            self._save()


settings_store = _SettingsStore()


# ─── Pydantic models ─────────────────────────────────────────────────

class AISettings(BaseModel):
    anthropic_api_key: Optional[str] = Field(None, description="Anthropic API key for the data analyst")
    model: Optional[str] = Field(None, description="Model used for analysis and forecasts")
    enable_ai_analysis: bool = Field(True, description="Enable natural-language analysis and forecasts")


class SettingsResponse(BaseModel):
    ai: AISettings
    status: str = "ok"


class SettingsUpdate(BaseModel):
    ai: Optional[AISettings] = None


# ─── Endpoints ────────────────────────────────────────────────────────

def _mask_key(key: str) -> str:
    """Mask an API key for display."""
    if not key:
        return ""
    return key[:8] + "..." + key[-4:] if len(key) > 12 else "***configured***"


@router.get("/", response_model=SettingsResponse)
async def get_settings():
    """Get AI settings. The API key is masked in the response."""
    ai_raw = settings_store.get("ai", {})
    return SettingsResponse(
        ai=AISettings(
            anthropic_api_key=_mask_key(get_anthropic_api_key()),
            model=get_ai_model(),
            enable_ai_analysis=ai_raw.get("enable_ai_analysis", True),
        )
    )


@router.put("/", response_model=SettingsResponse)
async def update_settings(update: SettingsUpdate):
    """Update AI settings."""
    if update.ai is not None:
        ai_data = update.ai.model_dump()
        existing = settings_store.get("ai", {})

        # A masked key sent back means "keep the stored one"
        val = ai_data.get("anthropic_api_key") or ""
        if "..." in val or val == "***configured***":
            ai_data["anthropic_api_key"] = existing.get("anthropic_api_key", "")

        settings_store.set("ai", ai_data)
        logger.info("AI settings updated (enabled=%s, model=%s)", ai_data["enable_ai_analysis"], ai_data["model"])

    return await get_settings()


@router.get("/ai/status")
async def get_ai_status():
    """Check if the analyst is configured and ready."""
    return ai_status()


def ai_status() -> Dict[str, Any]:
    enabled = is_ai_enabled()
    has_key = len(get_anthropic_api_key()) > 10
    return {
        "configured": has_key,
        "enabled": enabled,
        "ready": has_key and enabled,
        "model": get_ai_model(),
        "message": (
            "AI analysis is ready" if has_key and enabled
            else "AI analysis disabled" if not enabled
            else "Set an Anthropic API key in Settings"
        ),
    }


def get_anthropic_api_key() -> str:
    """Helper: the current Anthropic API key from settings (or config fallback)."""
    key = settings_store.get("ai", {}).get("anthropic_api_key", "")
    if key:
        return key
    return settings.ANTHROPIC_API_KEY or ""


def get_ai_model() -> str:
    return settings_store.get("ai", {}).get("model") or settings.AI_MODEL


def is_ai_enabled() -> bool:
    return bool(settings_store.get("ai", {}).get("enable_ai_analysis", True))
