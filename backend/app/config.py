"""Vector store admin configuration.

Loads settings from two YAML files:
  * vsadmin.settings.yaml: non-secret configuration
  * vsadmin.secrets.yaml: secrets (never committed)

The OpenAI API key may also come from the ``OPENAI_API_KEY`` environment
variable when the secrets file does not provide one.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("vsadmin.settings.yaml")
SECRETS_FILE  = Path("vsadmin.secrets.yaml")

DEFAULT_COLUMN_WIDTHS: Dict[str, int] = {
    "File Name":       200,
    "File ID":         150,
    "Size":            100,
    "Created":         120,
    "Purpose":         100,
    "Vector Store ID": 150,
    "Attributes":      200,
    "Actions":         100,
}


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class OpenAISecrets(BaseModel):
    api_key: Optional[str] = None


class Secrets(BaseModel):
    openai: OpenAISecrets = Field(default_factory=OpenAISecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:            str       = "0.0.0.0"
    port:            int       = 8000
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingSettings(BaseModel):
    level: str = "info"


class OpenAISettings(BaseModel):
    """Connection and upload behaviour for the OpenAI vector store API."""
    base_url:              Optional[str]   = None
    organization:          Optional[str]   = None
    timeout_seconds:       Optional[float] = None
    upload_purpose:        str             = "assistants"
    upload_settle_seconds: float           = Field(default=2.0, ge=0)
    default_upload_name:   str             = "document.pdf"


class ConsoleSettings(BaseModel):
    """Defaults for the admin console session."""
    default_vector_store_id: Optional[str]  = None
    column_widths:           Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_COLUMN_WIDTHS))
    min_column_width:        int            = Field(default=50, ge=1)

    @field_validator("column_widths")
    @classmethod
    def _fill_missing_columns(cls, value: Dict[str, int]) -> Dict[str, int]:
        merged = dict(DEFAULT_COLUMN_WIDTHS)
        merged.update(value)
        return merged


class AppSettings(BaseModel):
    server:  ServerSettings  = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    openai:  OpenAISettings  = Field(default_factory=OpenAISettings)
    console: ConsoleSettings = Field(default_factory=ConsoleSettings)
    secrets: Secrets         = Field(default_factory=Secrets)

    def openai_api_key(self) -> Optional[str]:
        """Return the API key from secrets, falling back to ``OPENAI_API_KEY``."""
        return self.secrets.openai.api_key or os.environ.get("OPENAI_API_KEY") or None


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_settings(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> AppSettings:
    """Load and merge settings + secrets into a single *AppSettings* object."""
    settings_data = _load_yaml(settings_path or SETTINGS_FILE)
    secrets_data  = _load_yaml(secrets_path or SECRETS_FILE)

    # Merge: secrets live under the "secrets" key in AppSettings
    settings_data["secrets"] = secrets_data

    app_settings = AppSettings(**settings_data)
    logger.info(
        "Settings loaded (server=%s:%s, default_vector_store=%s, api_key_configured=%s)",
        app_settings.server.host,
        app_settings.server.port,
        app_settings.console.default_vector_store_id,
        app_settings.openai_api_key() is not None,
    )
    return app_settings


_config: Optional[AppSettings] = None


def get_config() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _config
    if _config is None:
        _config = load_settings()
    return _config


def reset_config() -> None:
    """Drop the cached settings (for testing)."""
    global _config
    _config = None
