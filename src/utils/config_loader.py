"""
Configuration loader for the delivery quote backend
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Settings field -> environment variable(s), first non-empty wins
_ENV_KEYS: Dict[str, tuple] = {
    "site_url": ("YOUR_WEBSITE_URL", "SITE_URL"),
    "cors_origin": ("CORS_ORIGIN", "YOUR_WEBSITE_URL"),
    "stripe_secret_key": ("STRIPE_SECRET_KEY",),
    "checkout_mode": ("CHECKOUT_MODE",),
    "lead_sink": ("LEAD_SINK",),
    "leads_csv_path": ("LEADS_CSV_PATH",),
    "database_url": ("DATABASE_URL",),
    "environment": ("APP_ENV", "NODE_ENV"),
    "port": ("PORT",),
    "product_name": ("CHECKOUT_PRODUCT_NAME",),
    "currency": ("CHECKOUT_CURRENCY",),
    "minimum_charge_cents": ("MINIMUM_CHARGE_CENTS",),
}


class Settings(BaseModel):
    """Runtime settings injected into the app factory"""

    site_url: Optional[str] = None
    cors_origin: str = "*"
    stripe_secret_key: Optional[str] = None
    checkout_mode: str = ""
    lead_sink: str = ""
    leads_csv_path: str = "data/leads.csv"
    database_url: Optional[str] = None
    environment: str = "development"
    port: int = Field(default=10000, ge=1, le=65535)
    product_name: str = "Xpedite Now Delivery Quote"
    currency: str = "usd"
    minimum_charge_cents: int = Field(default=50, ge=0)

    @field_validator("site_url")
    @classmethod
    def _strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None

    @field_validator("cors_origin")
    @classmethod
    def _clean_origin(cls, v: str) -> str:
        return (v or "").strip().rstrip("/") or "*"

    @field_validator("checkout_mode", "lead_sink", "environment", "currency")
    @classmethod
    def _lower(cls, v: str) -> str:
        return (v or "").strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def sink_kind(self) -> str:
        if self.lead_sink in {"csv", "postgres", "memory"}:
            return self.lead_sink
        return "postgres" if self.database_url else "csv"

    @property
    def checkout_kind(self) -> str:
        if self.checkout_mode in {"stripe", "live", "real"}:
            return "stripe"
        if self.checkout_mode in {"mock", "test"}:
            return "mock"
        return "stripe" if self.stripe_secret_key else "mock"


def _from_env(env: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field_name, keys in _ENV_KEYS.items():
        for key in keys:
            raw = (env.get(key) or "").strip()
            if raw:
                values[field_name] = raw
                break
    return values


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Settings:
    """
    Build Settings from an optional YAML file overlaid by environment variables

    Args:
        env: Mapping to read variables from. Defaults to os.environ after load_dotenv().
        config_path: YAML file with Settings field names as keys. Defaults to
            APP_CONFIG_PATH when set.

    Raises:
        FileNotFoundError: If an explicit config_path doesn't exist
        ValidationError: If the merged values don't match the schema
    """
    if env is None:
        load_dotenv()
        env = os.environ

    data: Dict[str, Any] = {}
    if config_path is None and env.get("APP_CONFIG_PATH"):
        config_path = Path(env["APP_CONFIG_PATH"])
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data.update(yaml.safe_load(f) or {})
        logger.info("Loaded settings file %s", config_path)

    data.update(_from_env(env))

    try:
        return Settings(**data)
    except ValidationError as e:
        logger.error("Settings validation failed: %s", e)
        raise
