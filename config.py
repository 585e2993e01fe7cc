# config.py

import os
import json
from dotenv import load_dotenv
from typing import List, Optional
from pydantic import BaseModel, Field, ValidationError

from models.site import SiteCreate

load_dotenv()


class Settings(BaseModel):
    port: int = 8080
    check_interval_seconds: float = 10
    probe_timeout_ms: int = 5000
    max_concurrent_checks: int = 10
    event_log_retention: int = 1000
    remediation_timeout_seconds: float = 5
    cloudflare_zone_id: Optional[str] = None
    cloudflare_api_token: Optional[str] = None
    disable_scheduler: bool = False
    monitored_sites: List[SiteCreate] = Field(default_factory=list)


def _env_number(name: str, default, cast=int):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        print(f"⚠️ Warning: invalid {name}={raw!r}, using default {default}")
        return default
    if value <= 0:
        print(f"⚠️ Warning: {name} must be positive, using default {default}")
        return default
    return value


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _env_sites(name: str) -> List[SiteCreate]:
    raw = os.getenv(name)
    if not raw:
        return []
    try:
        entries = json.loads(raw)
        if not isinstance(entries, list):
            raise ValueError("expected a JSON array")
        return [SiteCreate(**entry) for entry in entries]
    except (ValueError, TypeError, ValidationError) as e:
        print(f"⚠️ Warning: could not parse {name}: {e}")
        return []


def load_settings() -> Settings:
    """Read the service settings from the environment (and .env)."""
    return Settings(
        port=_env_number("PORT", 8080),
        check_interval_seconds=_env_number("CHECK_INTERVAL_SECONDS", 10, float),
        probe_timeout_ms=_env_number("PROBE_TIMEOUT_MS", 5000),
        max_concurrent_checks=_env_number("MAX_CONCURRENT_CHECKS", 10),
        event_log_retention=_env_number("EVENT_LOG_RETENTION", 1000),
        remediation_timeout_seconds=_env_number("REMEDIATION_TIMEOUT_SECONDS", 5, float),
        cloudflare_zone_id=os.getenv("CLOUDFLARE_ZONE_ID") or None,
        cloudflare_api_token=os.getenv("CLOUDFLARE_API_TOKEN") or None,
        disable_scheduler=_env_flag("DISABLE_SCHEDULER"),
        monitored_sites=_env_sites("MONITORED_SITES"),
    )
