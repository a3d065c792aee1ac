"""
Service configuration.

Values come from the environment, with a project-root .env file loaded
first (see repositories/client.py for the Supabase credentials).

Environment variables:
- STRIPE_WEBHOOK_SECRET: signing secret of the payment webhook endpoint
- STRIPE_WEBHOOK_TOLERANCE_SECONDS: maximum signature age (default 300)
- INTERNAL_API_TOKEN: shared secret for internal fraud-detection calls
- LOG_LEVEL: logging level name (default INFO)
- CORS_ALLOW_ORIGINS: comma-separated origins (default *)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


@dataclass(frozen=True, slots=True)
class Settings:
    stripe_webhook_secret: Optional[str]
    stripe_webhook_tolerance_seconds: int
    internal_api_token: Optional[str]
    log_level: str
    cors_allow_origins: Tuple[str, ...]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
    return Settings(
        stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET") or None,
        stripe_webhook_tolerance_seconds=int(os.getenv("STRIPE_WEBHOOK_TOLERANCE_SECONDS", "300")),
        internal_api_token=os.getenv("INTERNAL_API_TOKEN") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_allow_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
    )


__all__ = ["Settings", "get_settings"]
