from __future__ import annotations

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

# Load variables from .env.example first (as defaults), then .env to override
project_root = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=project_root / ".env.example", override=False)
load_dotenv(dotenv_path=project_root / ".env", override=True)


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key, default)
    return v


DEFAULT_FACET_LIMIT = (
    "50:dt.type,50:w.organisatietype,50:c.product-area,50:dt.creator,"
    "25:dt.language,25:w.publicatienaam"
)


@dataclass
class Settings:
    app_env: str = _getenv("APP_ENV", "development") or "development"
    log_level: str = _getenv("LOG_LEVEL", "INFO") or "INFO"

    # SRU endpoint (repository.overheid.nl)
    sru_base_url: str = _getenv("SRU_BASE_URL", "https://repository.overheid.nl/sru") or "https://repository.overheid.nl/sru"
    sru_timeout: float = float(_getenv("SRU_TIMEOUT", "15") or 15)
    sru_max_records: int = int(_getenv("SRU_MAX_RECORDS", "100") or 100)
    user_agent: str = _getenv("SRU_USER_AGENT", "OverheidSearch/1.0 (Netherlands Government Document Search)") or "OverheidSearch/1.0"

    # Search defaults
    default_page_size: int = int(_getenv("PAGE_SIZE", "20") or 20)
    default_facet_limit: str = _getenv("FACET_LIMIT", DEFAULT_FACET_LIMIT) or DEFAULT_FACET_LIMIT

    # Comma separated list of allowed CORS origins
    cors_origins: str = _getenv("CORS_ORIGINS", "*") or "*"


settings = Settings()
