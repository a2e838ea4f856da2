"""Centralised settings for the lineage explorer.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Cloud endpoints
    # ------------------------------------------------------------------
    lineage_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "LINEAGE_API_URL", "https://datalineage.googleapis.com/v1"
        )
    )
    bigquery_api_url: str = field(
        default_factory=lambda: os.environ.get(
            "BIGQUERY_API_URL", "https://bigquery.googleapis.com/bigquery/v2"
        )
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )

    # Bearer token used by the CLI.  The HTTP API forwards the caller's
    # own ``Authorization`` header instead.
    access_token: str = field(
        default_factory=lambda: os.environ.get("LINEAGE_ACCESS_TOKEN", "")
    )

    # ------------------------------------------------------------------
    # Page sizes
    # ------------------------------------------------------------------
    process_batch_page_size: int = field(
        default_factory=lambda: int(os.environ.get("PROCESS_BATCH_PAGE_SIZE", "20"))
    )
    process_runs_page_size: int = field(
        default_factory=lambda: int(os.environ.get("PROCESS_RUNS_PAGE_SIZE", "50"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )
    log_json: bool = field(default_factory=lambda: _env_flag("LOG_JSON"))

    # ------------------------------------------------------------------
    # HTTP API
    # ------------------------------------------------------------------
    cors_origins: list[str] = field(
        default_factory=lambda: [
            o.strip()
            for o in os.environ.get("CORS_ORIGINS", "*").split(",")
            if o.strip()
        ]
    )


# Module-level singleton, import this everywhere:
#   from lineage_explorer.config import settings
settings = Settings()
