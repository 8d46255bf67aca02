"""Configuration management using pydantic-settings."""
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class EnrichmentSettings(BaseSettings):
    """Resolution pipeline configuration loaded from environment variables.

    All settings prefixed with ENRICH_ (e.g., ENRICH_MAX_CONCURRENCY=5)
    """

    # Orchestration
    max_concurrency: int = Field(
        default=5,
        ge=1,
        le=32,
        description="Hard ceiling of concurrently resolving records"
    )

    # Retry/timeout envelope
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts per record resolution"
    )
    attempt_timeout: float = Field(
        default=15.0,
        ge=1.0,
        le=300.0,
        description="Per-attempt deadline in seconds (strategies may request longer)"
    )
    retry_base_delay: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Delay before retry n is retry_base_delay * n seconds"
    )

    # Transport
    request_timeout: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="HTTP read timeout in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent to supplier sites"
    )
    max_link_candidates: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Links inspected when picking a product page from search results"
    )

    # Headless browser
    browser_enabled: bool = Field(
        default=True,
        description="Enable the rendered navigation step (Playwright Chromium)"
    )
    headless: bool = True
    render_timeout_ms: int = Field(
        default=20000,
        ge=1000,
        le=120000,
        description="Navigation timeout for rendered pages (ms)"
    )
    render_settle_ms: int = Field(
        default=10000,
        ge=0,
        le=60000,
        description="How long to wait for client-side rendering to settle (ms)"
    )
    render_step_timeout: float = Field(
        default=8.0,
        gt=0.0,
        le=300.0,
        description="Deadline in seconds for the whole rendered step; leaves room for static fallbacks"
    )

    # Extraction
    metric_only: bool = Field(
        default=False,
        description="Reject non-metric values instead of converting them"
    )
    known_targets_file: Optional[str] = Field(
        default=None,
        description="JSON file mapping tool descriptions to known product URLs"
    )

    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_prefix="ENRICH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def load_known_targets(self) -> Dict[str, Dict[str, str]]:
        """Load known-good product URLs keyed by supplier, then by description.

        The file layout is ``{"SECO": {"<description>": "<url>"}, ...}``.
        A missing setting yields an empty mapping.
        """
        if not self.known_targets_file:
            return {}
        path = Path(self.known_targets_file)
        data = json.loads(path.read_text(encoding="utf-8"))
        return {
            str(supplier).upper(): {str(k).strip().upper(): str(v) for k, v in targets.items()}
            for supplier, targets in data.items()
        }


# Global settings instance
settings = EnrichmentSettings()


def configure_logging(log_level: str = "INFO", json_output: Optional[bool] = None) -> None:
    """Configure structlog on top of stdlib logging.

    JSON output for production, colored console output otherwise.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if json_output is None:
        json_output = settings.is_production

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
