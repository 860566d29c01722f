"""
Settings and environment management module for the App Benchmark service.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for development
- Singleton pattern via @lru_cache for efficient access
- Optional SMTP credentials; email reports are skipped when they are missing

Environment Variables:
- SMTP_HOST / SMTP_PORT / SMTP_USER / SMTP_PASS: SMTP delivery for email reports
- SMTP_FROM: Sender address for email reports (default: benchmark@example.com)
- BENCHMARK_DATA_PATH: Optional JSON file replacing the built-in reference table
- STRICT_REFERENCE_KEYS: Reject unknown category/region/planType (default: false)
- RATE_LIMIT_WINDOW_MS / RATE_LIMIT_MAX_REQUESTS: Throttle for /api/ routes
- TRUST_PROXY_HEADERS: Key the throttle on X-Forwarded-For (default: false)
- CORS_ORIGINS: JSON list of allowed origins (default: ["*"])
- LOG_LEVEL: Root log level (default: INFO)

Usage:
    from appbench.core.config import get_settings

    settings = get_settings()
    if settings.email_configured:
        ...
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        smtp_host: SMTP server host. Email reports are disabled when unset.
        smtp_port: SMTP server port.
        smtp_user: SMTP login user.
        smtp_password: SMTP login password (env: SMTP_PASS).
        smtp_from: Sender address used for email reports.
        smtp_use_tls: Whether to upgrade the SMTP connection with STARTTLS.
        smtp_timeout: Socket timeout in seconds for SMTP operations.
        report_cta_url: Call-to-action link rendered at the bottom of reports.
        benchmark_data_path: Optional path to a JSON reference table.
        strict_reference_keys: Reject unknown category/region/planType values.
        rate_limit_window_ms: Rate-limit window length in milliseconds.
        rate_limit_max_requests: Requests allowed per window per client IP.
        trust_proxy_headers: Use the first X-Forwarded-For entry as client IP.
        cors_origins: Origins allowed by the CORS middleware.
        log_level: Root logging level.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
        populate_by_name=True,
    )

    # =========================================================================
    # SMTP (Optional - for email reports)
    # =========================================================================

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    # Kept under the SMTP_PASS name used by existing deployments
    smtp_password: Optional[str] = Field(default=None, alias='smtp_pass')
    smtp_from: str = 'benchmark@example.com'
    smtp_use_tls: bool = True
    smtp_timeout: float = 10.0

    report_cta_url: str = 'https://adapty.io/demo'

    # =========================================================================
    # Reference data
    # =========================================================================

    # When unset the built-in industry table is used
    benchmark_data_path: Optional[str] = None

    # False reproduces the lenient lookup: unknown keys resolve to 0 benchmarks
    strict_reference_keys: bool = False

    # =========================================================================
    # HTTP layer
    # =========================================================================

    # 15 minutes, 10 requests per client IP
    rate_limit_window_ms: int = Field(default=900_000, gt=0)
    rate_limit_max_requests: int = Field(default=10, ge=1)

    # Key the rate limiter on X-Forwarded-For; only safe behind a trusted proxy
    trust_proxy_headers: bool = False

    cors_origins: List[str] = ['*']

    log_level: str = 'INFO'

    @property
    def email_configured(self) -> bool:
        """True when host and credentials are all present."""
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The application settings instance with all configuration values.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
