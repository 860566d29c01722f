"""
Core infrastructure package for the App Benchmark service.

Provides:
- Configuration management via pydantic-settings
- Error taxonomy (ValidationError, ComputationError, DeliveryError)
- FastAPI dependency injection utilities
- In-memory rate limiting for /api/ routes

Usage Examples:
    from appbench.core import get_settings, SettingsDep, ValidationError
"""

from appbench.core.config import Settings, get_settings

from appbench.core.exceptions import (
    BenchmarkError,
    ValidationError,
    ComputationError,
    DeliveryError,
)

from appbench.core.dependencies import (
    get_settings_dependency,
    get_reference_table,
    SettingsDep,
    ReferenceTableDep,
)

from appbench.core.rate_limit import RateLimiter, get_client_ip


__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Errors (from exceptions.py)
    'BenchmarkError',
    'ValidationError',
    'ComputationError',
    'DeliveryError',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_reference_table',
    'SettingsDep',
    'ReferenceTableDep',
    # Rate limiting (from rate_limit.py)
    'RateLimiter',
    'get_client_ip',
]
