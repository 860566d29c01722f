"""
Pytest Configuration and Shared Fixtures for App Benchmark Tests.

This module provides fixtures and configuration for all tests, supporting:
- The built-in reference table
- Sample submissions matching the JSON contract of POST /api/benchmark
- Settings instances isolated from the process environment and .env files
- Mock SMTP fixtures for testing email delivery without a mail server
- A TestClient running the full application lifespan

Dependencies:
- pytest
- httpx (required by fastapi.testclient)
"""

from typing import Any, Callable, Dict, Generator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from appbench.core.config import Settings
from appbench.main import create_app
from appbench.models.schemas import UserSubmission
from appbench.services.reference_data import ReferenceTable, load_reference_table


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - integration: runs the whole FastAPI app through TestClient
    """
    config.addinivalue_line(
        'markers',
        'integration: marks tests that exercise the full HTTP application'
    )


# ============================================================
# REFERENCE DATA FIXTURES
# ============================================================

@pytest.fixture
def reference_table() -> ReferenceTable:
    """The built-in reference table."""
    return load_reference_table()


# ============================================================
# SUBMISSION FIXTURES
# ============================================================

@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """
    A valid POST /api/benchmark body.

    Education / US / monthly with a trial. Benchmarks for this key:
    price 15.2, trial->paid 29.31, LTV 36.0, refund rate 2.8.
    """
    return {
        'category': 'Education',
        'region': 'US',
        'planType': 'monthly',
        'price': 15.2,
        'conversionRate': 29.31,
        'ltv': 36.0,
        'refundRate': 10,
        'hasTrial': True,
        'email': 'founder@example.com',
    }


@pytest.fixture
def make_submission(sample_payload: Dict[str, Any]) -> Callable[..., UserSubmission]:
    """
    Factory building a UserSubmission from sample_payload with overrides.

    Usage:
        submission = make_submission(category='Utilities', hasTrial=False)
    """
    def _make(**overrides: Any) -> UserSubmission:
        return UserSubmission(**{**sample_payload, **overrides})

    return _make


@pytest.fixture
def underperforming_payload(sample_payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Education / US / monthly submission that trips every threshold rule.

    price 9.0 vs 15.2       -> -40.8%
    conversion 10 vs 29.31  -> -65.9%
    LTV 20 vs 36.0          -> -44.4%
    refund 10 vs 2.8        -> +257.1%
    """
    return {
        **sample_payload,
        'price': 9.0,
        'conversionRate': 10,
        'ltv': 20,
        'refundRate': 10,
    }


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with SMTP disabled and no .env lookup."""
    return Settings(_env_file=None)


@pytest.fixture
def smtp_settings() -> Settings:
    """Settings with SMTP fully configured."""
    return Settings(
        _env_file=None,
        smtp_host='smtp.test.local',
        smtp_port=587,
        smtp_user='mailer',
        smtp_pass='secret',
        smtp_from='reports@test.local',
    )


# ============================================================
# SMTP MOCK FIXTURES
# ============================================================

@pytest.fixture
def mock_smtp() -> Generator[MagicMock, None, None]:
    """
    Patch smtplib.SMTP as used by appbench.jobs.email_report.

    Yields:
        MagicMock: The patched SMTP class. The connection used inside the
        ``with`` block is ``mock_smtp.return_value.__enter__.return_value``.
    """
    with patch('appbench.jobs.email_report.smtplib.SMTP') as smtp_cls:
        smtp_cls.return_value.__enter__.return_value = MagicMock()
        yield smtp_cls


# ============================================================
# APPLICATION FIXTURES
# ============================================================

@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """TestClient over an app built with test_settings; lifespan runs on enter."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


@pytest.fixture
def smtp_client(smtp_settings: Settings) -> Generator[TestClient, None, None]:
    """TestClient over an app with SMTP configured."""
    with TestClient(create_app(smtp_settings)) as test_client:
        yield test_client

