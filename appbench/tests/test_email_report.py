"""
Pytest test module for email report rendering and delivery.

Test Classes:
- TestRenderReport: HTML/plain-text content, escaping, priority colours
- TestBuildReportMessage: headers and multipart layout
- TestSendBenchmarkReport: SMTP interaction through a mocked smtplib.SMTP
- TestDeliverBenchmarkReport: best-effort wrapper never raises
"""

import logging
import smtplib
from typing import Any, Callable, Dict
from unittest.mock import MagicMock

import pytest

from appbench.core.config import Settings
from appbench.core.exceptions import DeliveryError
from appbench.jobs.email_report import (
    build_report_message,
    deliver_benchmark_report,
    render_report_html,
    render_report_text,
    send_benchmark_report,
)
from appbench.models.schemas import BenchmarkEvaluation, UserSubmission
from appbench.services.evaluator import evaluate_submission
from appbench.services.reference_data import ReferenceTable


@pytest.fixture
def submission(underperforming_payload: Dict[str, Any]) -> UserSubmission:
    return UserSubmission(**underperforming_payload)


@pytest.fixture
def evaluation(submission: UserSubmission, reference_table: ReferenceTable) -> BenchmarkEvaluation:
    return evaluate_submission(submission, reference_table)


# =============================================================================
# Test Class: TestRenderReport
# =============================================================================

class TestRenderReport:

    def test_html_contains_every_metric(
        self,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        html = render_report_html(evaluation.results, evaluation.recommendations, submission, 'https://example.com/demo')

        for label in ('Price', 'Conversion Rate', 'Lifetime Value', 'Refund Rate'):
            assert f'>{label}</h3>' in html
        assert 'Your value: $9.00' in html
        assert 'Benchmark: $15.20' in html
        assert 'Difference: -40.8%' in html
        assert 'Difference: +257.1%' in html

    def test_html_colours_recommendations_by_priority(
        self,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        html = render_report_html(evaluation.results, evaluation.recommendations, submission, 'https://example.com/demo')

        assert 'color: #dc2626">HIGH Priority' in html
        assert 'color: #d97706">MEDIUM Priority' in html
        assert 'color: #4f46e5">LOW Priority' in html

    def test_html_includes_cta_and_context(
        self,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        html = render_report_html(evaluation.results, evaluation.recommendations, submission, 'https://example.com/demo')

        assert 'href="https://example.com/demo"' in html
        assert 'results for Education (monthly plan) in US' in html

    def test_html_escapes_user_text(
        self,
        make_submission: Callable[..., UserSubmission],
        reference_table: ReferenceTable,
    ) -> None:
        submission = make_submission(category='<script>alert(1)</script>')
        evaluation = evaluate_submission(submission, reference_table)

        html = render_report_html(evaluation.results, evaluation.recommendations, submission, 'https://example.com')

        assert '<script>' not in html
        assert '&lt;script&gt;' in html

    def test_text_report(
        self,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        text = render_report_text(evaluation.results, evaluation.recommendations, submission)

        assert 'Education / US / monthly' in text
        assert '- Refund Rate: 10.00% vs 2.80% (+257.1%)' in text
        assert '[HIGH]' in text


# =============================================================================
# Test Class: TestBuildReportMessage
# =============================================================================

class TestBuildReportMessage:

    def test_headers(
        self,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        message = build_report_message(smtp_settings, 'founder@example.com', evaluation, submission)

        assert message['Subject'] == 'Your Education App Benchmark Report'
        assert message['From'] == 'reports@test.local'
        assert message['To'] == 'founder@example.com'

    def test_has_text_and_html_parts(
        self,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        message = build_report_message(smtp_settings, 'founder@example.com', evaluation, submission)

        html_part = message.get_body(preferencelist=('html',))
        text_part = message.get_body(preferencelist=('plain',))
        assert html_part is not None and text_part is not None
        assert 'Your App Benchmark Report' in html_part.get_content()
        assert 'Metrics Comparison' in text_part.get_content()


# =============================================================================
# Test Class: TestSendBenchmarkReport
# =============================================================================

class TestSendBenchmarkReport:

    def test_sends_over_smtp(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        send_benchmark_report(smtp_settings, 'founder@example.com', evaluation, submission)

        mock_smtp.assert_called_once_with('smtp.test.local', 587, timeout=10.0)
        conn = mock_smtp.return_value.__enter__.return_value
        conn.starttls.assert_called_once()
        conn.login.assert_called_once_with('mailer', 'secret')
        conn.send_message.assert_called_once()
        sent = conn.send_message.call_args[0][0]
        assert sent['To'] == 'founder@example.com'

    def test_skips_starttls_when_disabled(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        settings = smtp_settings.model_copy(update={'smtp_use_tls': False})

        send_benchmark_report(settings, 'founder@example.com', evaluation, submission)

        conn = mock_smtp.return_value.__enter__.return_value
        conn.starttls.assert_not_called()
        conn.send_message.assert_called_once()

    def test_not_configured_raises(
        self,
        mock_smtp: MagicMock,
        test_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        with pytest.raises(DeliveryError):
            send_benchmark_report(test_settings, 'founder@example.com', evaluation, submission)

        mock_smtp.assert_not_called()

    def test_auth_failure_raises_delivery_error(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        conn = mock_smtp.return_value.__enter__.return_value
        conn.login.side_effect = smtplib.SMTPAuthenticationError(535, b'authentication failed')

        with pytest.raises(DeliveryError) as exc_info:
            send_benchmark_report(smtp_settings, 'founder@example.com', evaluation, submission)

        assert exc_info.value.recipient == 'founder@example.com'
        conn.send_message.assert_not_called()

    def test_connection_failure_raises_delivery_error(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        mock_smtp.side_effect = ConnectionRefusedError('connection refused')

        with pytest.raises(DeliveryError):
            send_benchmark_report(smtp_settings, 'founder@example.com', evaluation, submission)


# =============================================================================
# Test Class: TestDeliverBenchmarkReport
# =============================================================================

class TestDeliverBenchmarkReport:

    def test_returns_true_on_success(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        assert deliver_benchmark_report(smtp_settings, 'founder@example.com', evaluation, submission) is True

    def test_logs_and_swallows_delivery_error(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        mock_smtp.side_effect = OSError('network unreachable')

        with caplog.at_level(logging.ERROR, logger='appbench.jobs.email_report'):
            result = deliver_benchmark_report(smtp_settings, 'founder@example.com', evaluation, submission)

        assert result is False
        assert any('founder@example.com' in r.getMessage() for r in caplog.records)

    def test_single_attempt_no_retry(
        self,
        mock_smtp: MagicMock,
        smtp_settings: Settings,
        evaluation: BenchmarkEvaluation,
        submission: UserSubmission,
    ) -> None:
        mock_smtp.side_effect = OSError('network unreachable')

        deliver_benchmark_report(smtp_settings, 'founder@example.com', evaluation, submission)

        assert mock_smtp.call_count == 1
