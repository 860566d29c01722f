"""
Email benchmark report delivery for the App Benchmark service.

This module renders the benchmark comparison and recommendations into an HTML
email and delivers it over SMTP. It runs as a FastAPI background task after
the HTTP response has been produced, so its latency and its failures never
change what the caller receives.

Delivery Guarantees:
- Best effort: one attempt per request, no retries
- Failures raise DeliveryError inside send_benchmark_report; the background
  wrapper deliver_benchmark_report logs them and returns False
- Skipped entirely when SMTP_HOST, SMTP_USER and SMTP_PASS are not all set

Environment Requirements:
- SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS: SMTP server and credentials
- SMTP_FROM: Sender address (default: benchmark@example.com)
- SMTP_USE_TLS: Upgrade with STARTTLS (default: true)
- REPORT_CTA_URL: Link used by the call-to-action button

Usage:
    background_tasks.add_task(
        deliver_benchmark_report, settings, submission.email, evaluation, submission
    )

See Also:
    - appbench/api/benchmark.py: schedules the delivery
    - appbench/core/config.py: Settings with SMTP configuration
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from html import escape
from typing import Dict, List

from appbench.core.config import Settings
from appbench.core.exceptions import DeliveryError
from appbench.models.enums import Metric, Priority
from appbench.models.schemas import (
    BenchmarkEvaluation,
    BenchmarkResults,
    Recommendation,
    UserSubmission,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Report Formatting
# =============================================================================

METRIC_LABELS: Dict[Metric, str] = {
    Metric.PRICE: "Price",
    Metric.CONVERSION_RATE: "Conversion Rate",
    Metric.LTV: "Lifetime Value",
    Metric.REFUND_RATE: "Refund Rate",
}

PRIORITY_COLORS: Dict[Priority, str] = {
    Priority.HIGH: "#dc2626",
    Priority.MEDIUM: "#d97706",
    Priority.LOW: "#4f46e5",
}


def format_metric_value(metric: Metric, value: float) -> str:
    """Price and LTV in dollars, rates in percent."""
    if metric in (Metric.PRICE, Metric.LTV):
        return f"${value:,.2f}"
    return f"{value:.2f}%"


def format_difference(diff: float) -> str:
    return f"{diff:+.1f}%"


def build_subject(submission: UserSubmission) -> str:
    return f"Your {submission.category} App Benchmark Report"


def render_report_html(
    results: BenchmarkResults,
    recommendations: List[Recommendation],
    submission: UserSubmission,
    cta_url: str,
) -> str:
    """
    Render the HTML body of the benchmark report.

    Sections:
    - Heading with category and region
    - One block per metric (your value, benchmark, difference)
    - One block per recommendation, coloured by priority
    - Call-to-action footer

    User-supplied text is HTML-escaped.
    """
    category = escape(submission.category)
    region = escape(submission.region)
    plan_type = escape(submission.planType)

    metric_blocks = []
    for metric in Metric:
        comparison = getattr(results, metric.value)
        metric_blocks.append(
            '<div style="margin: 10px 0; padding: 10px; border: 1px solid #ddd;">'
            f'<h3 style="margin: 0;">{METRIC_LABELS[metric]}</h3>'
            f"<p>Your value: {format_metric_value(metric, comparison.userValue)}</p>"
            f"<p>Benchmark: {format_metric_value(metric, comparison.benchmarkValue)}</p>"
            f"<p>Difference: {format_difference(comparison.percentDifference)}</p>"
            "</div>"
        )

    recommendation_blocks = []
    for rec in recommendations:
        color = PRIORITY_COLORS[rec.priority]
        recommendation_blocks.append(
            '<div style="margin: 10px 0; padding: 10px; border: 1px solid #ddd;">'
            f'<h3 style="margin: 0; color: {color}">{rec.priority.value.upper()} Priority</h3>'
            f"<p>{escape(rec.message)}</p>"
            f'<p style="font-style: italic;">Suggested action: {escape(rec.suggestedAction)}</p>'
            "</div>"
        )

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        "<title>Your App Benchmark Report</title>\n"
        "</head>\n"
        '<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">\n'
        "<h1>Your App Benchmark Report</h1>\n"
        f"<p>Here are your benchmark results for {category} ({plan_type} plan) in {region}:</p>\n"
        '<div style="margin: 20px 0;">\n'
        "<h2>Metrics Comparison</h2>\n"
        + "\n".join(metric_blocks)
        + "\n</div>\n"
        '<div style="margin: 20px 0;">\n'
        "<h2>Recommendations</h2>\n"
        + "\n".join(recommendation_blocks)
        + "\n</div>\n"
        '<div style="margin-top: 30px; padding: 20px; background: #f3f4f6; text-align: center;">\n'
        "<p>Want to improve these metrics?</p>\n"
        f'<a href="{escape(cta_url, quote=True)}" style="display: inline-block; padding: 10px 20px; '
        'background: #4f46e5; color: white; text-decoration: none; border-radius: 5px;">'
        "Schedule Demo</a>\n"
        "</div>\n"
        "</body>\n"
        "</html>\n"
    )


def render_report_text(
    results: BenchmarkResults,
    recommendations: List[Recommendation],
    submission: UserSubmission,
) -> str:
    """Plain-text alternative for mail clients without HTML."""
    lines = [
        "Your App Benchmark Report",
        "",
        f"{submission.category} / {submission.region} / {submission.planType}",
        "",
        "Metrics Comparison",
    ]
    for metric in Metric:
        comparison = getattr(results, metric.value)
        lines.append(
            f"- {METRIC_LABELS[metric]}: "
            f"{format_metric_value(metric, comparison.userValue)} vs "
            f"{format_metric_value(metric, comparison.benchmarkValue)} "
            f"({format_difference(comparison.percentDifference)})"
        )
    lines.extend(["", "Recommendations"])
    for rec in recommendations:
        lines.append(f"- [{rec.priority.value.upper()}] {rec.message} -> {rec.suggestedAction}")
    return "\n".join(lines) + "\n"


def build_report_message(
    settings: Settings,
    recipient: str,
    evaluation: BenchmarkEvaluation,
    submission: UserSubmission,
) -> EmailMessage:
    """
    Assemble the multipart report email (plain text + HTML alternative).
    """
    message = EmailMessage()
    message["Subject"] = build_subject(submission)
    message["From"] = settings.smtp_from
    message["To"] = recipient
    message.set_content(
        render_report_text(evaluation.results, evaluation.recommendations, submission)
    )
    message.add_alternative(
        render_report_html(
            evaluation.results,
            evaluation.recommendations,
            submission,
            settings.report_cta_url,
        ),
        subtype="html",
    )
    return message


# =============================================================================
# Delivery
# =============================================================================

def send_benchmark_report(
    settings: Settings,
    recipient: str,
    evaluation: BenchmarkEvaluation,
    submission: UserSubmission,
) -> None:
    """
    Deliver the report over SMTP.

    Raises:
        DeliveryError: If SMTP is not configured or the server rejects the
            connection, the login or the message.
    """
    if not settings.email_configured:
        raise DeliveryError("SMTP is not configured", recipient=recipient)

    message = build_report_message(settings, recipient, evaluation, submission)

    try:
        with smtplib.SMTP(
            settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout
        ) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        raise DeliveryError(f"Failed to send benchmark report: {e}", recipient=recipient) from e

    logger.info(f"Benchmark email sent to: {recipient}")


def deliver_benchmark_report(
    settings: Settings,
    recipient: str,
    evaluation: BenchmarkEvaluation,
    submission: UserSubmission,
) -> bool:
    """
    Background-task entry point: send the report, log any failure.

    Returns:
        True if the report was sent, False otherwise. Never raises.
    """
    try:
        send_benchmark_report(settings, recipient, evaluation, submission)
        return True
    except DeliveryError as e:
        logger.error(f"Email send error for {e.recipient}: {e.message}")
        return False
    except Exception:
        logger.exception(f"Unexpected error while sending benchmark report to {recipient}")
        return False
