"""
Background Jobs for the App Benchmark service.

- Email report delivery (email_report.py): renders the benchmark report and
  sends it over SMTP as a best-effort task scheduled after the HTTP response.

Delivery Guarantees:
--------------------
- One attempt per request; failures are logged and never retried.
- The HTTP response never depends on delivery success.

Usage Examples:
---------------
    from appbench.jobs import deliver_benchmark_report

    background_tasks.add_task(
        deliver_benchmark_report, settings, submission.email, evaluation, submission
    )
"""

from appbench.jobs.email_report import (
    # Background task entry point
    deliver_benchmark_report,
    # Raising delivery
    send_benchmark_report,
    # Rendering
    build_report_message,
    render_report_html,
    render_report_text,
)


__all__ = [
    'deliver_benchmark_report',  # Best-effort send, never raises
    'send_benchmark_report',     # Send, raises DeliveryError
    'build_report_message',      # EmailMessage with text + HTML parts
    'render_report_html',        # HTML body
    'render_report_text',        # Plain-text body
]
