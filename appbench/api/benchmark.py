"""
FastAPI router module for benchmark evaluation.

Key Endpoints:
- POST /api/benchmark - Compare submitted metrics with industry benchmarks
- GET /api/benchmarks/{category}/{region}/{plan_type} - Raw benchmark values for one key

API Contract:
- POST /api/benchmark success: { success: true, results: {...}, recommendations: [...] }
- POST /api/benchmark failure: { success: false, error, message, details: [...] } (HTTP 400)

Email Reports:
- Scheduled with BackgroundTasks once the response payload is built
- Only when SMTP is configured; delivery failures are logged and never
  reach the caller

Dependencies:
- appbench/core/dependencies.py: SettingsDep, ReferenceTableDep
- appbench/services/evaluator.py: validate_submission, evaluate_submission
- appbench/jobs/email_report.py: deliver_benchmark_report
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body

from appbench.core.dependencies import ReferenceTableDep, SettingsDep
from appbench.core.exceptions import ComputationError, ValidationError
from appbench.jobs.email_report import deliver_benchmark_report
from appbench.models.schemas import BenchmarkResponse, BenchmarkSnapshot, ErrorResponse
from appbench.services.evaluator import evaluate_submission, validate_submission


# Logger for this module
logger = logging.getLogger(__name__)


router = APIRouter()


# =============================================================================
# POST /benchmark - Evaluate Submission
# =============================================================================


@router.post(
    "/benchmark",
    response_model=BenchmarkResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_benchmark(
    payload: Annotated[Any, Body()],
    background_tasks: BackgroundTasks,
    settings: SettingsDep,
    reference_table: ReferenceTableDep,
) -> BenchmarkResponse:
    """
    Compare the submitted app metrics with the industry benchmarks.

    The body is validated here rather than by FastAPI so that failures use the
    service's 4-field error shape with HTTP 400.

    Args:
        payload: JSON object with category, region, planType, price,
            conversionRate, ltv, refundRate, hasTrial and email.
        background_tasks: Used to schedule the email report.
        settings: Application settings.
        reference_table: Benchmark table loaded at startup.

    Returns:
        { success: true, results: {...}, recommendations: [...] }

    Raises:
        ValidationError: Missing or malformed fields (rendered as HTTP 400).
        ComputationError: Defect in the comparison (rendered as HTTP 500).

    Example Request:
        POST /api/benchmark
        {
            "category": "Education",
            "region": "US",
            "planType": "monthly",
            "price": 12.99,
            "conversionRate": 29.31,
            "ltv": 30.0,
            "refundRate": 10,
            "hasTrial": true,
            "email": "founder@example.com"
        }
    """
    try:
        submission = validate_submission(
            payload,
            reference_table=reference_table,
            strict_keys=settings.strict_reference_keys,
        )
    except ValidationError as e:
        logger.warning(f"POST /api/benchmark rejected: {e.message} (fields: {', '.join(e.fields)})")
        raise

    try:
        evaluation = evaluate_submission(submission, reference_table)
    except ComputationError:
        logger.error(
            f"Benchmark calculation error for {submission.category}/{submission.region}/{submission.planType}",
            exc_info=True,
        )
        raise

    response = BenchmarkResponse(
        results=evaluation.results,
        recommendations=evaluation.recommendations,
    )

    if settings.email_configured:
        background_tasks.add_task(
            deliver_benchmark_report, settings, submission.email, evaluation, submission
        )
    else:
        logger.debug("SMTP not configured; skipping benchmark email")

    logger.info(
        f"Benchmark evaluated: category={submission.category}, region={submission.region}, "
        f"planType={submission.planType}, recommendations={len(evaluation.recommendations)}"
    )
    return response


# =============================================================================
# GET /benchmarks/{category}/{region}/{plan_type} - Reference Snapshot
# =============================================================================


@router.get("/benchmarks/{category}/{region}/{plan_type}", response_model=BenchmarkSnapshot)
async def get_benchmarks(
    category: str,
    region: str,
    plan_type: str,
    reference_table: ReferenceTableDep,
) -> BenchmarkSnapshot:
    """
    Return the raw benchmark values for one category/region/plan type.

    Unknown keys yield null values rather than an error.
    """
    return reference_table.snapshot(category, region, plan_type)
