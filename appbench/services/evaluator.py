"""
Benchmark Evaluator Service

Compares a user's app metrics against the reference table and derives
recommendations. The evaluation is a pure function of the submission and the
table: no I/O, no shared mutable state, same input gives the same output.

Steps:
1. Look up the four benchmarks (price, conversion, LTV, refund rate).
2. Compute percentDifference = (user - benchmark) / benchmark * 100, rounded
   to one decimal; 0 when the benchmark is missing or zero.
3. Apply the threshold rules independently; every matching rule fires, and
   the generic platform recommendation is always appended last.

Validation happens before any computation. A rejected submission raises
ValidationError and nothing is computed.
"""

import logging
import math
from typing import Any, List, Mapping, Optional, Union

import pydantic

from appbench.core.exceptions import ComputationError, ValidationError
from appbench.models.enums import Metric, Priority, RecommendationCategory
from appbench.models.schemas import (
    BenchmarkEvaluation,
    BenchmarkResults,
    MetricComparison,
    Recommendation,
    UserSubmission,
)
from appbench.services.reference_data import ReferenceTable


logger = logging.getLogger(__name__)


# =============================================================================
# Recommendation thresholds (percent difference vs benchmark)
# =============================================================================

CONVERSION_GAP_THRESHOLD: float = -10.0
PRICE_GAP_THRESHOLD: float = -20.0
LTV_GAP_THRESHOLD: float = -15.0
REFUND_EXCESS_THRESHOLD: float = 15.0


# =============================================================================
# Validation
# =============================================================================


def _format_loc(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


def validate_submission(
    payload: Mapping[str, Any],
    reference_table: Optional[ReferenceTable] = None,
    strict_keys: bool = False,
) -> UserSubmission:
    """
    Build a UserSubmission from a JSON-shaped payload.

    Args:
        payload: Decoded request body.
        reference_table: Needed only when strict_keys is True.
        strict_keys: Reject category/region/planType values that are not keys
            of the reference table instead of resolving them to 0 benchmarks.

    Returns:
        The validated submission.

    Raises:
        ValidationError: With one detail entry per offending field.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(
            "Request body must be a JSON object",
            details=[{"field": "body", "message": "expected an object"}],
        )

    try:
        submission = UserSubmission.model_validate(dict(payload))
    except pydantic.ValidationError as e:
        errors = e.errors()
        details = [
            {"field": _format_loc(err["loc"]), "message": err["msg"]}
            for err in errors
        ]
        missing = [d["field"] for d, err in zip(details, errors) if err["type"] == "missing"]
        message = (
            f"Missing required fields: {', '.join(missing)}"
            if missing and len(missing) == len(details)
            else "Invalid submission"
        )
        raise ValidationError(message, details=details) from e

    if strict_keys and reference_table is not None:
        unknown = reference_table.unknown_keys(
            submission.category, submission.region, submission.planType
        )
        if unknown:
            values = {
                "category": submission.category,
                "region": submission.region,
                "planType": submission.planType,
            }
            raise ValidationError(
                "Unknown benchmark keys",
                details=[
                    {"field": name, "message": f"unknown value '{values[name]}'"}
                    for name in unknown
                ],
            )

    return submission


# =============================================================================
# Comparison
# =============================================================================


def percent_difference(user_value: float, benchmark_value: Optional[float]) -> float:
    """
    Relative deviation of user_value from benchmark_value, in percent.

    Returns 0.0 when the benchmark is missing or zero.

    Raises:
        ComputationError: If the result is not finite.
    """
    if not benchmark_value:
        return 0.0

    diff = round((user_value - benchmark_value) / benchmark_value * 100, 1)
    if not math.isfinite(diff):
        raise ComputationError(
            f"Non-finite difference for user={user_value!r} benchmark={benchmark_value!r}"
        )
    # Normalise -0.0
    return diff + 0.0


def _compare(metric: Metric, user_value: float, benchmark_value: Optional[float]) -> MetricComparison:
    if benchmark_value is None:
        logger.warning(f"No benchmark available for {metric.value}; difference reported as 0")
    return MetricComparison(
        userValue=user_value,
        benchmarkValue=benchmark_value or 0.0,
        percentDifference=percent_difference(user_value, benchmark_value),
    )


def compare_metrics(submission: UserSubmission, reference_table: ReferenceTable) -> BenchmarkResults:
    """
    Compare the four submitted metrics with their benchmarks.
    """
    return BenchmarkResults(
        price=_compare(
            Metric.PRICE,
            submission.price,
            reference_table.price_benchmark(submission.planType, submission.region),
        ),
        conversionRate=_compare(
            Metric.CONVERSION_RATE,
            submission.conversionRate,
            reference_table.conversion_benchmark(submission.category, submission.hasTrial),
        ),
        ltv=_compare(
            Metric.LTV,
            submission.ltv,
            reference_table.ltv_benchmark(submission.category, submission.planType),
        ),
        refundRate=_compare(
            Metric.REFUND_RATE,
            submission.refundRate,
            reference_table.refund_benchmark(submission.category),
        ),
    )


# =============================================================================
# Recommendations
# =============================================================================


def generate_recommendations(
    results: BenchmarkResults,
    submission: Optional[UserSubmission] = None,
) -> List[Recommendation]:
    """
    Apply the threshold rules to a set of comparisons.

    Rules are independent; the output keeps rule order and always ends with
    the low-priority platform recommendation.
    """
    recommendations: List[Recommendation] = []

    conversion_diff = results.conversionRate.percentDifference
    if conversion_diff < CONVERSION_GAP_THRESHOLD:
        funnel = "trial-to-paid" if submission is not None and submission.hasTrial else "install-to-paid"
        recommendations.append(Recommendation(
            category=RecommendationCategory.CONVERSION,
            priority=Priority.HIGH,
            message=(
                f"Your {funnel} conversion rate is {abs(conversion_diff)}% below the "
                f"industry benchmark. Closing this gap would generate additional monthly revenue"
            ),
            suggestedAction="A/B test different trial lengths and paywall designs",
        ))

    if results.price.percentDifference < PRICE_GAP_THRESHOLD:
        recommendations.append(Recommendation(
            category=RecommendationCategory.PRICING,
            priority=Priority.MEDIUM,
            message="Consider testing a price increase - market shows tolerance",
            suggestedAction="Test 10-15% price increase with A/B testing",
        ))

    if results.ltv.percentDifference < LTV_GAP_THRESHOLD:
        recommendations.append(Recommendation(
            category=RecommendationCategory.RETENTION,
            priority=Priority.HIGH,
            message="Review your retention strategies to optimize LTV",
            suggestedAction="Focus on onboarding and feature adoption",
        ))

    if results.refundRate.percentDifference > REFUND_EXCESS_THRESHOLD:
        recommendations.append(Recommendation(
            category=RecommendationCategory.REFUND,
            priority=Priority.MEDIUM,
            message="Your refund rate is above industry average",
            suggestedAction="Review onboarding flow and set proper expectations",
        ))

    recommendations.append(Recommendation(
        category=RecommendationCategory.PLATFORM,
        priority=Priority.LOW,
        message="Track these metrics continuously to catch changes early",
        suggestedAction="Re-run this benchmark after each pricing or paywall experiment",
    ))

    return recommendations


# =============================================================================
# Entry point
# =============================================================================


def evaluate_submission(
    submission: Union[UserSubmission, Mapping[str, Any]],
    reference_table: ReferenceTable,
) -> BenchmarkEvaluation:
    """
    Evaluate one submission against the reference table.

    Args:
        submission: A UserSubmission, or a raw payload that is validated first.
        reference_table: The read-only benchmark table.

    Returns:
        BenchmarkEvaluation with four comparisons and at least one recommendation.

    Raises:
        ValidationError: If a raw payload fails validation.
        ComputationError: If a comparison is not finite.
    """
    if not isinstance(submission, UserSubmission):
        submission = validate_submission(submission)

    results = compare_metrics(submission, reference_table)
    recommendations = generate_recommendations(results, submission)

    logger.debug(
        f"Evaluated {submission.category}/{submission.region}/{submission.planType}: "
        f"{len(recommendations)} recommendations"
    )
    return BenchmarkEvaluation(results=results, recommendations=recommendations)

