"""
Backend Services Module

Business logic for the App Benchmark service. Each service is stateless and
testable without the HTTP layer.

Services:
- reference_data: Immutable benchmark table, built-in data and JSON loader
- evaluator: Submission validation, metric comparison and recommendations
"""

from appbench.services.reference_data import (
    DEFAULT_BENCHMARK_DATA,
    ReferenceData,
    ReferenceTable,
    build_reference_table,
    load_reference_table,
)

from appbench.services.evaluator import (
    CONVERSION_GAP_THRESHOLD,
    PRICE_GAP_THRESHOLD,
    LTV_GAP_THRESHOLD,
    REFUND_EXCESS_THRESHOLD,
    validate_submission,
    percent_difference,
    compare_metrics,
    generate_recommendations,
    evaluate_submission,
)


__all__ = [
    # Reference data
    'DEFAULT_BENCHMARK_DATA',
    'ReferenceData',
    'ReferenceTable',
    'build_reference_table',
    'load_reference_table',
    # Evaluator
    'CONVERSION_GAP_THRESHOLD',
    'PRICE_GAP_THRESHOLD',
    'LTV_GAP_THRESHOLD',
    'REFUND_EXCESS_THRESHOLD',
    'validate_submission',
    'percent_difference',
    'compare_metrics',
    'generate_recommendations',
    'evaluate_submission',
]
