"""
Package initialization file for appbench models.

Re-exports the Pydantic schemas and enumerations so other modules can import
them from appbench.models directly.

Usage:
    from appbench.models import UserSubmission, MetricComparison, Priority
"""

from appbench.models.enums import (
    AppCategory,
    Region,
    PlanType,
    Priority,
    RecommendationCategory,
    Metric,
)

from appbench.models.schemas import (
    UserSubmission,
    MetricComparison,
    BenchmarkResults,
    Recommendation,
    BenchmarkEvaluation,
    BenchmarkResponse,
    BenchmarkSnapshot,
    FieldError,
    ErrorResponse,
    HealthResponse,
)


__all__ = [
    # Enums
    'AppCategory',
    'Region',
    'PlanType',
    'Priority',
    'RecommendationCategory',
    'Metric',
    # Schemas
    'UserSubmission',
    'MetricComparison',
    'BenchmarkResults',
    'Recommendation',
    'BenchmarkEvaluation',
    'BenchmarkResponse',
    'BenchmarkSnapshot',
    'FieldError',
    'ErrorResponse',
    'HealthResponse',
]
