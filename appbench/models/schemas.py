"""
Pydantic request/response models for the App Benchmark API.

Field names are camelCase to match the JSON contract used by the benchmark
form (`planType`, `conversionRate`, `hasTrial`, ...).

All models use Pydantic v2 syntax with field validation and examples.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from appbench.models.enums import Priority, RecommendationCategory


# Pragmatic syntactic check: local@domain.tld, no whitespace
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Upper bound for price and ltv, USD
MAX_AMOUNT = 1e9


# =============================================================================
# Input Models
# =============================================================================


class UserSubmission(BaseModel):
    """
    Metrics entered by the user for one app.

    Rates are percentages in [0, 100]; price and ltv are capped at MAX_AMOUNT.
    conversionRate, ltv and refundRate default to 0 when omitted.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        allow_inf_nan=False,
        frozen=True,
        extra='ignore',
        json_schema_extra={
            "example": {
                "category": "Productivity",
                "region": "US",
                "planType": "monthly",
                "price": 9.99,
                "conversionRate": 18.5,
                "ltv": 41.0,
                "refundRate": 3.4,
                "hasTrial": True,
                "email": "founder@example.com"
            }
        }
    )

    category: str = Field(
        ...,
        min_length=1,
        description="App category (Education, Health & Fitness, Lifestyle, ...)"
    )
    region: str = Field(
        ...,
        min_length=1,
        description="Pricing region (US, Europe, APAC, LATAM, MEA)"
    )
    planType: str = Field(
        ...,
        min_length=1,
        description="Billing cadence (weekly, monthly, annual)"
    )
    price: float = Field(
        ...,
        gt=0.0,
        le=MAX_AMOUNT,
        description="Subscription price in USD"
    )
    conversionRate: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Conversion rate in percent (trial->paid when hasTrial, else install->paid)"
    )
    ltv: float = Field(
        default=0.0,
        ge=0.0,
        le=MAX_AMOUNT,
        description="Lifetime value per paying user in USD"
    )
    refundRate: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Refund rate in percent"
    )
    hasTrial: bool = Field(
        default=False,
        description="Whether the plan starts with a free trial"
    )
    email: str = Field(
        ...,
        min_length=3,
        max_length=254,
        description="Recipient address for the email report"
    )

    @field_validator('price', 'conversionRate', 'ltv', 'refundRate', mode='before')
    @classmethod
    def metrics_must_not_be_booleans(cls, value):
        # true/false would otherwise coerce to 1.0/0.0
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        return value

    @field_validator('email')
    @classmethod
    def email_must_be_well_formed(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("must be a valid email address")
        return value


# =============================================================================
# Result Models
# =============================================================================


class MetricComparison(BaseModel):
    """
    User value vs benchmark for one metric.

    percentDifference is rounded to one decimal and is 0 when no benchmark
    is available.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "userValue": 10.0,
                "benchmarkValue": 2.8,
                "percentDifference": 257.1
            }
        }
    )

    userValue: float = Field(..., description="Value entered by the user")
    benchmarkValue: float = Field(
        ...,
        description="Industry benchmark, 0 when no benchmark is available"
    )
    percentDifference: float = Field(
        ...,
        description="(user - benchmark) / benchmark * 100, one decimal"
    )


class BenchmarkResults(BaseModel):
    """One comparison per metric."""
    model_config = ConfigDict(frozen=True)

    price: MetricComparison
    conversionRate: MetricComparison
    ltv: MetricComparison
    refundRate: MetricComparison


class Recommendation(BaseModel):
    """A canned recommendation triggered by a threshold rule."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "category": "refund",
                "priority": "medium",
                "message": "Your refund rate is above industry average",
                "suggestedAction": "Review onboarding flow and set proper expectations"
            }
        }
    )

    category: RecommendationCategory
    priority: Priority
    message: str
    suggestedAction: str


class BenchmarkEvaluation(BaseModel):
    """Output of the evaluator: comparisons plus ordered recommendations."""
    model_config = ConfigDict(frozen=True)

    results: BenchmarkResults
    recommendations: List[Recommendation] = Field(..., min_length=1)


# =============================================================================
# API Response Models
# =============================================================================


class BenchmarkResponse(BaseModel):
    """
    Response for POST /api/benchmark.

    { success: true, results: {...}, recommendations: [...] }
    """
    success: bool = True
    results: BenchmarkResults
    recommendations: List[Recommendation]


class BenchmarkSnapshot(BaseModel):
    """
    Raw benchmark values for one category/region/planType key.

    Values are null when the key is not in the reference table.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "price": 15.2,
                "conversionRate": 23.32,
                "installToPaidRate": 0.66,
                "ltv": 48.8,
                "refundRate": 2.7
            }
        }
    )

    price: Optional[float] = Field(default=None, description="Price benchmark for planType/region")
    conversionRate: Optional[float] = Field(default=None, description="Trial->paid conversion benchmark")
    installToPaidRate: Optional[float] = Field(default=None, description="Install->paid conversion benchmark")
    ltv: Optional[float] = Field(default=None, description="LTV benchmark for category/planType")
    refundRate: Optional[float] = Field(default=None, description="Refund rate benchmark for category")


class FieldError(BaseModel):
    """Validation problem on a single input field."""
    field: str = Field(..., description="Field with validation error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """
    Error body returned for rejected requests.

    { success: false, error: "ValidationError", message: "...", details: [...] }
    """
    success: bool = False
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human readable summary")
    details: List[FieldError] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
