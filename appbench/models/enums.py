"""
Enumeration definitions for the App Benchmark service.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models.

The category, region and plan type values are the keys of the built-in
reference table. Submissions are not restricted to them; see
appbench.services.evaluator.validate_submission.
"""

from enum import Enum


class AppCategory(str, Enum):
    """
    App store categories covered by the built-in benchmark table.
    """
    EDUCATION = "Education"
    HEALTH_FITNESS = "Health & Fitness"
    LIFESTYLE = "Lifestyle"
    PHOTO_VIDEO = "Photo & Video"
    PRODUCTIVITY = "Productivity"
    UTILITIES = "Utilities"


class Region(str, Enum):
    """
    Pricing regions.
    """
    US = "US"
    EUROPE = "Europe"
    APAC = "APAC"
    LATAM = "LATAM"
    MEA = "MEA"


class PlanType(str, Enum):
    """
    Billing cadence of the subscription plan.

    Used as a lookup key for price and LTV benchmarks.
    """
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ANNUAL = "annual"


class Priority(str, Enum):
    """
    Recommendation priority.

    Report colours: high=#dc2626, medium=#d97706, low=#4f46e5.
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationCategory(str, Enum):
    """
    Area a recommendation addresses.

    - conversion: conversion rate well below benchmark
    - pricing: price well below benchmark, room for an increase
    - retention: LTV well below benchmark
    - refund: refund rate well above benchmark
    - platform: generic recommendation, always present
    """
    CONVERSION = "conversion"
    PRICING = "pricing"
    RETENTION = "retention"
    REFUND = "refund"
    PLATFORM = "platform"


class Metric(str, Enum):
    """
    Compared metrics, in report order.
    """
    PRICE = "price"
    CONVERSION_RATE = "conversionRate"
    LTV = "ltv"
    REFUND_RATE = "refundRate"
