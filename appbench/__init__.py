"""
App Benchmark Service Package.

FastAPI service that compares subscription-app metrics (price, conversion rate,
lifetime value, refund rate) against industry-average benchmarks and returns
percentage differences plus rule-based recommendations.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, dependencies, errors and rate limiting
    - models: Pydantic schemas and enums
    - services: Reference data and the benchmark evaluator
    - jobs: Background email report delivery
"""

__version__ = "1.0.0"
