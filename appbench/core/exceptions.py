"""
Error taxonomy for the App Benchmark service.

- ValidationError: missing or malformed submission input (HTTP 400)
- ComputationError: a defect in the evaluator; never expected on validated input (HTTP 500)
- DeliveryError: email report could not be sent; logged only, never surfaced

All errors are local to a single request. There are no retries and no
partial results.
"""

from typing import Dict, List, Optional


class BenchmarkError(Exception):
    """Base class for all service errors."""

    error_code: str = "BenchmarkError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BenchmarkError):
    """
    Raised when a submission is missing required fields or fails range checks.

    Attributes:
        details: Field-level problems as ``{"field": ..., "message": ...}`` dicts.
    """

    error_code = "ValidationError"

    def __init__(self, message: str, details: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.details = details or []

    @property
    def fields(self) -> List[str]:
        return [d["field"] for d in self.details]


class ComputationError(BenchmarkError):
    """Raised when a comparison produces a non-finite value."""

    error_code = "ComputationError"


class DeliveryError(BenchmarkError):
    """Raised when an email report cannot be delivered."""

    error_code = "DeliveryError"

    def __init__(self, message: str, recipient: Optional[str] = None):
        super().__init__(message)
        self.recipient = recipient
