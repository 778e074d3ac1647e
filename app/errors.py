"""
Error taxonomy for the analyze endpoint.

Each exception knows the HTTP status and the envelope ``error`` text it maps
to. Anything that is not an ``AnalysisError`` is reported as a generic 500.
"""

from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for failures with a dedicated status code."""

    status_code = 500
    error = "Failed to analyze receipt"

    def __init__(self, details: Optional[str] = None):
        super().__init__(details or self.error)
        self.details = details


class MissingImageError(AnalysisError):
    status_code = 400
    error = "Image is required"


class MissingCredentialError(AnalysisError):
    status_code = 401
    error = "API Key is missing"


class ImageTooLargeError(AnalysisError):
    status_code = 413
    error = "Image is too large"


class ReceiptValidationError(AnalysisError):
    """The model answered with JSON that is not a valid receipt record."""

    status_code = 422
    error = "Receipt validation failed"
