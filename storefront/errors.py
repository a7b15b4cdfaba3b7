"""Error taxonomy for storefront operations.

Every public operation catches at its own boundary, posts a notice and
re-raises one of these, so callers always see a terminal outcome.
"""
from typing import Dict, Optional


class StorefrontError(Exception):
    message = "An error occurred. Please try again."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.message
        self.status_code = status_code
        super().__init__(self.message)


class NotAuthenticatedError(StorefrontError):
    message = "Please login to continue"


class SessionExpiredError(StorefrontError):
    message = "Session expired. Please login again."


class NotFoundError(StorefrontError):
    message = "Not found. Please refresh and try again."


class RequestError(StorefrontError):
    """The API understood the request and refused it (400/422)."""
    message = "Invalid request. Please check the details."


class TransientError(StorefrontError):
    """Network failures, 5xx answers and success: false bodies. Safe to retry."""
    message = "Something went wrong. Please try again."


class EmptyCartError(StorefrontError):
    message = "Your cart is empty"


class FormValidationError(StorefrontError):
    message = "Please fill all required fields correctly"

    def __init__(self, errors: Dict[str, str]):
        super().__init__()
        self.errors = dict(errors)
