"""
Domain Exceptions — raised by services, mapped to HTTP responses in main.py.
"""


class PaydeskError(Exception):
    """Base class for service-level errors."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(PaydeskError):
    status_code = 404


class InvalidTransitionError(PaydeskError):
    """Payment is not in a state that allows the requested change."""

    status_code = 409


class DuplicateUTRError(PaydeskError):
    status_code = 409


class GatewayError(PaydeskError):
    """Payment gateway unreachable or rejected the request."""

    status_code = 502


class PayloadTooLargeError(PaydeskError):
    status_code = 413
