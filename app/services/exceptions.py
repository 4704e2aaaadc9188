"""
Service Exceptions

Errors raised by the payment services. Each carries the HTTP status the routers
respond with; the message is safe to show to customers.
"""

from typing import Optional


class AkaLawError(Exception):
    """Base class for errors raised by the payment services."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AkaLawError):
    """Missing or malformed input."""

    status_code = 400


class NotFoundError(AkaLawError):
    """Unknown payment reference or document."""

    status_code = 404


class DocumentNotReadyError(NotFoundError):
    """The payment is valid but the document archive is not on disk yet."""

    def __init__(self, message: str, reference: str, document_title: str):
        super().__init__(message)
        self.reference = reference
        self.document_title = document_title


class ForbiddenError(AkaLawError):
    """The payment is not in a state that allows the requested action."""

    status_code = 403


class GatewayError(AkaLawError):
    """Paystack returned a non-2xx response or could not be reached."""

    status_code = 500

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        upstream_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body


class StoreError(AkaLawError):
    """Firestore read or write failure."""

    status_code = 500


class NotificationError(AkaLawError):
    """Email provider failure. Never surfaced to HTTP clients."""

    status_code = 500
