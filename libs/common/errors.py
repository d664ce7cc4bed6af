"""Error taxonomy shared by the storefront routers and services.

Each error carries the HTTP status it maps to; handlers in
``libs.common.error_handler`` turn them into ``{"error": message}``.
"""

from fastapi import status


class StoreError(Exception):
    """Base class for user-visible store errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(StoreError):
    """User-correctable request problem (empty cart, mixed cart, missing field)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StoreError):
    """Unknown product slug, customer, or checkout session."""

    status_code = status.HTTP_404_NOT_FOUND


class ProviderError(StoreError):
    """The payment provider rejected or failed a request."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: str = None, status_code: int = None):
        self.code = code
        super().__init__(message, status_code)


class SignatureError(StoreError):
    """Webhook signature missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(StoreError):
    """Required provider credentials are not configured."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
