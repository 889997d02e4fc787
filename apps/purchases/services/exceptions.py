"""
Domain-specific exceptions for purchases app.

The pricing engine reports problems as result values; the persistence
services below turn them into these exceptions, which views map to HTTP
responses.
"""


class PurchaseServiceError(Exception):
    """Base exception for all purchase service errors."""
    pass


class PurchaseNotFoundError(PurchaseServiceError):
    """Raised when a purchase does not exist."""
    pass


class PaymentNotFoundError(PurchaseServiceError):
    """Raised when a payment is not recorded on the purchase."""
    pass


class StoreNotFoundError(PurchaseServiceError):
    """Raised when the purchasing store does not exist."""
    pass


class InvalidPurchaseError(PurchaseServiceError):
    """Raised when a purchase request fails validation."""
    pass


class InvalidPaymentError(PurchaseServiceError):
    """Raised when a payment fails ledger validation."""
    pass
