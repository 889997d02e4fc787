"""
Domain-specific exceptions for suppliers app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class SupplierServiceError(Exception):
    """Base exception for all supplier service errors."""
    pass


class SupplierNotFoundError(SupplierServiceError):
    """Raised when a supplier does not exist."""
    pass


class DuplicateSupplierCodeError(SupplierServiceError):
    """Raised when a supplier code is already taken."""
    pass


class TierNotFoundError(SupplierServiceError):
    """Raised when a discount tier does not exist."""
    pass


class InvalidTierError(SupplierServiceError):
    """Raised when a tier or tier set breaks the schedule rules."""
    pass


class ProtectedTierError(SupplierServiceError):
    """Raised when deleting a protected tier."""
    pass
