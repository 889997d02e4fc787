"""
Suppliers services - Business logic layer.

This package contains the supplier operations:
- Discount schedule resolution (pure)
- Supplier and tier management
- Pricing configuration accessors
"""

from .tier_resolution import (
    TierRule,
    NO_DISCOUNT_TIER,
    resolve_tier,
    discount_rate,
)

from .supplier_management import (
    validate_tier_set,
    default_tier_data,
    create_supplier,
    update_supplier,
    delete_supplier,
    create_tier,
    update_tier,
    delete_tier,
    get_supplier_tiers,
    load_discount_schedule,
)

from .exceptions import (
    SupplierServiceError,
    SupplierNotFoundError,
    DuplicateSupplierCodeError,
    TierNotFoundError,
    InvalidTierError,
    ProtectedTierError,
)

__all__ = [
    # Resolution
    'TierRule',
    'NO_DISCOUNT_TIER',
    'resolve_tier',
    'discount_rate',
    # Management
    'validate_tier_set',
    'default_tier_data',
    'create_supplier',
    'update_supplier',
    'delete_supplier',
    'create_tier',
    'update_tier',
    'delete_tier',
    'get_supplier_tiers',
    'load_discount_schedule',
    # Exceptions
    'SupplierServiceError',
    'SupplierNotFoundError',
    'DuplicateSupplierCodeError',
    'TierNotFoundError',
    'InvalidTierError',
    'ProtectedTierError',
]
