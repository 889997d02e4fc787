"""
Shared result types and numeric coercion for the pricing engine.

Engine functions report business-rule failures as values instead of
raising, so callers can surface them as confirmable messages.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a caller-facing validation."""

    valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> 'ValidationResult':
        return cls(valid=False, error=error)

    def __bool__(self):
        return self.valid


def to_decimal(value, default=None) -> Optional[Decimal]:
    """
    Coerce ``value`` to ``Decimal``.

    Floats go through ``str`` so ``0.1`` stays ``Decimal('0.1')``. Returns
    ``default`` for ``None``, empty strings and unparseable input.
    """
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default
