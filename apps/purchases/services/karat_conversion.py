"""
Karat normalization.

Every gram quantity is compared and summed in 21k-equivalent grams.
18k gold is worth 18/21 of its weight in 21k.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from apps.common.results import to_decimal

logger = logging.getLogger(__name__)


KARAT_18 = '18'
KARAT_21 = '21'
SUPPORTED_KARATS = (KARAT_18, KARAT_21)

# Stored 21k-equivalent grams (receipt lines, converted payments)
GRAM_PRECISION = Decimal('0.0001')
# Summed and compared gram totals
GRAM_DISPLAY_PRECISION = Decimal('0.1')

_PURITY_RATIO = {
    KARAT_18: Decimal(18) / Decimal(21),
}


def normalize_karat(karat_type) -> str:
    """Return ``'18'``/``'21'`` for a karat given as str, int or choice."""
    if karat_type is None:
        return ''
    return str(getattr(karat_type, 'value', karat_type)).strip().lower().rstrip('k')


def is_supported_karat(karat_type) -> bool:
    return normalize_karat(karat_type) in SUPPORTED_KARATS


def convert_to_21k(grams, karat_type) -> Decimal:
    """
    Convert a karat-tagged gram quantity to 21k-equivalent grams.

    Negative, NaN, infinite or unparseable quantities become ``0`` with a
    warning. An unknown karat type is treated as 21k, also with a warning.

    Example:
        >>> convert_to_21k(21, '18')
        Decimal('18')
    """
    value = to_decimal(grams)
    if value is None or not value.is_finite() or value < 0:
        logger.warning("Invalid gram quantity %r for %sk conversion; using 0", grams, karat_type)
        return Decimal('0')

    karat = normalize_karat(karat_type)
    if karat == KARAT_21:
        return value
    if karat == KARAT_18:
        # Multiply first so whole multiples of 21 stay exact
        return value * 18 / 21

    logger.warning("Unknown karat type %r; treating %s g as 21k", karat_type, value)
    return value


def quantize_grams(grams) -> Decimal:
    """Round to the stored gram precision (4 dp)."""
    return Decimal(grams).quantize(GRAM_PRECISION, rounding=ROUND_HALF_UP)


def round_grams(grams) -> Decimal:
    """Round a gram total to one decimal place, half up."""
    return Decimal(grams).quantize(GRAM_DISPLAY_PRECISION, rounding=ROUND_HALF_UP)
