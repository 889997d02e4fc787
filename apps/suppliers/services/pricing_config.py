"""
Pricing configuration accessors.

Reads the ``GOLD_PRICING`` settings dict and hands the pricing engine typed
values. Every engine function also accepts explicit overrides, so these
accessors are only the defaults.
"""

from decimal import Decimal

from django.conf import settings

from .tier_resolution import TierRule


BAND_NAMES = ('low', 'medium', 'high')


def _pricing():
    return getattr(settings, 'GOLD_PRICING', {})


def base_fee_per_gram() -> Decimal:
    """Currency charged per 21k-equivalent gram before discounts."""
    return Decimal(str(_pricing().get('BASE_FEE_PER_GRAM', '5')))


def payment_terms_days() -> int:
    return int(_pricing().get('DEFAULT_PAYMENT_TERMS_DAYS', 30))


def discount_thresholds() -> dict:
    """
    Named monthly-volume thresholds in grams.

    Returns:
        Dictionary with integer ``LOW``, ``MEDIUM`` and ``HIGH`` keys.
    """
    thresholds = _pricing().get('MONTHLY_DISCOUNT_THRESHOLDS', {})
    return {
        'LOW': int(thresholds.get('LOW', 0)),
        'MEDIUM': int(thresholds.get('MEDIUM', 750)),
        'HIGH': int(thresholds.get('HIGH', 1000)),
    }


def medium_threshold() -> int:
    return discount_thresholds()['MEDIUM']


def fee_schedule_karat() -> str:
    return str(_pricing().get('FEE_SCHEDULE_KARAT', '21'))


def monthly_discount_gate_enforced() -> bool:
    return bool(_pricing().get('ENFORCE_MONTHLY_DISCOUNT_GATE', False))


def default_band_rates(supplier_code: str) -> dict:
    """
    Seed low/medium/high percentages for a supplier code.

    Unknown codes get zero rates so a new supplier starts without discount.
    """
    rates = _pricing().get('DEFAULT_DISCOUNT_RATES', {}).get(supplier_code, {})
    return {band: Decimal(str(rates.get(band, 0))) for band in BAND_NAMES}


def default_band_schedule(karat_type: str = None) -> dict:
    """
    Build a resolver schedule from the configured three-band rates.

    Each configured supplier gets three protected tiers keyed on the
    LOW/MEDIUM/HIGH thresholds, filed under ``karat_type`` (the fee
    schedule karat by default).
    """
    karat_type = karat_type or fee_schedule_karat()
    thresholds = discount_thresholds()
    schedule = {}
    for code in _pricing().get('DEFAULT_DISCOUNT_RATES', {}):
        rates = default_band_rates(code)
        schedule[(code, karat_type)] = [
            TierRule(
                name=band,
                threshold=thresholds[band.upper()],
                discount_percentage=rates[band],
                is_protected=True,
            )
            for band in BAND_NAMES
        ]
    return schedule
