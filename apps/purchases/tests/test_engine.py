"""
Tests for the pure pricing engine.

No database access: everything here runs on snapshots and explicit
discount schedules.
"""

import logging
import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal

from apps.purchases.models import PurchaseStatus
from apps.purchases.services import (
    PaymentEntry,
    PaymentTotals,
    PurchaseSnapshot,
    apply_payment,
    build_receipt_line,
    calculate_due_date,
    calculate_purchase_fees,
    convert_to_21k,
    days_left,
    derive_status,
    month_aggregate,
    recalculate_after_payment_change,
    recalculate_after_purchase_change,
    recalculate_month,
    recalculate_purchase,
    remaining_amounts,
    reverse_payment,
    round_grams,
    should_apply_discount,
    total_grams_for,
    totals_from_history,
    validate_payment,
    validate_purchase_request,
    validate_receipt_line,
)


CENT = Decimal('0.01')
TODAY = date(2025, 5, 20)


def cents(value):
    return value.quantize(CENT)


# =============================================================================
# Karat conversion
# =============================================================================

class TestConvertTo21k:

    def test_21k_is_unchanged(self):
        assert convert_to_21k(100, '21') == Decimal('100')

    def test_18k_scales_by_purity(self):
        assert convert_to_21k(21, '18') == Decimal('18')

    def test_accepts_int_and_suffixed_karat(self):
        assert convert_to_21k(Decimal('42'), 18) == Decimal('36')
        assert convert_to_21k(Decimal('42'), '18k') == Decimal('36')

    @pytest.mark.parametrize('grams', [0, 1, Decimal('7.3'), 200, Decimal('1234.5678')])
    def test_converting_again_as_21k_is_idempotent(self, grams):
        once = convert_to_21k(grams, '18')

        assert convert_to_21k(once, '21') == once

    @pytest.mark.parametrize('grams', [-1, 'NaN', 'Infinity', 'abc', None])
    def test_invalid_grams_become_zero_with_warning(self, grams, caplog):
        with caplog.at_level(logging.WARNING, logger='apps.purchases'):
            assert convert_to_21k(grams, '18') == Decimal('0')

        assert 'Invalid gram quantity' in caplog.text

    def test_unknown_karat_is_treated_as_21k(self, caplog):
        with caplog.at_level(logging.WARNING, logger='apps.purchases'):
            assert convert_to_21k(50, '24') == Decimal('50')

        assert 'Unknown karat type' in caplog.text


# =============================================================================
# Receipt lines
# =============================================================================

class TestReceiptLines:

    def test_line_total_combines_both_karats(self):
        line = build_receipt_line('EG18', grams_18k=200, grams_21k=10)

        assert line.total_grams_21k == Decimal('181.4286')

    def test_purchase_total_rounds_to_one_decimal(self):
        lines = {'EG18': build_receipt_line('EG18', grams_18k=200)}

        assert total_grams_for(lines) == Decimal('171.4')

    def test_matching_submitted_total_is_valid(self):
        assert validate_receipt_line('EG18', 200, 0, '171.43').valid

    def test_mismatched_submitted_total_is_rejected(self):
        result = validate_receipt_line('EG18', 200, 0, '200')

        assert not result.valid
        assert 'does not match' in result.error

    def test_negative_grams_are_rejected(self):
        result = validate_receipt_line('EG21', 0, -5)

        assert not result.valid
        assert '21k grams' in result.error

    def test_request_needs_store(self):
        result = validate_purchase_request(date(2025, 5, 1), None, {'EG21': {'grams_21k': 10}})

        assert result.error == 'Please select a store.'

    def test_request_needs_some_grams(self):
        result = validate_purchase_request(date(2025, 5, 1), 'store-1', {'EG21': {'grams_21k': 0}})

        assert not result.valid

    def test_due_date_adds_payment_terms(self):
        assert calculate_due_date(date(2025, 5, 10)) == date(2025, 6, 9)
        assert calculate_due_date(date(2025, 5, 10), 7) == date(2025, 5, 17)


# =============================================================================
# Fee calculation
# =============================================================================

class TestFeeCalculation:

    def test_eg18_receipt_at_600_grams_scenario(self, eg_schedule):
        lines = {'EG18': build_receipt_line('EG18', grams_18k=200)}

        fees = calculate_purchase_fees(
            lines, date(2025, 5, 10), Decimal('600'),
            schedule=eg_schedule, base_fee_per_gram=Decimal('5'),
        )

        assert lines['EG18'].total_grams_21k == Decimal('171.4286')
        assert cents(fees.base_fees) == Decimal('857.14')
        assert cents(fees.total_discount) == Decimal('44.57')
        assert cents(fees.total_fees) == Decimal('812.57')

    @pytest.mark.parametrize('monthly_total', [0, 499, 500, 999, 1000, 5000])
    def test_net_fees_equal_base_minus_discount(self, eg_schedule, monthly_total):
        lines = {
            'EG18': build_receipt_line('EG18', grams_18k=Decimal('123.45')),
            'EG21': build_receipt_line('EG21', grams_21k=Decimal('67.8')),
        }

        fees = calculate_purchase_fees(lines, date(2025, 5, 10), monthly_total, schedule=eg_schedule)

        assert fees.total_fees == fees.base_fees - fees.total_discount

    def test_net_fees_may_be_negative(self, eg_schedule):
        lines = {'EG18': build_receipt_line('EG18', grams_21k=100)}

        fees = calculate_purchase_fees(
            lines, date(2025, 5, 10), 1000,
            schedule=eg_schedule, base_fee_per_gram=Decimal('0.1'),
        )

        assert fees.base_fees == Decimal('10.0')
        assert fees.total_discount == Decimal('34')
        assert fees.total_fees == Decimal('-24.0')

    def test_discount_uses_21k_schedule_for_18k_receipts(self):
        schedule = {
            ('EG18', '18'): [TierRuleStub('only-18k', 0, Decimal('50'))],
            ('EG18', '21'): [TierRuleStub('only-21k', 0, Decimal('10'))],
        }
        lines = {'EG18': build_receipt_line('EG18', grams_18k=210)}

        fees = calculate_purchase_fees(lines, date(2025, 5, 10), 0, schedule=schedule)

        assert fees.total_discount == Decimal('18')

    def test_missing_schedule_gives_no_discount(self, caplog):
        lines = {'XX99': build_receipt_line('XX99', grams_21k=100)}

        with caplog.at_level(logging.WARNING, logger='apps.suppliers'):
            fees = calculate_purchase_fees(
                lines, date(2025, 5, 10), 800,
                schedule={}, base_fee_per_gram=Decimal('5'),
            )

        assert fees.total_discount == Decimal('0')
        assert fees.total_fees == Decimal('500')
        assert 'No discount tiers' in caplog.text

    def test_default_schedule_comes_from_settings(self):
        lines = {'EG21': build_receipt_line('EG21', grams_21k=100)}

        fees = calculate_purchase_fees(lines, date(2025, 5, 10), 800)

        # Configured EG21 medium band: 20%
        assert fees.total_discount == Decimal('20')

    def test_discount_applies_on_every_date_by_default(self):
        assert should_apply_discount(date(2025, 5, 10), 0)

    def test_enforced_gate_requires_medium_volume(self):
        assert not should_apply_discount(date(2025, 5, 10), 600, enforce_gate=True)
        assert should_apply_discount(date(2025, 5, 10), 750, enforce_gate=True)

    def test_enforced_gate_from_settings_skips_discount(self, settings, eg_schedule):
        settings.GOLD_PRICING = {**settings.GOLD_PRICING, 'ENFORCE_MONTHLY_DISCOUNT_GATE': True}
        lines = {'EG21': build_receipt_line('EG21', grams_21k=100)}

        fees = calculate_purchase_fees(lines, date(2025, 5, 10), 100, schedule=eg_schedule)

        assert fees.total_discount == Decimal('0')


class TierRuleStub:
    """Tier-shaped object; the resolver only needs the three attributes."""

    def __init__(self, name, threshold, discount_percentage):
        self.name = name
        self.threshold = threshold
        self.discount_percentage = discount_percentage


# =============================================================================
# Status engine
# =============================================================================

class TestStatusEngine:

    def _purchase(self, grams_paid=0, fees_paid=0, due_date=date(2025, 6, 1)):
        return PurchaseSnapshot(
            id='p1',
            date=date(2025, 5, 2),
            store_id='s1',
            due_date=due_date,
            total_grams=Decimal('100'),
            total_fees=Decimal('500'),
            payments=PaymentTotals(Decimal(grams_paid), Decimal(fees_paid)),
        )

    def test_days_left(self):
        assert days_left(date(2025, 6, 1), date(2025, 5, 30)) == 2
        assert days_left(date(2025, 6, 1), date(2025, 6, 1)) == 0
        assert days_left(date(2025, 6, 1), date(2025, 6, 3)) == -2

    def test_pending_without_payments(self):
        assert derive_status(self._purchase(), TODAY) == PurchaseStatus.PENDING

    def test_partial_with_some_payment(self):
        assert derive_status(self._purchase(fees_paid=10), TODAY) == PurchaseStatus.PARTIAL

    def test_overdue_beats_partial(self):
        purchase = self._purchase(grams_paid=50, due_date=date(2025, 5, 1))

        assert derive_status(purchase, TODAY) == PurchaseStatus.OVERDUE

    def test_due_date_itself_is_not_overdue(self):
        purchase = self._purchase(due_date=TODAY)

        assert derive_status(purchase, TODAY) == PurchaseStatus.PENDING

    def test_paid_overrides_past_due_date(self):
        purchase = self._purchase(grams_paid=100, fees_paid=600, due_date=date(2025, 1, 1))

        assert derive_status(purchase, TODAY) == PurchaseStatus.PAID

    def test_negative_net_fees_need_only_grams(self):
        purchase = replace(self._purchase(grams_paid=100), total_fees=Decimal('-24'))

        assert derive_status(purchase, TODAY) == PurchaseStatus.PAID

    def test_remaining_amounts(self):
        remaining = remaining_amounts(self._purchase(grams_paid=40, fees_paid=600))

        assert remaining == {'grams_due': Decimal('60'), 'fees_due': Decimal('-100')}


# =============================================================================
# Month recalculation
# =============================================================================

class TestRecalculation:

    def test_month_aggregate_sums_only_that_month(self, make_snapshot):
        purchases = [
            make_snapshot(date(2025, 5, 1), {'EG21': (0, 400)}),
            make_snapshot(date(2025, 5, 31), {'EG21': (0, 400)}),
            make_snapshot(date(2025, 6, 1), {'EG21': (0, 900)}),
            make_snapshot(date(2024, 5, 15), {'EG21': (0, 900)}),
        ]

        aggregate = month_aggregate(purchases, 5, 2025)

        assert aggregate.monthly_total_grams == Decimal('800')
        assert aggregate.discount_eligible is True
        assert len(aggregate.purchases) == 2

    def test_below_medium_is_not_eligible(self, make_snapshot):
        aggregate = month_aggregate([make_snapshot(receipts={'EG21': (0, 749)})], 5, 2025)

        assert aggregate.discount_eligible is False

    def test_third_purchase_reprices_whole_month(self, make_snapshot, eg_schedule):
        first = make_snapshot(date(2025, 5, 3), {'EG21': (0, 400)})
        second = make_snapshot(date(2025, 5, 9), {'EG21': (0, 400)})

        before = recalculate_month([first, second], 5, 2025, schedule=eg_schedule, today=TODAY)
        assert before.monthly_total_grams == Decimal('800')
        assert [p.total_discount for p in before.updated_purchases] == [Decimal('80'), Decimal('80')]

        third = make_snapshot(date(2025, 5, 15), {'EG21': (0, 400)})
        after = recalculate_after_purchase_change(
            before.updated_purchases + [third], third.date, schedule=eg_schedule, today=TODAY
        )

        assert after.monthly_total_grams == Decimal('1200')
        assert [p.total_discount for p in after.updated_purchases] == [Decimal('92')] * 3
        assert [p.total_fees for p in after.updated_purchases] == [Decimal('1908')] * 3

    def test_three_600_gram_purchases_use_high_tier(self, make_snapshot, eg_schedule):
        purchases = [make_snapshot(date(2025, 5, day), {'EG21': (0, 600)}) for day in (1, 2, 3)]

        result = recalculate_month(purchases, 5, 2025, schedule=eg_schedule, today=TODAY)

        assert result.monthly_total_grams == Decimal('1800')
        assert result.discount_eligible is True
        # 23% of 600 g
        assert all(p.total_discount == Decimal('138') for p in result.updated_purchases)

    def test_other_months_pass_through_unchanged(self, make_snapshot, eg_schedule):
        june = make_snapshot(date(2025, 6, 2), {'EG21': (0, 100)})
        may = make_snapshot(date(2025, 5, 2), {'EG21': (0, 100)})

        result = recalculate_month([june, may], 5, 2025, schedule=eg_schedule, today=TODAY)

        assert result.updated_purchases[0] is june
        assert result.updated_purchases[1].base_fees == Decimal('500')

    def test_recalculation_is_idempotent(self, make_snapshot, eg_schedule):
        purchases = [
            make_snapshot(date(2025, 5, 3), {'EG18': (200, 0)}),
            make_snapshot(date(2025, 5, 9), {'EG21': (0, Decimal('333.3')), 'EG18': (50, 10)}),
            make_snapshot(date(2025, 4, 30), {'EG21': (0, 1000)}),
        ]

        once = recalculate_month(purchases, 5, 2025, schedule=eg_schedule, today=TODAY)
        twice = recalculate_month(once.updated_purchases, 5, 2025, schedule=eg_schedule, today=TODAY)

        assert twice.updated_purchases == once.updated_purchases
        assert twice.monthly_total_grams == once.monthly_total_grams

    def test_recalculation_refreshes_status(self, make_snapshot, eg_schedule):
        purchase = make_snapshot(date(2025, 3, 1), {'EG21': (0, 10)})

        result = recalculate_month([purchase], 3, 2025, schedule=eg_schedule, today=TODAY)

        assert result.updated_purchases[0].status == PurchaseStatus.OVERDUE

    def test_payment_change_updates_only_status(self, make_snapshot, eg_schedule):
        purchase = recalculate_purchase(
            make_snapshot(receipts={'EG21': (0, 100)}), 100, schedule=eg_schedule, today=TODAY
        )
        other = make_snapshot(receipts={'EG21': (0, 50)})
        settled = replace(
            purchase,
            base_fees=Decimal('999'),
            payments=PaymentTotals(Decimal('100'), Decimal('1000')),
        )

        updated = recalculate_after_payment_change([settled, other], settled.id, today=TODAY)

        assert updated[0].status == PurchaseStatus.PAID
        assert updated[0].base_fees == Decimal('999')
        assert updated[1] is other


# =============================================================================
# Settlement ledger
# =============================================================================

@pytest.fixture
def priced_purchase(make_snapshot, eg_schedule):
    """100 g of 21k at the 15% EG21 tier: fees 500 - 15 = 485."""
    return recalculate_purchase(
        make_snapshot(receipts={'EG21': (0, 100)}), 100, schedule=eg_schedule, today=TODAY
    )


def payment(payment_id='pay-1', grams=0, fees=0, karat='21'):
    return PaymentEntry(
        id=payment_id,
        date=date(2025, 5, 15),
        grams_paid=Decimal(str(grams)),
        fees_paid=Decimal(str(fees)),
        karat_type=karat,
    )


class TestSettlementLedger:

    def test_priced_purchase(self, priced_purchase):
        assert priced_purchase.total_fees == Decimal('485')

    def test_both_amounts_zero_is_rejected(self, priced_purchase):
        result = validate_payment(priced_purchase, 0, None)

        assert not result.valid
        assert result.error == 'Please enter at least one payment amount (fees or grams).'

    def test_negative_amount_is_rejected(self, priced_purchase):
        assert not validate_payment(priced_purchase, -1, 10).valid

    def test_unsupported_karat_is_rejected(self, priced_purchase):
        assert not validate_payment(priced_purchase, 10, 0, '24').valid

    def test_grams_above_due_are_rejected(self, priced_purchase):
        result = validate_payment(priced_purchase, Decimal('100.1'), 0, '21')

        assert not result.valid
        assert 'cannot exceed grams due' in result.error

    def test_18k_grams_are_compared_after_conversion(self, priced_purchase):
        # 116.6 g 18k = 99.94 g 21k; 117 g 18k = 100.29 g 21k
        assert validate_payment(priced_purchase, Decimal('116.6'), 0, '18').valid
        assert not validate_payment(priced_purchase, Decimal('117'), 0, '18').valid

    def test_fee_overpayment_is_allowed(self, priced_purchase):
        assert validate_payment(priced_purchase, 0, 10000).valid

    def test_apply_18k_payment_adds_converted_grams(self, priced_purchase):
        result = apply_payment(priced_purchase, payment(grams=21, karat='18'), today=TODAY)

        assert result.success
        assert result.purchase.payments.grams_paid == Decimal('18')
        assert result.purchase.status == PurchaseStatus.PARTIAL
        assert len(result.purchase.payment_history) == 1
        # Input snapshot is untouched
        assert priced_purchase.payments.grams_paid == Decimal('0')

    def test_full_settlement_with_fee_credit_is_paid(self, priced_purchase):
        result = apply_payment(priced_purchase, payment(grams=100, fees=600), today=TODAY)

        assert result.purchase.status == PurchaseStatus.PAID
        assert remaining_amounts(result.purchase)['fees_due'] == Decimal('-115')

    def test_invalid_payment_leaves_purchase_alone(self, priced_purchase):
        result = apply_payment(priced_purchase, payment(grams=0, fees=0), today=TODAY)

        assert not result.success
        assert result.purchase is None

    def test_duplicate_payment_id_is_rejected(self, priced_purchase):
        first = apply_payment(priced_purchase, payment(fees=10), today=TODAY).purchase

        result = apply_payment(first, payment(fees=10), today=TODAY)

        assert not result.success
        assert 'already recorded' in result.error

    @pytest.mark.parametrize('grams,fees,karat', [
        (Decimal('7.3'), Decimal('12.345'), '18'),
        (Decimal('33.33'), 0, '21'),
        (0, Decimal('0.01'), '21'),
        (Decimal('1'), Decimal('485'), '18'),
    ])
    def test_reverse_restores_totals_exactly(self, priced_purchase, grams, fees, karat):
        start = apply_payment(priced_purchase, payment('earlier', grams=5, karat='18'), today=TODAY).purchase

        applied = apply_payment(start, payment('pay-1', grams, fees, karat), today=TODAY).purchase
        reversed_ = reverse_payment(applied, 'pay-1', today=TODAY).purchase

        assert reversed_.payments == start.payments
        assert reversed_.payment_history == start.payment_history
        assert reversed_.status == start.status

    def test_running_totals_match_history(self, priced_purchase):
        purchase = priced_purchase
        for index, (grams, karat) in enumerate([(10, '18'), (Decimal('12.5'), '21'), (3, '18')]):
            purchase = apply_payment(purchase, payment(f'p{index}', grams, 1, karat), today=TODAY).purchase

        assert totals_from_history(purchase.payment_history) == purchase.payments

    def test_reversing_reopens_paid_purchase(self, priced_purchase):
        paid = apply_payment(priced_purchase, payment(grams=100, fees=485), today=TODAY).purchase

        result = reverse_payment(paid, 'pay-1', today=TODAY)

        assert paid.status == PurchaseStatus.PAID
        assert result.purchase.status == PurchaseStatus.PENDING

    def test_reverse_unknown_payment_fails(self, priced_purchase):
        result = reverse_payment(priced_purchase, 'missing')

        assert not result.success
        assert result.error == 'Payment missing not found.'

    def test_rounding_helper(self):
        assert round_grams(Decimal('171.45')) == Decimal('171.5')
