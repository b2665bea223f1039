"""
Move Masters Tariff Ledger — Tests
=====================================
Aggregation, balance due, overage, hourly windows, payments and
charge edits.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from core.commands.rejection import ReasonCode
from core.config.rules import TariffPolicy
from engines.relocation.tariff import (
    ChargeLedger,
    compute_ledger_totals,
    cubic_overage,
    overage_revenue,
    register_payment,
    update_charges,
    window_hours,
)


def _example_ledger(**overrides) -> ChargeLedger:
    kwargs = dict(
        weight_base_lbs=2000,
        weight_base_rate="0.50",
        cubic_estimate_cu_ft=450,
        cubic_base_cu_ft=450,
        cubic_base_rate="6.50",
        hourly_men=3,
        hourly_trucks=1,
        hourly_rate=150,
        fuel_surcharge=60,
        stairs_origin=25,
        stairs_dest=25,
        partial_payments=(500,),
    )
    kwargs.update(overrides)
    return ChargeLedger(**kwargs)


class TestLedgerTotals:
    def test_worked_example(self):
        totals = compute_ledger_totals(_example_ledger())
        assert totals.weight_total == Decimal("1000")
        assert totals.cubic_total == Decimal("2925")
        assert totals.hourly_total == Decimal("450")
        assert totals.other_total == Decimal("110")
        assert totals.packing_total == Decimal("0")
        assert totals.storage_total == Decimal("0")
        assert totals.grand_total == Decimal("4485")
        assert totals.total_paid == Decimal("500")
        assert totals.balance_due == Decimal("3985")

    def test_pure_function(self):
        ledger = _example_ledger()
        assert compute_ledger_totals(ledger) == compute_ledger_totals(ledger)

    def test_additional_weight_and_cubic(self):
        ledger = ChargeLedger(
            weight_add_lbs=100, weight_add_rate="0.75",
            cubic_add_cu_ft=10, cubic_add_rate=8,
        )
        totals = compute_ledger_totals(ledger)
        assert totals.weight_total == Decimal("75")
        assert totals.cubic_total == Decimal("80")

    def test_packing_total(self):
        ledger = ChargeLedger(
            packing_materials_total=120, full_packing_service=300, packing_other=15,
        )
        assert compute_ledger_totals(ledger).packing_total == Decimal("435")

    def test_all_accessorials_summed(self):
        ledger = ChargeLedger(
            fuel_surcharge=1, stairs_origin=2, stairs_dest=3,
            long_carry_origin=4, long_carry_dest=5,
            shuttle_origin=6, shuttle_dest=7,
            misc_bulky_item=8, split_stop_off=9,
            pgs_service=10, valuation_charge=11,
        )
        assert compute_ledger_totals(ledger).other_total == Decimal("66")

    def test_storage_counts_only_with_days(self):
        stored = ChargeLedger(
            storage_days=0, storage_cu_ft=100, storage_rate=2, storage_other=40,
        )
        assert compute_ledger_totals(stored).storage_total == Decimal("0")

        stored = ChargeLedger(
            storage_days=30, storage_cu_ft=100, storage_rate=2, storage_other=40,
        )
        assert compute_ledger_totals(stored).storage_total == Decimal("240")

    def test_price_adjustment_applied_to_balance(self):
        discount = compute_ledger_totals(_example_ledger(price_adjustment=-85))
        surcharge = compute_ledger_totals(_example_ledger(price_adjustment=15))
        assert discount.balance_due == Decimal("3900")
        assert surcharge.balance_due == Decimal("4000")
        assert discount.grand_total == Decimal("4485")

    def test_overpayment_settles(self):
        totals = compute_ledger_totals(_example_ledger(partial_payments=(5000,)))
        assert totals.balance_due == Decimal("-515")
        assert totals.is_settled

    def test_to_dict_uses_strings(self):
        data = compute_ledger_totals(_example_ledger()).to_dict()
        assert data["grand_total"] == "4485.00"
        assert data["balance_due"] == "3985.00"


class TestOverage:
    def test_overage_example(self):
        ledger = ChargeLedger(
            cubic_estimate_cu_ft=450, cubic_base_cu_ft=500, cubic_base_rate="6.50",
        )
        assert cubic_overage(ledger) == Decimal("50")
        assert overage_revenue(ledger) == Decimal("325.00")
        totals = compute_ledger_totals(ledger)
        assert totals.overage_cu_ft == Decimal("50")
        assert totals.overage_revenue == Decimal("325.00")

    def test_under_estimate_is_zero(self):
        ledger = ChargeLedger(
            cubic_estimate_cu_ft=450, cubic_base_cu_ft=400, cubic_base_rate="6.50",
        )
        assert cubic_overage(ledger) == Decimal("0")
        assert overage_revenue(ledger) == Decimal("0")


class TestHourlyWindows:
    def test_window_hours(self):
        assert window_hours("08:00 AM", "12:00 PM") == Decimal("4")
        assert window_hours("01:00 PM", "02:30 PM") == Decimal("1.5")
        assert window_hours("13:00", "15:00") == Decimal("2")

    def test_blank_window_is_zero(self):
        assert window_hours("", "") == Decimal("0")
        assert window_hours("08:00 AM", "") == Decimal("0")

    def test_window_across_midnight(self):
        assert window_hours("11:00 PM", "01:00 AM") == Decimal("2")

    def test_logged_hours_sums_both_windows(self):
        ledger = ChargeLedger(
            hourly_part1_start="08:00 AM", hourly_part1_end="12:00 PM",
            hourly_part2_start="01:00 PM", hourly_part2_end="03:00 PM",
        )
        assert ledger.logged_hours == Decimal("6")

    def test_invalid_clock_string_rejected(self):
        with pytest.raises(ValueError, match="not a clock time"):
            ChargeLedger(hourly_part1_start="noonish")

    def test_duration_not_billed_by_default(self):
        ledger = _example_ledger(
            hourly_part1_start="08:00 AM", hourly_part1_end="12:00 PM",
        )
        assert compute_ledger_totals(ledger).hourly_total == Decimal("450")

    def test_duration_billed_when_policy_enabled(self):
        ledger = _example_ledger(
            hourly_part1_start="08:00 AM", hourly_part1_end="12:00 PM",
        )
        policy = TariffPolicy(bill_hourly_by_duration=True)
        assert compute_ledger_totals(ledger, policy).hourly_total == Decimal("1800")


class TestLedgerValidation:
    def test_coerces_to_decimal(self):
        ledger = ChargeLedger(weight_base_rate=0.5)
        assert ledger.weight_base_rate == Decimal("0.5")

    def test_negative_charge_rejected(self):
        with pytest.raises(ValueError, match="fuel_surcharge"):
            ChargeLedger(fuel_surcharge=-1)

    def test_non_positive_payment_rejected(self):
        with pytest.raises(ValueError, match="partial payment"):
            ChargeLedger(partial_payments=(0,))

    def test_serialization_roundtrip(self):
        ledger = _example_ledger(hourly_part1_start="08:00 AM", price_adjustment=-10)
        assert ChargeLedger.from_dict(ledger.to_dict()) == ledger

    def test_from_dict_rejects_unknown_fields(self):
        with pytest.raises(ValueError, match="Unknown ledger fields"):
            ChargeLedger.from_dict({"tip_jar": 5})


class TestRegisterPayment:
    def test_appends_payment(self):
        outcome = register_payment(_example_ledger(), 250)
        assert outcome.is_accepted
        assert outcome.subject.partial_payments == (Decimal("500"), Decimal("250"))
        assert compute_ledger_totals(outcome.subject).balance_due == Decimal("3735")

    @pytest.mark.parametrize("amount", [-5, 0, "0.00", "abc", None, "NaN"])
    def test_invalid_amounts_rejected(self, amount):
        ledger = _example_ledger()
        outcome = register_payment(ledger, amount)
        assert outcome.is_rejected
        assert outcome.code == ReasonCode.INVALID_AMOUNT
        assert outcome.subject is ledger
        assert ledger.partial_payments == (Decimal("500"),)

    def test_prior_entries_preserved_in_order(self):
        ledger = _example_ledger()
        ledger = register_payment(ledger, 100).subject
        ledger = register_payment(ledger, "50.25").subject
        assert ledger.partial_payments == (
            Decimal("500"), Decimal("100"), Decimal("50.25"),
        )


class TestUpdateCharges:
    def test_updates_fields(self):
        outcome = update_charges(_example_ledger(), {"cubic_base_cu_ft": 500})
        assert outcome.is_accepted
        assert outcome.subject.cubic_base_cu_ft == Decimal("500")

    def test_partial_payments_not_editable(self):
        outcome = update_charges(_example_ledger(), {"partial_payments": ()})
        assert outcome.code == ReasonCode.INVALID_CHARGE
        assert "append-only" in outcome.reason.message

    def test_unknown_field_rejected(self):
        outcome = update_charges(_example_ledger(), {"tip_jar": 5})
        assert outcome.code == ReasonCode.INVALID_CHARGE

    def test_negative_value_rejected(self):
        ledger = _example_ledger()
        outcome = update_charges(ledger, {"stairs_origin": -25})
        assert outcome.code == ReasonCode.INVALID_CHARGE
        assert outcome.subject is ledger

    def test_negative_adjustment_allowed(self):
        outcome = update_charges(_example_ledger(), {"price_adjustment": -100})
        assert outcome.is_accepted
