"""
Tests for ledger assembly: normalization, chronological merge, fetch failures
and request generations.
"""

from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from hotel_ledger.errors import StoreUnavailableError
from hotel_ledger.ledger import (
    CASH_SALE,
    CREDIT_ISSUED,
    CREDIT_PAYMENT_CASH,
    CREDIT_PAYMENT_DEPOSIT,
    DEPOSIT,
    EXPENSE,
    GenerationTracker,
    build_ledger,
    merge_entries,
    normalize_cash_sale,
    normalize_credit_sale,
    normalize_deposit,
    normalize_expense,
    normalize_sources,
)
from hotel_ledger.model import KIND_CREDIT_PAYMENT, KIND_SALE, CashSale, CreditSale, Deposit, Expense
from hotel_ledger.store import fetch_rows


def cash_sale(**kw):
    fields = dict(id="cs1", date=datetime(2024, 1, 5, 10, 0), item_service="Room 101",
                  amount=100.0, currency="USD", revenue_category="Rooms")
    fields.update(kw)
    return CashSale(**fields)


def credit_sale(**kw):
    fields = dict(id="cr1", date=datetime(2024, 1, 3, 9, 0), customer_name="Alice", item_service="Dinner",
                  original_amount=50.0, paid_amount=0.0, balance_due=50.0, currency="USD",
                  revenue_category="Restaurant", status="Pending")
    fields.update(kw)
    return CreditSale(**fields)


def deposit(**kw):
    fields = dict(id="d1", date=datetime(2024, 1, 6, 12, 0), amount=300.0, currency="SSP", bank="Equity",
                  reference_no="REF-9", deposited_by="Bob")
    fields.update(kw)
    return Deposit(**fields)


def expense(**kw):
    fields = dict(id="e1", date=datetime(2024, 1, 4, 8, 0), category="Utilities", description="Power bill",
                  amount=30.0, currency="USD")
    fields.update(kw)
    return Expense(**fields)


class TestEntryNormalizer:
    def test_cash_sale(self):
        entry = normalize_cash_sale(cash_sale(details="3 nights"))
        assert entry.id == "cash_cs1"
        assert entry.type == CASH_SALE
        assert entry.description == "Room 101 - 3 nights"
        assert entry.amount == 100.0
        assert entry.currency == "USD"
        assert entry.transaction_id == "cs1"
        assert entry.source_table == "cash_sales"

    def test_cash_sale_with_payment_prefix_is_credit_payment(self):
        entry = normalize_cash_sale(cash_sale(item_service="Payment for Credit Sale ID: cr1"))
        assert entry.type == CREDIT_PAYMENT_CASH

    def test_explicit_kind_wins_over_description(self):
        tagged = normalize_cash_sale(cash_sale(item_service="Room 7", kind=KIND_CREDIT_PAYMENT))
        plain = normalize_cash_sale(cash_sale(item_service="Payment for Credit on room", kind=KIND_SALE))
        assert tagged.type == CREDIT_PAYMENT_CASH
        assert plain.type == CASH_SALE

    def test_credit_sale_uses_original_amount(self):
        entry = normalize_credit_sale(credit_sale(paid_amount=20.0, balance_due=30.0))
        assert entry.type == CREDIT_ISSUED
        assert entry.amount == 50.0
        assert entry.description == "Credit for Dinner to Alice"
        assert entry.id == "credit_issued_cr1"
        assert entry.source_table == "credit_sales_issued"

    def test_deposit_default_description(self):
        entry = normalize_deposit(deposit())
        assert entry.type == DEPOSIT
        assert entry.description == "Deposit by Bob (Ref: REF-9)"
        assert entry.currency == "SSP"

    def test_deposit_credit_payment(self):
        by_prefix = normalize_deposit(deposit(description="Payment for Credit Sale ID: cr1"))
        by_kind = normalize_deposit(deposit(description="Settled invoice", kind=KIND_CREDIT_PAYMENT))
        assert by_prefix.type == CREDIT_PAYMENT_DEPOSIT
        assert by_prefix.description == "Payment for Credit Sale ID: cr1"
        assert by_kind.type == CREDIT_PAYMENT_DEPOSIT

    def test_expense_keeps_its_currency(self):
        entry = normalize_expense(expense(currency="SSP", paid_to="City Power"))
        assert entry.type == EXPENSE
        assert entry.currency == "SSP"
        assert entry.description == "Power bill (Paid to: City Power)"

    def test_expense_currency_override(self):
        entry = normalize_expense(expense(currency="SSP"), currency_override="USD")
        assert entry.currency == "USD"

    def test_every_row_produces_one_entry(self):
        sources = {
            "cash_sales": [cash_sale(id=f"c{i}") for i in range(3)],
            "credit_sales": [credit_sale()],
            "deposits": [deposit(), deposit(id="d2")],
            "expenses": [expense()],
        }
        entries = normalize_sources(sources)
        assert len(entries) == 7
        assert all(e.amount >= 0 for e in entries)
        assert all(e.currency in ("USD", "SSP") for e in entries)


class TestChronologicalMerger:
    def test_sorted_newest_first(self):
        entries = normalize_sources({
            "cash_sales": [cash_sale()],
            "credit_sales": [credit_sale()],
            "deposits": [deposit()],
            "expenses": [expense()],
        })
        dates = [e.date for e in entries]
        assert all(dates[i] >= dates[i + 1] for i in range(len(dates) - 1))

    def test_scenario_order(self):
        entries = normalize_sources({
            "cash_sales": [cash_sale()],
            "credit_sales": [credit_sale()],
            "expenses": [expense()],
        })
        assert [e.type for e in entries] == [CASH_SALE, EXPENSE, CREDIT_ISSUED]
        assert [e.date.date() for e in entries] == [date(2024, 1, 5), date(2024, 1, 4), date(2024, 1, 3)]

    def test_equal_dates_keep_fetch_order(self):
        same = datetime(2024, 2, 1, 12, 0)
        entries = normalize_sources({
            "cash_sales": [cash_sale(date=same)],
            "credit_sales": [credit_sale(date=same)],
            "deposits": [deposit(date=same)],
            "expenses": [expense(date=same)],
        })
        assert [e.source_table for e in entries] == ["cash_sales", "credit_sales_issued", "deposits", "expenses"]

    def test_merge_empty(self):
        assert merge_entries([], []) == []


class TestBuildLedger:
    def seed(self, db):
        db.add_all([cash_sale(), credit_sale(), expense(), deposit(date=datetime(2024, 2, 10, 9, 0))])
        db.commit()

    def test_range_filter_is_inclusive_by_day(self, db):
        self.seed(db)
        entries = build_ledger(db, date(2024, 1, 3), date(2024, 1, 5))
        assert [e.id for e in entries] == ["cash_cs1", "expense_e1", "credit_issued_cr1"]

    def test_unbounded_range(self, db):
        self.seed(db)
        assert len(build_ledger(db)) == 4

    def test_idempotent(self, db):
        self.seed(db)
        assert build_ledger(db) == build_ledger(db)

    def test_store_failure_aborts(self):
        broken = MagicMock()
        broken.query.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))
        with pytest.raises(StoreUnavailableError) as exc:
            build_ledger(broken)
        assert exc.value.collection == "cash_sales"

    def test_fetch_rows_ascending(self, db):
        self.seed(db)
        rows = fetch_rows(db, CashSale)
        assert [r.id for r in rows] == ["cs1"]


class TestGenerationTracker:
    def test_newer_request_supersedes_older(self):
        tracker = GenerationTracker()
        first = tracker.begin("ledger:a")
        second = tracker.begin("ledger:a")
        assert not tracker.is_current("ledger:a", first)
        assert tracker.is_current("ledger:a", second)

    def test_keys_are_independent(self):
        tracker = GenerationTracker()
        a = tracker.begin("ledger:a")
        tracker.begin("ledger:b")
        assert tracker.is_current("ledger:a", a)
        b = tracker.latest("ledger:b")
        assert b > a
        assert tracker.is_current("ledger:b", b)

    def test_only_recent_keys_are_kept(self):
        tracker = GenerationTracker(max_keys=2)
        old = tracker.begin("ledger:a")
        tracker.begin("ledger:b")
        tracker.begin("ledger:c")
        assert len(tracker) == 2
        assert tracker.latest("ledger:a") == 0
        # Nothing newer is known for an evicted key
        assert tracker.is_current("ledger:a", old)
        renewed = tracker.begin("ledger:a")
        assert renewed != old
        assert not tracker.is_current("ledger:a", old)
        assert tracker.latest("ledger:b") == 0

    def test_using_a_key_keeps_it(self):
        tracker = GenerationTracker(max_keys=2)
        tracker.begin("ledger:a")
        tracker.begin("ledger:b")
        tracker.begin("ledger:a")
        tracker.begin("ledger:c")
        assert tracker.latest("ledger:a") > 0
        assert tracker.latest("ledger:b") == 0
