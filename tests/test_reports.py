"""
Tests for the profit-and-loss aggregation and the dashboard figures.
"""

from datetime import date, datetime

from hotel_ledger.model import KIND_CREDIT_PAYMENT, CashSale, CreditSale, Deposit, Expense
from hotel_ledger.reports import (
    aggregate_profit_and_loss,
    dashboard_stats,
    default_period,
    describe_period,
    format_amount,
    profit_and_loss,
)


def sale(amount, category, currency="USD", **kw):
    return CashSale(id=kw.pop("id", f"cs-{amount}-{category}"), date=kw.pop("date", datetime(2024, 1, 5)),
                    item_service=kw.pop("item_service", "Service"), amount=amount, currency=currency,
                    revenue_category=category, **kw)


def credit(amount, category, currency="USD", **kw):
    return CreditSale(id=kw.pop("id", f"cr-{amount}"), date=kw.pop("date", datetime(2024, 1, 3)),
                      customer_name=kw.pop("customer_name", "Alice"), item_service="Service",
                      original_amount=amount, paid_amount=kw.pop("paid_amount", 0.0),
                      balance_due=kw.pop("balance_due", amount), currency=currency,
                      revenue_category=category, status=kw.pop("status", "Pending"))


def cost(amount, category, currency="USD", **kw):
    return Expense(id=kw.pop("id", f"e-{amount}-{category}"), date=kw.pop("date", datetime(2024, 1, 4)),
                   category=category, description="Cost", amount=amount, currency=currency)


class TestAggregateProfitAndLoss:
    def test_scenario(self):
        figures = aggregate_profit_and_loss(
            [sale(100.0, "Rooms")], [credit(50.0, "Restaurant")], [cost(30.0, "Utilities")]
        )
        usd = figures["USD"]
        assert usd.total_revenue == 150
        assert usd.total_cogs == 0
        assert usd.gross_profit == 150
        assert usd.total_operating_expenses == 30
        assert usd.net_profit == 120
        assert usd.revenue_by_category["Rooms"] == 100
        assert usd.revenue_by_category["Restaurant"] == 50
        assert figures["SSP"].total_revenue == 0

    def test_identities_hold_exactly(self):
        figures = aggregate_profit_and_loss(
            [sale(0.1, "Rooms"), sale(0.2, "Main Bar"), sale(1234.56, None)],
            [credit(99.99, "Swimming Pool")],
            [cost(0.3, "Cost of Goods Sold - Bar"), cost(12.7, "Cost of Goods Sold - Restaurant"),
             cost(0.7, "Taxes"), cost(3.3, "Marketing")],
        )
        for report in figures.values():
            assert report.gross_profit == report.total_revenue - report.total_cogs
            assert report.net_profit == report.gross_profit - report.total_operating_expenses

    def test_unset_and_unknown_categories_go_to_other(self):
        figures = aggregate_profit_and_loss(
            [sale(10.0, None), sale(5.0, "Spa")], [], [cost(7.0, "Mystery")]
        )
        usd = figures["USD"]
        assert usd.revenue_by_category["Other"] == 15.0
        assert usd.operating_expenses_by_category["Other"] == 7.0

    def test_cogs_separated_from_operating_expenses(self):
        figures = aggregate_profit_and_loss(
            [sale(500.0, "Main Bar")], [],
            [cost(120.0, "Cost of Goods Sold - Bar"), cost(80.0, "Staff Salaries")],
        )
        usd = figures["USD"]
        assert usd.total_cogs == 120.0
        assert usd.cogs_by_category["Cost of Goods Sold - Bar"] == 120.0
        assert usd.gross_profit == 380.0
        assert usd.total_operating_expenses == 80.0
        assert usd.net_profit == 300.0

    def test_currencies_are_partitioned(self):
        figures = aggregate_profit_and_loss(
            [sale(100.0, "Rooms", "USD"), sale(20000.0, "Rooms", "SSP")], [], [cost(5000.0, "Taxes", "SSP")]
        )
        assert figures["USD"].net_profit == 100.0
        assert figures["SSP"].total_revenue == 20000.0
        assert figures["SSP"].net_profit == 15000.0

    def test_credit_payment_cash_sales_count_as_revenue(self):
        payment = sale(40.0, "Restaurant", id="pay", item_service="Payment for Credit Sale ID: cr-50.0",
                       kind=KIND_CREDIT_PAYMENT)
        figures = aggregate_profit_and_loss([payment], [credit(50.0, "Restaurant")], [])
        assert figures["USD"].total_revenue == 90.0
        assert figures["USD"].revenue_by_category["Restaurant"] == 90.0

    def test_idempotent(self):
        args = ([sale(100.0, "Rooms")], [credit(50.0, "Restaurant")], [cost(30.0, "Utilities")])
        assert aggregate_profit_and_loss(*args) == aggregate_profit_and_loss(*args)


class TestPeriods:
    def test_default_period_is_calendar_month(self):
        assert default_period(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert default_period(date(2023, 12, 3)) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_describe_period(self):
        assert describe_period(date(2024, 1, 1), date(2024, 1, 31)) == "for January 2024"
        assert describe_period(date(2024, 1, 3), date(2024, 1, 5)) == "from Jan 03, 2024 to Jan 05, 2024"
        assert describe_period(date(2024, 1, 1), date(2024, 12, 31)) == "for the Year 2024"
        assert describe_period(date(2023, 1, 1), date(2024, 12, 31)) == "from Jan 01, 2023 to Dec 31, 2024"

    def test_format_amount(self):
        assert format_amount(1234.5) == "1,234.50"


class TestProfitAndLossFromStore:
    def test_range_limits_rows(self, db):
        db.add_all([
            sale(100.0, "Rooms"),
            sale(70.0, "Rooms", id="late", date=datetime(2024, 2, 2)),
            credit(50.0, "Restaurant"),
            cost(30.0, "Utilities"),
        ])
        db.commit()
        report = profit_and_loss(db, date(2024, 1, 1), date(2024, 1, 31))
        assert report.description == "for January 2024"
        assert report.currencies["USD"].total_revenue == 150.0
        assert report.currencies["USD"].net_profit == 120.0


class TestDashboard:
    def test_today_and_outstanding(self, db):
        today = date(2024, 3, 10)
        at = datetime(2024, 3, 10, 11, 30)
        db.add_all([
            credit(200.0, "Rooms", id="t1", date=at, customer_name="Alice"),
            credit(80.0, "Rooms", "SSP", id="t2", date=at, customer_name="Bob", status="Overdue"),
            credit(60.0, "Rooms", id="old", date=datetime(2024, 1, 1), customer_name="Alice",
                   paid_amount=20.0, balance_due=40.0),
            credit(90.0, "Rooms", id="paid", date=datetime(2024, 1, 1), customer_name="Carol",
                   paid_amount=90.0, balance_due=0.0, status="Paid"),
            Deposit(id="dep", date=at, amount=500.0, currency="USD", bank="Equity", reference_no="R1",
                    deposited_by="Dan"),
            cost(25.0, "Supplies", "SSP", date=at),
            cost(99.0, "Supplies", date=datetime(2024, 3, 9)),
        ])
        db.commit()
        stats = dashboard_stats(db, today)
        assert stats.credit_sales_today == {"USD": 200.0, "SSP": 80.0}
        assert stats.deposits_today == {"USD": 500.0, "SSP": 0.0}
        assert stats.expenses_today == {"USD": 0.0, "SSP": 25.0}
        assert stats.outstanding_customer_credit == {"USD": 240.0, "SSP": 80.0}
        assert stats.active_debtors_count == 2
