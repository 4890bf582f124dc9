# hotel_ledger/reports.py
import calendar
from datetime import date
from typing import Dict

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreUnavailableError
from .logging_config import logger
from .model import (
    COGS_CATEGORIES, CURRENCIES, OPERATING_EXPENSE_CATEGORIES,
    REVENUE_CATEGORIES, CashSale, CreditSale, Deposit, Expense,
)
from .store import fetch_rows


class ReportFigures(BaseModel):
    total_revenue: float = 0.0
    revenue_by_category: Dict[str, float] = Field(default_factory=lambda: dict.fromkeys(REVENUE_CATEGORIES, 0.0))
    total_cogs: float = 0.0
    cogs_by_category: Dict[str, float] = Field(default_factory=lambda: dict.fromkeys(COGS_CATEGORIES, 0.0))
    gross_profit: float = 0.0
    total_operating_expenses: float = 0.0
    operating_expenses_by_category: Dict[str, float] = Field(
        default_factory=lambda: dict.fromkeys(OPERATING_EXPENSE_CATEGORIES, 0.0)
    )
    net_profit: float = 0.0


class ProfitAndLoss(BaseModel):
    start_date: date
    end_date: date
    description: str
    currencies: Dict[str, ReportFigures]


class DashboardStats(BaseModel):
    credit_sales_today: Dict[str, float]
    deposits_today: Dict[str, float]
    expenses_today: Dict[str, float]
    outstanding_customer_credit: Dict[str, float]
    active_debtors_count: int


def format_amount(amount: float) -> str:
    return f"{amount:,.2f}"


def revenue_bucket(category):
    return category if category in REVENUE_CATEGORIES else "Other"


def aggregate_profit_and_loss(cash_sales, credit_sales, expenses) -> Dict[str, ReportFigures]:
    figures = {currency: ReportFigures() for currency in CURRENCIES}

    for sale in cash_sales:
        if sale.currency not in figures:
            continue
        report = figures[sale.currency]
        report.revenue_by_category[revenue_bucket(sale.revenue_category)] += sale.amount

    for sale in credit_sales:
        if sale.currency not in figures:
            continue
        report = figures[sale.currency]
        report.revenue_by_category[revenue_bucket(sale.revenue_category)] += sale.original_amount

    for expense in expenses:
        if expense.currency not in figures:
            continue
        report = figures[expense.currency]
        if expense.category in COGS_CATEGORIES:
            report.cogs_by_category[expense.category] += expense.amount
        else:
            category = expense.category if expense.category in OPERATING_EXPENSE_CATEGORIES else "Other"
            report.operating_expenses_by_category[category] += expense.amount

    for report in figures.values():
        report.total_revenue = sum(report.revenue_by_category[c] for c in REVENUE_CATEGORIES)
        report.total_cogs = sum(report.cogs_by_category[c] for c in COGS_CATEGORIES)
        report.gross_profit = report.total_revenue - report.total_cogs
        report.total_operating_expenses = sum(
            report.operating_expenses_by_category[c] for c in OPERATING_EXPENSE_CATEGORIES
        )
        report.net_profit = report.gross_profit - report.total_operating_expenses

    return figures


def default_period(today: date | None = None):
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def describe_period(start: date, end: date) -> str:
    if start.year == end.year and (start.month, start.day) == (1, 1) and (end.month, end.day) == (12, 31):
        return f"for the Year {start.year}"
    if start.day == 1 and default_period(start)[1] == end:
        return f"for {start.strftime('%B %Y')}"
    return f"from {start.strftime('%b %d, %Y')} to {end.strftime('%b %d, %Y')}"


def profit_and_loss(db: Session, start: date | None = None, end: date | None = None) -> ProfitAndLoss:
    default_start, default_end = default_period()
    start = start or default_start
    end = end or default_end

    cash_sales = fetch_rows(db, CashSale, start, end)
    credit_sales = fetch_rows(db, CreditSale, start, end)
    expenses = fetch_rows(db, Expense, start, end)
    figures = aggregate_profit_and_loss(cash_sales, credit_sales, expenses)
    logger.info(
        f"P&L {start} .. {end}: USD net {format_amount(figures['USD'].net_profit)}, "
        f"SSP net {format_amount(figures['SSP'].net_profit)}"
    )
    return ProfitAndLoss(
        start_date=start,
        end_date=end,
        description=describe_period(start, end),
        currencies=figures,
    )


def _per_currency(rows, attr):
    totals = dict.fromkeys(CURRENCIES, 0.0)
    for row in rows:
        if row.currency in totals:
            totals[row.currency] += getattr(row, attr)
    return totals


def dashboard_stats(db: Session, today: date | None = None) -> DashboardStats:
    today = today or date.today()
    credit_sales = fetch_rows(db, CreditSale, today, today)
    deposits = fetch_rows(db, Deposit, today, today)
    expenses = fetch_rows(db, Expense, today, today)
    try:
        outstanding = (
            db.query(CreditSale)
            .filter(CreditSale.status.in_(["Pending", "Overdue"]))
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Outstanding credit query failed: {e}")
        raise StoreUnavailableError("credit_sales", e) from e

    return DashboardStats(
        credit_sales_today=_per_currency(credit_sales, "original_amount"),
        deposits_today=_per_currency(deposits, "amount"),
        expenses_today=_per_currency(expenses, "amount"),
        outstanding_customer_credit=_per_currency(outstanding, "balance_due"),
        active_debtors_count=len({sale.customer_name for sale in outstanding}),
    )
