# hotel_ledger/ledger.py
import threading
from collections import OrderedDict
from datetime import datetime
from itertools import chain
from typing import Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .config import settings
from .logging_config import logger
from .model import KIND_CREDIT_PAYMENT
from .store import fetch_ledger_sources

CASH_SALE = "Cash Sale"
CREDIT_ISSUED = "Credit Issued"
DEPOSIT = "Deposit"
EXPENSE = "Expense"
CREDIT_PAYMENT_CASH = "Credit Payment (Cash)"
CREDIT_PAYMENT_DEPOSIT = "Credit Payment (Deposit)"

# Description prefixes that marked credit payments before rows carried a kind
CASH_PAYMENT_PREFIX = "Payment for Credit"
DEPOSIT_PAYMENT_PREFIX = "Payment for Credit Sale ID:"


class LedgerEntry(BaseModel):
    id: str
    date: datetime
    description: str
    type: str
    amount: float
    currency: str
    transaction_id: str
    source_table: str


def _is_credit_payment(kind, description, prefix):
    if kind:
        return kind == KIND_CREDIT_PAYMENT
    return bool(description) and description.startswith(prefix)


def _cash_sale_description(sale):
    return f"{sale.item_service} - {sale.details}" if sale.details else sale.item_service


def is_cash_credit_payment(sale) -> bool:
    return _is_credit_payment(sale.kind, _cash_sale_description(sale), CASH_PAYMENT_PREFIX)


def normalize_cash_sale(sale) -> LedgerEntry:
    return LedgerEntry(
        id=f"cash_{sale.id}",
        date=sale.date,
        description=_cash_sale_description(sale),
        type=CREDIT_PAYMENT_CASH if is_cash_credit_payment(sale) else CASH_SALE,
        amount=sale.amount,
        currency=sale.currency,
        transaction_id=sale.id,
        source_table="cash_sales",
    )


def normalize_credit_sale(sale) -> LedgerEntry:
    return LedgerEntry(
        id=f"credit_issued_{sale.id}",
        date=sale.date,
        description=f"Credit for {sale.item_service} to {sale.customer_name}",
        type=CREDIT_ISSUED,
        amount=sale.original_amount,
        currency=sale.currency,
        transaction_id=sale.id,
        source_table="credit_sales_issued",
    )


def normalize_deposit(deposit) -> LedgerEntry:
    paid_credit = _is_credit_payment(deposit.kind, deposit.description, DEPOSIT_PAYMENT_PREFIX)
    description = deposit.description or f"Deposit by {deposit.deposited_by} (Ref: {deposit.reference_no})"
    return LedgerEntry(
        id=f"deposit_{deposit.id}",
        date=deposit.date,
        description=description,
        type=CREDIT_PAYMENT_DEPOSIT if paid_credit else DEPOSIT,
        amount=deposit.amount,
        currency=deposit.currency,
        transaction_id=deposit.id,
        source_table="deposits",
    )


def normalize_expense(expense, currency_override: Optional[str] = None) -> LedgerEntry:
    description = expense.description
    if expense.paid_to:
        description = f"{expense.description} (Paid to: {expense.paid_to})"
    return LedgerEntry(
        id=f"expense_{expense.id}",
        date=expense.date,
        description=description,
        type=EXPENSE,
        amount=expense.amount,
        currency=currency_override or expense.currency,
        transaction_id=expense.id,
        source_table="expenses",
    )


def merge_entries(*groups: Iterable[LedgerEntry]) -> List[LedgerEntry]:
    # sorted() is stable with reverse=True: equal dates keep fetch order
    return sorted(chain.from_iterable(groups), key=lambda e: e.date, reverse=True)


def normalize_sources(sources: dict, expense_currency: Optional[str] = None) -> List[LedgerEntry]:
    return merge_entries(
        [normalize_cash_sale(s) for s in sources.get("cash_sales", [])],
        [normalize_credit_sale(s) for s in sources.get("credit_sales", [])],
        [normalize_deposit(d) for d in sources.get("deposits", [])],
        [normalize_expense(e, expense_currency) for e in sources.get("expenses", [])],
    )


def build_ledger(db: Session, start=None, end=None, expense_currency: Optional[str] = None) -> List[LedgerEntry]:
    if expense_currency is None:
        expense_currency = settings.LEDGER_EXPENSE_CURRENCY
    sources = fetch_ledger_sources(db, start, end)
    entries = normalize_sources(sources, expense_currency)
    logger.info(f"Ledger assembled: {len(entries)} entries ({start} .. {end})")
    return entries


class GenerationTracker:
    """Numbers the requests of each view so superseded results can be dropped.

    Generations come from one counter shared by all keys, so a key that was
    evicted and begun again never reuses a number still in flight. Only the
    most recently used max_keys keys are remembered.
    """

    def __init__(self, max_keys: int = 1024):
        self._lock = threading.Lock()
        self._latest = OrderedDict()
        self._counter = 0
        self.max_keys = max_keys

    def begin(self, key: str) -> int:
        with self._lock:
            self._counter += 1
            self._latest[key] = self._counter
            self._latest.move_to_end(key)
            while len(self._latest) > self.max_keys:
                self._latest.popitem(last=False)
            return self._counter

    def is_current(self, key: str, generation: int) -> bool:
        with self._lock:
            # An evicted key has no newer request on record
            return self._latest.get(key, generation) == generation

    def latest(self, key: str) -> int:
        with self._lock:
            return self._latest.get(key, 0)

    def __len__(self):
        with self._lock:
            return len(self._latest)
