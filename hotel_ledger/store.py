# hotel_ledger/store.py
from datetime import date, datetime, time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreUnavailableError
from .logging_config import logger
from .model import CashSale, CreditPurchase, CreditSale, Deposit, Expense

# Column holding the business date of each dated collection
DATE_COLUMNS = {
    CashSale: "date",
    CreditSale: "date",
    Deposit: "date",
    Expense: "date",
    CreditPurchase: "date_of_purchase",
}


def start_of_day(value: date | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def end_of_day(value: date | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.max)


def fetch_rows(db: Session, model, start=None, end=None) -> list:
    """Rows of `model` dated inside the inclusive [start, end] day range."""
    collection = model.__tablename__
    column = getattr(model, DATE_COLUMNS[model])
    try:
        query = db.query(model)
        if start is not None:
            query = query.filter(column >= start_of_day(start))
        if end is not None:
            query = query.filter(column <= end_of_day(end))
        rows = query.order_by(column.asc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Query on {collection} failed: {e}")
        raise StoreUnavailableError(collection, e) from e
    logger.debug(f"Fetched {len(rows)} rows from {collection} ({start} .. {end})")
    return rows


def fetch_ledger_sources(db: Session, start=None, end=None) -> dict:
    # Credit purchases reach the ledger through the expenses their payments create
    return {
        "cash_sales": fetch_rows(db, CashSale, start, end),
        "credit_sales": fetch_rows(db, CreditSale, start, end),
        "deposits": fetch_rows(db, Deposit, start, end),
        "expenses": fetch_rows(db, Expense, start, end),
    }
