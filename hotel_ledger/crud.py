# hotel_ledger/crud.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import RecordNotFoundError, StoreUnavailableError, ValidationFailure
from .logging_config import logger
from .model import CashSale
from .store import DATE_COLUMNS


def _default_order(model):
    # Dated records newest first, master data alphabetically
    if model in DATE_COLUMNS:
        return getattr(model, DATE_COLUMNS[model]).desc()
    return model.name.asc()


def list_records(db: Session, model, **filters):
    query = db.query(model)
    for field, value in filters.items():
        if value is not None:
            query = query.filter(getattr(model, field) == value)
    try:
        return query.order_by(_default_order(model)).all()
    except SQLAlchemyError as e:
        logger.error(f"Listing {model.__tablename__} failed: {e}")
        raise StoreUnavailableError(model.__tablename__, e) from e


def get_record(db: Session, model, record_id: str):
    try:
        record = db.get(model, record_id)
    except SQLAlchemyError as e:
        raise StoreUnavailableError(model.__tablename__, e) from e
    if record is None:
        raise RecordNotFoundError(model.__tablename__, record_id)
    return record


def commit(db: Session, collection: str, *records):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Write to {collection} failed: {e}")
        raise StoreUnavailableError(collection, e) from e
    for record in records:
        db.refresh(record)


def create_record(db: Session, model, data: dict):
    record = model(**data)
    db.add(record)
    commit(db, model.__tablename__, record)
    logger.info(f"Created {model.__tablename__} record {record.id}")
    return record


def update_record(db: Session, model, record_id: str, changes: dict):
    record = get_record(db, model, record_id)
    columns = model.__table__.columns
    for field, value in changes.items():
        # Required columns cannot be cleared
        if value is None and field in columns and not columns[field].nullable:
            continue
        setattr(record, field, value)
    commit(db, model.__tablename__, record)
    logger.info(f"Updated {model.__tablename__} record {record_id}: {sorted(changes)}")
    return record


def delete_record(db: Session, model, record_id: str):
    record = get_record(db, model, record_id)
    db.delete(record)
    commit(db, model.__tablename__)
    logger.info(f"Deleted {model.__tablename__} record {record_id}")


def create_on_credit(db: Session, model, data: dict):
    """Credit sales and purchases start unpaid with the full amount due."""
    data = dict(data, paid_amount=0.0, balance_due=data["original_amount"])
    return create_record(db, model, data)


def update_on_credit(db: Session, model, record_id: str, changes: dict):
    record = get_record(db, model, record_id)
    amount = changes.get("original_amount")
    if amount is not None and amount < record.paid_amount:
        raise ValidationFailure(
            f"Amount {amount:,.2f} is less than the {record.paid_amount:,.2f} already paid.",
            title="Invalid Amount",
        )
    if amount is not None:
        changes = dict(changes, balance_due=amount - record.paid_amount)
    return update_record(db, model, record_id, changes)


def update_cash_sale(db: Session, sale_id: str, changes: dict):
    sale = get_record(db, CashSale, sale_id)
    amount = changes.get("amount")
    if sale.linked_credit_sale_id and amount is not None and amount != sale.amount:
        raise ValidationFailure(
            "This cash sale is linked to a credit sale due to a shortfall. To change amounts, "
            "adjust the linked credit sale or handle reconciliation manually.",
            title="Cannot Edit Amount",
        )
    return update_record(db, CashSale, sale_id, changes)

