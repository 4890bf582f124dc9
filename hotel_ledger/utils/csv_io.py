# hotel_ledger/utils/csv_io.py

import pandas as pd
from io import StringIO
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..crud import commit
from ..errors import StoreUnavailableError, ValidationFailure
from ..logging_config import logger
from ..model import CURRENCIES, DATA_GROUPS, EXPENSE_CATEGORIES, TABLES, CashSale, Deposit, Expense

CLEAR_CONFIRMATION = "DELETE"

# Importable tables: model, required columns, optional columns
IMPORT_SPECS = {
    "cash_sales": (
        CashSale,
        {"date", "item_service", "amount"},
        {"details", "currency", "revenue_category", "customer_name", "kind"},
    ),
    "deposits": (
        Deposit,
        {"date", "amount", "bank", "reference_no", "deposited_by"},
        {"currency", "description", "kind"},
    ),
    "expenses": (
        Expense,
        {"date", "description", "amount"},
        {"category", "currency", "paid_to", "vendor_id"},
    ),
}


def _fetch_all(db: Session, model):
    try:
        return db.query(model).all()
    except SQLAlchemyError as e:
        raise StoreUnavailableError(model.__tablename__, e) from e


def export_table_csv(db: Session, table_name: str) -> str:
    model = TABLES.get(table_name)
    if model is None:
        raise ValidationFailure(f"Unknown table '{table_name}'", title="Download Error")
    rows = _fetch_all(db, model)
    if not rows:
        raise ValidationFailure(f"No data found in table {table_name} to download.", title="No Data")

    columns = [c.name for c in model.__table__.columns]
    df = pd.DataFrame([{c: getattr(r, c) for c in columns} for r in rows], columns=columns)
    logger.info(f"Exported {len(df)} rows from {table_name}")
    return df.to_csv(index=False)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = df.columns.str.strip().str.lower().str.replace(" ", "_")
    return df


def parse_import_csv(file_bytes: bytes, table_name: str) -> list[dict]:
    if table_name not in IMPORT_SPECS:
        raise ValidationFailure(f"Import into '{table_name}' is not supported", title="Import Error")
    _, required, optional = IMPORT_SPECS[table_name]

    try:
        decoded = file_bytes.decode("utf-8")
        df = normalize_columns(pd.read_csv(StringIO(decoded)))

        if not required.issubset(df.columns):
            missing = required - set(df.columns)
            raise ValueError(f"Missing columns: {', '.join(sorted(missing))}")

        df = df.dropna(subset=["date", "amount"])  # Drop rows with missing critical info
        df["amount"] = df["amount"].astype(float)
        if (df["amount"] < 0).any():
            raise ValueError("Amounts must not be negative")
        df["date"] = pd.to_datetime(df["date"])

        if "currency" not in df.columns:
            df["currency"] = "USD"
        df["currency"] = df["currency"].fillna("USD").str.upper()
        unknown = set(df["currency"]) - set(CURRENCIES)
        if unknown:
            raise ValueError(f"Unsupported currency: {', '.join(sorted(unknown))}")

        if table_name == "expenses":
            if "category" not in df.columns:
                df["category"] = "Other"
            df["category"] = df["category"].fillna("Other")
            unknown = set(df["category"]) - set(EXPENSE_CATEGORIES)
            if unknown:
                raise ValueError(f"Unknown expense category: {', '.join(sorted(unknown))}")

        keep = [c for c in df.columns if c in required | optional]
        df = df[keep].astype(object).where(pd.notna(df[keep]), None)
    except (ValueError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise ValidationFailure(f"Failed to parse CSV: {e}", title="Import Error") from e

    records = df.to_dict(orient="records")
    for record in records:
        record["date"] = pd.Timestamp(record["date"]).to_pydatetime()
    return records


def import_records(db: Session, table_name: str, file_bytes: bytes) -> int:
    records = parse_import_csv(file_bytes, table_name)
    model = IMPORT_SPECS[table_name][0]
    db.add_all([model(**record) for record in records])
    commit(db, table_name)
    logger.info(f"Imported {len(records)} rows into {table_name}")
    return len(records)


def clear_data_group(db: Session, group: str, confirmation: str) -> dict:
    if confirmation != CLEAR_CONFIRMATION:
        raise ValidationFailure(
            f"Type {CLEAR_CONFIRMATION} to confirm; this action is irreversible.", title="Confirmation required"
        )
    if group not in DATA_GROUPS:
        raise ValidationFailure(f"Unknown data group '{group}'")

    deleted = {}
    for table_name in DATA_GROUPS[group]:
        try:
            deleted[table_name] = db.query(TABLES[table_name]).delete(synchronize_session=False)
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreUnavailableError(table_name, e) from e
    commit(db, ", ".join(DATA_GROUPS[group]))
    logger.warning(f"Cleared data group {group}: {deleted}")
    return deleted
