# hotel_ledger/opening_balances.py
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .crud import commit
from .errors import StoreUnavailableError
from .logging_config import logger
from .model import Bank, Customer, OpeningBalance, Vendor
from .schemas import AccountBalance, OpeningBalanceForm


def _balances_on(db: Session, balance_date: date):
    try:
        return db.query(OpeningBalance).filter(OpeningBalance.balance_date == balance_date).all()
    except SQLAlchemyError as e:
        raise StoreUnavailableError("opening_balances", e) from e


def load_opening_balances(db: Session, balance_date: date) -> OpeningBalanceForm:
    existing = _balances_on(db, balance_date)

    def get_balance(account_type, account_id, currency):
        for row in existing:
            # account_id is null for cash on hand and other payables
            if (row.account_type == account_type and row.currency == currency
                    and (account_id is None or row.account_id == account_id)):
                return row.amount
        return 0.0

    def accounts(model, account_type):
        try:
            records = db.query(model).order_by(model.name).all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(model.__tablename__, e) from e
        return [
            AccountBalance(
                account_id=r.id,
                name=r.name,
                currency=getattr(r, "currency", None),
                opening_balance_usd=get_balance(account_type, r.id, "USD"),
                opening_balance_ssp=get_balance(account_type, r.id, "SSP"),
            )
            for r in records
        ]

    other_payable = next((r for r in existing if r.account_type == "OTHER_PAYABLE"), None)
    return OpeningBalanceForm(
        cash_on_hand_usd=get_balance("CASH_ON_HAND", None, "USD"),
        cash_on_hand_ssp=get_balance("CASH_ON_HAND", None, "SSP"),
        banks=accounts(Bank, "BANK_ACCOUNT"),
        customers=accounts(Customer, "CUSTOMER_DEBT"),
        vendors=accounts(Vendor, "VENDOR_CREDIT"),
        other_payables_usd=get_balance("OTHER_PAYABLE", None, "USD"),
        other_payables_ssp=get_balance("OTHER_PAYABLE", None, "SSP"),
        other_payables_description=(other_payable.description or "") if other_payable else "",
    )


def build_opening_balance_rows(balance_date: date, form: OpeningBalanceForm) -> list:
    rows = []

    def add(account_type, account_name, amount, currency, account_id=None, description=None):
        rows.append({
            "balance_date": balance_date,
            "account_type": account_type,
            "account_id": account_id,
            "account_name": account_name,
            "amount": amount,
            "currency": currency,
            "description": description,
        })

    add("CASH_ON_HAND", "Cash on Hand USD", form.cash_on_hand_usd, "USD")
    add("CASH_ON_HAND", "Cash on Hand SSP", form.cash_on_hand_ssp, "SSP")

    for bank in form.banks:
        for currency, amount in (("USD", bank.opening_balance_usd), ("SSP", bank.opening_balance_ssp)):
            if amount < 0:
                continue
            if bank.currency == currency:
                name = f"{bank.name} ({currency})"
            else:
                name = f"{bank.name} (Opening {currency} for {bank.currency} Bank)"
            add("BANK_ACCOUNT", name, amount, currency, account_id=bank.account_id)

    for account_type, label, accounts in (
        ("CUSTOMER_DEBT", "Customer", form.customers),
        ("VENDOR_CREDIT", "Vendor", form.vendors),
    ):
        for account in accounts:
            for currency, amount in (("USD", account.opening_balance_usd), ("SSP", account.opening_balance_ssp)):
                if amount > 0:
                    add(account_type, f"{label}: {account.name} ({currency})", amount, currency,
                        account_id=account.account_id)

    for currency, amount in (("USD", form.other_payables_usd), ("SSP", form.other_payables_ssp)):
        if amount > 0:
            add("OTHER_PAYABLE", f"Other Payables {currency}", amount, currency,
                description=form.other_payables_description)

    return rows


def save_opening_balances(db: Session, balance_date: date, form: OpeningBalanceForm) -> list:
    saved = []
    for row in build_opening_balance_rows(balance_date, form):
        query = db.query(OpeningBalance).filter(
            OpeningBalance.balance_date == row["balance_date"],
            OpeningBalance.account_type == row["account_type"],
            OpeningBalance.currency == row["currency"],
        )
        if row["account_id"] is None:
            query = query.filter(OpeningBalance.account_id.is_(None))
        else:
            query = query.filter(OpeningBalance.account_id == row["account_id"])
        try:
            record = query.first()
        except SQLAlchemyError as e:
            raise StoreUnavailableError("opening_balances", e) from e

        if record is None:
            record = OpeningBalance(**row)
            db.add(record)
        else:
            for field, value in row.items():
                setattr(record, field, value)
        saved.append(record)

    commit(db, "opening_balances", *saved)
    logger.info(f"Saved {len(saved)} opening balances for {balance_date}")
    return saved
