# hotel_ledger/payments.py
from datetime import datetime

from sqlalchemy.orm import Session

from .crud import commit, get_record
from .errors import ValidationFailure
from .logging_config import logger
from .model import (
    KIND_CREDIT_PAYMENT, KIND_SALE, CashSale, CreditPurchase, CreditSale, Deposit, Expense, Vendor,
)

# Rounding slack when comparing a payment with the balance due
TOLERANCE = 0.001


def check_payment_amount(amount: float, balance_due: float):
    if amount is None or amount <= 0:
        raise ValidationFailure("Please enter a valid payment amount.", title="Invalid Payment Details")
    if amount > balance_due + TOLERANCE:
        raise ValidationFailure(
            f"Amount paid ({amount}) cannot exceed balance due ({balance_due}).",
            title="Overpayment",
        )


def record_cash_sale(db: Session, data: dict):
    """Store a cash sale; an under-tendered sale leaves its shortfall on credit.

    Returns (cash_sale, credit_sale_or_None, change_due).
    """
    data = dict(data)
    tendered = data.pop("amount_tendered", None)
    amount = data["amount"]
    credit_sale = None
    change_due = 0.0

    if tendered is not None and tendered < amount:
        if tendered <= 0:
            raise ValidationFailure(
                "Nothing was tendered; record a credit sale instead.", title="Invalid Payment Details"
            )
        if not data.get("customer_name"):
            raise ValidationFailure(
                "A customer is required to carry the shortfall as a credit sale.", title="Missing fields"
            )
        shortfall = amount - tendered
        credit_sale = CreditSale(
            customer_name=data["customer_name"],
            item_service=data["item_service"],
            details=f"Shortfall on cash sale of {data.get('currency', 'USD')} {amount:.2f}",
            original_amount=shortfall,
            paid_amount=0.0,
            balance_due=shortfall,
            currency=data.get("currency", "USD"),
            date=data["date"],
            status="Pending",
            revenue_category=data.get("revenue_category"),
        )
        db.add(credit_sale)
        db.flush()
        data.update(amount=tendered, linked_credit_sale_id=credit_sale.id, kind=data.get("kind") or KIND_SALE)
    elif tendered is not None:
        change_due = tendered - amount

    sale = CashSale(**data)
    db.add(sale)
    if credit_sale is not None:
        commit(db, "cash_sales", sale, credit_sale)
        logger.info(f"Cash sale {sale.id} short by {credit_sale.original_amount:.2f}, credit sale {credit_sale.id} opened")
    else:
        commit(db, "cash_sales", sale)
        logger.info(f"Cash sale {sale.id} recorded")
    return sale, credit_sale, change_due


def record_credit_sale_payment(db: Session, sale_id: str, data: dict):
    sale = get_record(db, CreditSale, sale_id)
    amount = data.get("amount")
    check_payment_amount(amount, sale.balance_due)
    method = data.get("method", "cash")
    if method == "deposit" and not all(data.get(f) for f in ("bank", "reference_no", "deposited_by")):
        raise ValidationFailure(
            "Bank, reference number and depositor are required for a deposit payment.", title="Missing fields"
        )

    paid_on = data.get("date") or datetime.now()
    description = f"Payment for Credit Sale ID: {sale.id}"

    sale.paid_amount = sale.paid_amount + amount
    sale.balance_due = sale.original_amount - sale.paid_amount
    if sale.balance_due <= TOLERANCE:
        sale.status = "Paid"

    cash_sale = deposit = None
    if method == "deposit":
        deposit = Deposit(
            date=paid_on,
            amount=amount,
            currency=sale.currency,
            bank=data["bank"],
            reference_no=data["reference_no"],
            deposited_by=data["deposited_by"],
            description=f"{description} ({sale.customer_name})",
            linked_credit_sale_id=sale.id,
            kind=KIND_CREDIT_PAYMENT,
        )
        db.add(deposit)
    else:
        cash_sale = CashSale(
            date=paid_on,
            item_service=description,
            details=sale.customer_name,
            amount=amount,
            currency=sale.currency,
            revenue_category=sale.revenue_category,
            customer_name=sale.customer_name,
            linked_credit_sale_id=sale.id,
            kind=KIND_CREDIT_PAYMENT,
        )
        db.add(cash_sale)

    commit(db, "credit_sales", *[r for r in (sale, cash_sale, deposit) if r is not None])
    logger.info(f"Payment of {sale.currency} {amount:.2f} on credit sale {sale.id} by {method}; balance {sale.balance_due:.2f}")
    return sale, cash_sale, deposit


def record_credit_purchase_payment(db: Session, purchase_id: str, data: dict):
    purchase = get_record(db, CreditPurchase, purchase_id)
    amount = data.get("amount")
    check_payment_amount(amount, purchase.balance_due)

    vendor = db.get(Vendor, purchase.vendor_id)
    vendor_name = vendor.name if vendor else purchase.vendor_id
    description = data.get("description")
    if description is None:
        description = (
            f"Payment for Credit Purchase: {purchase.item_service_purchased} "
            f"(ID: {purchase.id}) from Vendor: {vendor_name}"
        )
    if not description.strip():
        raise ValidationFailure(
            "Please provide a description for the expense record.", title="Missing Payment Description"
        )

    purchase.paid_amount = purchase.paid_amount + amount
    purchase.balance_due = purchase.original_amount - purchase.paid_amount
    purchase.status = "Paid" if purchase.balance_due <= TOLERANCE else "Partially Paid"

    expense = Expense(
        date=data.get("date") or datetime.now(),
        category=purchase.expense_category or "Other",
        description=description,
        amount=amount,
        currency=purchase.currency,
        paid_to=vendor_name,
        vendor_id=purchase.vendor_id,
        is_cash_purchase=True,
        related_credit_purchase_id=purchase.id,
    )
    db.add(expense)
    commit(db, "credit_purchases", purchase, expense)
    logger.info(f"Payment of {purchase.currency} {amount:.2f} for Vendor: {vendor_name} recorded")
    return purchase, expense
