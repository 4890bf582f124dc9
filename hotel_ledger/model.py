# hotel_ledger/model.py
import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Float, String, Text, UniqueConstraint
from .database import Base

CURRENCIES = ("USD", "SSP")

REVENUE_CATEGORIES = (
    "Rooms", "Main Bar", "Restaurant", "Conference Halls",
    "Internet Services", "Swimming Pool", "Other",
)
COGS_CATEGORIES = ("Cost of Goods Sold - Bar", "Cost of Goods Sold - Restaurant")
OPERATING_EXPENSE_CATEGORIES = (
    "Staff Salaries", "Taxes", "Utilities", "Supplies", "Maintenance",
    "Marketing", "Operating Supplies", "Other",
)
EXPENSE_CATEGORIES = OPERATING_EXPENSE_CATEGORIES[:6] + COGS_CATEGORIES + OPERATING_EXPENSE_CATEGORIES[6:]


# Discriminants for rows that settle a credit sale
KIND_SALE = "sale"
KIND_CREDIT_PAYMENT = "credit_payment"


def new_id() -> str:
    return str(uuid.uuid4())


class Bank(Base):
    __tablename__ = "banks"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    account_number = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")


class Customer(Base):
    __tablename__ = "customers"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)


class Vendor(Base):
    __tablename__ = "vendors"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    section = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    current_stock = Column(Float, default=0)
    unit = Column(String, nullable=False)
    reorder_level = Column(Float, default=0)
    supplier = Column(String, nullable=True)
    last_restock_date = Column(Date, nullable=True)

    @property
    def needs_reorder(self):
        return (self.current_stock or 0) <= (self.reorder_level or 0)


class CashSale(Base):
    __tablename__ = "cash_sales"
    id = Column(String(36), primary_key=True, default=new_id)
    date = Column(DateTime, nullable=False, index=True)
    item_service = Column(String, nullable=False)
    details = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    revenue_category = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    linked_credit_sale_id = Column(String(36), nullable=True)
    kind = Column(String, nullable=True)


class CreditSale(Base):
    __tablename__ = "credit_sales"
    id = Column(String(36), primary_key=True, default=new_id)
    customer_name = Column(String, nullable=False)
    item_service = Column(String, nullable=False)
    details = Column(Text, nullable=True)
    original_amount = Column(Float, nullable=False)
    paid_amount = Column(Float, nullable=False, default=0)
    balance_due = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    date = Column(DateTime, nullable=False, index=True)
    due_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="Pending")
    revenue_category = Column(String, nullable=True)


class Deposit(Base):
    __tablename__ = "deposits"
    id = Column(String(36), primary_key=True, default=new_id)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    bank = Column(String, nullable=False)
    reference_no = Column(String, nullable=False)
    deposited_by = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    linked_credit_sale_id = Column(String(36), nullable=True)
    kind = Column(String, nullable=True)


class Expense(Base):
    __tablename__ = "expenses"
    id = Column(String(36), primary_key=True, default=new_id)
    date = Column(DateTime, nullable=False, index=True)
    category = Column(String, nullable=False, default="Other")
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    paid_to = Column(String, nullable=True)
    vendor_id = Column(String(36), nullable=True)
    is_cash_purchase = Column(Boolean, default=False)
    related_credit_purchase_id = Column(String(36), nullable=True)


class CreditPurchase(Base):
    __tablename__ = "credit_purchases"
    id = Column(String(36), primary_key=True, default=new_id)
    vendor_id = Column(String(36), nullable=False)
    item_service_purchased = Column(String, nullable=False)
    details = Column(Text, nullable=True)
    original_amount = Column(Float, nullable=False)
    paid_amount = Column(Float, nullable=False, default=0)
    balance_due = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    date_of_purchase = Column(DateTime, nullable=False, index=True)
    due_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="Pending")
    expense_category = Column(String, nullable=True)


class OpeningBalance(Base):
    __tablename__ = "opening_balances"
    id = Column(String(36), primary_key=True, default=new_id)
    balance_date = Column(Date, nullable=False, index=True)
    account_type = Column(String, nullable=False)
    account_id = Column(String(36), nullable=True)
    account_name = Column(String, nullable=False)
    amount = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False)
    description = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint('balance_date', 'account_type', 'account_id', 'currency', name='uix_opening_balance'),
    )


# Table name -> model, for export and bulk maintenance
TABLES = {
    model.__tablename__: model
    for model in (
        Bank, Customer, Vendor, InventoryItem, CashSale, CreditSale,
        Deposit, Expense, CreditPurchase, OpeningBalance,
    )
}

DATA_GROUPS = {
    "transactional": ("cash_sales", "credit_sales", "deposits", "expenses", "credit_purchases"),
    "master": ("customers", "vendors", "banks", "inventory_items"),
    "opening_balances": ("opening_balances",),
}
