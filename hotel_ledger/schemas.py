# hotel_ledger/schemas.py
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Currency = Literal["USD", "SSP"]
CreditSaleStatus = Literal["Pending", "Paid", "Overdue"]
CreditPurchaseStatus = Literal["Pending", "Partially Paid", "Paid", "Overdue"]
InventorySection = Literal["bar", "rooms", "halls"]
CashSaleKind = Literal["sale", "credit_payment"]
DepositKind = Literal["deposit", "credit_payment"]
RevenueCategory = Literal[
    "Rooms", "Main Bar", "Restaurant", "Conference Halls", "Internet Services", "Swimming Pool", "Other"
]
ExpenseCategory = Literal[
    "Staff Salaries", "Taxes", "Utilities", "Supplies", "Maintenance", "Marketing",
    "Cost of Goods Sold - Bar", "Cost of Goods Sold - Restaurant", "Operating Supplies", "Other",
]


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Banks / customers / vendors

class BankIn(BaseModel):
    name: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=1)
    currency: Currency = "USD"


class BankUpdate(BaseModel):
    name: Optional[str] = None
    account_number: Optional[str] = None
    currency: Optional[Currency] = None


class BankOut(BankIn, ORMModel):
    id: str


class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerOut(CustomerIn, ORMModel):
    id: str


class VendorIn(BaseModel):
    name: str = Field(..., min_length=1)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class VendorUpdate(BaseModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class VendorOut(VendorIn, ORMModel):
    id: str


# Inventory

class InventoryItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    section: InventorySection
    category: str
    current_stock: float = Field(0, ge=0)
    unit: str
    reorder_level: float = Field(0, ge=0)
    supplier: Optional[str] = None
    last_restock_date: Optional[date] = None


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    section: Optional[InventorySection] = None
    category: Optional[str] = None
    current_stock: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    reorder_level: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    last_restock_date: Optional[date] = None


class InventoryItemOut(InventoryItemIn, ORMModel):
    id: str
    needs_reorder: bool


# Cash sales

class CashSaleIn(BaseModel):
    date: datetime
    item_service: str = Field(..., min_length=1)
    details: Optional[str] = None
    amount: float = Field(..., gt=0)
    currency: Currency = "USD"
    revenue_category: Optional[RevenueCategory] = None
    customer_name: Optional[str] = None
    kind: Optional[CashSaleKind] = None
    # Less than amount: the remainder becomes a credit sale
    amount_tendered: Optional[float] = Field(None, ge=0)


class CashSaleUpdate(BaseModel):
    date: Optional[datetime] = None
    item_service: Optional[str] = None
    details: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    revenue_category: Optional[RevenueCategory] = None
    customer_name: Optional[str] = None


class CashSaleOut(ORMModel):
    id: str
    date: datetime
    item_service: str
    details: Optional[str] = None
    amount: float
    currency: str
    revenue_category: Optional[str] = None
    customer_name: Optional[str] = None
    linked_credit_sale_id: Optional[str] = None
    kind: Optional[str] = None


class CashSaleReceipt(BaseModel):
    sale: CashSaleOut
    credit_sale: Optional["CreditSaleOut"] = None
    change_due: float = 0.0


# Credit sales

class CreditSaleIn(BaseModel):
    customer_name: str = Field(..., min_length=1)
    item_service: str = Field(..., min_length=1)
    details: Optional[str] = None
    original_amount: float = Field(..., gt=0)
    currency: Currency = "USD"
    date: datetime
    due_date: Optional[datetime] = None
    status: CreditSaleStatus = "Pending"
    revenue_category: Optional[RevenueCategory] = None


class CreditSaleUpdate(BaseModel):
    customer_name: Optional[str] = None
    item_service: Optional[str] = None
    details: Optional[str] = None
    original_amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[CreditSaleStatus] = None
    revenue_category: Optional[RevenueCategory] = None


class CreditSaleOut(ORMModel):
    id: str
    customer_name: str
    item_service: str
    details: Optional[str] = None
    original_amount: float
    paid_amount: float
    balance_due: float
    currency: str
    date: datetime
    due_date: Optional[datetime] = None
    status: str
    revenue_category: Optional[str] = None


class CreditSalePaymentIn(BaseModel):
    amount: float = Field(..., gt=0)
    method: Literal["cash", "deposit"] = "cash"
    date: Optional[datetime] = None
    bank: Optional[str] = None
    reference_no: Optional[str] = None
    deposited_by: Optional[str] = None


# Deposits

class DepositIn(BaseModel):
    date: datetime
    amount: float = Field(..., gt=0)
    currency: Currency = "USD"
    bank: str = Field(..., min_length=1)
    reference_no: str = Field(..., min_length=1)
    deposited_by: str = Field(..., min_length=1)
    description: Optional[str] = None
    kind: Optional[DepositKind] = None


class DepositUpdate(BaseModel):
    date: Optional[datetime] = None
    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    bank: Optional[str] = None
    reference_no: Optional[str] = None
    deposited_by: Optional[str] = None
    description: Optional[str] = None


class DepositOut(DepositIn, ORMModel):
    id: str
    linked_credit_sale_id: Optional[str] = None


# Expenses

class ExpenseIn(BaseModel):
    date: datetime
    category: ExpenseCategory = "Other"
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    currency: Currency = "USD"
    paid_to: Optional[str] = None
    vendor_id: Optional[str] = None


class ExpenseUpdate(BaseModel):
    date: Optional[datetime] = None
    category: Optional[ExpenseCategory] = None
    description: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    paid_to: Optional[str] = None
    vendor_id: Optional[str] = None


class ExpenseOut(ExpenseIn, ORMModel):
    id: str
    is_cash_purchase: bool = False
    related_credit_purchase_id: Optional[str] = None


# Credit purchases

class CreditPurchaseIn(BaseModel):
    vendor_id: str = Field(..., min_length=1)
    item_service_purchased: str = Field(..., min_length=1)
    details: Optional[str] = None
    original_amount: float = Field(..., gt=0)
    currency: Currency = "USD"
    date_of_purchase: datetime
    due_date: Optional[datetime] = None
    status: CreditPurchaseStatus = "Pending"
    expense_category: ExpenseCategory


class CreditPurchaseUpdate(BaseModel):
    vendor_id: Optional[str] = None
    item_service_purchased: Optional[str] = None
    details: Optional[str] = None
    original_amount: Optional[float] = Field(None, gt=0)
    currency: Optional[Currency] = None
    date_of_purchase: Optional[datetime] = None
    due_date: Optional[datetime] = None
    status: Optional[CreditPurchaseStatus] = None
    expense_category: Optional[ExpenseCategory] = None


class CreditPurchaseOut(ORMModel):
    id: str
    vendor_id: str
    item_service_purchased: str
    details: Optional[str] = None
    original_amount: float
    paid_amount: float
    balance_due: float
    currency: str
    date_of_purchase: datetime
    due_date: Optional[datetime] = None
    status: str
    expense_category: Optional[str] = None


class CreditPurchasePaymentIn(BaseModel):
    amount: float = Field(..., gt=0)
    date: Optional[datetime] = None
    description: Optional[str] = None


class CreditPurchasePaymentOut(BaseModel):
    purchase: CreditPurchaseOut
    expense: ExpenseOut


class CreditSalePaymentOut(BaseModel):
    sale: CreditSaleOut
    cash_sale: Optional[CashSaleOut] = None
    deposit: Optional[DepositOut] = None


# Opening balances

class AccountBalance(BaseModel):
    account_id: str
    name: str
    currency: Optional[str] = None
    opening_balance_usd: float = 0.0
    opening_balance_ssp: float = 0.0


class OpeningBalanceForm(BaseModel):
    cash_on_hand_usd: float = Field(0.0, ge=0)
    cash_on_hand_ssp: float = Field(0.0, ge=0)
    banks: List[AccountBalance] = []
    customers: List[AccountBalance] = []
    vendors: List[AccountBalance] = []
    other_payables_usd: float = Field(0.0, ge=0)
    other_payables_ssp: float = Field(0.0, ge=0)
    other_payables_description: str = ""


class OpeningBalanceOut(ORMModel):
    id: str
    balance_date: date
    account_type: str
    account_id: Optional[str] = None
    account_name: str
    amount: float
    currency: str
    description: Optional[str] = None


class ClearDataIn(BaseModel):
    group: Literal["transactional", "master", "opening_balances"]
    confirmation: str


CashSaleReceipt.model_rebuild()
