# hotel_ledger/main.py
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Header, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from .config import settings
from .crud import create_on_credit, update_cash_sale, update_on_credit
from .database import Base, engine, get_db
from .errors import LedgerError, StaleRequestError
from .ledger import GenerationTracker, build_ledger
from .logging_config import logger
from .model import (
    Bank, CashSale, CreditPurchase, CreditSale, Customer, Deposit, Expense, InventoryItem, Vendor,
)
from .opening_balances import load_opening_balances, save_opening_balances
from .pagination import Page, page_query, paginate
from .payments import record_cash_sale, record_credit_purchase_payment, record_credit_sale_payment
from .reports import DashboardStats, ProfitAndLoss, dashboard_stats, profit_and_loss
from .routers import crud_router
from . import schemas
from .utils.csv_io import clear_data_group, export_table_csv, import_records

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Hotel Ledger")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

generations = GenerationTracker()


@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"title": exc.title, "detail": exc.detail})


def _begin(view: str, client_id: Optional[str]):
    # Requests without a client id are never superseded
    if not client_id:
        return None, None
    key = f"{view}:{client_id}"
    return key, generations.begin(key)


def _ensure_current(key: Optional[str], generation: Optional[int]):
    if key is not None and not generations.is_current(key, generation):
        raise StaleRequestError(f"Request {generation} for {key} was superseded by a newer one")


@app.get("/")
def root():
    return {"message": "Hotel Ledger is Live!"}


# Master data

app.include_router(crud_router("/banks", Bank, schemas.BankIn, schemas.BankUpdate, schemas.BankOut))
app.include_router(crud_router(
    "/customers", Customer, schemas.CustomerIn, schemas.CustomerUpdate, schemas.CustomerOut,
))
app.include_router(crud_router("/vendors", Vendor, schemas.VendorIn, schemas.VendorUpdate, schemas.VendorOut))
app.include_router(crud_router(
    "/inventory", InventoryItem, schemas.InventoryItemIn, schemas.InventoryItemUpdate, schemas.InventoryItemOut,
    filter_fields=("section",),
))

# Transactions

cash_sales_router = crud_router(
    "/sales/cash", CashSale, schemas.CashSaleIn, schemas.CashSaleUpdate, schemas.CashSaleOut,
    updater=lambda db, model, sale_id, changes: update_cash_sale(db, sale_id, changes),
    with_create=False,
)


@cash_sales_router.post("", response_model=schemas.CashSaleReceipt, status_code=201)
def create_cash_sale(payload: schemas.CashSaleIn, db: Session = Depends(get_db)):
    sale, credit_sale, change_due = record_cash_sale(db, payload.model_dump())
    return {"sale": sale, "credit_sale": credit_sale, "change_due": change_due}


credit_sales_router = crud_router(
    "/credit-sales", CreditSale, schemas.CreditSaleIn, schemas.CreditSaleUpdate, schemas.CreditSaleOut,
    filter_fields=("status", "customer_name"),
    creator=create_on_credit,
    updater=update_on_credit,
)


@credit_sales_router.post("/{sale_id}/payments", response_model=schemas.CreditSalePaymentOut, status_code=201)
def pay_credit_sale(sale_id: str, payload: schemas.CreditSalePaymentIn, db: Session = Depends(get_db)):
    sale, cash_sale, deposit = record_credit_sale_payment(db, sale_id, payload.model_dump())
    return {"sale": sale, "cash_sale": cash_sale, "deposit": deposit}


credit_purchases_router = crud_router(
    "/purchases/credit", CreditPurchase, schemas.CreditPurchaseIn, schemas.CreditPurchaseUpdate,
    schemas.CreditPurchaseOut,
    filter_fields=("status", "vendor_id"),
    creator=create_on_credit,
    updater=update_on_credit,
)


@credit_purchases_router.post(
    "/{purchase_id}/payments", response_model=schemas.CreditPurchasePaymentOut, status_code=201
)
def pay_credit_purchase(purchase_id: str, payload: schemas.CreditPurchasePaymentIn, db: Session = Depends(get_db)):
    purchase, expense = record_credit_purchase_payment(db, purchase_id, payload.model_dump())
    return {"purchase": purchase, "expense": expense}


app.include_router(cash_sales_router)
app.include_router(credit_sales_router)
app.include_router(credit_purchases_router)
app.include_router(crud_router("/deposits", Deposit, schemas.DepositIn, schemas.DepositUpdate, schemas.DepositOut))
app.include_router(crud_router(
    "/expenses", Expense, schemas.ExpenseIn, schemas.ExpenseUpdate, schemas.ExpenseOut,
    filter_fields=("category",),
))


# Aggregation views

@app.get("/ledger", response_model=Page)
def ledger(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Depends(page_query),
    x_client_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    key, generation = _begin("ledger", x_client_id)
    entries = build_ledger(db, start_date, end_date)
    _ensure_current(key, generation)
    return paginate(entries, page)


@app.get("/reports/profit-loss", response_model=ProfitAndLoss)
def profit_loss_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    x_client_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    key, generation = _begin("profit-loss", x_client_id)
    report = profit_and_loss(db, start_date, end_date)
    _ensure_current(key, generation)
    return report


@app.get("/dashboard", response_model=DashboardStats)
def dashboard(db: Session = Depends(get_db)):
    return dashboard_stats(db)


# Opening balances

@app.get("/opening-balances", response_model=schemas.OpeningBalanceForm)
def get_opening_balances(balance_date: date, db: Session = Depends(get_db)):
    return load_opening_balances(db, balance_date)


@app.put("/opening-balances", response_model=List[schemas.OpeningBalanceOut])
def put_opening_balances(balance_date: date, form: schemas.OpeningBalanceForm, db: Session = Depends(get_db)):
    return save_opening_balances(db, balance_date, form)


# Data management

@app.get("/settings/export/{table_name}")
def export_table(table_name: str, db: Session = Depends(get_db)):
    content = export_table_csv(db, table_name)
    filename = f"{table_name}_export_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/settings/import/{table_name}")
def import_table(table_name: str, file: UploadFile = File(...), db: Session = Depends(get_db)):
    content = file.file.read()
    count = import_records(db, table_name, content)
    return {"message": f"Imported {count} rows into {table_name}", "count": count}


@app.post("/settings/clear")
def clear_data(payload: schemas.ClearDataIn, db: Session = Depends(get_db)):
    deleted = clear_data_group(db, payload.group, payload.confirmation)
    return {"message": f"Cleared {payload.group} data", "deleted": deleted}
