# hotel_ledger/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LEDGER_PAGE_SIZE = int(os.getenv("LEDGER_PAGE_SIZE", "15"))
    # When set, every expense shows up in the ledger in this currency
    LEDGER_EXPENSE_CURRENCY = os.getenv("LEDGER_EXPENSE_CURRENCY") or None
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


settings = Settings()
