import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# -----------------------
# Database Config
# -----------------------
DB_TYPE = os.getenv("DB_TYPE", "sqlite").lower()

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres setup")
elif DB_TYPE == "sqlite":
    DATABASE_URL = os.getenv("SQLITE_URL", "sqlite+aiosqlite:///./hotel_billing.db")
else:
    raise ValueError(f"Unsupported DB_TYPE: {DB_TYPE}")

# -----------------------
# Property Config
# -----------------------
# "Today" for discount windows and blackout dates is the hotel's local date
PROPERTY_TIMEZONE = os.getenv("PROPERTY_TIMEZONE", "Asia/Colombo")

DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")
DEFAULT_SERVICE_CHARGE_RATE = Decimal(os.getenv("DEFAULT_SERVICE_CHARGE_RATE", "10"))
DEFAULT_TAX_RATE = Decimal(os.getenv("DEFAULT_TAX_RATE", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
