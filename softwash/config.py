import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./softwash.db")
# Hosted Postgres URLs come without a driver; use psycopg 3
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql://" + DATABASE_URL[len("postgres://") :]
if DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = "postgresql+psycopg://" + DATABASE_URL[len("postgresql://") :]

# Admin console
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if not ADMIN_PASSWORD:
    import warnings

    warnings.warn(
        "ADMIN_PASSWORD not set! Using insecure default - DO NOT USE IN PRODUCTION",
        RuntimeWarning,
        stacklevel=2,
    )
    ADMIN_PASSWORD = "change-me"  # noqa: S105 - Dev fallback only

# "memory" keeps sessions in-process (lost on restart), "redis" shares them across workers
TOKEN_STORE = os.getenv("TOKEN_STORE", "memory").lower()
ADMIN_TOKEN_TTL = int(os.getenv("ADMIN_TOKEN_TTL", "43200"))  # 12 hours, redis store only

# Pricing catalog cache and scheduled price changes
PRICING_CACHE_TTL = int(os.getenv("PRICING_CACHE_TTL", "60"))
PRICING_SWEEP_INTERVAL = int(os.getenv("PRICING_SWEEP_INTERVAL", "3600"))
PRICING_SWEEP_ENABLED = os.getenv("PRICING_SWEEP_ENABLED", "true").lower() == "true"
SEED_CATALOG = os.getenv("SEED_CATALOG", "true").lower() == "true"

# Business details used in notifications
BUSINESS_NAME = os.getenv("BUSINESS_NAME", "D&G Soft Wash")
BUSINESS_EMAIL = os.getenv("BUSINESS_EMAIL")
BUSINESS_PHONE = os.getenv("BUSINESS_PHONE", "")
REVIEW_URL = os.getenv("REVIEW_URL", "")

# Day of week with no service (Monday=0 ... Sunday=6)
CLOSED_WEEKDAY = int(os.getenv("CLOSED_WEEKDAY", "6"))

# Invoices are due this many business days after they are sent
INVOICE_DUE_BUSINESS_DAYS = int(os.getenv("INVOICE_DUE_BUSINESS_DAYS", "5"))

# IRS-style standard mileage rate used for the deduction estimate
MILEAGE_RATE = float(os.getenv("MILEAGE_RATE", "0.70"))

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{BUSINESS_NAME} <noreply@dgsoftwash.com>")

# Twilio SMS Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_FROM_NUMBER = os.getenv("TWILIO_FROM_NUMBER")
TWILIO_MESSAGING_SERVICE_SID = os.getenv("TWILIO_MESSAGING_SERVICE_SID")

# Rate limiting (requests per window, per client IP)
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
LOGIN_RATE_LIMIT = int(os.getenv("LOGIN_RATE_LIMIT", "10"))
LOGIN_RATE_WINDOW = int(os.getenv("LOGIN_RATE_WINDOW", "300"))
CONTACT_RATE_LIMIT = int(os.getenv("CONTACT_RATE_LIMIT", "20"))
CONTACT_RATE_WINDOW = int(os.getenv("CONTACT_RATE_WINDOW", "3600"))

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://dgsoftwash.com,https://www.dgsoftwash.com,http://localhost:3000",
).split(",")
