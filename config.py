"""
Configuration for GroupPayback
"""
import logging
import os

DATABASE_URL = os.environ.get("DATABASE_URL")

# Hosted Postgres URLs use the old "postgres://" scheme, SQLAlchemy wants "postgresql://"
if DATABASE_URL and DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

if not DATABASE_URL:
    DATABASE_URL = "sqlite:///./grouppayback.db"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

SETTLEMENT_DEBOUNCE_SECONDS = float(os.environ.get("SETTLEMENT_DEBOUNCE_SECONDS", "2.0"))
SAVE_DEBOUNCE_SECONDS = float(os.environ.get("SAVE_DEBOUNCE_SECONDS", "1.0"))

# Past this many characters a share link is too long to be passed around safely
URL_LENGTH_BUDGET = 2000

DEFAULT_CURRENCY = "$"

CURRENCIES = [
    ("$", "Dollar"),
    ("€", "Euro"),
    ("£", "Pound"),
    ("¥", "Yen/Yuan"),
    ("₹", "Rupee"),
    ("₩", "Won"),
    ("R$", "Real"),
    ("CHF", "Franc"),
    ("kr", "Krona"),
    ("₽", "Ruble"),
]


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
