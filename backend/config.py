"""
Configuration et utilitaires partagés
Sales Tracker - env, MongoDB handle, date and math helpers.
"""

import os
import math
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Load .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'sales_tracker')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Frontend origin (CORS, credentials allowed)
CLIENT_BASE_URL = os.environ.get('CLIENT_BASE_URL', 'http://localhost:3000')

# Roles: anyone listed here is a manager, everybody else a salesperson
MANAGER_EMAILS = [
    e.strip().lower()
    for e in os.environ.get('MANAGER_EMAILS', '').split(',')
    if e.strip()
]

# OpenAI
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '')
OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-3.5-turbo')
OPENAI_MAX_TOKENS = int(os.environ.get('OPENAI_MAX_TOKENS', '1000'))
OPENAI_TEMPERATURE = float(os.environ.get('OPENAI_TEMPERATURE', '0.5'))

# New sales logs get a follow-up this many days out
DEFAULT_FOLLOW_UP_DAYS = int(os.environ.get('DEFAULT_FOLLOW_UP_DAYS', '7'))


# ==================== HELPERS ====================

def now_iso() -> str:
    """Retourne la date/heure actuelle en ISO"""
    return datetime.now(timezone.utc).isoformat()

def start_of_year_iso(now: datetime = None) -> str:
    """January 1st 00:00 UTC of the current (or given) year, as ISO."""
    now = now or datetime.now(timezone.utc)
    return datetime(now.year, 1, 1, tzinfo=timezone.utc).isoformat()


def parse_datetime(value):
    """
    Normalise a stored date into an aware UTC datetime.
    Accepts datetime objects and ISO strings (with or without offset,
    trailing 'Z' allowed). Anything else returns None.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def safe_divide(numerator, denominator) -> float:
    """
    numerator / denominator, or 0 when either side is not a number
    or the denominator is zero. Never returns NaN or infinity.
    """
    try:
        num = float(numerator)
        den = float(denominator)
    except (TypeError, ValueError):
        return 0
    if math.isnan(num) or math.isnan(den) or den == 0:
        return 0
    result = num / den
    if math.isinf(result):
        return 0
    return result


def resolve_role(email: str) -> str:
    """manager | salesperson, from MANAGER_EMAILS."""
    if email and email.lower() in MANAGER_EMAILS:
        return "manager"
    return "salesperson"
