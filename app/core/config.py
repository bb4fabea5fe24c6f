import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Runtime configuration read from the environment (and `.env`)."""

    def __init__(self):
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")
        self.DB_LOCK_TIMEOUT_MS = int(os.getenv("DB_LOCK_TIMEOUT_MS", 5000))
        self.ROOM_WRITE_ATTEMPTS = int(os.getenv("ROOM_WRITE_ATTEMPTS", 3))

        # -------- AUTH --------
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

        # -------- CACHE --------
        self.REDIS_URL = os.getenv("REDIS_URL")
        self.ROOM_CACHE_TTL = int(os.getenv("ROOM_CACHE_TTL", 60))

        # -------- PAYMENTS --------
        self.STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
        self.PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd")
        self.PAYMENT_TIMEOUT_SECONDS = float(os.getenv("PAYMENT_TIMEOUT_SECONDS", 10))

        # -------- BOOKING POLICY --------
        self.TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.10"))
        self.INVOICE_PREFIX = os.getenv("INVOICE_PREFIX", "INV-")
        self.CANCELLATION_WINDOW_HOURS = int(os.getenv("CANCELLATION_WINDOW_HOURS", 24))

        # -------- LOGGING --------
        self.LOG_DIR = os.getenv("LOG_DIR", "logs")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
