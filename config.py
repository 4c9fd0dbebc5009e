import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # Hosted Postgres in production; local SQLite file for development
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "capster_booking.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer token lifetime (8 hours)
    TOKEN_LIFETIME_SECONDS = int(os.getenv("TOKEN_LIFETIME_SECONDS", str(8 * 60 * 60)))

    # Registration password policy
    PASSWORD_MIN_LEN = int(os.getenv("PASSWORD_MIN_LEN", "8"))

    # Booking day grid: slot starts from opening to closing (inclusive)
    BOOKING_OPENING_TIME = os.getenv("BOOKING_OPENING_TIME", "09:00")
    BOOKING_CLOSING_TIME = os.getenv("BOOKING_CLOSING_TIME", "18:00")
    BOOKING_SLOT_MINUTES = 60

    # Admission control: active bookings a user may hold today or later
    MAX_ACTIVE_BOOKINGS_PER_USER = int(os.getenv("MAX_ACTIVE_BOOKINGS_PER_USER", "2"))

    # Catalog lookups (branches, capsters, services) are cached in-process
    CATALOG_CACHE_TTL_SECONDS = int(os.getenv("CATALOG_CACHE_TTL_SECONDS", "300"))
    CATALOG_CACHE_MAXSIZE = int(os.getenv("CATALOG_CACHE_MAXSIZE", "1024"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
