"""
Runtime configuration for the Studio Sara pricing service.

Values are read once from the environment at import time.
"""
import os

STORE_CURRENCY = os.getenv("STORE_CURRENCY", "INR").upper()
HOME_COUNTRY = os.getenv("HOME_COUNTRY", "IN").upper()
MONEY_PLACES = int(os.getenv("MONEY_PLACES", 2))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
