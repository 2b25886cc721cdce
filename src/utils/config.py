# runtime settings, read once from the environment (and .env if present)
import os

from dotenv import load_dotenv

load_dotenv()


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# backend
DB_PATH = os.getenv("DB_PATH", "data/shop.sqlite")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "4000"))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@thestore.fh")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "th3bestPassw0rd")

# client
API_URL = os.getenv("API_URL", f"http://{HOST}:{PORT}")
STORAGE_PATH = os.getenv("STORAGE_PATH", "data/client_storage.json")
NOTICE_SECONDS = _float("NOTICE_SECONDS", 1.8)
CHECKOUT_SUCCESS_DELAY = _float("CHECKOUT_SUCCESS_DELAY", 0.9)

# logging
DEBUG = bool(os.getenv("DEBUG"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE")
