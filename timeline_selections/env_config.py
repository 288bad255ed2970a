import os

from dotenv import load_dotenv

from timeline_selections.config import SELECTION_GROUPS_FILE

load_dotenv()


APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "4000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SELECTION_API_BASE = os.getenv("SELECTION_API_BASE", "http://localhost:4000")


def storage_backend() -> str:
    """
    json (по умолчанию) | postgres.
    Читается на каждый вызов, чтобы тесты могли подменять окружение.
    """
    return os.getenv("SELECTION_STORAGE", "json").strip().lower()


def selection_data_file() -> str:
    return os.getenv("SELECTION_DATA_FILE", str(SELECTION_GROUPS_FILE))
