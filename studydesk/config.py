# studydesk/config.py
import os
from dotenv import load_dotenv

load_dotenv()

def _as_bool(val: str | None, default=False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}

def _as_set(val: str | None, default: set[str]) -> set[str]:
    if not val:
        return set(default)
    return {part.strip().lower().lstrip(".") for part in val.split(",") if part.strip()}

_DEFAULT_EXTENSIONS = {
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "txt", "md", "csv",
    "zip", "png", "jpg", "jpeg", "gif", "webp",
}
_DEFAULT_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


class Config:
    # --- Core ---
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    ENV = os.getenv("ENV", "development")

    # DB: sqlite file by default, any SQLAlchemy URL (e.g. postgresql://) otherwise
    SQLALCHEMY_DATABASE_URI = (
        os.getenv("SQLALCHEMY_DATABASE_URI")
        or os.getenv("DATABASE_URL")
        or "sqlite:///studydesk.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_DB = _as_bool(os.getenv("AUTO_CREATE_DB", "1"))

    # --- Uploads ---
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER")  # default: <instance>/uploads
    UPLOAD_URL_PREFIX = "/uploads"
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(50 * 1024 * 1024)))  # 50MB
    ALLOWED_EXTENSIONS = _as_set(os.getenv("ALLOWED_EXTENSIONS"), _DEFAULT_EXTENSIONS)
    ALLOWED_IMAGE_EXTENSIONS = _as_set(os.getenv("ALLOWED_IMAGE_EXTENSIONS"), _DEFAULT_IMAGE_EXTENSIONS)
    RECLAIM_WORKERS = int(os.getenv("RECLAIM_WORKERS", "1"))

    # --- Sessions ---
    SESSION_BACKEND = os.getenv("SESSION_BACKEND", "sql")  # sql|memory|file
    SESSION_FILE_DIR = os.getenv("SESSION_FILE_DIR")  # default: <instance>/sessions
    SESSION_LIFETIME = int(os.getenv("SESSION_LIFETIME", str(24 * 60 * 60)))
    SESSION_ID_COOKIE = os.getenv("SESSION_ID_COOKIE", "studydesk.sid")
    LOGIN_REDIRECT = os.getenv("LOGIN_REDIRECT", "/home.html")

    # --- Logging ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_FILENAME = os.getenv("LOG_FILENAME", "studydesk.log")
    LOG_JSON = _as_bool(os.getenv("LOG_JSON", "0"))

    # --- Sentry ---
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0"))

    # --- Security cookies (recommended for prod) ---
    SESSION_COOKIE_SECURE = _as_bool(os.getenv("SESSION_COOKIE_SECURE", "1" if ENV == "production" else "0"))
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
