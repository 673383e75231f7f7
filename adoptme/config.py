from pydantic import BaseModel
import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()  # loads the .env at the project root


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "AdoptMe API")
    env: str = os.getenv("APP_ENV", "dev")
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    db_name: str = os.getenv("DB_NAME", "adoptme")
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
    jwt_expires_hours: int = int(os.getenv("JWT_EXPIRES_HOURS", "168"))
    session_secret: str = os.getenv(
        "SESSION_SECRET", "adoptme-super-secret-key-change-in-production-min-32-chars"
    )
    session_max_age: int = int(os.getenv("SESSION_MAX_AGE", "86400"))
    session_name: str = os.getenv("SESSION_NAME", "adoptme.session")
    session_https_only: bool = _flag("SESSION_HTTPS_ONLY")
    session_refresh_seconds: int = int(os.getenv("SESSION_REFRESH_SECONDS", "1800"))
    throttle_limit: int = int(os.getenv("THROTTLE_LIMIT", "100"))
    throttle_ttl: int = int(os.getenv("THROTTLE_TTL", "60"))
    media_dir: str = os.getenv("MEDIA_DIR", str(Path(__file__).resolve().parents[1] / "media"))
    frontend_base_url: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:3001")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    notify_on_new_pet: bool = _flag("NOTIFY_ON_NEW_PET", "1")


_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
        Path(_settings.media_dir).mkdir(parents=True, exist_ok=True)
        Path(_settings.media_dir, "pets").mkdir(parents=True, exist_ok=True)
        Path(_settings.media_dir, "documents").mkdir(parents=True, exist_ok=True)
    return _settings
