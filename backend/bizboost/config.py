# bizboost/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Byte-Sized Business Boost API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend (cookie auth needs explicit origins, not "*")
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if o.strip()
    ]

    # Session cookie
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session_id")
    session_ttl_days: int = int(os.getenv("SESSION_TTL_DAYS", "7"))
    cookie_secure: bool = _flag("COOKIE_SECURE", "false")  # Enable behind HTTPS
    session_sweep_interval_seconds: int = int(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", "3600"))

    # Captcha
    captcha_ttl_seconds: int = int(os.getenv("CAPTCHA_TTL_SECONDS", "300"))
    captcha_sweep_interval_seconds: int = int(os.getenv("CAPTCHA_SWEEP_INTERVAL_SECONDS", "60"))
    signup_captcha_required: bool = _flag("SIGNUP_CAPTCHA_REQUIRED", "true")

    # Key-value store backing captchas and rate-limit counters
    kv_backend: str = os.getenv("KV_BACKEND", "memory")

    # Auth rate limiting (per client IP, fixed window); 0 disables
    auth_rate_limit_max: int = int(os.getenv("AUTH_RATE_LIMIT_MAX", "20"))
    auth_rate_limit_window_seconds: int = int(os.getenv("AUTH_RATE_LIMIT_WINDOW_SECONDS", "900"))

    # General limit for every /api route (per client IP, fixed window); 0 disables
    api_rate_limit_max: int = int(os.getenv("API_RATE_LIMIT_MAX", "100"))
    api_rate_limit_window_seconds: int = int(os.getenv("API_RATE_LIMIT_WINDOW_SECONDS", "900"))

    # Account rules
    min_password_length: int = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_ttl_days * 24 * 60 * 60


settings = Settings()  # Instantiate configuration
