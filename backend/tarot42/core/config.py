# tarot42/core/config.py
import os

from dotenv import load_dotenv


def str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def merge_unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in items:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


class Settings:
    def __init__(self) -> None:
        self.ENV = os.getenv("ENV", "dev").strip().lower()  # dev | prod
        if self.ENV != "prod":
            # Load .env only for non-prod so prod can't be accidentally influenced by local files.
            load_dotenv()

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        self.PORT = int(os.getenv("PORT", "3000"))

        # ----------------------------
        # Database
        # ----------------------------
        self.DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
        self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
        self.DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "5"))
        self.DB_POOL_TIMEOUT_SECONDS = float(os.getenv("DB_POOL_TIMEOUT_SECONDS", "5"))
        # Applied per connection on PostgreSQL only. 0 = server default.
        self.DB_STATEMENT_TIMEOUT_MS = int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000"))

        # ----------------------------
        # Auth / sessions
        # ----------------------------
        self.AUTH_SECRET = os.getenv("AUTH_SECRET", "")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.AUTH_LOOKUP_TIMEOUT_SECONDS = float(os.getenv("AUTH_LOOKUP_TIMEOUT_SECONDS", "5"))
        self.SESSION_EXPIRE_DAYS = int(os.getenv("SESSION_EXPIRE_DAYS", "7"))
        self.SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "tarot42.session_token").strip()
        self.SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "lax")

        self.PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))
        self.REQUIRE_EMAIL_VERIFICATION = str_to_bool(os.getenv("REQUIRE_EMAIL_VERIFICATION"), default=True)
        self.AUTO_SIGN_IN_AFTER_VERIFICATION = str_to_bool(
            os.getenv("AUTO_SIGN_IN_AFTER_VERIFICATION"), default=True
        )
        self.EMAIL_VERIFY_TOKEN_EXPIRE_HOURS = int(os.getenv("EMAIL_VERIFY_TOKEN_EXPIRE_HOURS", "1"))

        # OAuth client credentials for linked Google accounts.
        self.GOOGLE_CLIENT_ID = os.getenv("GOOGLE_WEB_CLIENT_ID", "")
        self.GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_WEB_CLIENT_SECRET", "")

        if self.ENV == "prod":
            self.PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").strip().rstrip("/")
        else:
            self.PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").strip().rstrip("/")

        # ----------------------------
        # CORS
        # ----------------------------
        dev_defaults = [
            "http://localhost:8081",
            "tarot42://",
        ]

        cors_from_env = parse_csv(os.getenv("CORS_ORIGINS"))
        if self.ENV == "prod":
            self.CORS_ORIGINS = merge_unique(cors_from_env)
        else:
            self.CORS_ORIGINS = merge_unique(cors_from_env + dev_defaults)

        # ----------------------------
        # Email delivery
        # ----------------------------
        self.EMAIL_ENABLED = str_to_bool(os.getenv("EMAIL_ENABLED"), default=False)
        self.EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "smtp").strip().lower()
        self.FROM_EMAIL = os.getenv("FROM_EMAIL", '"Tarot42 App" <noreply@tarot42.dev>')
        self.RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")

        self.SMTP_HOST = os.getenv("SMTP_HOST", "")
        self.SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
        self.SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
        self.SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
        self.SMTP_USE_TLS = str_to_bool(os.getenv("SMTP_USE_TLS", "true"), default=True)
        # Port 465 implies implicit TLS unless explicitly overridden.
        self.SMTP_USE_SSL = str_to_bool(os.getenv("SMTP_USE_SSL"), default=self.SMTP_PORT == 465)

        # ----------------------------
        # Rate limiting
        # ----------------------------
        self.ENABLE_RATE_LIMITING = str_to_bool(os.getenv("ENABLE_RATE_LIMITING", "false"))
        self.AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "10/minute")

        self._validate_prod()

    def _validate_prod(self) -> None:
        if self.ENV != "prod":
            return

        missing: list[str] = []

        if not self.AUTH_SECRET:
            missing.append("AUTH_SECRET")
        if not self.DATABASE_URL:
            missing.append("DATABASE_URL")
        if not self.PUBLIC_BASE_URL:
            missing.append("PUBLIC_BASE_URL")
        if not self.CORS_ORIGINS:
            missing.append("CORS_ORIGINS")

        cors_joined = ",".join(self.CORS_ORIGINS)
        if "localhost" in cors_joined or "127.0.0.1" in cors_joined:
            raise RuntimeError("CORS_ORIGINS contains localhost/dev origins in prod")

        if self.PUBLIC_BASE_URL and not self.PUBLIC_BASE_URL.startswith("https://"):
            raise RuntimeError("PUBLIC_BASE_URL should be https://... in prod")

        if missing:
            raise RuntimeError(f"Missing required prod env vars: {', '.join(missing)}")

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"

    @property
    def database_url(self) -> str:
        if not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL must be set")
        url = self.DATABASE_URL
        # Hosted providers hand out postgres:// URLs; SQLAlchemy wants an explicit driver.
        if url.startswith("postgres://"):
            url = "postgresql+psycopg2://" + url[len("postgres://"):]
        elif url.startswith("postgresql://"):
            url = "postgresql+psycopg2://" + url[len("postgresql://"):]
        return url


settings = Settings()


def require_auth_secret() -> None:
    if not settings.AUTH_SECRET:
        raise RuntimeError("AUTH_SECRET must be set")
