import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


# Known mail services: identifier -> (SMTP host, port)
MAIL_SERVICES = {
    "gmail": ("smtp.gmail.com", 587),
    "outlook": ("smtp-mail.outlook.com", 587),
    "hotmail": ("smtp-mail.outlook.com", 587),
    "yahoo": ("smtp.mail.yahoo.com", 587),
    "zoho": ("smtp.zoho.com", 587),
}


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Process configuration.

    Values come from the environment (and an optional ``.env`` file) but any of
    them can be passed as keyword arguments, so an app can be built with a
    fixed secret and mail account without touching ``os.environ``.
    """

    def __init__(self, **overrides):
        # Security
        self.JWT_SECRET: Optional[str] = os.getenv("JWT_SECRET")
        self.ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
        self.TOKEN_EXPIRE_MINUTES: int = int(os.getenv("TOKEN_EXPIRE_MINUTES", "60"))
        self.BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

        # MongoDB Connection
        self.MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
        self.DATABASE_NAME: str = os.getenv("DATABASE_NAME", "auth")

        # Email / SMTP (used for password reset emails)
        self.EMAIL_SERVICE: str = os.getenv("EMAIL_SERVICE", "gmail")
        self.EMAIL: str = os.getenv("EMAIL", "")
        self.EMAIL_PASSWORD: str = os.getenv("EMAIL_PASSWORD", "")
        self.SMTP_HOST: str = os.getenv("SMTP_HOST", "")
        self.SMTP_PORT: int = int(os.getenv("SMTP_PORT", "0"))
        self.SMTP_USE_TLS: bool = _env_bool("SMTP_USE_TLS", "True")
        self.RESET_URL_BASE: str = os.getenv("RESET_URL_BASE", "http://localhost:5000/reset-password")

        # API
        self.API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
        self.API_PORT: int = int(os.getenv("API_PORT", "5000"))
        self.CORS_ORIGINS: list = (
            os.getenv("CORS_ORIGINS").split(",") if os.getenv("CORS_ORIGINS") else ["*"]
        )

        # Development
        self.DEBUG: bool = _env_bool("DEBUG", "False")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise TypeError(f"Unknown setting: {key}")
            setattr(self, key, value)

        self.validate_config()

    def validate_config(self):
        """Validate critical configuration"""
        if not self.JWT_SECRET:
            raise ValueError("JWT_SECRET environment variable must be set")

        if self.TOKEN_EXPIRE_MINUTES <= 0:
            raise ValueError("TOKEN_EXPIRE_MINUTES must be positive")

        # bcrypt accepts work factors 4..31
        if not 4 <= self.BCRYPT_ROUNDS <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")

        if not self.SMTP_HOST:
            service = MAIL_SERVICES.get(self.EMAIL_SERVICE.lower())
            if service is None:
                raise ValueError(f"Unknown EMAIL_SERVICE '{self.EMAIL_SERVICE}' and no SMTP_HOST set")
            self.SMTP_HOST, default_port = service
            if not self.SMTP_PORT:
                self.SMTP_PORT = default_port
        elif not self.SMTP_PORT:
            self.SMTP_PORT = 587

        self.CORS_ORIGINS = [origin.strip() for origin in self.CORS_ORIGINS if origin.strip()]

    @property
    def EMAIL_SERVICE_ENABLED(self) -> bool:
        return bool(self.EMAIL and self.EMAIL_PASSWORD)

    @property
    def safe_mongodb_uri(self) -> str:
        """MongoDB URI without credentials, for logs."""
        if "@" in self.MONGODB_URI:
            scheme = self.MONGODB_URI.split("://", 1)[0]
            return f"{scheme}://{self.MONGODB_URI.split('@', 1)[1]}"
        return self.MONGODB_URI
