"""
Application settings, read once from the environment at process start
"""
import os
import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict


class Settings(BaseModel):
    """Process configuration passed explicitly into every component"""
    model_config = ConfigDict(frozen=True)

    database_url: str = "sqlite:///./bookings.db"

    # Admin Basic Auth. The defaults are for local development only.
    admin_user: str = "admin"
    admin_pass: str = "change-me"

    # Transactional email (any missing value disables notifications)
    email_api_key: Optional[str] = None
    email_from: Optional[str] = None
    owner_email: Optional[str] = None
    email_api_url: str = "https://api.resend.com/emails"
    email_timeout: float = 10.0
    business_name: str = "Repair Service"

    cors_origins: List[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def email_enabled(self) -> bool:
        return bool(self.email_api_key and self.email_from and self.owner_email)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and .env if present)"""
        load_dotenv()

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./bookings.db"),
            admin_user=os.getenv("ADMIN_USER", "admin"),
            admin_pass=os.getenv("ADMIN_PASS", "change-me"),
            email_api_key=os.getenv("RESEND_API_KEY") or None,
            email_from=os.getenv("EMAIL_FROM") or None,
            owner_email=os.getenv("OWNER_EMAIL") or None,
            email_api_url=os.getenv("EMAIL_API_URL", "https://api.resend.com/emails"),
            email_timeout=float(os.getenv("EMAIL_TIMEOUT", "10")),
            business_name=os.getenv("BUSINESS_NAME", "Repair Service"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO"):
    """Set up root logging for the process"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
