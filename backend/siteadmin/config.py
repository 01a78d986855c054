"""
SiteAdmin Backend - Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types/ranges and produces one frozen Settings value.
Who:   Built once at process entry (siteadmin.main / siteadmin.__main__) and
       passed explicitly to create_app(); components receive the values they
       need through their constructors.
When:  Read once at startup. There is no hot reload.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development. A deployment
    that sends mail MUST provide SMTP_USER, SMTP_PASS, MAIL_FROM and MAIL_TO.

    Attributes are grouped by concern for readability.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    # What: Deployment environment name ("development", "production", ...)
    # Effect: "production" enables HSTS and makes FORCE_HTTPS take effect
    app_env: str = Field(default="development")

    # What: Redirect plain HTTP to HTTPS (only honoured in production)
    force_https: bool = Field(default=False)

    # What: Trust X-Forwarded-For / X-Forwarded-Proto from a reverse proxy
    # Effect: Rate limiter keys and the HTTPS redirect use the forwarded values
    trust_proxy: bool = Field(default=True)

    # What: Number of reverse proxies in front of the app that append to
    #       X-Forwarded-For. The client address is the entry that many places
    #       from the right; entries further left are client-supplied.
    proxy_hops: int = Field(default=1, ge=1)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: "*" or comma-separated origins
    cors_origin: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        origins = [origin.strip() for origin in self.cors_origin.split(",")]
        return [origin for origin in origins if origin] or ["*"]

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() in {"production", "prod"}

    # ── Storage ───────────────────────────────────────────────────────────
    # What: Directory holding one JSON document per resource
    data_dir: str = Field(default="./data")

    # What: Directory served under /uploads
    upload_dir: str = Field(default="./public/uploads")

    # What: Upload size ceiling in bytes (5MB)
    max_upload_size: int = Field(default=5 * 1024 * 1024, ge=1)

    # What: Upper bound in seconds for a single file read or write
    file_io_timeout: float = Field(default=5.0, gt=0)

    # ── Mail relay ────────────────────────────────────────────────────────
    # What: Well-known relay identifier (icloud, gmail, outlook, ...)
    # Override: SMTP_HOST / SMTP_PORT take precedence when set
    mail_service: str = Field(default="icloud")
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: Optional[int] = Field(default=None, ge=1, le=65535)
    smtp_user: str = Field(default="")
    smtp_pass: str = Field(default="")
    mail_from: str = Field(default="")
    mail_to: str = Field(default="")
    smtp_timeout: float = Field(default=15.0, gt=0)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # CORS_ORIGIN and cors_origin both work
        "extra": "ignore",
        "frozen": True,
    }

    def missing_mail_settings(self) -> List[str]:
        """
        List the mail settings a working relay needs but are unset.

        Called during startup (logged as a warning) and by GET /health. The
        server still starts without them; only /api/send-email fails.
        """
        required = {
            "SMTP_USER": self.smtp_user,
            "SMTP_PASS": self.smtp_pass,
            "MAIL_FROM": self.mail_from,
            "MAIL_TO": self.mail_to,
        }
        return [name for name, value in required.items() if not value]
