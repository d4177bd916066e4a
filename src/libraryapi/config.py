"""Configuration management for the library service.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DEFAULT_OVERDUE_MESSAGE = (
    "Attention! You have an overdue loan. "
    "Please return the book as soon as possible."
)

MAIL_BACKENDS = ("smtp", "console")
SMTP_SECURITY_MODES = ("starttls", "ssl", "none")


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Lending
    grace_days: int

    # Scheduler
    schedule_interval: float  # seconds
    overdue_message: str

    # Mail
    mail_backend: str
    mail_sender: str
    smtp_host: str
    smtp_port: int
    smtp_username: Optional[str]
    smtp_password: Optional[str]
    smtp_security: str
    smtp_timeout: float  # seconds

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get(
            "LIBRARY_DB_PATH",
            str(Path.home() / ".libraryapi" / "library.db"),
        )

        return cls(
            db_path=Path(db_path_str).expanduser(),
            grace_days=int(os.environ.get("LIBRARY_GRACE_DAYS", "4")),
            schedule_interval=float(os.environ.get("LIBRARY_SCHEDULE_INTERVAL", "86400")),
            overdue_message=os.environ.get("LIBRARY_OVERDUE_MESSAGE", DEFAULT_OVERDUE_MESSAGE),
            mail_backend=os.environ.get("LIBRARY_MAIL_BACKEND", "smtp").lower(),
            mail_sender=os.environ.get("LIBRARY_MAIL_SENDER", "library@localhost"),
            smtp_host=os.environ.get("SMTP_HOST", "localhost"),
            smtp_port=int(os.environ.get("SMTP_PORT", "587")),
            smtp_username=os.environ.get("SMTP_USERNAME"),
            smtp_password=os.environ.get("SMTP_PASSWORD"),
            smtp_security=os.environ.get("SMTP_SECURITY", "starttls").lower(),
            smtp_timeout=float(os.environ.get("SMTP_TIMEOUT", "30")),
            log_level=os.environ.get("LIBRARY_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.grace_days < 0:
            errors.append(f"Grace period cannot be negative: {self.grace_days}")
        if self.schedule_interval <= 0:
            errors.append(f"Schedule interval must be positive: {self.schedule_interval}")
        if self.smtp_timeout <= 0:
            errors.append(f"SMTP timeout must be positive: {self.smtp_timeout}")
        if self.mail_backend not in MAIL_BACKENDS:
            errors.append(f"Unknown mail backend: {self.mail_backend}")
        if self.smtp_security not in SMTP_SECURITY_MODES:
            errors.append(f"Unknown SMTP security mode: {self.smtp_security}")
        if not self.mail_sender:
            errors.append("Mail sender is required")

        # Check database directory is writable
        if str(self.db_path) != ":memory:" and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        return errors

    def has_smtp_credentials(self) -> bool:
        """Check if SMTP login credentials are present."""
        return bool(self.smtp_username and self.smtp_password)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
