"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "tgflow.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"
DEFAULT_API_URL = "https://api.telegram.org"


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def env_bool(var_name: str, default: bool = False) -> bool:
    """Return boolean interpretation of an environment variable."""
    value = os.getenv(var_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "on"}


@dataclass
class Settings:
    """Bot configuration loaded from environment variables."""

    bot_token: str | None = field(
        default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN")
    )
    api_url: str = field(
        default_factory=lambda: os.getenv("TELEGRAM_API_URL", DEFAULT_API_URL)
    )
    database_url: str | None = field(
        default_factory=lambda: os.getenv("DATABASE_URL")
    )
    auto_answer_callbacks: bool = field(
        default_factory=lambda: env_bool("AUTO_ANSWER_CALLBACKS", False)
    )
    serialize_per_identity: bool = field(
        default_factory=lambda: env_bool("SERIALIZE_PER_IDENTITY", False)
    )
    strict_steps: bool = field(
        default_factory=lambda: env_bool("STRICT_STEPS", False)
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def db_path(self) -> PathLike:
        """Absolute path (or ``:memory:``) of the conversation state database."""
        return resolve_db_path(self.database_url)
