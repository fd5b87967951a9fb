"""Configuration handling for the JCI Connect dashboard."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

import yaml  # type: ignore
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


# Load environment variables from .env file if it exists
load_dotenv()

DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


@dataclass
class CalendarDisplayConfig:
    """Fixed layout constants shared by the grid positioning and the hour labels."""

    start_hour: int = 8
    end_hour: int = 24
    cell_height: int = 44
    month_display_cap: int = 3

    def __post_init__(self):
        """Validate calendar display configuration."""
        if not (0 <= self.start_hour <= 23):
            raise ValueError(
                f"start_hour must be between 0 and 23 (got {self.start_hour})"
            )
        if not (1 <= self.end_hour <= 24):
            raise ValueError(f"end_hour must be between 1 and 24 (got {self.end_hour})")
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"Calendar start_hour must be before end_hour (start: {self.start_hour}, end: {self.end_hour})"
            )
        if self.cell_height <= 0:
            raise ValueError("cell_height must be a positive number of pixels")
        if self.month_display_cap < 1:
            raise ValueError("month_display_cap must be at least 1")

    @property
    def total_hours(self) -> int:
        return self.end_hour - self.start_hour

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarDisplayConfig":
        """Create CalendarDisplayConfig from dictionary."""
        return cls(
            start_hour=int(data.get("start_hour", 8)),
            end_hour=int(data.get("end_hour", 24)),
            cell_height=int(data.get("cell_height", 44)),
            month_display_cap=int(data.get("month_display_cap", 3)),
        )


@dataclass
class ZoomConfig:
    """Zoom Server-to-Server OAuth configuration."""

    enabled: bool = False
    account_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    registration_type: int = 0
    api_base_url: str = "https://api.zoom.us/v2"
    oauth_url: str = "https://zoom.us/oauth/token"

    @property
    def is_configured(self) -> bool:
        """Check whether the Zoom API can be called at all."""
        return bool(
            self.enabled and self.account_id and self.client_id and self.client_secret
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZoomConfig":
        """Create Zoom configuration from dictionary."""
        # Credentials can be specified in environment variables
        enabled = data.get("enabled")
        if enabled is None:
            enabled = _env_flag("USE_ZOOM_API")

        return cls(
            enabled=bool(enabled),
            account_id=data.get("account_id") or os.environ.get("ZOOM_ACCOUNT_ID"),
            client_id=data.get("client_id") or os.environ.get("ZOOM_CLIENT_ID"),
            client_secret=data.get("client_secret")
            or os.environ.get("ZOOM_CLIENT_SECRET"),
            timezone=data.get("timezone")
            or os.environ.get("ZOOM_TIMEZONE", DEFAULT_TIMEZONE),
            registration_type=int(
                data.get("registration_type")
                or os.environ.get("ZOOM_REGISTRATION_TYPE", "0")
            ),
            api_base_url=data.get("api_base_url", "https://api.zoom.us/v2"),
            oauth_url=data.get("oauth_url", "https://zoom.us/oauth/token"),
        )


class StorageBackend(Enum):
    """Meeting storage backend type."""

    LOCAL = "local"
    POSTGRES = "postgres"

    @classmethod
    def from_string(cls, value: str) -> "StorageBackend":
        normalized = value.lower().strip()
        if normalized in ("local", "sqlite"):
            return cls.LOCAL
        elif normalized in ("postgres", "postgresql"):
            return cls.POSTGRES
        else:
            raise ValueError(
                f"Invalid storage backend '{value}'. Must be 'local' or 'postgres'."
            )


@dataclass
class PostgresConfig:
    """PostgreSQL database configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "jci_connect"
    user: str = "jci_connect"
    password: str = ""
    ssl_mode: str = "prefer"

    @property
    def connection_string(self) -> str:
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}?sslmode={self.ssl_mode}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PostgresConfig":
        return cls(
            host=data.get("host") or os.environ.get("POSTGRES_HOST", "localhost"),
            port=int(data.get("port") or os.environ.get("POSTGRES_PORT", "5432")),
            database=data.get("database")
            or os.environ.get("POSTGRES_DATABASE", "jci_connect"),
            user=data.get("user") or os.environ.get("POSTGRES_USER", "jci_connect"),
            password=data.get("password") or os.environ.get("POSTGRES_PASSWORD", ""),
            ssl_mode=data.get("ssl_mode", "prefer"),
        )


@dataclass
class StorageConfig:
    """Where meetings are persisted."""

    backend: StorageBackend = StorageBackend.LOCAL
    sqlite_path: str = "config/meetings.db"
    postgres: PostgresConfig = field(default_factory=PostgresConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        backend_str = data.get("backend") or os.environ.get("STORAGE_BACKEND", "local")
        return cls(
            backend=StorageBackend.from_string(backend_str),
            sqlite_path=data.get("sqlite_path")
            or os.environ.get("SQLITE_PATH", "config/meetings.db"),
            postgres=PostgresConfig.from_dict(data.get("postgres", {})),
        )


@dataclass
class AgentConfig:
    """Gemini configuration for agenda generation."""

    api_key: str = ""
    model: str = "gemini-2.5-flash"
    temperature: float = 0.7

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentConfig":
        api_key = (
            data.get("api_key")
            or os.environ.get("GEMINI_API_KEY")
            or os.environ.get("API_KEY", "")
        )
        return cls(
            api_key=api_key,
            model=data.get("model", "gemini-2.5-flash"),
            temperature=float(data.get("temperature", 0.7)),
        )


@dataclass
class WebConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    theme: str = "light"

    def __post_init__(self):
        if self.theme not in ("light", "dark", "system"):
            raise ValueError(
                f"Invalid theme '{self.theme}'. Must be 'light', 'dark', or 'system'."
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WebConfig":
        return cls(
            host=data.get("host") or os.environ.get("WEB_HOST", "0.0.0.0"),
            port=int(data.get("port") or os.environ.get("WEB_PORT", "8080")),
            theme=data.get("theme", "light"),
        )


@dataclass
class AppConfig:
    """Top-level application configuration."""

    timezone: str = DEFAULT_TIMEZONE
    calendar: CalendarDisplayConfig = field(default_factory=CalendarDisplayConfig)
    zoom: ZoomConfig = field(default_factory=ZoomConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    web: WebConfig = field(default_factory=WebConfig)

    def __post_init__(self):
        """Validate application configuration."""
        # Validate timezone
        try:
            ZoneInfo(self.timezone)
        except Exception as e:
            raise ValueError(
                f"Invalid timezone '{self.timezone}': {e}. "
                "Must be a valid IANA timezone (e.g., 'Asia/Kuala_Lumpur')"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create configuration from dictionary."""
        return cls(
            timezone=data.get("timezone")
            or os.environ.get("APP_TIMEZONE", DEFAULT_TIMEZONE),
            calendar=CalendarDisplayConfig.from_dict(data.get("calendar", {})),
            zoom=ZoomConfig.from_dict(data.get("zoom", {})),
            storage=StorageConfig.from_dict(data.get("storage", {})),
            agent=AgentConfig.from_dict(data.get("agent", {})),
            web=WebConfig.from_dict(data.get("web", {})),
        )


_last_loaded_config_path: Optional[Path] = None


def get_last_loaded_config_path() -> Optional[Path]:
    return _last_loaded_config_path


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration from file or environment variables.

    Args:
        config_path: Path to configuration file

    Returns:
        Application configuration

    Raises:
        ValueError: If configuration is invalid
    """
    # Container paths first (Docker), then local dev paths
    default_locations = [
        Path("/app/config/config.yaml"),
        Path("/app/config/config.yml"),
        Path("config/config.yaml"),
        Path("config/config.yml"),
        Path("config.yaml"),
        Path("config.yml"),
        Path("~/.config/jci-connect/config.yaml"),
    ]

    config_data: Dict[str, Any] = {}
    global _last_loaded_config_path

    if config_path:
        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {config_path}")
            _last_loaded_config_path = Path(config_path).expanduser()
        except FileNotFoundError:
            logger.warning(f"Configuration file not found: {config_path}")
    else:
        for path in default_locations:
            expanded_path = path.expanduser()
            if expanded_path.exists():
                with open(expanded_path, "r") as f:
                    config_data = yaml.safe_load(f) or {}
                logger.info(f"Loaded configuration from {expanded_path}")
                _last_loaded_config_path = expanded_path
                break

    # Every section falls back to environment variables
    if not config_data:
        logger.info("No configuration file found, using environment variables")

    try:
        return AppConfig.from_dict(config_data)
    except (TypeError, KeyError) as e:
        raise ValueError(f"Invalid configuration: {e}")
