"""
Application Configuration Module
"""
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine BASE_DIR in a packaging-aware way (works for dev and PyInstaller 'frozen' exe)
if getattr(sys, "frozen", False):
    _BASE_DIR = Path(sys.executable).parent
else:
    _BASE_DIR = Path(__file__).resolve().parent.parent.parent


class AppConfig(BaseSettings):
    """Ustawienia aplikacji (nadpisywalne przez zmienne POMODORO_* lub plik .env)"""

    model_config = SettingsConfigDict(
        env_prefix="POMODORO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Info
    APP_NAME: str = "Pomodoro Sync"
    APP_VERSION: str = "0.1.0"

    # Paths
    BASE_DIR: Path = _BASE_DIR
    DATA_DIR: Path = _BASE_DIR / "data"
    LOGS_DIR: Path = _BASE_DIR / "logs"

    # Backend
    API_BASE_URL: str = Field(
        default="http://localhost:5000",
        description="Base URL of the Pomodoro session/settings backend",
    )
    REQUEST_TIMEOUT: float = Field(default=10.0, description="HTTP timeout in seconds")
    HEALTH_CHECK_TIMEOUT: float = Field(default=5.0, description="Health check timeout in seconds")

    # Timer
    TICK_INTERVAL_MS: int = 1000
    AUTO_CHAIN_DELAY_MS: int = 1000
    STARTUP_RESTORE_DELAY_MS: int = 100

    # Ręczne wymuszenie trybu offline przy starcie
    OFFLINE_MODE: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "1 month"

    @property
    def local_db_path(self) -> Path:
        return self.DATA_DIR / "pomodoro.db"


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get application configuration instance"""
    return config


def ensure_directories() -> None:
    """Create necessary directories if they don't exist"""
    for directory in (config.DATA_DIR, config.LOGS_DIR):
        directory.mkdir(parents=True, exist_ok=True)
