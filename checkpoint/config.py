# =======================================================================================
# checkpoint/config.py - Configuration Management
# =======================================================================================
import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

def _env_list(name: str, default: str) -> List[str]:
    """Helper to parse comma separated environment variables."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]

class Config:
    # Remote authoritative service
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:3000")
    API_TIMEOUT_MS: int = int(os.getenv("API_TIMEOUT_MS", "10000"))

    # Local fallback store
    LOCAL_DB_URL: str = os.getenv("LOCAL_DB_URL", "sqlite:///./checkpoint_local.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))

    # API Settings
    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    CORS_ALLOW_ORIGINS: List[str] = _env_list("CORS_ALLOW_ORIGINS", "*")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def api_timeout_seconds(self) -> float:
        return self.API_TIMEOUT_MS / 1000.0

config = Config()
