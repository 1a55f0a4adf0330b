from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Lighthouse Microservice"
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # ── Collector API ───────────────────────────
    API_URL: str = "http://localhost:3000"
    COLLECTOR_RESULTS_PATH: str = "/api/lighthouse/results"
    COLLECTOR_TIMEOUT: float = 30.0

    # ── Lighthouse / Chrome ─────────────────────
    LIGHTHOUSE_BIN: str = "lighthouse"
    LIGHTHOUSE_TIMEOUT: float = 120.0
    CHROMEDRIVER_PATH: Optional[str] = None

    # ── Jobs ────────────────────────────────────
    MAX_CONCURRENT_JOBS: int = 2
    SHUTDOWN_GRACE_PERIOD: float = 10.0

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def collector_url(self) -> str:
        return self.API_URL.rstrip("/") + self.COLLECTOR_RESULTS_PATH


settings = Settings()
