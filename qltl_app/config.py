from __future__ import annotations
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

APP_TITLE = "QLTL"
APP_SUBTITLE = "Hệ thống quản lý tài liệu"

DEFAULT_MAX_FILE_SIZE_MB = 10
DEFAULT_MAX_FILE_PER_UPLOAD = 5
DEFAULT_ALLOWED_FILE_TYPES: List[str] = [".pdf", ".doc", ".docx"]

PDF_DPI_DEFAULT = 110

class Settings(BaseSettings):
    api_base_url: str = "http://localhost:5000/api"
    request_timeout: float = 60.0
    get_retries: int = 3

    client_db_path: str = "qltl_state.db"

    log_level: str = "INFO"
    max_workers: int = 5

    model_config = SettingsConfigDict(env_prefix="QLTL_", env_file=".env", extra="ignore")

settings = Settings()
