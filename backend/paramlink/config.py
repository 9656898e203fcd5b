import os
from pathlib import Path


class Settings:
    """Application settings with environment variable overrides."""

    APP_NAME: str = "ParamLink Parameter Sync"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
    DB_PATH: Path = DATA_DIR / "paramlink.db"
    # Exported workbooks and error reports
    EXPORT_DIR: Path = Path(os.getenv("EXPORT_DIR", str(DATA_DIR / "exports")))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"sqlite+aiosqlite:///{DB_PATH}",
    )

    # CORS
    ALLOWED_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost").split(",")
        if o.strip()
    ]

    # Sync behaviour
    PROGRESS_BATCH_ROWS: int = int(os.getenv("PROGRESS_BATCH_ROWS", "10"))
    ERROR_PREVIEW_LINES: int = int(os.getenv("ERROR_PREVIEW_LINES", "10"))
    HISTORY_LIMIT: int = 50


settings = Settings()
