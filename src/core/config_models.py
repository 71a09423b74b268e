from pathlib import Path

from pydantic import BaseModel, Field

API_DIR = Path(__file__).resolve().parent.parent / "api"


class DatabaseConfig(BaseModel):
    """Database connection and engine configuration."""

    url: str = Field(..., description="Database connection URL")
    echo: bool = Field(default=False, description="Enable SQL query logging")
    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=20, ge=0, le=100)
    pool_timeout: int = Field(default=30, ge=1, le=300)
    pool_pre_ping: bool = Field(default=True)
    create_tables: bool = Field(default=True, description="Create missing tables on startup")


class ServerConfig(BaseModel):
    """Server runtime configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, ge=1, le=65535, description="Server port")
    reload: bool = Field(default=False, description="Enable auto-reload in development")
    check_db_on_start: bool = Field(
        default=True, description="Run DB connection check on startup"
    )


class LoggingConfig(BaseModel):
    """Application logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


class ViewsConfig(BaseModel):
    """Server-side rendering configuration."""

    templates_dir: Path = Field(default=API_DIR / "templates")
    static_dir: Path = Field(default=API_DIR / "static")
    summary_length: int = Field(default=50, ge=0, description="Characters shown in list summaries")
