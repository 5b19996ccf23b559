from pydantic_settings import BaseSettings
from pydantic import Field, validator
from dotenv import load_dotenv

load_dotenv(".env")

class Settings(BaseSettings):
    # Storage Configuration
    DATABASE_PATH: str = Field(default="data/healing_records.db", description="Path to the SQLite database file")
    DATABASE_TIMEOUT: float = Field(default=10.0, description="Seconds to wait for the SQLite write lock")

    # Record-keeping policy (selector keys, metrics, superseding) lives in YAML
    HEALING_CONFIG_PATH: str = Field(default="config/healing_records.yaml", description="Path to the record-keeping policy file")

    # Metrics Gateway Configuration
    METRICS_SERVICE_URL: str = Field(default="http://localhost:7878", description="Base URL of the metrics gateway")
    METRICS_TIMEOUT: float = Field(default=5.0, description="Timeout for metrics gateway calls (in seconds)")

    # Service Configuration
    APP_PORT: int = Field(default=7878, description="Port for FastAPI service")
    LOG_LEVEL: str = Field(default="INFO", description="Root logging level")
    LOG_DIR: str = Field(default="logs", description="Directory for rotating log files")

    @validator('LOG_LEVEL')
    def validate_log_level(cls, v):
        """Validate that LOG_LEVEL is a standard logging level name."""
        if v.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError(f"LOG_LEVEL must be a logging level name, got '{v}'")
        return v.upper()

    @validator('DATABASE_TIMEOUT', 'METRICS_TIMEOUT')
    def validate_timeouts(cls, v):
        """Validate that timeouts are positive."""
        if v <= 0:
            raise ValueError(f"Timeouts must be positive, got {v}")
        return v

    @validator('METRICS_SERVICE_URL')
    def validate_metrics_url(cls, v):
        """Strip the trailing slash so endpoint paths can be appended."""
        return v.rstrip('/')

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = 'allow'  # Allow extra fields from .env file

settings = Settings()
