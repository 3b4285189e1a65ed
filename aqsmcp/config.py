from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Core Settings
    base_url: str = Field("https://aqs.epa.gov/data/api", description="EPA AQS Data API base URL")
    rate_limit_seconds: float = Field(5.0, description="Minimum spacing between request starts")
    request_timeout: float = Field(60.0, description="HTTP timeout in seconds")

    # Logging Settings
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Enable JSON logging")

    model_config = SettingsConfigDict(env_file=".env", env_prefix="AQS_", extra="ignore")


settings = Settings()
