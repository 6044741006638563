from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_base_url: str = "http://localhost:8081/api"
    log_level: str = "INFO"

    # HTTP timeouts (in seconds)
    request_timeout_seconds: int = 30
    upload_chunk_timeout_seconds: int = 180  # Bulk catalog reconciliation is slow server-side

    # Batching
    upload_chunk_size: int = 500
    delete_chunk_size: int = 500

    # Ingestion limits
    max_file_size_mb: int = 50

    model_config = ConfigDict(env_file=".env", env_prefix="PHARMADMIN_", extra="ignore")


settings = Settings()
