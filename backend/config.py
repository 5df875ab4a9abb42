from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./clinical_timeline.db"
    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    api_base_url: str = "http://localhost:8000"
    allowed_origins: str = "http://localhost:3000"
    max_upload_size_mb: int = 20

    timeline_key: str = "data/events.json"
    upload_prefix: str = "exams"
    seed_timeline_on_empty: bool = True

    analysis_service_url: str | None = None
    analysis_timeout_seconds: float = 120.0
    openai_api_key: str | None = None
    llama_cloud_api_key: str | None = None


settings = Settings()
