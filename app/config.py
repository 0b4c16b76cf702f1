from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Research pipeline
    research_max_iterations: int = 3
    research_top_results: int = 3

    # Search provider
    search_provider: str = "mock"  # mock
    search_latency_seconds: float = 1.0

    # Progress stream
    progress_heartbeat_seconds: float = 30.0

    # Entity store
    seed_demo_data: bool = True

    # App
    cors_origins: str = "http://localhost:8080"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_file_enabled: bool = True
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
