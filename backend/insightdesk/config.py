from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 5432
    db_username: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "insightdesk"
    database_url: str | None = None

    llm_provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str | None = None

    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    llm_temperature: float = 0.7
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 60.0

    # Simulated sync duration for a data source refresh
    sync_delay_seconds: int = 3
    scheduler_enabled: bool = True

    # Seed the demo insight feed for this user on startup (optional)
    demo_user_id: str | None = None

    jwt_secret: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"

    port: int = 8000
    env: str = "development"

    model_config = {"env_file": ".env", "extra": "ignore", "env_file_encoding": "utf-8"}

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.db_username}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
