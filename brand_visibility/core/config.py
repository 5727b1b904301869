from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenAI query-idea generator (empty key disables it; keyword templates are used instead)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 30.0
    suggestion_temperature: float = 0.8  # higher = more diverse suggestions

    # App
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.app_env == "production":
        if settings.log_level.upper() == "DEBUG":
            errors.append("LOG_LEVEL must not be DEBUG in production")
        if not settings.log_json:
            errors.append("LOG_JSON must be true in production")

    if settings.openai_timeout <= 0:
        errors.append("OPENAI_TIMEOUT must be positive")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
