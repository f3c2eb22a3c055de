from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDPORT_")

    app_name: str = "CardPort"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/cardport"

    # Preview and commit limits are independent: a preview only scans the
    # first `preview_limit` source lines, a commit rejects batches larger
    # than `import_batch_limit` entries before touching the database.
    preview_limit: int = 10
    import_batch_limit: int = 1000


settings = Settings()
