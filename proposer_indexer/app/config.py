"""Config file."""
from urllib.parse import quote_plus

from pydantic import AnyHttpUrl, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # PROJECT
    project_name: str = Field("proposer-indexer", alias="PROJECT_NAME")

    # UPSTREAM RPC
    rpc_base_url: AnyHttpUrl = Field("https://rpc.osmosis.zone", alias="RPC_BASE_URL")
    rpc_timeout_seconds: float = Field(30.0, gt=0, alias="RPC_TIMEOUT_SECONDS")

    # INDEXER
    lowest_height: int = Field(9_558_628, ge=0, alias="LOWEST_HEIGHT")
    indexer_interval_seconds: float = Field(30.0, ge=0, alias="INDEXER_INTERVAL_SECONDS")
    batch_size: int = Field(5, ge=1, alias="BATCH_SIZE")

    # STARTUP
    store_connect_attempts: int = Field(10, ge=1, alias="STORE_CONNECT_ATTEMPTS")
    store_connect_delay_seconds: float = Field(2.0, ge=0, alias="STORE_CONNECT_DELAY_SECONDS")

    # DATABASE
    postgres_user: str = Field("osmosis", alias="POSTGRES_USER")
    postgres_password: SecretStr = Field(SecretStr("osmosis"), alias="POSTGRES_PASSWORD")
    postgres_server: str = Field("db", alias="POSTGRES_SERVER")
    postgres_port: int = Field(5432, alias="POSTGRES_PORT")
    postgres_db: str = Field("osmosis", alias="POSTGRES_DB")
    database_url: str | None = Field(None, alias="DATABASE_URL")

    # STATISTICS API
    stats_host: str = Field("127.0.0.1", alias="STATS_HOST")
    stats_port: int = Field(8080, alias="STATS_PORT")

    @model_validator(mode="after")
    def assemble_db_url(self) -> "Settings":
        if not self.database_url:
            user = quote_plus(self.postgres_user)
            password = quote_plus(self.postgres_password.get_secret_value())
            host = self.postgres_server
            port = self.postgres_port
            db = self.postgres_db

            self.database_url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

        return self

    @property
    def rpc_base_url_str(self) -> str:
        # AnyHttpUrl normalizes a bare host to "https://host/"
        return str(self.rpc_base_url).rstrip("/")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


settings: Settings = Settings()
