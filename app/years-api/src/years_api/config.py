from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (prefix ``YEARS_``)."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="YEARS_")

    # Tree
    root: str = "."
    layout: str = "2006/Jan/2006-01-02.txt"
    metadata_accessor: str = ""

    # Query parsing
    parser_layouts: list[str] = ["2006-01-02", "2006-01-02T15:04:05Z07:00", "2006-01"]
    accept_epoch_seconds: bool = True
    accept_epoch_millis: bool = False
    accept_aliases: bool = True

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False


settings = Settings()
