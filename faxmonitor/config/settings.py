from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "faxmonitor"
    db_username: str = "faxmonitor"
    db_password: str = "secret"

    fax_source: str = "memory"
    fax_server_host: str = ""
    fax_queue_account: str = ""

    poll_interval_seconds: float = 1.0

    # Extra undocumented codes merged over the built-in table.
    undocumented_status_codes: dict[int, str] = {}
    undocumented_extended_status_codes: dict[int, str] = {}
