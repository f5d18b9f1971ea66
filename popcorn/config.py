"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Popcorn settings loaded from environment variables."""

    # Catalog (OMDb)
    omdb_api_key: str = ""
    omdb_base_url: str = "https://www.omdbapi.com/"
    request_timeout: float = 15.0

    # Data paths
    data_dir: Path = Path("~/.popcorn").expanduser()
    db_path: Path = Path("~/.popcorn/popcorn.db").expanduser()

    # Storage slot holding the watched collection
    watched_key: str = "watched"

    # Search and rating behaviour
    min_query_length: int = 4
    max_rating: int = 10

    app_title: str = "usePopcorn"
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "POPCORN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton instance, used only to bootstrap the application
settings = Settings()
