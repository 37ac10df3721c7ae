from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Neo4j settings
    NEO4J_URI: str = "bolt://localhost:7687"
    NEO4J_USERNAME: str = "neo4j"
    NEO4J_PASSWORD: str | None = None
    NEO4J_DATABASE: str = "neo4j"

    # =================================================================
    # DRIVER POOL SETTINGS - Simple and configurable
    # =================================================================
    NEO4J_MAX_CONNECTION_POOL_SIZE: int = 50
    NEO4J_CONNECTION_TIMEOUT: float = 30.0
    NEO4J_CONNECTION_ACQUISITION_TIMEOUT: float = 30.0

    # HTTP caching
    ETAGS_ENABLED: bool = False

    # Pagination
    PAGINATION_MAX_LIMIT: int = 100

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_neo4j_driver_config(self) -> dict:
        """
        Get driver pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "max_connection_pool_size": self.NEO4J_MAX_CONNECTION_POOL_SIZE,
            "connection_timeout": self.NEO4J_CONNECTION_TIMEOUT,
            "connection_acquisition_timeout": self.NEO4J_CONNECTION_ACQUISITION_TIMEOUT,
        }

        if self.environment == "development":
            # Smaller pool for a local single-instance database
            config.update(
                {
                    "max_connection_pool_size": min(self.NEO4J_MAX_CONNECTION_POOL_SIZE, 10),
                    "connection_timeout": 15.0,
                }
            )

        return config


settings = Settings()
