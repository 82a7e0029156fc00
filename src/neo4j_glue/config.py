"""Configuration management for Neo4j connections and ephemeral databases.

Loads configuration from environment variables and an optional .env file
in the project root.

Example .env:

    NEO4J_URI=bolt://localhost:7687
    NEO4J_USERNAME=neo4j
    NEO4J_PASSWORD=your_password_here
    NEO4J_DATABASE=neo4j
    NEO4J_EPHEMERAL_IMAGE=neo4j:5
    LOG_LEVEL=INFO

Credentials are optional: without them the driver connects anonymously.
"""

from typing import Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment / .env file.

    We use explicit aliases so the mapping to env vars is obvious and
    easy to consume from scripts.
    """

    # Neo4j configuration
    neo4j_uri: AnyUrl = Field(
        "bolt://localhost:7687",
        alias="NEO4J_URI",
        description="Neo4j connection URI, e.g. bolt://localhost:7687",
    )
    neo4j_username: Optional[str] = Field(
        None,
        alias="NEO4J_USERNAME",
        description="Neo4j username, omit for anonymous access",
    )
    neo4j_password: Optional[str] = Field(
        None,
        alias="NEO4J_PASSWORD",
        description="Neo4j password, omit for anonymous access",
    )
    neo4j_database: Optional[str] = Field(
        None,
        alias="NEO4J_DATABASE",
        description="Neo4j database name, server default when unset",
    )
    neo4j_max_connection_lifetime: int = Field(
        3600,
        alias="NEO4J_MAX_CONNECTION_LIFETIME",
        description="Maximum lifetime of a Neo4j connection in seconds",
    )
    neo4j_max_connection_pool_size: int = Field(
        100,
        alias="NEO4J_MAX_CONNECTION_POOL_SIZE",
        description="Maximum number of connections in the Neo4j pool",
    )

    # Ephemeral database configuration
    ephemeral_image: str = Field(
        "neo4j:5",
        alias="NEO4J_EPHEMERAL_IMAGE",
        description="Docker image used to boot disposable test databases",
    )
    ephemeral_startup_timeout: int = Field(
        120,
        alias="NEO4J_EPHEMERAL_STARTUP_TIMEOUT",
        description="Seconds to wait for a disposable database to accept Bolt",
    )

    log_level: str = Field(
        "INFO",
        alias="LOG_LEVEL",
        description="Log level for the CLI (e.g. DEBUG, INFO, WARN, ERROR)",
    )

    # Pydantic v2 settings for env loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,  # we use explicit aliases, so keep env lookup strict
        extra="ignore",
        populate_by_name=False,
    )
