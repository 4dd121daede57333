from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Docker Engine API (unix socket)
    docker_socket: str = "/var/run/docker.sock"
    docker_timeout: float = 10.0

    # Cache — "redis" for a shared cache, "local" for in-process only
    cache_backend: str = "redis"
    redis_url: str = "redis://127.0.0.1:6379/0"
    default_cache_ttl: int = 60  # seconds, overridden by --cache-ttl

    # SQLite store
    db_path: str = "data/monitor.db"
    db_pool_size: int = 2
    db_pool_timeout: float = 5.0  # seconds to wait for a free connection

    # Watch mode — sleep between passes, independent of the cache TTL
    watch_interval: float = 5.0

    # Logging
    log_level: str = "INFO"


settings = Settings()
