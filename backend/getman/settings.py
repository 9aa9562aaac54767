"""
Application Settings Management

Centralizes service configuration: server, CORS, Redis, workspace storage
and logging.

IMPORTANT:
- Override values through environment variables (prefix GETMAN_) or a
  .env.local file at the project root
- Tests set GETMAN_ENVIRONMENT=test and rely on the in-memory store
"""

from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/getman/settings.py -> backend/getman/ -> backend/ -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

ENV_FILE = PROJECT_ROOT / ".env.local"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==================== Environment ====================
    # "local-dev" | "test" | "production"
    environment: str = "local-dev"

    # ==================== Server ====================
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = True

    # ==================== Frontend (CORS generation) ====================
    frontend_host: str = "localhost"
    frontend_port: int = 3000

    # ==================== API ====================
    api_prefix: str = "/api/v1"

    # ==================== Redis ====================
    # "fake": in-process FakeRedis, no external service
    # "redis": real Redis instance
    redis_type: str = "fake"

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_index: int = 0
    redis_password: str | None = None
    redis_socket_timeout: int = 5
    redis_socket_connect_timeout: int = 5

    # ==================== Workspace storage ====================
    # true: tree records kept in process memory (single instance only)
    # false: tree records persisted to Redis
    use_memory_store: bool = True

    # Seconds before persisted records expire, 0 keeps them forever
    workspace_ttl: int = 0

    # Name of the synthetic folder anchoring every workspace tree
    bootstrap_root_name: str = "__BOOTSTRAP_ROOT_ITEM"

    # ==================== Paths ====================
    workspace_name: str = "getman-workspace"
    logs_subdir: str = "logs"

    # ==================== Logging ====================
    log_max_bytes: int = 20 * 1024 * 1024  # 20MB
    log_backup_count: int = 5

    model_config = SettingsConfigDict(
        env_prefix="GETMAN_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @computed_field  # type: ignore[misc]
    @property
    def cors_origins(self) -> list[str]:
        """CORS origins derived from the frontend host and port."""
        return [
            f"http://{self.frontend_host}:{self.frontend_port}",
            f"http://127.0.0.1:{self.frontend_port}",
            f"http://localhost:{self.frontend_port}",
        ]

    def validate_configuration(self) -> None:
        """
        Validate configuration settings

        Raises:
            ValueError: If configuration is invalid
        """
        if self.port == self.frontend_port:
            raise ValueError(
                f"Port conflict: Backend port {self.port} conflicts with "
                f"frontend port {self.frontend_port}"
            )
        if self.redis_type not in ("fake", "redis"):
            raise ValueError(f"Unknown redis_type: {self.redis_type!r}")
        if self.workspace_ttl < 0:
            raise ValueError("workspace_ttl must be >= 0")

    @classmethod
    def get_project_root(cls) -> Path:
        """Absolute path of the project root."""
        return PROJECT_ROOT

    def is_local_dev(self) -> bool:
        """Check if running in local development mode."""
        return self.environment == "local-dev"

    def get_workspace_root(self) -> Path:
        """
        Workspace root directory

        - local-dev: {project_root}/getman-workspace/
        - test/production: /app/
        """
        if self.is_local_dev():
            return self.get_project_root() / self.workspace_name
        return Path("/app")

    def get_logs_root(self) -> Path:
        """Logs directory under the workspace root."""
        return self.get_workspace_root() / self.logs_subdir


settings = Settings()
