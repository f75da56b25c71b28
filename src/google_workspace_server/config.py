"""Environment-based configuration for google-workspace-server.

Environment Variables:
    GOOGLE_CLIENT_ID: OAuth client ID (required)
    GOOGLE_CLIENT_SECRET: OAuth client secret (required)
    GOOGLE_REFRESH_TOKEN: Long-lived refresh token (required)
    PORT: HTTP shim port (default: 4100)
    HOST: HTTP shim bind address (default: 0.0.0.0)
    GMAIL_FETCH_CONCURRENCY: Max concurrent message detail fetches (default: 10)
    LOG_LEVEL: Logging level name (default: INFO)

Values may also come from a ``.env`` file in the working directory.
"""

import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError

from google_workspace_server.auth.models import OAuthClientCredentials
from google_workspace_server.errors import ConfigurationError

DEFAULT_HOST = "0.0.0.0"  # nosec B104 - the HTTP shim is meant to be reachable
DEFAULT_PORT = 4100
DEFAULT_FETCH_CONCURRENCY = 10

CREDENTIAL_ENV_VARS = {
    "client_id": "GOOGLE_CLIENT_ID",
    "client_secret": "GOOGLE_CLIENT_SECRET",
    "refresh_token": "GOOGLE_REFRESH_TOKEN",
}


class Settings(BaseModel):
    """Process-wide settings, loaded once at startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    credentials: OAuthClientCredentials
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, load_env_file: bool = True
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            load_env_file: Load a ``.env`` file into ``os.environ`` first.

        Returns:
            Validated settings.

        Raises:
            ConfigurationError: If a credential is missing or a value is malformed.
        """
        if environ is None:
            if load_env_file:
                load_dotenv()
            environ = os.environ

        values = {field: environ.get(var, "").strip() for field, var in CREDENTIAL_ENV_VARS.items()}
        missing = [CREDENTIAL_ENV_VARS[field] for field, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                "Required Google OAuth credentials not found in environment variables: "
                + ", ".join(missing)
            )

        try:
            return cls(
                credentials=OAuthClientCredentials(**values),
                host=environ.get("HOST", DEFAULT_HOST),
                port=_int_from_env(environ, "PORT", DEFAULT_PORT),
                fetch_concurrency=_int_from_env(
                    environ, "GMAIL_FETCH_CONCURRENCY", DEFAULT_FETCH_CONCURRENCY
                ),
                log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            )
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e


def _int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got: {raw}") from e
    if value < 1:
        raise ConfigurationError(f"{name} must be positive, got: {value}")
    return value
