"""JSON file storage for the credentials produced by the setup flow.

Storage Location: ./token.json (working directory, by default)

The file holds a single google-auth "authorized_user" record, written with
owner-only permissions. The server itself never reads it; operators copy the
client id, client secret and refresh token into the environment.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from google_workspace_server.auth.models import AuthorizedUserInfo

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_FILE = "token.json"


def get_token_path() -> Path:
    """Get the default token file path.

    Returns:
        Path to token.json in the current working directory.
    """
    return Path.cwd() / DEFAULT_TOKEN_FILE


class TokenStorage:
    """Reads and writes the authorized-user record.

    Attributes:
        token_path: Path to the token file.

    Example:
        ```python
        storage = TokenStorage()
        storage.store(info)

        stored = storage.retrieve()
        if stored:
            print(f"Refresh token: {stored.refresh_token}")
        ```
    """

    def __init__(self, token_path: Path | None = None) -> None:
        """Initialize token storage.

        Args:
            token_path: Custom path for the token file. Defaults to ./token.json.
        """
        self.token_path = token_path or get_token_path()

    def store(self, info: AuthorizedUserInfo) -> None:
        """Write the record, replacing any previous one.

        Args:
            info: Credentials returned by the authorization flow.
        """
        self.token_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.token_path, "w") as f:
            f.write(info.model_dump_json(indent=2, exclude_none=True))

        # Set file permissions to owner read/write only (600)
        self.token_path.chmod(0o600)
        logger.info("Credentials saved to %s", self.token_path)

    def retrieve(self) -> AuthorizedUserInfo | None:
        """Load the stored record.

        Returns:
            The record, or None if the file is missing or unreadable.
        """
        if not self.token_path.exists():
            return None

        try:
            with open(self.token_path) as f:
                return AuthorizedUserInfo.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", self.token_path, e)
            return None
