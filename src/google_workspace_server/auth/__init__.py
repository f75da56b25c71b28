"""OAuth authentication for google-workspace-server.

At runtime the server authenticates with a single refresh token supplied
through the environment; :class:`CredentialProvider` turns it into access
tokens on demand. The setup flow (:class:`OAuthManager`) is how an operator
obtains that refresh token in the first place.

Quick Start:
    ```python
    from google_workspace_server.auth import OAuthManager

    manager = OAuthManager()
    info = await manager.authenticate(Path("credentials.json"))
    print(info.refresh_token)
    ```
"""

from google_workspace_server.auth.credentials import GOOGLE_WORKSPACE_SCOPES, CredentialProvider
from google_workspace_server.auth.models import AuthorizedUserInfo, OAuthClientCredentials
from google_workspace_server.auth.oauth_manager import OAuthManager
from google_workspace_server.auth.token_storage import TokenStorage

__all__ = [
    "AuthorizedUserInfo",
    "CredentialProvider",
    "GOOGLE_WORKSPACE_SCOPES",
    "OAuthClientCredentials",
    "OAuthManager",
    "TokenStorage",
]
