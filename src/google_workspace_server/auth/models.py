"""Pydantic models for OAuth client credentials and stored tokens."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105 - public endpoint


class OAuthClientCredentials(BaseModel):
    """The three static secrets the server authenticates with.

    Loaded once at startup and never mutated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)


class AuthorizedUserInfo(BaseModel):
    """Result of the interactive authorization flow, as written to token.json.

    The layout matches google-auth's "authorized_user" info so the file can
    also be loaded with ``Credentials.from_authorized_user_file``.
    """

    client_id: str
    client_secret: str
    refresh_token: str
    token: str | None = None
    token_uri: str = GOOGLE_TOKEN_URI
    scopes: list[str] = Field(default_factory=list)
    expiry: datetime | None = None
    type: str = "authorized_user"

    def to_client_credentials(self) -> OAuthClientCredentials:
        """Return the subset the server needs at runtime."""
        return OAuthClientCredentials(
            client_id=self.client_id,
            client_secret=self.client_secret,
            refresh_token=self.refresh_token,
        )
