"""
Credential resolution

Turns the broker configuration into exactly one authentication strategy.
Precedence is OAuth2 client credentials, then a static token, then none.
"""
import base64
import json
from dataclasses import dataclass
from typing import Optional, Union

from .config import PulsarConfig
from .errors import ConfigurationError

TOKEN_SCHEME = "token"
CREDENTIALS_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class NoCredential:
    """Connect without authentication"""


@dataclass(frozen=True)
class StaticToken:
    token: bytes
    scheme: str = TOKEN_SCHEME

    def __repr__(self) -> str:
        return f"StaticToken(scheme={self.scheme!r}, token=<{len(self.token)} bytes>)"


@dataclass(frozen=True)
class OAuth2ClientCredentials:
    issuer_url: str
    credentials: str  # JSON document with the client id/secret
    audience: str
    scope: Optional[str] = None

    @property
    def credentials_url(self) -> str:
        """Inline data reference to the credentials document"""
        encoded = base64.b64encode(self.credentials.encode('utf-8')).decode('ascii')
        return f"data:{CREDENTIALS_MEDIA_TYPE};base64,{encoded}"

    def __repr__(self) -> str:
        return (
            f"OAuth2ClientCredentials(issuer_url={self.issuer_url!r}, "
            f"audience={self.audience!r}, scope={self.scope!r})"
        )


Credential = Union[NoCredential, StaticToken, OAuth2ClientCredentials]


def resolve_credential(config: PulsarConfig, require_credential: bool = False) -> Credential:
    """
    Select the authentication strategy for a run

    Args:
        config: Broker configuration holding the optional token and oauth descriptor
        require_credential: Fail instead of falling back to no authentication

    Raises:
        ConfigurationError: neither token nor oauth is configured and
            require_credential is set
    """
    if config.oauth is not None:
        return OAuth2ClientCredentials(
            issuer_url=config.oauth.issuer_url,
            credentials=json.dumps(config.oauth.to_dict()),
            audience=config.oauth.audience,
        )

    if config.token:
        return StaticToken(config.token.encode('utf-8'))

    if require_credential:
        raise ConfigurationError("A token or oauth credential is required")

    return NoCredential()
