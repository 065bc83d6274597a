"""
Configuration classes for the Pulsar publisher
"""
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigurationError

CONFIG_ENV_VAR = "PULSAR_PUBLISHER_CONFIG"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"
DEFAULT_CONFIG_FILE = "config.toml"

# Accepted spellings for the oauth table keys
_OAUTH_KEYS = {
    'client_id': ('client_id', 'clientId'),
    'client_secret': ('client_secret', 'clientSecret'),
    'client_email': ('client_email', 'clientEmail'),
    'issuer_url': ('issuer_url', 'issuerUrl'),
    'audience': ('audience',),
}


@dataclass(frozen=True)
class OAuthConfig:
    """OAuth2 client-credentials descriptor"""
    client_id: str
    client_secret: str
    client_email: str
    issuer_url: str
    audience: str

    def to_dict(self) -> Dict[str, str]:
        """Credentials document handed to the token issuer"""
        return {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'client_email': self.client_email,
            'issuer_url': self.issuer_url,
            'audience': self.audience,
        }


@dataclass(frozen=True)
class PulsarConfig:
    """Broker endpoint, topic and input file"""
    hostname: str
    port: int
    tenant: str
    namespace: str
    topic: str
    filename: str
    token: Optional[str] = None
    oauth: Optional[OAuthConfig] = None

    @property
    def service_url(self) -> str:
        return f"pulsar+ssl://{self.hostname}:{self.port}"


@dataclass(frozen=True)
class PublisherOptions:
    """Publish loop behaviour"""
    require_credential: bool = False
    producer_name: str = "test_producer"
    progress_interval: int = 100
    pipeline_depth: int = 1  # Un-acknowledged sends allowed at once


@dataclass(frozen=True)
class AppConfig:
    pulsar: PulsarConfig
    publisher: PublisherOptions = field(default_factory=PublisherOptions)


class LogConfig:
    """Logging configuration"""

    @staticmethod
    def resolve_level(level: Optional[str] = None) -> int:
        """Map a level name (or LOG_LEVEL from the environment) to a logging level"""
        name = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO").upper()
        resolved = logging.getLevelName(name)
        if not isinstance(resolved, int):
            raise ConfigurationError(f"Unknown log level: {name}")
        return resolved

    @staticmethod
    def setup_logging(level=logging.INFO):
        """Setup logging configuration"""
        logging.basicConfig(
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            level=level,
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def resolve_config_path(path: Optional[str] = None) -> Path:
    """Explicit path, then $PULSAR_PUBLISHER_CONFIG, then ./config.toml"""
    if path:
        return Path(path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path(DEFAULT_CONFIG_FILE)


def load_config(path: Optional[str] = None) -> AppConfig:
    """Read and validate the TOML configuration file"""
    config_path = resolve_config_path(path)
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Unable to read config {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Unable to parse config {config_path}: {e}") from e

    return parse_config(data)


def parse_config(data: Dict[str, Any]) -> AppConfig:
    """Build an AppConfig from already-parsed configuration data"""
    pulsar = data.get('pulsar')
    if not isinstance(pulsar, dict):
        raise ConfigurationError("Missing [pulsar] section")

    return AppConfig(
        pulsar=_parse_pulsar(pulsar),
        publisher=_parse_publisher(data.get('publisher', {})),
    )


def _parse_pulsar(section: Dict[str, Any]) -> PulsarConfig:
    port = section.get('port')
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigurationError(f"pulsar.port must be an integer in 1..65535, got {port!r}")

    token = section.get('token')
    if token is not None and not isinstance(token, str):
        raise ConfigurationError("pulsar.token must be a string")

    oauth = section.get('oauth')
    if oauth is not None:
        if not isinstance(oauth, dict):
            raise ConfigurationError("pulsar.oauth must be a table")
        oauth = _parse_oauth(oauth)

    return PulsarConfig(
        hostname=_require_str(section, 'hostname', 'pulsar'),
        port=port,
        tenant=_require_str(section, 'tenant', 'pulsar'),
        namespace=_require_str(section, 'namespace', 'pulsar'),
        topic=_require_str(section, 'topic', 'pulsar'),
        filename=_require_str(section, 'filename', 'pulsar'),
        token=token or None,
        oauth=oauth,
    )


def _parse_oauth(section: Dict[str, Any]) -> OAuthConfig:
    values = {}
    for name, aliases in _OAUTH_KEYS.items():
        value = next((section[a] for a in aliases if a in section), None)
        if not isinstance(value, str) or not value:
            raise ConfigurationError(f"pulsar.oauth.{name} is required")
        values[name] = value
    return OAuthConfig(**values)


def _parse_publisher(section: Any) -> PublisherOptions:
    if not isinstance(section, dict):
        raise ConfigurationError("[publisher] must be a table")

    defaults = PublisherOptions()
    require_credential = section.get('require_credential', defaults.require_credential)
    if not isinstance(require_credential, bool):
        raise ConfigurationError("publisher.require_credential must be a boolean")

    producer_name = section.get('producer_name', defaults.producer_name)
    if not isinstance(producer_name, str) or not producer_name:
        raise ConfigurationError("publisher.producer_name must be a non-empty string")

    return PublisherOptions(
        require_credential=require_credential,
        producer_name=producer_name,
        progress_interval=_positive_int(section, 'progress_interval', defaults.progress_interval),
        pipeline_depth=_positive_int(section, 'pipeline_depth', defaults.pipeline_depth),
    )


def _require_str(section: Dict[str, Any], key: str, prefix: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{prefix}.{key} is required")
    return value


def _positive_int(section: Dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"publisher.{key} must be a positive integer, got {value!r}")
    return value
