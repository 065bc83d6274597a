"""
Pulsar line publisher
Sends each line of a text file as one message to a Pulsar topic
"""

__version__ = "1.0.0"

from .config import AppConfig, PulsarConfig, OAuthConfig, PublisherOptions, LogConfig, load_config
from .auth import resolve_credential, NoCredential, StaticToken, OAuth2ClientCredentials
from .client import BrokerConnection, full_topic_name
from .producer import PulsarProducer
from .source import LineSource
from .publisher import ProgressReporter, PublishResult, publish_lines

__all__ = [
    'AppConfig',
    'PulsarConfig',
    'OAuthConfig',
    'PublisherOptions',
    'LogConfig',
    'load_config',
    'resolve_credential',
    'NoCredential',
    'StaticToken',
    'OAuth2ClientCredentials',
    'BrokerConnection',
    'full_topic_name',
    'PulsarProducer',
    'LineSource',
    'ProgressReporter',
    'PublishResult',
    'publish_lines'
]
