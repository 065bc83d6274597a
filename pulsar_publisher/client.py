"""
Broker connection and producer creation
"""
import asyncio
import json
import logging
from typing import Optional

import pulsar

from .auth import Credential, NoCredential, OAuth2ClientCredentials, StaticToken
from .config import PulsarConfig
from .errors import BrokerConnectionError, ProducerCreationError
from .producer import PulsarProducer

TOPIC_DOMAIN = "persistent"
TOPIC_TENANT = "public"

# Raised lazily by the client when the first broker round trip happens
_CONNECTION_FAILURES = (
    pulsar.ConnectError,
    pulsar.AuthenticationError,
    pulsar.Timeout,
)


def build_authentication(credential: Credential) -> Optional[pulsar.Authentication]:
    """Translate a resolved credential into a client authentication object"""
    if isinstance(credential, NoCredential):
        return None

    if isinstance(credential, StaticToken):
        return pulsar.AuthenticationToken(credential.token.decode('utf-8'))

    if isinstance(credential, OAuth2ClientCredentials):
        params = {
            'type': 'client_credentials',
            'issuer_url': credential.issuer_url,
            'private_key': credential.credentials_url,
            'audience': credential.audience,
        }
        if credential.scope is not None:
            params['scope'] = credential.scope
        return pulsar.AuthenticationOauth2(json.dumps(params))

    raise TypeError(f"Unsupported credential: {credential!r}")


def full_topic_name(namespace: str, topic: str) -> str:
    """Fully-qualified topic name; the tenant segment is always 'public'"""
    return f"{TOPIC_DOMAIN}://{TOPIC_TENANT}/{namespace}/{topic}"


class BrokerConnection:
    """Authenticated connection to a Pulsar broker"""

    def __init__(self, client: pulsar.Client, service_url: str):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = client
        self.service_url = service_url
        self._closed = False

    @classmethod
    async def open(cls, config: PulsarConfig, credential: Credential) -> "BrokerConnection":
        """Open a TLS connection to the configured broker"""
        logger = logging.getLogger(cls.__name__)
        service_url = config.service_url

        try:
            authentication = build_authentication(credential)
            client = await asyncio.to_thread(
                pulsar.Client,
                service_url,
                authentication=authentication,
            )
        except Exception as e:
            logger.error(f"Failed to connect to {service_url}: {e}")
            raise BrokerConnectionError(f"Failed to build pulsar client: {e}") from e

        logger.info(f"Connected to {service_url} ({type(credential).__name__})")
        return cls(client, service_url)

    async def create_producer(
            self,
            namespace: str,
            topic: str,
            producer_name: str,
            tenant: Optional[str] = None
    ) -> PulsarProducer:
        """
        Create a zstd-compressed producer bound to one topic

        Args:
            namespace: Topic namespace
            topic: Topic name
            producer_name: Name registered with the broker
            tenant: Accepted for completeness; not part of the topic name
        """
        topic_name = full_topic_name(namespace, topic)
        if tenant is not None and tenant != TOPIC_TENANT:
            self.logger.debug(f"Ignoring configured tenant '{tenant}' for topic {topic_name}")

        try:
            producer = await asyncio.to_thread(
                self.client.create_producer,
                topic_name,
                producer_name=producer_name,
                compression_type=pulsar.CompressionType.ZSTD,
            )
        except _CONNECTION_FAILURES as e:
            self.logger.error(f"Connection to {self.service_url} failed: {e}")
            raise BrokerConnectionError(f"Failed to connect to {self.service_url}: {e}") from e
        except pulsar.PulsarException as e:
            self.logger.error(f"Failed to create producer for '{topic_name}': {e}")
            raise ProducerCreationError(f"Failed to create producer: {e}") from e

        self.logger.info(f"Producer '{producer_name}' created for topic '{topic_name}'")
        return PulsarProducer(producer, topic_name)

    def close(self) -> None:
        """Close the client; safe to call more than once"""
        if self._closed:
            return
        self._closed = True
        try:
            self.client.close()
        except pulsar.PulsarException as e:
            self.logger.warning(f"Error closing client: {e}")
        self.logger.info("Connection closed")

    async def __aenter__(self) -> "BrokerConnection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
