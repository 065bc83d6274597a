"""Shared fakes for the Pulsar client."""

from __future__ import annotations

import pulsar
import pytest

from pulsar_publisher.config import AppConfig, OAuthConfig, PublisherOptions, PulsarConfig


class FakeProducer:
    """Stand-in for pulsar.Producer that acknowledges sends synchronously."""

    def __init__(self, fail_on=None, raise_on=None):
        self.sent = []
        self.closed = False
        self._fail_on = set(fail_on or ())
        self._raise_on = set(raise_on or ())
        self._deferred = []
        self.defer = False

    def send_async(self, content, callback):
        self.sent.append(content)
        number = len(self.sent)
        if number in self._raise_on:
            raise pulsar.ProducerQueueIsFull("simulated queue full")
        result = pulsar.Result.Timeout if number in self._fail_on else pulsar.Result.Ok
        if self.defer:
            self._deferred.append((callback, result, number))
        else:
            callback(result, number)

    def release(self):
        """Acknowledge every deferred send, oldest first."""
        deferred, self._deferred = self._deferred, []
        for callback, result, number in deferred:
            callback(result, number)

    def close(self):
        self.closed = True


class FakeClient:
    """Stand-in for pulsar.Client."""

    def __init__(self, service_url, authentication=None, producer=None, producer_error=None):
        self.service_url = service_url
        self.authentication = authentication
        self.producer = producer or FakeProducer()
        self.producer_error = producer_error
        self.producer_args = None
        self.closed = False

    def create_producer(self, topic, producer_name=None, compression_type=None):
        self.producer_args = {
            "topic": topic,
            "producer_name": producer_name,
            "compression_type": compression_type,
        }
        if self.producer_error is not None:
            raise self.producer_error
        return self.producer

    def close(self):
        self.closed = True


@pytest.fixture
def fake_pulsar(monkeypatch):
    """Patch pulsar.Client; returns a dict that records the created client."""
    state = {"client": None, "producer": FakeProducer(), "producer_error": None, "client_error": None}

    def factory(service_url, authentication=None):
        if state["client_error"] is not None:
            raise state["client_error"]
        state["client"] = FakeClient(
            service_url,
            authentication=authentication,
            producer=state["producer"],
            producer_error=state["producer_error"],
        )
        return state["client"]

    monkeypatch.setattr(pulsar, "Client", factory)
    return state


@pytest.fixture
def write_lines(tmp_path):
    def _write(lines, name="messages.txt"):
        path = tmp_path / name
        path.write_bytes(b"".join(line + b"\n" for line in lines))
        return path

    return _write


def make_config(filename="messages.txt", token=None, oauth=None, **publisher) -> AppConfig:
    return AppConfig(
        pulsar=PulsarConfig(
            hostname="broker.example.com",
            port=6651,
            tenant="acme",
            namespace="ns1",
            topic="t1",
            filename=str(filename),
            token=token,
            oauth=oauth,
        ),
        publisher=PublisherOptions(**publisher),
    )


def make_oauth() -> OAuthConfig:
    return OAuthConfig(
        client_id="client-1",
        client_secret="s3cret",
        client_email="client-1@example.com",
        issuer_url="https://auth.example.com/",
        audience="urn:pulsar:test",
    )
