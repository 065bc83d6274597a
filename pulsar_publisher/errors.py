"""
Error taxonomy for the publish pipeline
"""


class PublisherError(Exception):
    """Base class for fatal publisher errors"""

    exit_code = 1


class ConfigurationError(PublisherError):
    """Configuration missing, unparseable or lacking a required credential"""

    exit_code = 2


class BrokerConnectionError(PublisherError, ConnectionError):
    """Handshake, DNS, TLS or authentication failure"""

    exit_code = 3


class ProducerCreationError(PublisherError):
    """Topic, permission or producer build failure"""

    exit_code = 4


class SendError(PublisherError):
    """Broker rejected or failed to acknowledge a message"""

    exit_code = 5

    def __init__(self, message: str, sent: int = 0):
        super().__init__(message)
        self.sent = sent


class LineDecodeError(ValueError):
    """A line of the input file is not valid text. Handled by dropping the line."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number


class FileOpenError(OSError):
    """Input file missing or unreadable. Handled by skipping the publish."""
