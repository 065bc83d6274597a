"""
Pulsar producer wrapper with awaitable acknowledgments
"""
import asyncio
import logging
from typing import Dict

import pulsar

from .errors import SendError


class PulsarProducer:
    """Producer bound to a single topic"""

    def __init__(self, producer: pulsar.Producer, topic: str):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.producer = producer
        self.topic = topic
        self._closed = False

        # Statistics
        self.success_count = 0
        self.error_count = 0

    def _delivery_callback(self, future: asyncio.Future, result, msg_id) -> None:
        """Acknowledgment callback, runs on the event loop thread"""
        if future.done():
            return
        if result == pulsar.Result.Ok:
            self.success_count += 1
            future.set_result(msg_id)
        else:
            self.error_count += 1
            self.logger.error(f"Delivery failed: {result}")
            future.set_exception(SendError(f"Broker did not acknowledge message: {result}"))

    def send(self, body: str) -> asyncio.Future:
        """
        Send a message without blocking

        Returns a future that resolves to the message id once the broker
        acknowledges it, or fails with SendError.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def callback(result, msg_id):
            # Invoked on a client I/O thread
            loop.call_soon_threadsafe(self._delivery_callback, future, result, msg_id)

        try:
            self.producer.send_async(body.encode('utf-8'), callback)
        except pulsar.PulsarException as e:
            self.error_count += 1
            self.logger.error(f"Failed to send message: {e}")
            raise SendError(f"Failed to send message: {e}") from e

        return future

    def close(self) -> None:
        """Close the producer; safe to call more than once"""
        if self._closed:
            return
        self._closed = True
        try:
            self.producer.close()
        except pulsar.PulsarException as e:
            self.logger.warning(f"Error closing producer: {e}")
        self.logger.info(
            f"Producer closed: "
            f"Success={self.success_count:,}, "
            f"Errors={self.error_count:,}"
        )

    def get_stats(self) -> Dict[str, int]:
        """Get producer statistics"""
        return {
            'success_count': self.success_count,
            'error_count': self.error_count,
            'total_sent': self.success_count + self.error_count
        }
