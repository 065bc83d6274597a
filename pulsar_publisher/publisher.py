"""
Publish loop: one message per input line
"""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque

from .errors import FileOpenError, LineDecodeError, SendError
from .producer import PulsarProducer
from .source import LineSource

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    sent: int = 0
    skipped: int = 0  # Undecodable lines dropped
    file_found: bool = True


class ProgressReporter:
    """Logs the running message count"""

    def __init__(self, interval: int = 100):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.interval = interval

    def acknowledged(self, count: int) -> None:
        if count % self.interval == 0:
            self.logger.info(f"Sent {count} messages")

    def finish(self, count: int) -> None:
        self.logger.info(f"Sent {count} messages")


async def publish_lines(
        producer: PulsarProducer,
        source: LineSource,
        reporter: ProgressReporter,
        pipeline_depth: int = 1
) -> PublishResult:
    """
    Send every decodable line of the source as one message

    Args:
        producer: Producer bound to the target topic
        source: Unopened line source
        reporter: Progress reporter fed with each acknowledgment
        pipeline_depth: Maximum number of un-acknowledged sends

    Returns:
        Counters for the run. A source that cannot be opened is skipped
        and reported as zero messages sent.

    Raises:
        SendError: A send was rejected or not acknowledged. Nothing after
            the failed line is sent; ``SendError.sent`` holds the count
            acknowledged before the failure.
    """
    if pipeline_depth < 1:
        raise ValueError("pipeline_depth must be at least 1")

    result = PublishResult()

    try:
        source.open()
    except FileOpenError as e:
        logger.warning(f"Skipping publish: {e}")
        result.file_found = False
        reporter.finish(result.sent)
        return result

    pending: Deque[asyncio.Future] = deque()

    async def wait_for_oldest() -> None:
        await pending.popleft()
        result.sent += 1
        reporter.acknowledged(result.sent)

    try:
        for line in source:
            try:
                text = line.decode()
            except LineDecodeError as e:
                result.skipped += 1
                logger.debug(f"Dropping undecodable {e}")
                continue

            if len(pending) >= pipeline_depth:
                await wait_for_oldest()
            pending.append(producer.send(text))

        while pending:
            await wait_for_oldest()

    except SendError as e:
        # Outstanding sends are awaited but not counted
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        e.sent = result.sent
        raise
    finally:
        source.close()

    logger.debug(f"Producer stats: {producer.get_stats()}, skipped={result.skipped}")
    reporter.finish(result.sent)
    return result
