"""
Main entry point for the Pulsar line publisher
"""
import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .auth import resolve_credential
from .client import BrokerConnection
from .config import AppConfig, LogConfig, load_config
from .errors import PublisherError, SendError
from .publisher import ProgressReporter, PublishResult, publish_lines
from .source import LineSource


class PublisherApplication:
    """Main application orchestrator"""

    def __init__(self, config: AppConfig):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config

    async def run(self) -> PublishResult:
        """Run the complete publish workflow"""
        pulsar_config = self.config.pulsar
        options = self.config.publisher

        # Resolved before any connection attempt
        credential = resolve_credential(pulsar_config, options.require_credential)

        connection = await BrokerConnection.open(pulsar_config, credential)
        async with connection:
            producer = await connection.create_producer(
                pulsar_config.namespace,
                pulsar_config.topic,
                options.producer_name,
                tenant=pulsar_config.tenant,
            )
            try:
                return await publish_lines(
                    producer,
                    LineSource(pulsar_config.filename),
                    ProgressReporter(options.progress_interval),
                    pipeline_depth=options.pipeline_depth,
                )
            finally:
                producer.close()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pulsar-publisher",
        description="Publish each line of a file as a message to a Pulsar topic"
    )
    parser.add_argument('--config', type=str, help='Path to the TOML configuration file')
    parser.add_argument('--require-credential', action='store_true',
                        help='Fail unless a token or oauth credential is configured')
    parser.add_argument('--log-level', type=str, help='Logging level (default: $LOG_LEVEL or INFO)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code"""
    args = parse_args(argv)
    logger = logging.getLogger("pulsar_publisher")

    try:
        LogConfig.setup_logging(LogConfig.resolve_level(args.log_level))

        config = load_config(args.config)
        if args.require_credential and not config.publisher.require_credential:
            config = replace(
                config, publisher=replace(config.publisher, require_credential=True)
            )

        app = PublisherApplication(config)
        asyncio.run(app.run())

    except SendError as e:
        logger.error(f"{type(e).__name__}: {e} (sent {e.sent} messages before failure)")
        return e.exit_code
    except PublisherError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return e.exit_code
    except KeyboardInterrupt:
        logger.info("Interrupted! Shutting down...")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
