"""
Telemetry Agent - Main Application

Runs on the phone as a systemd service and:
- Samples power, thermal, CPU, memory and network every few seconds
- Samples CPU statistics, GPU, storage and processes every minute
- Samples sensors and system state every few minutes
- Ships every snapshot to the collector, buffering while it is unreachable

Usage:
    telemetry-agent [--config CONFIG_PATH] [--dry-run]
    telemetry-agent --once --tier high
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Any, Dict, Optional

import structlog

from . import __version__
from .api import HttpTransport, Transporter
from .config import AgentSettings, load_settings
from .models import Tier
from .probes import build_probes
from .telemetry import Aggregator, Scheduler

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "info", log_file: Optional[str] = None) -> None:
    """Configure structured JSON logging on top of the stdlib logging tree."""
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class TelemetryAgent:
    """Main telemetry agent application."""

    def __init__(self, settings: AgentSettings, transport: Optional[HttpTransport] = None):
        self.settings = settings
        self._shutdown_event = asyncio.Event()
        self._backlog_task: Optional[asyncio.Task] = None
        self._stop_task: Optional[asyncio.Task] = None

        # Initialize components
        self.transport = transport or HttpTransport()
        self.aggregator = Aggregator(
            build_probes(settings),
            probe_timeout=settings.probe_timeout_ms / 1000,
        )
        self.transporter = Transporter.from_settings(settings, self.transport)
        self.scheduler = Scheduler(
            self.aggregator,
            self.transporter,
            device_id=settings.device_id,
            intervals=settings.intervals,
        )

    async def _backlog_report_loop(self) -> None:
        """Report the offline backlog at the configured interval."""
        interval = self.settings.backlog_report_interval_ms / 1000

        while self.scheduler.is_running:
            await asyncio.sleep(interval)
            backlog = self.transporter.backlog
            if backlog > 0:
                logger.info("Offline buffer backlog", entries=backlog)

    async def start(self) -> None:
        """Start the telemetry agent."""
        logger.info(
            "Starting telemetry agent",
            version=__version__,
            device_id=self.settings.device_id,
            server_url=self.settings.server_url,
            intervals_ms={
                "high": self.settings.high_interval_ms,
                "medium": self.settings.medium_interval_ms,
                "low": self.settings.low_interval_ms,
            },
        )

        if self.settings.dry_run:
            logger.warning("DRY RUN MODE - telemetry will not be sent to server")

        if await self.transporter.check_health():
            logger.info("Server health check passed")
        else:
            logger.warning("Server health check failed - will buffer telemetry until server is available")

        await self.scheduler.start()
        self._backlog_task = asyncio.create_task(self._backlog_report_loop())

        logger.info("Telemetry agent started successfully")

    async def run(self) -> None:
        """Start and block until stop() is called."""
        await self.start()
        await self._shutdown_event.wait()

    async def stop(self) -> None:
        """Stop the telemetry agent."""
        if self._shutdown_event.is_set():
            return

        logger.info("Stopping telemetry agent")

        if self.scheduler.is_running:
            await self.scheduler.stop()

        if self._backlog_task:
            self._backlog_task.cancel()
            try:
                await self._backlog_task
            except asyncio.CancelledError:
                pass

        if self.transporter.backlog > 0:
            logger.warning("Discarding undelivered telemetry", entries=self.transporter.backlog)

        await self.transport.close()
        self._shutdown_event.set()
        logger.info("Telemetry agent stopped")

    def request_stop(self) -> None:
        """Schedule stop() on the running loop, e.g. from a signal handler."""
        if self._stop_task is None:
            self._stop_task = asyncio.create_task(self.stop())

    async def collect_once(self, tier: str = "all") -> Dict[str, Any]:
        """Collect without sending, for diagnostics."""
        if tier == "full":
            return await self.aggregator.collect_all()
        if tier == "all":
            return {t.value: await self.aggregator.collect(t) for t in Tier}
        return await self.aggregator.collect(Tier(tier))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pinephone Telemetry Agent")
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--once", "-o",
        action="store_true",
        help="Collect once, print JSON and exit"
    )
    parser.add_argument(
        "--tier", "-t",
        default="all",
        choices=["high", "medium", "low", "all", "full"],
        help="Tier to collect with --once (default: all)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Log telemetry instead of sending it"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    settings = load_settings(args.config, dry_run=args.dry_run)
    configure_logging(
        "debug" if args.debug else settings.log_level,
        settings.log_file_path if settings.log_to_file else None,
    )

    agent = TelemetryAgent(settings)

    if args.once:
        try:
            data = await agent.collect_once(args.tier)
        finally:
            await agent.transport.close()
        print(json.dumps(data, indent=2, default=str))
        return 0

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, lambda s=sig: _handle_signal(agent, s))

    try:
        await agent.run()
    except Exception as e:
        logger.exception("Agent failed", error=str(e))
        return 1

    return 0


def _handle_signal(agent: TelemetryAgent, signum: int) -> None:
    logger.info("Received signal", signal=signum)
    agent.request_stop()


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
