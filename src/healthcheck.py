import argparse
import asyncio
import logging
import sys

import httpx

from config.config import Config, parse_duration, parse_port
from config.endpoint_loader import load_endpoints
from config.errors import ConfigurationError
from config.logging_config import setup_logging
from core.availability_ledger import AvailabilityLedger
from core.cycle_scheduler import CycleScheduler
from core.lifecycle import LifecycleController
from core.metrics_manager import MetricsManager
from core.probe_executor import ProbeExecutor
from core.reporter import Reporter

logger = logging.getLogger(__name__)


def _argument_type(convert):
    def parse(value: str):
        try:
            return convert(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e))

    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healthcheck",
        description="Probe HTTP endpoints periodically and report their availability.",
    )
    parser.add_argument(
        "--file", default=Config.CONFIG_FILE, help="Path to the YAML configuration file"
    )
    parser.add_argument("--log", default=Config.LOG_FILE, help="Path to the log file")
    # Unset numeric flags fall back to the environment in resolve_settings
    parser.add_argument(
        "--interval",
        type=_argument_type(parse_duration),
        help="Health check interval (e.g. 15s, 1m)",
    )
    parser.add_argument(
        "--latency",
        type=_argument_type(parse_duration),
        help="Latency threshold for UP status (e.g. 500ms, 1s)",
    )
    parser.add_argument(
        "--metrics-port",
        type=_argument_type(parse_port),
        help="Expose Prometheus metrics on this port (0 disables)",
    )
    return parser


def resolve_settings(args):
    """
    Fill settings not given on the command line from ``Config``.

    Raises:
        ConfigurationError: If an environment value is invalid.
    """
    if args.interval is None:
        args.interval = Config.setting("CHECK_INTERVAL", parse_duration)
    if args.latency is None:
        args.latency = Config.setting("LATENCY_THRESHOLD", parse_duration)
    if args.metrics_port is None:
        args.metrics_port = Config.setting("METRICS_PORT", parse_port)
    args.request_timeout = Config.setting("REQUEST_TIMEOUT", parse_duration)
    return args


async def run_monitor(args) -> int:
    lifecycle = LifecycleController()
    # Installed before loading so a signal during startup exits cleanly
    lifecycle.install_handlers()
    try:
        endpoints = load_endpoints(args.file)

        logger.info("Domains and URLs being monitored:")
        for endpoint in endpoints:
            logger.info(f"- Domain: {endpoint.domain}, URL: {endpoint.url}")

        metrics_manager = MetricsManager()
        if args.metrics_port > 0:
            metrics_manager.serve(args.metrics_port)

        ledger = AvailabilityLedger(endpoints)
        async with httpx.AsyncClient() as client:
            executor = ProbeExecutor(
                client,
                latency_threshold=args.latency,
                request_timeout=args.request_timeout,
            )
            reporter = Reporter(endpoints, ledger, metrics_manager=metrics_manager)
            scheduler = CycleScheduler(
                endpoints,
                executor,
                ledger,
                reporter,
                interval=args.interval,
                metrics_manager=metrics_manager,
            )
            return await lifecycle.run(scheduler)
    finally:
        lifecycle.remove_handlers()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if not args.file:
        print(
            "Error: Configuration file path must be provided using the --file flag.",
            file=sys.stderr,
        )
        return 1

    try:
        resolve_settings(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        setup_logging(args.log)
    except (OSError, ValueError) as e:
        print(f"Error initializing logger: {e}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(run_monitor(args))
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        # SIGINT before the event loop had handlers in place
        logger.info("Received signal SIGINT. Exiting program.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
