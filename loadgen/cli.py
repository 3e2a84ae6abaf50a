import argparse
import asyncio
import logging
import time
from functools import partial
from typing import List, Optional

from . import __version__, config
from .controller import BatchController, default_client_factory
from .dispatcher import RequestDispatcher
from .otel_init import init_tracing
from .rand import RandomSource

log = logging.getLogger(__name__)

INVALID_TOTAL = "Invalid value for total requests. Expected an integer."
INVALID_BATCH = "Invalid value for batch size. Expected an integer."
MISSING_VALUES = "Please provide valid values for total requests and batch size."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loadgen",
        description="Send GET requests with random parameters in concurrent batches",
    )
    parser.add_argument("-n", "--requests", type=int, help="The total number of requests to send")
    parser.add_argument("-b", "--batch-size", type=int,
                        help=f"Number of requests to send at a time (default {config.DEFAULT_BATCH_SIZE}, "
                             "also used when only the total is given)")
    parser.add_argument("total_arg", nargs="?", metavar="REQUESTS",
                        help="Total requests, when -n is not given")
    parser.add_argument("batch_arg", nargs="?", metavar="BATCH_SIZE",
                        help="Batch size, when -b is not given")
    parser.add_argument("--url", default=config.TARGET_URL, help="Endpoint to send requests to")
    parser.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT_S,
                        help="Per-request timeout in seconds")
    parser.add_argument("--seed", type=int, help="Seed for the parameter generator")
    parser.add_argument("--trace", action=argparse.BooleanOptionalAction, default=config.ENABLE_TRACING,
                        help="Export OpenTelemetry traces over OTLP/HTTP (ENABLE_TRACING)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse argv and resolve the total/batch values.

    Options win over positional arguments. Exits with status 1 when either
    value is not an integer or does not resolve to a positive number.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    total = args.requests
    if total is None and args.total_arg is not None:
        try:
            total = int(args.total_arg)
        except ValueError:
            parser.exit(1, INVALID_TOTAL + "\n")

    batch_size = args.batch_size
    if batch_size is None:
        if args.batch_arg is not None:
            try:
                batch_size = int(args.batch_arg)
            except ValueError:
                parser.exit(1, INVALID_BATCH + "\n")
        else:
            batch_size = config.DEFAULT_BATCH_SIZE

    if not total or not batch_size or total < 0 or batch_size < 0:
        parser.exit(1, MISSING_VALUES + "\n")

    args.total_requests = total
    args.batch_size = batch_size
    return args


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else config.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()],
    )


async def run(args: argparse.Namespace) -> None:
    dispatcher = RequestDispatcher(RandomSource(seed=args.seed), url=args.url)
    controller = BatchController(dispatcher, partial(default_client_factory, timeout=args.timeout))
    await controller.run(args.total_requests, args.batch_size)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    if args.trace:
        tp = init_tracing(config.SERVICE_NAME)
    else:
        tp = None

    log.info("Sending %d requests to %s in batches of %d",
             args.total_requests, args.url, args.batch_size)
    t0 = time.perf_counter()
    try:
        asyncio.run(run(args))
    finally:
        if tp is not None:
            tp.shutdown()
    log.info("All requests completed. Total time: %.2fs for %d requests",
             time.perf_counter() - t0, args.total_requests)
