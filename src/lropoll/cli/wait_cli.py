"""CLI entry point for waiting on a long-running operation."""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional
from lropoll.client.operations import OperationsClient
from lropoll.config import get_settings
from lropoll.core.exceptions import (
    LROException,
    OperationFailedError,
    PollCancelledError,
    PollTimeoutError,
    PollTransportError,
)
from lropoll.observability.metrics import init_system_info
from lropoll.operation.descriptor import OperationDescriptor
from lropoll.operation.models import PollOptions
from lropoll.transport.http import HttpRpcInvoker

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_GAVE_UP = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="lropoll-wait",
        description="Poll a long-running operation until it finishes and print its result.",
    )
    parser.add_argument("operation", help="Operation name")
    parser.add_argument("--endpoint", help="Service endpoint (default: RPC_ENDPOINT)")
    parser.add_argument("--timeout", type=float, help="Give up after this many seconds")
    parser.add_argument("--max-attempts", type=int, help="Give up after this many status fetches")
    return parser.parse_args(argv)


def _decode_json(raw: bytes):
    return json.loads(raw)


async def wait_for_operation(args: argparse.Namespace) -> int:
    """
    Poll the operation named in args and print its result.

    Returns:
        int: Process exit code
    """
    settings = get_settings()
    overrides = {}
    if args.timeout is not None:
        overrides["total_timeout"] = args.timeout
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts
    options = PollOptions.from_settings(settings, **overrides)

    descriptor = OperationDescriptor(
        "wait", decode_result=_decode_json, decode_metadata=_decode_json
    )

    async with HttpRpcInvoker(args.endpoint or settings.RPC_ENDPOINT, settings.RPC_TIMEOUT) as invoker:
        operations = OperationsClient(invoker)
        # The first status fetch happens inside the poll session
        operation = operations.bind({"name": args.operation}, descriptor)

        try:
            result = await operation.wait(options)
        except OperationFailedError as e:
            logger.error(f"Operation {args.operation} failed: {e}")
            return EXIT_FAILED
        except (PollTimeoutError, PollTransportError, PollCancelledError) as e:
            logger.error(f"Gave up on operation {args.operation}: {e}")
            last = operation.get_metadata()
            if last is not None:
                print(json.dumps({"metadata": last}, indent=2))
            return EXIT_GAVE_UP

    print(json.dumps(result, indent=2))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    init_system_info(settings.APP_VERSION)

    args = parse_args(argv)
    try:
        code = asyncio.run(wait_for_operation(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        code = EXIT_GAVE_UP
    except LROException as e:
        logger.error(f"Error: {e}", exc_info=True)
        code = EXIT_GAVE_UP
    sys.exit(code)


if __name__ == "__main__":
    main()
