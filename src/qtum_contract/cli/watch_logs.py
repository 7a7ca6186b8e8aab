"""CLI command for streaming decoded contract logs.

Usage:
    python -m qtum_contract.cli.watch_logs --repo solar.json --contract NAME [OPTIONS]

Examples:
    # Follow new logs of a contract deployed with solar
    python -m qtum_contract.cli.watch_logs --repo solar.json --contract MyToken

    # Replay from a block, only logs with 1+ confirmation
    python -m qtum_contract.cli.watch_logs --repo solar.json --contract MyToken \\
        --from-block 80000 --minconf 1

    # Only Transfer events
    python -m qtum_contract.cli.watch_logs --repo solar.json --contract MyToken --event Transfer
"""

import asyncio
import json
import sys
from argparse import ArgumentParser, Namespace
from typing import Any

import structlog

from qtum_contract.abi import get_contract_info
from qtum_contract.contract import Contract
from qtum_contract.core.config import Settings, configure_logging
from qtum_contract.models.contract import ContractLogEntry
from qtum_contract.models.rpc import WaitForLogsRequest
from qtum_contract.services.blockchain.emitter import CATCH_ALL, routing_key
from qtum_contract.services.exceptions import ContractError
from qtum_contract.services.rpc.qtum_rpc import QtumRPC

logger = structlog.get_logger()


def json_default(value: Any) -> Any:
    """JSON fallback for decoded ABI values."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, tuple):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_entry(entry: ContractLogEntry) -> str:
    return json.dumps(entry.model_dump(by_alias=True, exclude_none=True), default=json_default)


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(description="Stream decoded event logs of a Qtum contract")

    parser.add_argument("--repo", default="solar.json", help="Path to solar.json (default: solar.json)")
    parser.add_argument("--contract", required=True, help="Contract name in the repo")
    parser.add_argument(
        "--from-block",
        type=int,
        help="Block to start from (default: latest)",
    )
    parser.add_argument(
        "--minconf",
        type=int,
        help="Minimum confirmations of returned logs (default: node default)",
    )
    parser.add_argument(
        "--event",
        help=f"Only print this event type ({CATCH_ALL!r} for unrecognized logs)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    """Main CLI entry point (async).

    Returns:
        Exit code: 0 (stopped by user), 1 (error)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    try:
        info = get_contract_info(args.repo, args.contract)
    except (FileNotFoundError, KeyError) as e:
        logger.error("watch_logs.error", error=str(e))
        return 1

    request = WaitForLogsRequest(from_block=args.from_block, minconf=args.minconf)

    def print_entry(entry: ContractLogEntry) -> None:
        if args.event and routing_key(entry) != args.event:
            return
        print(format_entry(entry), flush=True)

    async with QtumRPC.from_settings(settings) as rpc:
        contract = Contract.from_settings(rpc, info, settings)
        logger.info(
            "watch_logs.start",
            contract=args.contract,
            address=contract.address,
            from_block=request.from_block,
            minconf=request.minconf,
        )

        subscription = contract.on_log(print_entry, request)
        try:
            await subscription.wait()
        except ContractError as e:
            logger.error("watch_logs.error", error=str(e), cursor=subscription.cursor)
            return 1
        except asyncio.CancelledError:
            # Ctrl-C; asyncio.run turns this into KeyboardInterrupt for main()
            subscription.cancel()
            logger.warning("watch_logs.interrupted", cursor=subscription.cursor)
            raise

    return 0


def main(argv: list[str] | None = None) -> int:
    """Synchronous wrapper for async main."""
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
