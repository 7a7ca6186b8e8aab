"""CLI command for calling or sending a contract method.

Usage:
    python -m qtum_contract.cli.call_method --repo solar.json --contract NAME METHOD [ARGS...]

Arguments are parsed as JSON when possible, so numbers, booleans and arrays
can be passed directly; anything else is passed as a string.

Examples:
    # Read-only call
    python -m qtum_contract.cli.call_method --contract MyToken balanceOf 7926223070547d2d15b2ef5e7383e541c338ffe9

    # Send a transaction and wait for one confirmation
    python -m qtum_contract.cli.call_method --contract MyToken --send --confirm 1 \\
        transfer 7926223070547d2d15b2ef5e7383e541c338ffe9 1000
"""

import asyncio
import json
import sys
from argparse import ArgumentParser, Namespace
from typing import Any

import structlog

from qtum_contract.abi import get_contract_info
from qtum_contract.cli.watch_logs import json_default
from qtum_contract.contract import Contract
from qtum_contract.core.config import Settings, configure_logging
from qtum_contract.services.exceptions import ContractError
from qtum_contract.services.rpc.qtum_rpc import QtumRPC

logger = structlog.get_logger()


def parse_value(raw: str) -> Any:
    """Parse a CLI argument as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(description="Call or send a Qtum contract method")

    parser.add_argument("--repo", default="solar.json", help="Path to solar.json (default: solar.json)")
    parser.add_argument("--contract", required=True, help="Contract name in the repo")
    parser.add_argument("--sender", help="Sender address (default: contract info or QTUM_SENDER_ADDRESS)")
    parser.add_argument(
        "--send",
        action="store_true",
        help="Create a transaction (sendtocontract) instead of a read-only call",
    )
    parser.add_argument("--amount", type=float, help="QTUM to send with the transaction")
    parser.add_argument("--gas-limit", type=int, help="Transaction gas limit")
    parser.add_argument("--gas-price", type=float, help="Transaction gas price in QTUM")
    parser.add_argument(
        "--confirm",
        type=int,
        metavar="N",
        help="With --send, wait until the transaction is N blocks deep",
    )
    parser.add_argument("method", help="Method name")
    parser.add_argument("args", nargs="*", help="Method arguments")
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
        Exit code: 0 (success), 1 (error)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    try:
        info = get_contract_info(args.repo, args.contract)
    except (FileNotFoundError, KeyError) as e:
        logger.error("call_method.error", error=str(e))
        return 1

    method_args = [parse_value(a) for a in args.args]

    async with QtumRPC.from_settings(settings) as rpc:
        contract = Contract.from_settings(rpc, info, settings)
        try:
            if not args.send:
                result = await contract.call(args.method, method_args, sender_address=args.sender)
                print(json.dumps(result.outputs, default=json_default))
                return 0

            tx = await contract.send(
                args.method,
                method_args,
                amount=args.amount,
                gas_limit=args.gas_limit,
                gas_price=args.gas_price,
                sender_address=args.sender,
            )
            print(json.dumps({"txid": tx.txid, "method": tx.method}))

            if args.confirm:
                receipt = await tx.confirm(
                    args.confirm,
                    on_update=lambda t, r: logger.info(
                        "call_method.confirmation", txid=t.txid, confirmations=t.confirmations
                    ),
                )
                print(
                    json.dumps(
                        receipt.model_dump(by_alias=True, exclude_none=True),
                        default=json_default,
                    )
                )
            return 0

        except (ContractError, ValueError) as e:
            logger.error("call_method.error", method=args.method, error=str(e))
            return 1


def main(argv: list[str] | None = None) -> int:
    """Synchronous wrapper for async main."""
    return asyncio.run(async_main(argv))


if __name__ == "__main__":
    sys.exit(main())
