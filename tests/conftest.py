"""pytest fixtures for qtum_contract tests.

Provides:
- token_abi: ABI of a minimal ERC20-like token (constant and non-constant methods, events)
- contract_info: Token descriptor with a default sender
- rpc: AsyncMock standing in for QtumRPC (no network)
- contract: Contract bound to `rpc` with a zero confirmation poll interval
- helpers to build wire-format receipts and waitforlogs entries
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from eth_utils.abi import event_signature_to_log_topic

from qtum_contract.contract import Contract
from qtum_contract.models.contract_info import ContractInfo
from qtum_contract.services.rpc.qtum_rpc import QtumRPC

CONTRACT_ADDRESS = "a8e1e0c3ed3f1a4ff4a4eb3ce3ad2ae1dd6e1c7c"
DEFAULT_SENDER = "qUbxboqjBRp96j3La8D1RYkyqx5uQbJPoW"
ALICE = "7926223070547d2d15b2ef5e7383e541c338ffe9"
BOB = "2352be3db3177f0a07efbe6da5857615b8c9901d"
TXID = "6b7f70d8520e1ec87ba7f1ee559b491cc3028b77ae166e789be882b4b7d5d0a5"
BLOCK_HASH = "4f8e4b2a0c8f3f2d6e1a9b7c5d3e1f0a2b4c6d8e0f1a3b5c7d9e1f2a4b6c8d0e"

TOKEN_ABI: list[dict[str, Any]] = [
    {
        "name": "balanceOf",
        "type": "function",
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "outputs": [{"name": "balance", "type": "uint256"}],
        "payable": False,
    },
    {
        "name": "transfer",
        "type": "function",
        "constant": False,
        "inputs": [{"name": "_to", "type": "address"}, {"name": "_value", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
        "payable": False,
    },
    {
        "name": "totalSupply",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "mint",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_to", "type": "address"}, {"name": "_amount", "type": "uint256"}],
        "outputs": [],
    },
    {
        "name": "Transfer",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
    {
        "name": "Mint",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"name": "to", "type": "address", "indexed": True},
            {"name": "amount", "type": "uint256", "indexed": False},
        ],
    },
    {"type": "constructor", "inputs": [], "payable": False},
]


def address_topic(address: str) -> str:
    return "0" * 24 + address


def transfer_log(sender: str = ALICE, to: str = BOB, value: int = 100) -> dict[str, Any]:
    """Raw Transfer log (address, topics, data) in qtumd wire format."""
    return {
        "address": CONTRACT_ADDRESS,
        "topics": [
            event_signature_to_log_topic("Transfer(address,address,uint256)").hex(),
            address_topic(sender),
            address_topic(to),
        ],
        "data": encode(["uint256"], [value]).hex(),
    }


def mint_log(to: str = ALICE, amount: int = 1000) -> dict[str, Any]:
    return {
        "address": CONTRACT_ADDRESS,
        "topics": [
            event_signature_to_log_topic("Mint(address,uint256)").hex(),
            address_topic(to),
        ],
        "data": encode(["uint256"], [amount]).hex(),
    }


def unknown_log() -> dict[str, Any]:
    """Log whose topic matches no event in TOKEN_ABI."""
    return {
        "address": CONTRACT_ADDRESS,
        "topics": [event_signature_to_log_topic("Approval(address,address,uint256)").hex()],
        "data": encode(["uint256"], [1]).hex(),
    }


def receipt_wire(logs: list[dict[str, Any]] | None = None, block_number: int = 100) -> dict[str, Any]:
    """One gettransactionreceipt element in wire format."""
    return {
        "blockHash": BLOCK_HASH,
        "blockNumber": block_number,
        "transactionHash": TXID,
        "transactionIndex": 2,
        "from": ALICE,
        "to": CONTRACT_ADDRESS,
        "cumulativeGasUsed": 51_616,
        "gasUsed": 51_616,
        "contractAddress": CONTRACT_ADDRESS,
        "excepted": "None",
        "log": logs if logs is not None else [transfer_log()],
    }


def log_entry_wire(log: dict[str, Any], block_number: int = 100) -> dict[str, Any]:
    """One waitforlogs entry in wire format."""
    return {
        "blockHash": BLOCK_HASH,
        "blockNumber": block_number,
        "transactionHash": TXID,
        "transactionIndex": 2,
        "from": ALICE,
        "to": CONTRACT_ADDRESS,
        "cumulativeGasUsed": 51_616,
        "gasUsed": 51_616,
        "contractAddress": CONTRACT_ADDRESS,
        "topics": log["topics"],
        "data": log["data"],
    }


@pytest.fixture
def token_abi() -> list[dict[str, Any]]:
    return TOKEN_ABI


@pytest.fixture
def contract_info() -> ContractInfo:
    return ContractInfo(abi=TOKEN_ABI, address=CONTRACT_ADDRESS, sender=DEFAULT_SENDER)


@pytest.fixture
def rpc() -> AsyncMock:
    """QtumRPC stand-in; every coroutine method is an AsyncMock."""
    return AsyncMock(spec=QtumRPC)


@pytest.fixture
def contract(rpc: AsyncMock, contract_info: ContractInfo) -> Contract:
    return Contract(rpc, contract_info, default_confirmations=1, confirmation_poll_interval=0)
