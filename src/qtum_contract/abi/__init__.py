"""Contract ABI utilities.

This module loads contract descriptors from solar deployment files
(`solar.json`), which map contract names to their ABI, address and
deployment metadata, and re-exports the codec and method index.
"""

import json
from pathlib import Path

from qtum_contract.abi.codec import (
    ContractLogDecoder,
    decode_inputs,
    decode_outputs,
    encode_inputs,
)
from qtum_contract.abi.method_index import MethodIndex
from qtum_contract.models.contract_info import ContractsRepoData, DeployedContractInfo


def load_contracts_repo(repo_path: str | Path) -> ContractsRepoData:
    """Load a solar deployment file.

    Args:
        repo_path: Path to solar.json (or a directory containing it)

    Returns:
        Parsed repository with contracts, libraries and related contracts

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(repo_path)
    if path.is_dir():
        path = path / "solar.json"

    if not path.exists():
        raise FileNotFoundError(
            f"Contracts repo not found: {path}\n"
            f"Deploy contracts with solar or pass --repo with the right path."
        )

    with open(path) as f:
        return ContractsRepoData.model_validate(json.load(f))


def get_contract_info(repo_path: str | Path, contract_name: str) -> DeployedContractInfo:
    """Load one deployed contract descriptor by name.

    Example:
        >>> info = get_contract_info("solar.json", "zeppelin-solidity/contracts/token/CappedToken.sol")
        >>> token = Contract(rpc, info)

    Raises:
        KeyError: If the contract is not in the repo
    """
    repo = load_contracts_repo(repo_path)
    try:
        return repo.contracts[contract_name]
    except KeyError:
        known = ", ".join(sorted(repo.contracts)) or "none"
        raise KeyError(f"Contract {contract_name!r} not found in repo (known: {known})") from None


__all__ = [
    "ContractLogDecoder",
    "MethodIndex",
    "decode_inputs",
    "decode_outputs",
    "encode_inputs",
    "get_contract_info",
    "load_contracts_repo",
]
