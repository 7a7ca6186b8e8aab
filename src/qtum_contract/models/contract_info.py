"""Contract descriptor models - ABI entries, contract info and solar deployment info."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CONSTANT_MUTABILITIES = frozenset({"view", "pure"})


class AbiParam(BaseModel):
    """One input/output parameter of an ABI function or event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str = ""
    type: str
    indexed: bool = False
    components: tuple["AbiParam", ...] | None = None
    internal_type: str | None = None

    @property
    def abi_type(self) -> str:
        """Canonical type string understood by eth-abi.

        Tuples are collapsed into `(t1,t2)` form, keeping any array suffix.
        """
        if self.type.startswith("tuple") and self.components is not None:
            inner = ",".join(c.abi_type for c in self.components)
            return f"({inner}){self.type[len('tuple'):]}"
        return self.type


class MethodABI(BaseModel):
    """ABI description of a contract function."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    name: str
    type: str = "function"
    inputs: tuple[AbiParam, ...] = ()
    outputs: tuple[AbiParam, ...] = ()
    constant: bool | None = None
    state_mutability: str | None = None
    payable: bool | None = None

    @property
    def is_constant(self) -> bool:
        """True for methods that do not alter on-chain state.

        Old solc ABIs carry an explicit `constant` flag; newer ones only
        carry `stateMutability`.
        """
        if self.constant is not None:
            return self.constant
        return self.state_mutability in CONSTANT_MUTABILITIES

    @property
    def input_types(self) -> list[str]:
        return [p.abi_type for p in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [p.abi_type for p in self.outputs]

    @property
    def signature(self) -> str:
        """Canonical signature, e.g. `transfer(address,uint256)`."""
        return f"{self.name}({','.join(self.input_types)})"


class EventABI(BaseModel):
    """ABI description of a contract event."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    name: str
    type: str = "event"
    inputs: tuple[AbiParam, ...] = ()
    anonymous: bool = False

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(p.abi_type for p in self.inputs)})"


class ContractInfo(BaseModel):
    """Immutable descriptor of a deployed contract.

    Attributes:
        abi: Raw ABI entries (functions and events)
        address: Contract address, 40 hex characters without 0x prefix
        sender: Optional default sender (base58 Qtum address)
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    abi: tuple[dict[str, Any], ...]
    address: str
    sender: str | None = None

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Normalize to 40 lowercase hex characters without 0x prefix."""
        if v.startswith("0x"):
            v = v[2:]
        if len(v) != 40:
            raise ValueError("Contract address must be 40 hexadecimal characters")
        try:
            int(v, 16)
        except ValueError:
            raise ValueError("Contract address must contain valid hexadecimal characters")
        return v.lower()


class DeployedContractInfo(ContractInfo):
    """Contract info plus the deployment metadata recorded by solar."""

    name: str
    deploy_name: str
    txid: str
    bin: str = ""
    binhash: str = ""
    created_at: str = ""
    confirmed: bool = False


class ContractsRepoData(BaseModel):
    """Contents of a solar deployment file (`solar.json`)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    contracts: dict[str, DeployedContractInfo] = Field(default_factory=dict)
    libraries: dict[str, DeployedContractInfo] = Field(default_factory=dict)
    related: dict[str, ContractInfo] = Field(default_factory=dict)
