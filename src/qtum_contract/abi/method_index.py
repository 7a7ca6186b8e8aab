"""Name-keyed method lookup built once from a contract ABI."""

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from qtum_contract.models.contract_info import MethodABI
from qtum_contract.services.exceptions import AbiDefinitionError, UnknownMethodError


class MethodIndex:
    """Read-only call/send method tables.

    `call_methods` holds every function; `send_methods` only the ones that
    change state. Constant methods therefore cannot be sent as transactions.
    Overloaded names are rejected because lookups are by bare name.
    """

    def __init__(self, abi: Sequence[Mapping[str, Any]]):
        call_methods: dict[str, MethodABI] = {}
        send_methods: dict[str, MethodABI] = {}

        for item in abi:
            # type defaults to "function" when omitted
            if item.get("type", "function") != "function":
                continue
            method = MethodABI.model_validate(item)
            if method.name in call_methods:
                raise AbiDefinitionError(
                    f"Duplicate method name in ABI: {method.name} "
                    f"({call_methods[method.name].signature} and {method.signature})"
                )
            call_methods[method.name] = method
            if not method.is_constant:
                send_methods[method.name] = method

        self.call_methods: Mapping[str, MethodABI] = MappingProxyType(call_methods)
        self.send_methods: Mapping[str, MethodABI] = MappingProxyType(send_methods)

    def for_call(self, name: str) -> MethodABI:
        try:
            return self.call_methods[name]
        except KeyError:
            raise UnknownMethodError(name, "call") from None

    def for_send(self, name: str) -> MethodABI:
        try:
            return self.send_methods[name]
        except KeyError:
            raise UnknownMethodError(name, "send") from None
