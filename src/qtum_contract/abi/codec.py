"""ABI codec for Qtum contracts.

Qtum runs the EVM, so call data, return values and event logs use the Solidity
ABI. Encoding and decoding is delegated to eth-abi; selectors and topics come
from eth-utils. What differs from Ethereum is the hex convention: Qtum RPC
speaks hex without the 0x prefix, and contract addresses are 40 hex chars.
"""

from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from eth_abi import decode, encode
from eth_abi.grammar import ABIType, BasicType, TupleType, parse
from eth_utils.abi import event_signature_to_log_topic, function_signature_to_4byte_selector

from qtum_contract.models.contract import DecodedEvent, LogEvent, UnrecognizedEvent
from qtum_contract.models.contract_info import EventABI, MethodABI
from qtum_contract.models.rpc import LogEntry, TransactionLog
from qtum_contract.services.exceptions import DecodeMismatch

logger = structlog.get_logger()


def strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def _to_abi_value(abi_type: ABIType, value: Any) -> Any:
    """Convert a caller-supplied argument into what eth-abi expects."""
    if abi_type.is_array:
        return [_to_abi_value(abi_type.item_type, v) for v in value]
    if isinstance(abi_type, TupleType):
        if isinstance(value, Mapping):
            raise TypeError("Tuple arguments must be passed positionally")
        return tuple(_to_abi_value(c, v) for c, v in zip(abi_type.components, value))
    if isinstance(abi_type, BasicType):
        if abi_type.base == "address" and isinstance(value, str):
            return "0x" + strip_0x(value).lower()
        if abi_type.base == "bytes" and isinstance(value, str):
            return bytes.fromhex(strip_0x(value))
    return value


def _from_abi_value(abi_type: ABIType, value: Any) -> Any:
    """Convert an eth-abi decoded value into the Qtum-facing form."""
    if abi_type.is_array:
        return [_from_abi_value(abi_type.item_type, v) for v in value]
    if isinstance(abi_type, TupleType):
        return tuple(_from_abi_value(c, v) for c, v in zip(abi_type.components, value))
    if isinstance(abi_type, BasicType) and abi_type.base == "address":
        return strip_0x(value).lower()
    return value


def encode_inputs(method: MethodABI, args: Sequence[Any]) -> str:
    """Encode a method call as hex call data (selector + arguments, no 0x).

    Raises:
        ValueError: If the argument count does not match the method inputs
    """
    types = method.input_types
    if len(args) != len(types):
        raise ValueError(
            f"{method.name} expects {len(types)} argument(s), got {len(args)}"
        )
    values = [_to_abi_value(parse(t), a) for t, a in zip(types, args)]
    selector = function_signature_to_4byte_selector(method.signature)
    return (selector + encode(types, values)).hex()


def decode_inputs(method: MethodABI, calldata: str) -> list[Any]:
    """Decode hex call data produced by encode_inputs back into arguments."""
    raw = bytes.fromhex(strip_0x(calldata))
    selector = function_signature_to_4byte_selector(method.signature)
    if raw[:4] != selector:
        raise ValueError(f"Call data selector does not match {method.signature}")
    types = method.input_types
    values = decode(types, raw[4:])
    return [_from_abi_value(parse(t), v) for t, v in zip(types, values)]


def decode_outputs(method: MethodABI, output: str) -> list[Any]:
    """Decode the hex output of a call against the method's return types."""
    types = method.output_types
    values = decode(types, bytes.fromhex(strip_0x(output)))
    return [_from_abi_value(parse(t), v) for t, v in zip(types, values)]


class ContractLogDecoder:
    """Decode raw log entries against the events of a contract ABI.

    Only non-anonymous events can be matched, by their topic[0] selector.
    """

    def __init__(self, abi: Sequence[Mapping[str, Any]]):
        self._events: dict[str, EventABI] = {}
        for item in abi:
            if item.get("type") != "event":
                continue
            event = EventABI.model_validate(item)
            if event.anonymous:
                continue
            topic = event_signature_to_log_topic(event.signature).hex()
            self._events[topic] = event

    @property
    def event_names(self) -> list[str]:
        return [e.name for e in self._events.values()]

    def decode(self, entry: LogEntry | TransactionLog) -> DecodedEvent:
        """Decode one entry or raise DecodeMismatch."""
        if not entry.topics:
            raise DecodeMismatch("Log entry has no topics")

        event = self._events.get(strip_0x(entry.topics[0]).lower())
        if event is None:
            raise DecodeMismatch(f"No event in ABI for topic {entry.topics[0]}")

        try:
            return self._decode_event(event, entry)
        except DecodeMismatch:
            raise
        except Exception as e:
            raise DecodeMismatch(f"Failed to decode {event.name}: {e}") from e

    def decode_tolerant(self, entry: LogEntry | TransactionLog) -> LogEvent:
        """Decode one entry, returning UnrecognizedEvent instead of raising."""
        try:
            return self.decode(entry)
        except DecodeMismatch as e:
            logger.debug("log_decoder.unrecognized", reason=str(e), topics=entry.topics)
            return UnrecognizedEvent(reason=str(e))

    def decode_many(self, entries: Sequence[LogEntry | TransactionLog]) -> list[LogEvent]:
        return [self.decode_tolerant(entry) for entry in entries]

    def _decode_event(self, event: EventABI, entry: LogEntry | TransactionLog) -> DecodedEvent:
        indexed = [p for p in event.inputs if p.indexed]
        topics = entry.topics[1:]
        if len(topics) != len(indexed):
            raise DecodeMismatch(
                f"{event.name} expects {len(indexed)} indexed topic(s), got {len(topics)}"
            )

        indexed_values: list[Any] = []
        for param, topic in zip(indexed, topics):
            abi_type = parse(param.abi_type)
            topic_bytes = bytes.fromhex(strip_0x(topic))
            if abi_type.is_dynamic or abi_type.is_array or isinstance(abi_type, TupleType):
                # Only the keccak hash of indexed reference types is logged
                indexed_values.append(topic_bytes)
            else:
                (value,) = decode([param.abi_type], topic_bytes)
                indexed_values.append(_from_abi_value(abi_type, value))

        data_params = [p for p in event.inputs if not p.indexed]
        data_types = [p.abi_type for p in data_params]
        data_values = decode(data_types, bytes.fromhex(strip_0x(entry.data)))

        indexed_iter = iter(indexed_values)
        data_iter = iter(
            _from_abi_value(parse(t), v) for t, v in zip(data_types, data_values)
        )
        args: dict[str, Any] = {}
        for position, param in enumerate(event.inputs):
            key = param.name or str(position)
            args[key] = next(indexed_iter) if param.indexed else next(data_iter)

        return DecodedEvent(type=event.name, args=args)
