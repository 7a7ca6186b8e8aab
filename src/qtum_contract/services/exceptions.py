"""Error hierarchy for contract dispatch, node transport and log decoding.

This module defines the exception hierarchy for client-level errors:
- ContractError: Base for all errors raised by this package
- TransientError: Errors that may succeed on retry (transport, timeouts)
- PermanentError: Errors that will not succeed on retry (unknown methods, reverts)

Retry policy is left to callers; nothing in this package retries on its own.
"""


class ContractError(Exception):
    """Base exception for all contract client errors."""

    pass


class TransientError(ContractError):
    """Transient error that may succeed on retry.

    Examples:
    - Node unreachable or connection reset
    - Malformed JSON-RPC response
    - Confirmation timeout
    """

    pass


class PermanentError(ContractError):
    """Permanent error that will not succeed on retry.

    Examples:
    - Unknown method name
    - VM exception during a call
    - Invalid ABI definition
    """

    pass


# Dispatch errors
class UnknownMethodError(PermanentError):
    """Method name is not in the call or send index of the contract.

    Raised before any network round-trip.
    """

    def __init__(self, method: str, kind: str):
        self.method = method
        self.kind = kind
        super().__init__(f"Unknown method to {kind}: {method}")


class ExecutionRevertedError(PermanentError):
    """The VM reported an exception status for an otherwise successful call."""

    def __init__(self, excepted: str):
        self.excepted = excepted
        super().__init__(f"Call exception: {excepted}")


class AbiDefinitionError(PermanentError):
    """Contract ABI cannot be indexed (e.g. two methods share a name)."""

    pass


# Transport errors
class TransportFailure(TransientError):
    """Base exception for node transport failures."""

    pass


class RpcError(TransportFailure):
    """Node answered with a JSON-RPC error object."""

    def __init__(self, code: int, message: str, method: str | None = None):
        self.code = code
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}[{code}] {message}")


class RpcTransportError(TransportFailure):
    """Network error, HTTP error status or non-JSON response from the node."""

    pass


class TransactionTimeoutError(TransientError):
    """Transaction did not reach the requested confirmation depth in time."""

    pass


# Decoding errors
class DecodeMismatch(ContractError):
    """A single log entry does not match any event in the contract ABI.

    Never escapes batch operations: the tolerant decoder converts it into an
    UnrecognizedEvent marker.
    """

    pass
