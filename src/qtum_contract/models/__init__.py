"""Data models for contract descriptors, node records and decoded results."""

from qtum_contract.models.contract import (
    ConfirmationHandler,
    ContractCallResult,
    ContractLogEntry,
    ContractLogs,
    ContractSendReceipt,
    ContractSendTx,
    DecodedEvent,
    LogEvent,
    UnrecognizedEvent,
)
from qtum_contract.models.contract_info import (
    AbiParam,
    ContractInfo,
    ContractsRepoData,
    DeployedContractInfo,
    EventABI,
    MethodABI,
)
from qtum_contract.models.rpc import (
    BlockTag,
    CallContractResult,
    ExecutionResult,
    LogEntry,
    LogFilter,
    SendToContractResult,
    TransactionInfo,
    TransactionLog,
    TransactionReceipt,
    WaitForLogsRequest,
    WaitForLogsResult,
)

__all__ = [
    "AbiParam",
    "BlockTag",
    "CallContractResult",
    "ConfirmationHandler",
    "ContractCallResult",
    "ContractInfo",
    "ContractLogEntry",
    "ContractLogs",
    "ContractSendReceipt",
    "ContractSendTx",
    "ContractsRepoData",
    "DecodedEvent",
    "DeployedContractInfo",
    "EventABI",
    "ExecutionResult",
    "LogEntry",
    "LogEvent",
    "LogFilter",
    "MethodABI",
    "SendToContractResult",
    "TransactionInfo",
    "TransactionLog",
    "TransactionReceipt",
    "UnrecognizedEvent",
    "WaitForLogsRequest",
    "WaitForLogsResult",
]
