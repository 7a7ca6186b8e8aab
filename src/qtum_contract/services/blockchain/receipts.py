"""Receipt shaping: attach ABI-decoded logs to a node receipt."""

from qtum_contract.abi.codec import ContractLogDecoder
from qtum_contract.models.contract import ContractSendReceipt
from qtum_contract.models.rpc import TransactionReceipt


def shape_receipt(receipt: TransactionReceipt, decoder: ContractLogDecoder) -> ContractSendReceipt:
    """Return a copy of `receipt` with `log` split into `rawlogs` and decoded `logs`.

    The input is not modified. Entries that match no ABI event decode to
    UnrecognizedEvent, so `len(logs) == len(rawlogs)` always holds.
    """
    fields = receipt.model_dump(by_alias=True, exclude={"log"})
    rawlogs = [entry.model_copy(deep=True) for entry in receipt.log]

    return ContractSendReceipt.model_validate(
        {
            **fields,
            "logs": decoder.decode_many(rawlogs),
            "rawlogs": rawlogs,
        }
    )
