"""Receipt shaping tests."""

from conftest import ALICE, BLOCK_HASH, TOKEN_ABI, mint_log, receipt_wire, transfer_log, unknown_log

from qtum_contract.abi.codec import ContractLogDecoder
from qtum_contract.models.contract import DecodedEvent, UnrecognizedEvent
from qtum_contract.models.rpc import TransactionReceipt
from qtum_contract.services.blockchain.receipts import shape_receipt


def test_shape_receipt_splits_raw_and_decoded_logs():
    raw_logs = [transfer_log(), unknown_log(), mint_log(ALICE, 5)]
    receipt = TransactionReceipt.model_validate(receipt_wire(raw_logs))

    shaped = shape_receipt(receipt, ContractLogDecoder(TOKEN_ABI))

    assert len(shaped.logs) == len(shaped.rawlogs) == 3
    assert [log.model_dump() for log in shaped.rawlogs] == [log.model_dump() for log in receipt.log]
    assert isinstance(shaped.logs[0], DecodedEvent)
    assert isinstance(shaped.logs[1], UnrecognizedEvent)
    assert shaped.logs[2].args == {"to": ALICE, "amount": 5}


def test_shape_receipt_keeps_receipt_fields():
    receipt = TransactionReceipt.model_validate(receipt_wire(block_number=321))

    shaped = shape_receipt(receipt, ContractLogDecoder(TOKEN_ABI))

    assert shaped.block_number == 321
    assert shaped.block_hash == BLOCK_HASH
    assert shaped.sender == ALICE
    assert "log" not in shaped.model_dump(by_alias=True)


def test_shape_receipt_does_not_mutate_input():
    receipt = TransactionReceipt.model_validate(receipt_wire([transfer_log()]))
    before = receipt.model_dump()

    shaped = shape_receipt(receipt, ContractLogDecoder(TOKEN_ABI))
    shaped.rawlogs[0].topics.append("ff" * 32)

    assert receipt.model_dump() == before
    assert shaped.rawlogs[0] is not receipt.log[0]


def test_shape_receipt_without_logs():
    receipt = TransactionReceipt.model_validate(receipt_wire([]))

    shaped = shape_receipt(receipt, ContractLogDecoder(TOKEN_ABI))

    assert shaped.logs == []
    assert shaped.rawlogs == []
