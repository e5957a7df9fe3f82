"""Pydantic models for the development node HTTP API.

Integer amounts and token ids are serialized as decimal strings so that
uint256 values survive JSON clients without precision loss.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from appchain.lbp.pool import PoolRecord
from appchain.models.types import Address, Uint256
from appchain.runtime import Block, TransactionReceipt


class TransactionRequest(BaseModel):
    """A signed call to a runtime method.

    The node trusts `sender` as the verified signer; signature checking
    belongs to the execution environment in front of it.
    """

    sender: Address
    module: str = Field(description="Runtime module name, e.g. 'lbp'")
    method: str = Field(description="Runtime method name, e.g. 'sell_path_signed'")
    args: dict[str, Any] = Field(default_factory=dict)


class QueuedResponse(BaseModel):
    queued: int = Field(description="Transactions waiting for the next block")


class ReceiptModel(BaseModel):
    sender: Address
    module: str
    method: str
    status: bool
    error: str | None = None
    status_message: str | None = None

    @classmethod
    def from_receipt(cls, receipt: TransactionReceipt) -> ReceiptModel:
        tx = receipt.transaction
        return cls(
            sender=tx.sender,
            module=tx.module,
            method=tx.method,
            status=receipt.status,
            error=receipt.error,
            status_message=receipt.status_message,
        )


class BlockResponse(BaseModel):
    height: int
    transactions: list[ReceiptModel]

    @classmethod
    def from_block(cls, block: Block) -> BlockResponse:
        return cls(
            height=block.height,
            transactions=[ReceiptModel.from_receipt(r) for r in block.transactions],
        )


class FeeScheduleModel(BaseModel):
    numerator: Uint256
    denominator: Uint256


class PoolRecordResponse(BaseModel):
    """LBP pool record as stored, plus its pool account."""

    pool: Address
    owner: Address
    start: int
    end: int
    accumulating: Uint256
    sold: Uint256
    initial_weight: int
    final_weight: int
    fee: FeeScheduleModel
    fee_collector: Address
    repay_target: Uint256

    @classmethod
    def from_record(cls, pool: str, record: PoolRecord) -> PoolRecordResponse:
        return cls(
            pool=pool,
            owner=record.owner,
            start=record.start,
            end=record.end,
            accumulating=record.assets.accumulating,
            sold=record.assets.sold,
            initial_weight=record.initial_weight,
            final_weight=record.final_weight,
            fee=FeeScheduleModel(
                numerator=record.fee.numerator, denominator=record.fee.denominator
            ),
            fee_collector=record.fee_collector,
            repay_target=record.repay_target,
        )


class FeeCollectedResponse(BaseModel):
    collector: Address
    asset: Uint256
    amount: Uint256


class BalanceResponse(BaseModel):
    token_id: Uint256
    account: Address
    balance: Uint256


class HealthResponse(BaseModel):
    status: str
    height: int
