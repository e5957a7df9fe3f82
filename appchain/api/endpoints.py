"""API endpoints for the appchain development node."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from appchain.errors import AppChainError
from appchain.models.api import (
    BalanceResponse,
    BlockResponse,
    FeeCollectedResponse,
    PoolRecordResponse,
    QueuedResponse,
    TransactionRequest,
)
from appchain.models.types import is_valid_address, normalize_address
from appchain.runtime import AppChain, get_default_chain

logger = structlog.get_logger()

router = APIRouter()


def get_chain() -> AppChain:
    """Dependency provider for the chain instance.

    Override this in tests to inject a fresh chain:
        app.dependency_overrides[get_chain] = lambda: chain

    Returns:
        The chain the node operates on.
    """
    return get_default_chain()


def _account(address: str) -> str:
    account = normalize_address(address)
    if not is_valid_address(account):
        raise HTTPException(status_code=422, detail=f"Invalid address: {address}")
    return account


@router.post("/transactions")
def submit_transaction(
    request: TransactionRequest,
    chain: AppChain = Depends(get_chain),
) -> QueuedResponse:
    """Queue a signed call for the next block.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Unknown module/method or bad arguments: 400 with the error code
    """
    try:
        chain.transaction(request.sender, request.module, request.method, **request.args)
    except AppChainError as err:
        logger.warning(
            "transaction_rejected",
            module=request.module,
            method=request.method,
            error=err.code,
        )
        raise HTTPException(status_code=400, detail={"error": err.code, "message": str(err)})

    logger.info(
        "transaction_queued",
        module=request.module,
        method=request.method,
        pending=len(chain.pending),
    )
    return QueuedResponse(queued=len(chain.pending))


@router.post("/blocks")
def produce_block(chain: AppChain = Depends(get_chain)) -> BlockResponse:
    """Produce a block from every queued transaction."""
    return BlockResponse.from_block(chain.produce_block())


@router.get("/lbp/pools/{token_a}/{token_b}")
def get_lbp_pool(
    token_a: int,
    token_b: int,
    chain: AppChain = Depends(get_chain),
) -> PoolRecordResponse:
    if token_a == token_b:
        raise HTTPException(status_code=400, detail="Tokens must be different")

    record = chain.lbp.get_pool(token_a, token_b)
    if record is None:
        raise HTTPException(status_code=404, detail="Pool does not exist")
    return PoolRecordResponse.from_record(chain.lbp.pool_key(token_a, token_b), record)


@router.get("/lbp/fees/{collector}/{asset}")
def get_fee_collected(
    collector: str,
    asset: int,
    chain: AppChain = Depends(get_chain),
) -> FeeCollectedResponse:
    account = _account(collector)
    return FeeCollectedResponse(
        collector=account,
        asset=asset,
        amount=chain.lbp.get_fee_collected(account, asset),
    )


@router.get("/balances/{token_id}/{account}")
def get_balance(
    token_id: int,
    account: str,
    chain: AppChain = Depends(get_chain),
) -> BalanceResponse:
    holder = _account(account)
    return BalanceResponse(
        token_id=token_id,
        account=holder,
        balance=chain.balances.get_balance(token_id, holder),
    )
