"""Settlement endpoints.

POST /markets/{market_id}/settle    — authority reports the result; latches the winner
POST /markets/{market_id}/redeem    — burn winning tokens for a pro-rata share of the pool
POST /markets/{market_id}/discard   — burn worthless losing tokens
GET  /markets/{market_id}/position  — caller's balances and current redeemable payout
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_current_caller
from src.pm_settlement.application.schemas import (
    DiscardRequest,
    RedeemRequest,
    SettleRequest,
)
from src.pm_settlement.application.service import SettlementService

router = APIRouter(prefix="/markets", tags=["settlement"])

_service = SettlementService()


@router.post("/{market_id}/settle")
async def settle_market(
    market_id: str,
    body: SettleRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.settle(db, market_id, caller, body)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )


@router.post("/{market_id}/redeem")
async def redeem(
    market_id: str,
    body: RedeemRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.redeem(db, market_id, caller, body)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )


@router.post("/{market_id}/discard")
async def discard_losing(
    market_id: str,
    body: DiscardRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.discard_losing(db, market_id, caller, body)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )


@router.get("/{market_id}/position")
async def get_position(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_position(db, market_id, caller)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )
