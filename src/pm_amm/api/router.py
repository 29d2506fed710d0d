"""AMM trading endpoints.

POST /markets/{market_id}/buy     — spend currency, receive outcome tokens
POST /markets/{market_id}/sell    — return outcome tokens, receive currency
GET  /markets/{market_id}/quote   — preview either at current reserves
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_amm.application.schemas import TradeRequest
from src.pm_amm.application.service import TradingService
from src.pm_common.database import get_db_session
from src.pm_common.enums import Outcome, TradeDirection
from src.pm_common.response import ApiResponse, success_response
from src.pm_common.units import U64_MAX
from src.pm_gateway.auth.dependencies import get_current_caller

router = APIRouter(prefix="/markets", tags=["amm"])

_service = TradingService()


@router.post("/{market_id}/buy")
async def buy(
    market_id: str,
    body: TradeRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.buy(db, market_id, caller, body)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )


@router.post("/{market_id}/sell")
async def sell(
    market_id: str,
    body: TradeRequest,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.sell(db, market_id, caller, body)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )


@router.get("/{market_id}/quote")
async def quote(
    market_id: str,
    request: Request,
    caller: Annotated[str, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    direction: TradeDirection = Query(...),
    outcome: Outcome = Query(...),
    amount: int = Query(..., ge=0, le=U64_MAX),
) -> ApiResponse:
    result = await _service.quote(db, market_id, direction, outcome, amount)
    return success_response(
        result.model_dump(mode="json"), request_id=getattr(request.state, "request_id", None)
    )
