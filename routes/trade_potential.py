"""
Trade potential API routes.

Ranked trade potentials for the trading terminal, plus a pure scoring
endpoint for records the caller already has.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import structlog

from models.trade_potential import (
    ReadinessLabel,
    ScoredTradePotential,
    ScoreRequest,
    SupplierPriceCreate,
    SupplierPriceResponse,
    TradePotentialListResponse,
    TradePotentialSummary,
)
from services.readiness_service import READINESS_LABELS, score_potentials
from services.trade_potential_service import get_trade_potential_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/trade-potential", tags=["Trade Potential"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=TradePotentialListResponse)
async def list_trade_potentials(
    status: Optional[str] = Query(
        None,
        description="complete, missing_price, missing_transport, missing_both or all"
    )
):
    """
    Get trade potentials ranked by readiness score.

    Hottest leads first. Equal scores keep matrix order.
    The summary always covers every potential, regardless of the filter.
    """
    try:
        service = get_trade_potential_service()
        return service.get_ranked(status=status)

    except Exception as e:
        return handle_error(e)


@router.get("/summary", response_model=TradePotentialSummary)
async def get_trade_potential_summary():
    """Counts per status and completion rate."""
    try:
        service = get_trade_potential_service()
        return service.get_summary()

    except Exception as e:
        return handle_error(e)


@router.post("/score", response_model=list[ScoredTradePotential])
async def score_trade_potentials(
    request: ScoreRequest,
    now: Optional[datetime] = Query(None, description="Reference time for expiry urgency")
):
    """
    Score caller-supplied potentials without touching the database.

    Returns them ranked, each with readiness_score and label.
    """
    return score_potentials(request.potentials, now=now)


@router.get("/labels", response_model=list[ReadinessLabel])
async def get_readiness_labels():
    """Readiness label bands, highest first."""
    return READINESS_LABELS


@router.post("/prices", response_model=SupplierPriceResponse, status_code=201)
async def add_supplier_price(data: SupplierPriceCreate):
    """
    Add a supplier price to close a missing_price gap.

    The potential is re-evaluated on the next matrix request.
    """
    try:
        service = get_trade_potential_service()
        return service.add_supplier_price(data)

    except Exception as e:
        return handle_error(e)
