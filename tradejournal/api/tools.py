"""Trader tools: forex session status and pips calculator."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from tradejournal.services.pips import InstrumentType, calculate_pips
from tradejournal.services.sessions import overlapping_sessions, session_status_summary

router = APIRouter(prefix="/api/tools", tags=["tools"])


class PipsRequest(BaseModel):
    entry_price: float = Field(..., gt=0, allow_inf_nan=False)
    exit_price: float = Field(..., gt=0, allow_inf_nan=False)
    lot_size: float = Field(1.0, gt=0, allow_inf_nan=False)
    symbol: str = Field("EURUSD", min_length=1, max_length=40)
    instrument: InstrumentType = InstrumentType.FOREX


@router.get("/sessions")
async def sessions(at: datetime | None = Query(None, description="UTC timestamp, defaults to now")):
    """Open/upcoming/closed status of the Sydney, Tokyo, London and New York sessions."""
    return {"sessions": session_status_summary(at), "overlap": overlapping_sessions(at)}


@router.post("/pips")
async def pips(req: PipsRequest):
    try:
        result = calculate_pips(
            req.entry_price, req.exit_price, req.lot_size, req.symbol, req.instrument
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return result.to_dict()
