"""Preferences API routes: goals, initial balance and general target per user."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tradejournal.models.goals import Goals
from tradejournal.services.preferences import PreferencesStore, get_preferences_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/preferences", tags=["preferences"])


class BalanceRequest(BaseModel):
    balance: float = Field(..., allow_inf_nan=False)


class TargetRequest(BaseModel):
    target: float = Field(..., ge=0, allow_inf_nan=False)


@router.get("/{user}/goals")
async def get_goals(user: str, store: PreferencesStore = Depends(get_preferences_store)):
    return store.load_goals(user).model_dump()


@router.put("/{user}/goals")
async def put_goals(
    user: str,
    goals: Goals,
    store: PreferencesStore = Depends(get_preferences_store),
):
    store.save_goals(user, goals)
    logger.info("Goals updated for %s", user)
    return goals.model_dump()


@router.get("/{user}/initial-balance")
async def get_initial_balance(user: str, store: PreferencesStore = Depends(get_preferences_store)):
    return {"balance": store.load_initial_balance(user)}


@router.put("/{user}/initial-balance")
async def put_initial_balance(
    user: str,
    req: BalanceRequest,
    store: PreferencesStore = Depends(get_preferences_store),
):
    try:
        store.save_initial_balance(user, req.balance)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"balance": req.balance}


@router.get("/{user}/target")
async def get_target(user: str, store: PreferencesStore = Depends(get_preferences_store)):
    return {"target": store.load_target(user)}


@router.put("/{user}/target")
async def put_target(
    user: str,
    req: TargetRequest,
    store: PreferencesStore = Depends(get_preferences_store),
):
    try:
        store.save_target(user, req.target)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"target": req.target}
