from fastapi import APIRouter

from travelai.api.models.schemas import BUDGET_TIERS, INTEREST_OPTIONS

router = APIRouter(prefix="/meta", tags=["meta"])


@router.get("/budgets")
async def list_budgets():
    return list(BUDGET_TIERS)


@router.get("/interests")
async def list_interests():
    return list(INTEREST_OPTIONS)
