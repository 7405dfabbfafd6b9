from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from travelai.api.models.schemas import (
    ErrorResponse,
    GenerateItineraryRequest,
    GenerateItineraryResponse,
    ItineraryDetailResponse,
    ItineraryListResponse,
)
from travelai.dependencies import get_current_user, get_itinerary_service
from travelai.domain.models import AuthenticatedUser
from travelai.domain.services.itinerary_service import ItineraryService

router = APIRouter(prefix="/itineraries", tags=["itineraries"])

_ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 401, 500, 502)}


@router.post("/generate", response_model=GenerateItineraryResponse, responses=_ERROR_RESPONSES)
async def generate_itinerary(
    body: GenerateItineraryRequest,
    authorization: Optional[str] = Header(default=None),
    svc: ItineraryService = Depends(get_itinerary_service),
):
    outcome = await svc.generate_itinerary(authorization, body)
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_content())


@router.get("", response_model=ItineraryListResponse)
async def list_itineraries(
    user: AuthenticatedUser = Depends(get_current_user),
    svc: ItineraryService = Depends(get_itinerary_service),
):
    records = await svc.list_itineraries(user)
    return ItineraryListResponse(itineraries=[record.to_api_model() for record in records])


@router.get("/{itinerary_id}", response_model=ItineraryDetailResponse)
async def get_itinerary(
    itinerary_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    svc: ItineraryService = Depends(get_itinerary_service),
):
    record = await svc.get_itinerary(user, itinerary_id)
    return ItineraryDetailResponse(itinerary=record.to_api_model())
