from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

# ---------- Catalogs ----------

BUDGET_TIERS: List[str] = [
    "Budget (Under $1000)",
    "Mid-range ($1000-$3000)",
    "Luxury ($3000-$10000)",
    "Ultra-luxury ($10000+)",
]

INTEREST_OPTIONS: List[str] = [
    "Culture & History",
    "Food & Dining",
    "Adventure & Outdoor",
    "Shopping",
    "Nightlife",
    "Museums & Art",
    "Nature & Wildlife",
    "Photography",
    "Architecture",
    "Local Experiences",
    "Relaxation & Wellness",
    "Sports & Recreation",
]


# ---------- Request ----------


class GenerateItineraryRequest(BaseModel):
    """Raw form payload. Fields are loose on purpose; the validator owns the rules."""

    destination: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    numTravelers: Optional[Union[int, str]] = 1
    budget: Optional[str] = None
    interests: List[str] = Field(default_factory=list)
    additionalInfo: Optional[str] = None


# ---------- Itinerary ----------


class UserData(BaseModel):
    user_id: str
    user_email: Optional[str] = None
    user_name: Optional[str] = None


class GeneratedItinerary(BaseModel):
    id: str
    content: str
    destination: str
    start_date: date
    end_date: date
    num_travelers: int
    budget: str
    interests: List[str]
    created_at: datetime
    user_data: UserData


class ItineraryContentOut(BaseModel):
    generated_text: str
    generated_at: datetime
    prompt_used: str
    user_email: Optional[str] = None
    user_name: Optional[str] = None


class ItineraryOut(BaseModel):
    id: str
    user_id: str
    destination: str
    start_date: date
    end_date: date
    num_travelers: int
    budget: str
    interests: List[str]
    additional_info: Optional[str] = None
    content: ItineraryContentOut
    created_at: datetime


# ---------- Response envelopes ----------


class GenerateItineraryResponse(BaseModel):
    success: Literal[True] = True
    itinerary: GeneratedItinerary


class ItineraryListResponse(BaseModel):
    success: Literal[True] = True
    itineraries: List[ItineraryOut]


class ItineraryDetailResponse(BaseModel):
    success: Literal[True] = True
    itinerary: ItineraryOut


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
