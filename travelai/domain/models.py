from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str]
    display_name: Optional[str]


@dataclass(frozen=True)
class TripRequest:
    destination: str
    start_date: date
    end_date: date
    num_travelers: int
    budget: str
    interests: List[str]
    additional_info: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    text: str
    prompt: str
    generated_at: datetime


@dataclass
class ItineraryContent:
    generated_text: str
    generated_at: datetime
    prompt_used: str
    user_email: Optional[str]
    user_name: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_text": self.generated_text,
            "generated_at": self.generated_at.isoformat(),
            "prompt_used": self.prompt_used,
            "user_email": self.user_email,
            "user_name": self.user_name,
        }


@dataclass
class ItineraryRecord:
    id: str
    user_id: str
    destination: str
    start_date: date
    end_date: date
    num_travelers: int
    budget: str
    interests: List[str]
    content: ItineraryContent
    created_at: datetime
    additional_info: Optional[str] = None

    def to_api_model(self):
        from travelai.api.models.schemas import ItineraryContentOut, ItineraryOut

        return ItineraryOut(
            id=self.id,
            user_id=self.user_id,
            destination=self.destination,
            start_date=self.start_date,
            end_date=self.end_date,
            num_travelers=self.num_travelers,
            budget=self.budget,
            interests=list(self.interests),
            additional_info=self.additional_info,
            content=ItineraryContentOut(**self.content.to_dict()),
            created_at=self.created_at,
        )

    def to_generated_model(self):
        """Shape returned right after generation: content flattened to the text body."""
        from travelai.api.models.schemas import GeneratedItinerary, UserData

        return GeneratedItinerary(
            id=self.id,
            content=self.content.generated_text,
            destination=self.destination,
            start_date=self.start_date,
            end_date=self.end_date,
            num_travelers=self.num_travelers,
            budget=self.budget,
            interests=list(self.interests),
            created_at=self.created_at,
            user_data=UserData(
                user_id=self.user_id,
                user_email=self.content.user_email,
                user_name=self.content.user_name,
            ),
        )
