from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from travelai.api.models.schemas import GenerateItineraryRequest
from travelai.core.errors import ValidationError
from travelai.domain.models import TripRequest


class ValidationRule(str, Enum):
    MISSING_REQUIRED_FIELDS = "missing_required_fields"
    INVALID_START_DATE = "invalid_start_date"
    START_DATE_IN_PAST = "start_date_in_past"
    INVALID_END_DATE = "invalid_end_date"
    END_DATE_NOT_AFTER_START = "end_date_not_after_start"
    INVALID_NUM_TRAVELERS = "invalid_num_travelers"


_MESSAGES = {
    ValidationRule.MISSING_REQUIRED_FIELDS: "Please fill in all required fields",
    ValidationRule.INVALID_START_DATE: "Start date is not a valid date",
    ValidationRule.START_DATE_IN_PAST: "Start date cannot be in the past",
    ValidationRule.INVALID_END_DATE: "End date is not a valid date",
    ValidationRule.END_DATE_NOT_AFTER_START: "End date must be after start date",
    ValidationRule.INVALID_NUM_TRAVELERS: "Number of travelers must be a positive whole number",
}


def _fail(rule: ValidationRule, field: str) -> ValidationError:
    return ValidationError(rule.value, _MESSAGES[rule], {"field": field, "rule": rule.value})


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _parse_date(value: str) -> Optional[date]:
    raw = value.strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    # Browsers occasionally send a full timestamp; only the calendar day matters.
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_travelers(value: Any) -> Optional[int]:
    if value is None or value == "":
        return 1
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return None
    return parsed if parsed >= 1 else None


def validate_trip_request(payload: GenerateItineraryRequest, today: Optional[date] = None) -> TripRequest:
    """
    Check the raw form payload and return a typed TripRequest.
    Rules run in a fixed order and the first violation is raised as ValidationError.
    """
    today = today or datetime.utcnow().date()
    has_interest = any(not _blank(item) for item in payload.interests)

    if (
        _blank(payload.destination)
        or _blank(payload.startDate)
        or _blank(payload.endDate)
        or _blank(payload.budget)
        or not has_interest
    ):
        missing = [
            name
            for name, value in (
                ("destination", payload.destination),
                ("startDate", payload.startDate),
                ("endDate", payload.endDate),
                ("budget", payload.budget),
            )
            if _blank(value)
        ]
        if not has_interest:
            missing.append("interests")
        raise _fail(ValidationRule.MISSING_REQUIRED_FIELDS, ",".join(missing))

    start = _parse_date(payload.startDate)
    if start is None:
        raise _fail(ValidationRule.INVALID_START_DATE, "startDate")
    if start < today:
        raise _fail(ValidationRule.START_DATE_IN_PAST, "startDate")

    end = _parse_date(payload.endDate)
    if end is None:
        raise _fail(ValidationRule.INVALID_END_DATE, "endDate")
    if end <= start:
        raise _fail(ValidationRule.END_DATE_NOT_AFTER_START, "endDate")

    travelers = _parse_travelers(payload.numTravelers)
    if travelers is None:
        raise _fail(ValidationRule.INVALID_NUM_TRAVELERS, "numTravelers")

    # Text fields are echoed as submitted; only the checks above ignore whitespace.
    return TripRequest(
        destination=payload.destination,
        start_date=start,
        end_date=end,
        num_travelers=travelers,
        budget=payload.budget,
        interests=list(payload.interests),
        additional_info=payload.additionalInfo,
    )
