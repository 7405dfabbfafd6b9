"""Prompt template for itinerary generation."""

from __future__ import annotations

import math
from datetime import date
from typing import Optional

from travelai.domain.models import TripRequest

ITINERARY_PROMPT = """You are an expert travel planner. Create a detailed day-by-day itinerary for the following trip:

**Trip Details:**
- Destination: {destination}
- Start Date: {start_date}
- End Date: {end_date}
- Duration: {duration} days
- Number of travelers: {num_travelers}
- Budget: {budget}
- Interests: {interests}
- Additional information: {additional_info}

**Requirements:**
Please provide a comprehensive itinerary that includes:

1. **Daily Schedule** (Day 1 to Day {duration}):
   - Morning, afternoon, and evening activities
   - Specific attractions and their recommended visit times
   - Estimated time needed for each activity

2. **Dining Recommendations**:
   - Breakfast, lunch, and dinner suggestions for each day
   - Local specialties and must-try dishes
   - Restaurant recommendations with price ranges

3. **Transportation**:
   - How to get around the city/country
   - Transportation options between attractions
   - Estimated costs and travel times

4. **Accommodation Suggestions**:
   - Recommended areas to stay
   - Hotel/accommodation types within budget
   - Booking tips and considerations

5. **Cultural Highlights**:
   - Must-see attractions and landmarks
   - Cultural experiences and local customs
   - Historical significance of key sites

6. **Budget Breakdown**:
   - Estimated daily costs
   - Money-saving tips
   - Free or low-cost activities

7. **Practical Information**:
   - Best times to visit attractions
   - Weather considerations
   - Safety tips and local etiquette
   - Essential phrases (if applicable)

Format the response as a well-structured travel guide with clear headings and bullet points for easy reading."""


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def trip_duration_days(start: date, end: date) -> int:
    """Whole days covered by the trip, counting both the first and the last day."""
    return math.ceil((end - start).total_seconds() / 86400) + 1


def build_itinerary_prompt(trip: TripRequest) -> str:
    return ITINERARY_PROMPT.format(
        destination=trip.destination,
        start_date=trip.start_date.isoformat(),
        end_date=trip.end_date.isoformat(),
        duration=trip_duration_days(trip.start_date, trip.end_date),
        num_travelers=trip.num_travelers,
        budget=trip.budget,
        interests=", ".join(trip.interests),
        additional_info=trip.additional_info if not _blank(trip.additional_info) else "None",
    )
