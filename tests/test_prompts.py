from datetime import date

from travelai.ai.prompts import build_itinerary_prompt, trip_duration_days
from travelai.domain.models import TripRequest


def _trip(**overrides):
    data = dict(
        destination="Kyoto, Japan",
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 5),
        num_travelers=3,
        budget="Luxury ($3000-$10000)",
        interests=["Architecture", "Food & Dining"],
        additional_info=None,
    )
    data.update(overrides)
    return TripRequest(**data)


def test_duration_counts_both_ends():
    assert trip_duration_days(date(2025, 6, 1), date(2025, 6, 5)) == 5
    assert trip_duration_days(date(2025, 12, 31), date(2026, 1, 1)) == 2


def test_prompt_is_deterministic():
    assert build_itinerary_prompt(_trip()) == build_itinerary_prompt(_trip())


def test_prompt_embeds_trip_details():
    prompt = build_itinerary_prompt(_trip())
    assert "- Destination: Kyoto, Japan" in prompt
    assert "- Start Date: 2025-06-01" in prompt
    assert "- End Date: 2025-06-05" in prompt
    assert "- Duration: 5 days" in prompt
    assert "- Number of travelers: 3" in prompt
    assert "- Budget: Luxury ($3000-$10000)" in prompt
    assert "- Interests: Architecture, Food & Dining" in prompt
    assert "- Additional information: None" in prompt
    assert "**Daily Schedule** (Day 1 to Day 5)" in prompt


def test_prompt_uses_additional_info_when_present():
    prompt = build_itinerary_prompt(_trip(additional_info="Traveling with a toddler {and a dog}"))
    assert "- Additional information: Traveling with a toddler {and a dog}" in prompt


def test_sections_in_fixed_order():
    prompt = build_itinerary_prompt(_trip())
    sections = [
        "Daily Schedule",
        "Dining Recommendations",
        "Transportation",
        "Accommodation Suggestions",
        "Cultural Highlights",
        "Budget Breakdown",
        "Practical Information",
    ]
    positions = [prompt.index(f"**{name}**") for name in sections]
    assert positions == sorted(positions)


def test_blank_additional_info_renders_none():
    prompt = build_itinerary_prompt(_trip(additional_info="   "))
    assert "- Additional information: None" in prompt
