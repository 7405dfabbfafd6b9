from datetime import date, datetime, timezone
from typing import List, Optional

import pytest

from travelai.api.models.schemas import GenerateItineraryRequest
from travelai.core.errors import StorageError
from travelai.domain.identity import InMemoryIdentityProvider
from travelai.domain.models import AuthenticatedUser, GenerationResult
from travelai.domain.repositories import InMemoryItineraryRepository
from travelai.domain.services.itinerary_service import ItineraryService

TODAY = date(2025, 1, 15)

ALICE = AuthenticatedUser(id="user-alice", email="alice@example.com", display_name="Alice Traveler")
BOB = AuthenticatedUser(id="user-bob", email="bob@example.com", display_name="bob@example.com")


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeGenerator:
    """Stands in for GeminiClient; records prompts and replays a fixed text or error."""

    def __init__(self, text: str = "## Day 1\nArrive and explore.", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return GenerationResult(text=self.text, prompt=prompt, generated_at=datetime(2025, 1, 15, 9, tzinfo=timezone.utc))


class FlakyRepository(InMemoryItineraryRepository):
    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    async def create(self, owner, trip, result):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise StorageError("connection reset")
        return await super().create(owner, trip, result)


@pytest.fixture
def identity():
    return InMemoryIdentityProvider({"alice-token": ALICE, "bob-token": BOB})


@pytest.fixture
def repo():
    return InMemoryItineraryRepository()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def service(repo, identity, generator):
    return ItineraryService(repo=repo, identity=identity, generator=generator, today=lambda: TODAY)


@pytest.fixture
def paris_payload():
    return GenerateItineraryRequest(
        destination="Paris, France",
        startDate="2025-09-10",
        endDate="2025-09-14",
        numTravelers=2,
        budget="Mid-range ($1000-$3000)",
        interests=["Food & Dining", "Museums & Art"],
    )
