from datetime import date

import pytest

from travelai.core.errors import MalformedResponse, NotFoundError, UpstreamFailure
from travelai.domain.services.itinerary_service import ItineraryService, PipelineStage

from conftest import ALICE, BOB, TODAY, FakeGenerator, FlakyRepository

pytestmark = pytest.mark.anyio

AUTH = "Bearer alice-token"


async def test_paris_request_creates_one_owned_record(service, repo, generator, paris_payload):
    outcome = await service.generate_itinerary(AUTH, paris_payload)

    assert outcome.success
    assert outcome.stage is PipelineStage.COMPLETED
    assert outcome.status_code == 200
    assert repo.count() == 1

    record = outcome.record
    assert record.user_id == ALICE.id
    assert record.destination == "Paris, France"
    assert record.start_date == date(2025, 9, 10)
    assert record.end_date == date(2025, 9, 14)
    assert record.num_travelers == 2
    assert record.budget == "Mid-range ($1000-$3000)"
    assert record.interests == ["Food & Dining", "Museums & Art"]
    assert record.content.generated_text
    assert record.content.prompt_used == generator.prompts[0]
    assert "- Duration: 5 days" in generator.prompts[0]


async def test_success_content_shape(service, paris_payload):
    content = (await service.generate_itinerary(AUTH, paris_payload)).to_content()

    assert content["success"] is True
    itinerary = content["itinerary"]
    assert itinerary["content"] == "## Day 1\nArrive and explore."
    assert itinerary["start_date"] == "2025-09-10"
    assert itinerary["user_data"] == {
        "user_id": ALICE.id,
        "user_email": ALICE.email,
        "user_name": ALICE.display_name,
    }


@pytest.mark.parametrize("authorization", [None, "Bearer nope", "alice-token"])
async def test_authentication_failure(service, repo, generator, paris_payload, authorization):
    outcome = await service.generate_itinerary(authorization, paris_payload)

    assert not outcome.success
    assert outcome.stage is PipelineStage.AUTHENTICATED
    assert outcome.status_code == 401
    assert outcome.to_content()["success"] is False
    assert generator.prompts == []
    assert repo.count() == 0


async def test_validation_failure_skips_generation(service, repo, generator, paris_payload):
    payload = paris_payload.model_copy(update={"interests": []})
    outcome = await service.generate_itinerary(AUTH, payload)

    assert outcome.stage is PipelineStage.VALIDATED
    assert outcome.status_code == 400
    assert outcome.reason == "missing_required_fields"
    assert outcome.to_content() == {"success": False, "error": "Please fill in all required fields"}
    assert generator.prompts == []


@pytest.mark.parametrize(
    "error, status_code",
    [(UpstreamFailure(500, "internal"), 502), (MalformedResponse(), 502), (RuntimeError("boom"), 500)],
)
async def test_failed_generation_persists_nothing(repo, identity, paris_payload, error, status_code):
    service = ItineraryService(repo=repo, identity=identity, generator=FakeGenerator(error=error), today=lambda: TODAY)

    outcome = await service.generate_itinerary(AUTH, paris_payload)

    assert outcome.stage is PipelineStage.GENERATING
    assert outcome.status_code == status_code
    assert outcome.error
    assert repo.count() == 0


async def test_upstream_detail_is_propagated(repo, identity, paris_payload):
    generator = FakeGenerator(error=UpstreamFailure(429, "Resource has been exhausted"))
    service = ItineraryService(repo=repo, identity=identity, generator=generator, today=lambda: TODAY)

    outcome = await service.generate_itinerary(AUTH, paris_payload)

    assert "429" in outcome.error
    assert "Resource has been exhausted" in outcome.error


async def test_storage_failure_reported_at_persisting(identity, generator, paris_payload):
    repo = FlakyRepository(failures=1)
    service = ItineraryService(repo=repo, identity=identity, generator=generator, today=lambda: TODAY)

    outcome = await service.generate_itinerary(AUTH, paris_payload)

    assert outcome.stage is PipelineStage.PERSISTING
    assert outcome.status_code == 500
    assert outcome.error == "Database error: connection reset"
    assert len(generator.prompts) == 1
    assert repo.count() == 0


async def test_storage_retry_reuses_generated_text(identity, generator, paris_payload):
    repo = FlakyRepository(failures=1)
    service = ItineraryService(
        repo=repo,
        identity=identity,
        generator=generator,
        today=lambda: TODAY,
        storage_max_attempts=2,
        storage_retry_backoff=0,
    )

    outcome = await service.generate_itinerary(AUTH, paris_payload)

    assert outcome.success
    assert repo.attempts == 2
    assert len(generator.prompts) == 1
    assert repo.count() == 1


async def test_identical_requests_are_not_deduplicated(service, repo, paris_payload):
    first = await service.generate_itinerary(AUTH, paris_payload)
    second = await service.generate_itinerary(AUTH, paris_payload)

    assert first.record.id != second.record.id
    assert repo.count() == 2


async def test_get_itinerary_of_other_owner_is_not_found(service, paris_payload):
    outcome = await service.generate_itinerary(AUTH, paris_payload)
    with pytest.raises(NotFoundError):
        await service.get_itinerary(BOB, outcome.record.id)
    assert (await service.get_itinerary(ALICE, outcome.record.id)).id == outcome.record.id


async def test_unexpected_error_message_is_generic(repo, identity, paris_payload):
    generator = FakeGenerator(error=RuntimeError("secret connection string leaked"))
    service = ItineraryService(repo=repo, identity=identity, generator=generator, today=lambda: TODAY)

    outcome = await service.generate_itinerary(AUTH, paris_payload)

    assert outcome.status_code == 500
    assert outcome.reason == "INTERNAL_ERROR"
    assert outcome.to_content() == {"success": False, "error": "Internal server error"}
