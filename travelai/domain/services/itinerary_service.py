from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import status

from travelai.ai.gemini_client import GeminiClient
from travelai.ai.prompts import build_itinerary_prompt
from travelai.api.models.schemas import GenerateItineraryRequest, GenerateItineraryResponse
from travelai.core.errors import APIError, NotFoundError, StorageError, ValidationError, error_content
from travelai.domain.identity import IdentityProvider, bearer_token
from travelai.domain.models import AuthenticatedUser, GenerationResult, ItineraryRecord, TripRequest
from travelai.domain.repositories import ItineraryRepository
from travelai.domain.validation import validate_trip_request

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    VALIDATED = "validated"
    GENERATING = "generating"
    PERSISTING = "persisting"
    COMPLETED = "completed"


@dataclass
class PipelineOutcome:
    """Terminal state of one generation request: Completed, or Failed at ``stage``."""

    stage: PipelineStage
    status_code: int
    record: Optional[ItineraryRecord] = None
    error: Optional[str] = None
    reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.stage is PipelineStage.COMPLETED and self.record is not None

    def to_content(self) -> Dict[str, Any]:
        if self.success:
            return GenerateItineraryResponse(itinerary=self.record.to_generated_model()).model_dump(mode="json")
        return error_content(self.error or "Request failed")


class ItineraryService:
    def __init__(
        self,
        repo: ItineraryRepository,
        identity: IdentityProvider,
        generator: GeminiClient,
        today: Optional[Callable[[], date]] = None,
        storage_max_attempts: int = 1,
        storage_retry_backoff: float = 0.5,
    ):
        self.repo = repo
        self.identity = identity
        self.generator = generator
        self._today = today or (lambda: datetime.utcnow().date())
        self.storage_max_attempts = max(1, storage_max_attempts)
        self.storage_retry_backoff = storage_retry_backoff

    async def generate_itinerary(
        self, authorization: Optional[str], payload: GenerateItineraryRequest
    ) -> PipelineOutcome:
        """
        Run one request through authenticate -> validate -> generate -> persist.
        Every failure is folded into a PipelineOutcome; nothing is raised to the caller.
        """
        stage = PipelineStage.RECEIVED
        logger.info("Itinerary request received for destination=%r", payload.destination)
        try:
            stage = PipelineStage.AUTHENTICATED
            user = await self.identity.verify(bearer_token(authorization))
            logger.info("User authenticated: %s", user.id)

            stage = PipelineStage.VALIDATED
            trip = validate_trip_request(payload, today=self._today())

            stage = PipelineStage.GENERATING
            result = await self.generator.generate(build_itinerary_prompt(trip))

            stage = PipelineStage.PERSISTING
            record = await self._persist(user, trip, result)
        except ValidationError as exc:
            logger.info("Itinerary request rejected: %s", exc.rule)
            return self._failed(stage, exc, reason=exc.rule)
        except APIError as exc:
            logger.warning("Itinerary request failed at %s: %s", stage.value, exc.detail)
            return self._failed(stage, exc, reason=exc.code)
        except Exception as exc:
            logger.exception("Unexpected error at %s stage: %s", stage.value, exc)
            return PipelineOutcome(
                stage=stage,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error="Internal server error",
                reason="INTERNAL_ERROR",
            )

        logger.info("Itinerary saved successfully with ID: %s", record.id)
        return PipelineOutcome(stage=PipelineStage.COMPLETED, status_code=status.HTTP_200_OK, record=record)

    async def list_itineraries(self, user: AuthenticatedUser) -> List[ItineraryRecord]:
        return await self.repo.list_for_owner(user.id)

    async def get_itinerary(self, user: AuthenticatedUser, itinerary_id: str) -> ItineraryRecord:
        record = await self.repo.get_for_owner(user.id, itinerary_id)
        if record is None:
            raise NotFoundError("Itinerary not found")
        return record

    async def _persist(
        self, user: AuthenticatedUser, trip: TripRequest, result: GenerationResult
    ) -> ItineraryRecord:
        # Retries reuse the generated text; the model is never called again from here.
        for attempt in range(1, self.storage_max_attempts + 1):
            try:
                return await self.repo.create(user, trip, result)
            except StorageError as exc:
                if attempt >= self.storage_max_attempts:
                    raise
                logger.warning(
                    "Persisting itinerary failed (attempt %d/%d): %s", attempt, self.storage_max_attempts, exc.reason
                )
                await asyncio.sleep(self.storage_retry_backoff * attempt)
        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def _failed(stage: PipelineStage, exc: APIError, reason: str) -> PipelineOutcome:
        return PipelineOutcome(stage=stage, status_code=exc.status_code, error=str(exc.detail), reason=reason)
