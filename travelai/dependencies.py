from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from travelai.ai.gemini_client import GeminiClient
from travelai.core.config import Settings, get_settings
from travelai.domain.identity import (
    IdentityProvider,
    InMemoryIdentityProvider,
    SupabaseIdentityProvider,
    bearer_token,
)
from travelai.domain.models import AuthenticatedUser
from travelai.domain.repositories import (
    InMemoryItineraryRepository,
    ItineraryRepository,
    SupabaseItineraryRepository,
)
from travelai.domain.services.itinerary_service import ItineraryService
from travelai.external.supabase_client import get_supabase_client


@lru_cache
def get_itinerary_repo() -> ItineraryRepository:
    settings = get_settings()
    client = get_supabase_client()
    if client is not None:
        return SupabaseItineraryRepository(client, table_name=settings.itineraries_table)
    return InMemoryItineraryRepository()


@lru_cache
def get_identity_provider() -> IdentityProvider:
    client = get_supabase_client()
    if client is not None:
        return SupabaseIdentityProvider(client)
    return InMemoryIdentityProvider()


def get_generation_client(settings: Settings = Depends(get_settings)) -> GeminiClient:
    return GeminiClient(settings)


def get_itinerary_service(
    settings: Settings = Depends(get_settings),
    repo: ItineraryRepository = Depends(get_itinerary_repo),
    identity: IdentityProvider = Depends(get_identity_provider),
    generator: GeminiClient = Depends(get_generation_client),
) -> ItineraryService:
    return ItineraryService(
        repo=repo,
        identity=identity,
        generator=generator,
        storage_max_attempts=settings.storage_max_attempts,
    )


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AuthenticatedUser:
    return await identity.verify(bearer_token(authorization))


__all__ = [
    "get_current_user",
    "get_generation_client",
    "get_identity_provider",
    "get_itinerary_repo",
    "get_itinerary_service",
]
