from abc import ABC, abstractmethod
import asyncio
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from travelai.core.errors import StorageError

from .models import AuthenticatedUser, GenerationResult, ItineraryContent, ItineraryRecord, TripRequest

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


def _content_for(owner: AuthenticatedUser, result: GenerationResult) -> ItineraryContent:
    return ItineraryContent(
        generated_text=result.text,
        generated_at=result.generated_at,
        prompt_used=result.prompt,
        user_email=owner.email,
        user_name=owner.display_name,
    )


class ItineraryRepository(ABC):
    @abstractmethod
    async def create(
        self, owner: AuthenticatedUser, trip: TripRequest, result: GenerationResult
    ) -> ItineraryRecord:
        """Insert one record; id and created_at are assigned by the store."""
        raise NotImplementedError

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> List[ItineraryRecord]:
        raise NotImplementedError

    @abstractmethod
    async def get_for_owner(self, owner_id: str, itinerary_id: str) -> Optional[ItineraryRecord]:
        raise NotImplementedError


class InMemoryItineraryRepository(ItineraryRepository):
    def __init__(self):
        self._store: Dict[str, ItineraryRecord] = {}

    async def create(
        self, owner: AuthenticatedUser, trip: TripRequest, result: GenerationResult
    ) -> ItineraryRecord:
        record = ItineraryRecord(
            id=str(uuid4()),
            user_id=owner.id,
            destination=trip.destination,
            start_date=trip.start_date,
            end_date=trip.end_date,
            num_travelers=trip.num_travelers,
            budget=trip.budget,
            interests=list(trip.interests),
            additional_info=trip.additional_info,
            content=_content_for(owner, result),
            created_at=datetime.now(timezone.utc),
        )
        self._store[record.id] = record
        return record

    async def list_for_owner(self, owner_id: str) -> List[ItineraryRecord]:
        owned = [record for record in self._store.values() if record.user_id == owner_id]
        # newest first; ties keep reverse insertion order
        return sorted(reversed(owned), key=lambda record: record.created_at, reverse=True)

    async def get_for_owner(self, owner_id: str, itinerary_id: str) -> Optional[ItineraryRecord]:
        record = self._store.get(itinerary_id)
        if record is None or record.user_id != owner_id:
            return None
        return record

    def count(self) -> int:
        return len(self._store)


class SupabaseItineraryRepository(ItineraryRepository):
    """
    Supabase-backed repository, one row per itinerary in the ``itineraries`` table.
    The table supplies ``id`` and ``created_at`` defaults; ``content`` is a JSONB column.
    """

    def __init__(self, client, table_name: str = "itineraries"):
        if client is None:
            raise ValueError("Supabase client is required for SupabaseItineraryRepository")
        self.client = client
        self.table_name = table_name

    async def create(
        self, owner: AuthenticatedUser, trip: TripRequest, result: GenerationResult
    ) -> ItineraryRecord:
        payload = {
            "user_id": owner.id,
            "destination": trip.destination,
            "start_date": trip.start_date.isoformat(),
            "end_date": trip.end_date.isoformat(),
            "num_travelers": trip.num_travelers,
            "budget": trip.budget,
            "interests": list(trip.interests),
            "additional_info": trip.additional_info,
            "content": _content_for(owner, result).to_dict(),
        }
        try:
            response = await asyncio.to_thread(
                lambda: self.client.table(self.table_name).insert(payload).execute()
            )
        except Exception as exc:  # postgrest APIError, httpx transport errors
            logger.error("Itinerary insert failed: %s", exc)
            raise StorageError(_reason(exc)) from exc

        rows = getattr(response, "data", None) or []
        if not rows or not isinstance(rows[0], dict):
            raise StorageError("insert returned no row")
        if rows[0].get("id") is None:
            raise StorageError("inserted row has no id")
        try:
            return self._row_to_record(rows[0])
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            # The row is already committed; report it from what was sent.
            logger.warning("Could not map inserted itinerary row %s: %s", rows[0].get("id"), exc)
            return self._payload_to_record(rows[0], owner, trip, result)

    async def list_for_owner(self, owner_id: str) -> List[ItineraryRecord]:
        rows = await self._select(
            lambda: self.client.table(self.table_name)
            .select("*")
            .eq("user_id", owner_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [self._row_to_record(row) for row in rows]

    async def get_for_owner(self, owner_id: str, itinerary_id: str) -> Optional[ItineraryRecord]:
        rows = await self._select(
            lambda: self.client.table(self.table_name)
            .select("*")
            .eq("id", itinerary_id)
            .eq("user_id", owner_id)
            .limit(1)
            .execute()
        )
        if not rows:
            return None
        return self._row_to_record(rows[0])

    async def _select(self, query) -> List[Dict[str, Any]]:
        try:
            response = await asyncio.to_thread(query)
        except Exception as exc:
            logger.error("Itinerary query failed: %s", exc)
            raise StorageError(_reason(exc)) from exc
        return getattr(response, "data", None) or []

    def _payload_to_record(
        self, row: Dict[str, Any], owner: AuthenticatedUser, trip: TripRequest, result: GenerationResult
    ) -> ItineraryRecord:
        try:
            created_at = _parse_dt(row.get("created_at"))
        except (TypeError, ValueError, AttributeError):
            created_at = datetime.now(timezone.utc)
        return ItineraryRecord(
            id=str(row["id"]),
            user_id=owner.id,
            destination=trip.destination,
            start_date=trip.start_date,
            end_date=trip.end_date,
            num_travelers=trip.num_travelers,
            budget=trip.budget,
            interests=list(trip.interests),
            additional_info=trip.additional_info,
            content=_content_for(owner, result),
            created_at=created_at,
        )

    def _row_to_record(self, row: Dict[str, Any]) -> ItineraryRecord:
        content = row.get("content") or {}
        created_at = _parse_dt(row["created_at"])
        return ItineraryRecord(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            destination=row["destination"],
            start_date=_parse_date(row["start_date"]),
            end_date=_parse_date(row["end_date"]),
            num_travelers=int(row["num_travelers"]),
            budget=row["budget"],
            interests=list(row.get("interests") or []),
            additional_info=row.get("additional_info"),
            content=ItineraryContent(
                generated_text=content.get("generated_text", ""),
                generated_at=_parse_dt(content.get("generated_at") or created_at),
                prompt_used=content.get("prompt_used", ""),
                user_email=content.get("user_email"),
                user_name=content.get("user_name"),
            ),
            created_at=created_at,
        )


def _reason(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or exc.__class__.__name__


def _parse_dt(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # PostgREST trims trailing zeros from fractional seconds; older fromisoformat needs 3 or 6 digits
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    return datetime.fromisoformat(value)


def _parse_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])
