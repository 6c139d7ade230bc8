"""Supabase-backed usage counter repository."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from nutrition_advisor.domain.usage import UsageCounter
from nutrition_advisor.services.usage import UsageRepository


@dataclass
class SupabaseUsageRepository(UsageRepository):
    """Supabase implementation for daily usage counters."""

    client: Client

    def get(self, user_id: UUID) -> UsageCounter | None:
        """Return the stored counter for a user, if present."""
        response = (
            self.client.table("user_usage")
            .select("recommendations_used, last_reset_date")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_counter(response.data[0])

    def upsert(self, user_id: UUID, counter: UsageCounter) -> UsageCounter:
        """Write the counter, keyed on the user."""
        response = (
            self.client.table("user_usage")
            .upsert(
                {
                    "user_id": str(user_id),
                    "recommendations_used": counter.recommendations_used,
                    "last_reset_date": counter.last_reset_date.isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to write usage counter")
        return _to_counter(response.data[0])


def _to_counter(row: dict[str, object]) -> UsageCounter:
    return UsageCounter(
        recommendations_used=int(row.get("recommendations_used") or 0),
        last_reset_date=date.fromisoformat(str(row["last_reset_date"])),
    )
