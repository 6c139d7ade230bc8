"""Daily usage counter logic."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from nutrition_advisor.domain.usage import UsageCounter
from nutrition_advisor.errors import PersistenceError

logger = logging.getLogger(__name__)


def utc_today() -> date:
    """Return the current UTC calendar date."""
    return datetime.now(tz=UTC).date()


class UsageRepository(Protocol):
    """Persistence interface for daily usage counters."""

    def get(self, user_id: UUID) -> UsageCounter | None:
        """Return the stored counter for a user, if present."""

    def upsert(self, user_id: UUID, counter: UsageCounter) -> UsageCounter:
        """Write the counter for a user and return the stored row."""


@dataclass
class UsageService:
    """Reads and increments the per-user daily counter.

    The day boundary is UTC midnight. A counter last reset on an earlier
    day is written back as zero before it is trusted or incremented.
    Increments are read-then-write, so two tabs generating at the same time
    can lose one update.
    """

    repository: UsageRepository
    today: Callable[[], date] = field(default=utc_today)

    def load_usage(self, user_id: UUID) -> UsageCounter:
        """Return today's counter, creating or resetting it as needed."""
        current_day = self.today()
        try:
            stored = self.repository.get(user_id)
            if stored is None:
                logger.info(
                    "Creating usage counter", extra={"user_id": str(user_id)}
                )
                return self.repository.upsert(user_id, UsageCounter(0, current_day))
            if stored.last_reset_date != current_day:
                logger.info(
                    "Resetting usage for new day", extra={"user_id": str(user_id)}
                )
                return self.repository.upsert(user_id, stored.for_day(current_day))
            return stored
        except Exception as exc:
            logger.exception("Failed to load usage", extra={"user_id": str(user_id)})
            raise PersistenceError("Could not load your usage") from exc

    def increment_usage(self, user_id: UUID) -> UsageCounter:
        """Add one generation to today's counter."""
        counter = self.load_usage(user_id)
        updated = UsageCounter(
            recommendations_used=counter.recommendations_used + 1,
            last_reset_date=counter.last_reset_date,
        )
        try:
            return self.repository.upsert(user_id, updated)
        except Exception as exc:
            logger.exception(
                "Failed to increment usage", extra={"user_id": str(user_id)}
            )
            raise PersistenceError("Could not record your usage") from exc
