"""Recommendation persistence and history."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_advisor.domain.recommendations import HistoryEntry, Recommendation
from nutrition_advisor.errors import PersistenceError
from nutrition_advisor.services.profiles import ProfileService

logger = logging.getLogger(__name__)


class RecommendationRepository(Protocol):
    """Persistence interface for recommendations."""

    def archive_active(self, user_id: UUID) -> None:
        """Mark every active recommendation of the user as archived."""

    def create(self, user_id: UUID, profile_id: UUID, text: str) -> Recommendation:
        """Insert an active recommendation and return it."""

    def get(self, recommendation_id: UUID) -> Recommendation | None:
        """Return a recommendation by id, if present."""

    def list_history(self, user_id: UUID) -> list[HistoryEntry]:
        """Return all recommendations of the user, newest first."""


@dataclass
class RecommendationService:
    """Stores recommendations so each user has at most one active record."""

    repository: RecommendationRepository
    profile_service: ProfileService

    def save(self, user_id: UUID, profile_id: UUID, text: str) -> Recommendation:
        """Archive the active recommendation, insert the new one, link it.

        The archive and insert are separate writes; a reader between them
        briefly sees no active recommendation.
        """
        try:
            self.repository.archive_active(user_id)
            created = self.repository.create(user_id, profile_id, text)
        except Exception as exc:
            logger.exception(
                "Failed to save recommendation", extra={"user_id": str(user_id)}
            )
            raise PersistenceError("Failed to save your recommendation") from exc
        self.profile_service.link_recommendation(profile_id, created.id)
        logger.info(
            "Recommendation saved",
            extra={"user_id": str(user_id), "recommendation_id": str(created.id)},
        )
        return created

    def get(self, recommendation_id: UUID | None) -> Recommendation | None:
        """Return the linked recommendation, if any."""
        if recommendation_id is None:
            return None
        try:
            return self.repository.get(recommendation_id)
        except Exception as exc:
            logger.exception(
                "Failed to load recommendation",
                extra={"recommendation_id": str(recommendation_id)},
            )
            raise PersistenceError("Could not load your recommendation") from exc

    def history(self, user_id: UUID, current_id: UUID | None) -> list[HistoryEntry]:
        """Return the user's history, flagging the active recommendation."""
        try:
            entries = self.repository.list_history(user_id)
        except Exception as exc:
            logger.exception(
                "Failed to load recommendation history",
                extra={"user_id": str(user_id)},
            )
            raise PersistenceError("Failed to load recommendation history") from exc
        return [
            HistoryEntry(
                recommendation=entry.recommendation,
                profile=entry.profile,
                is_current=entry.recommendation.id == current_id,
            )
            for entry in entries
        ]
