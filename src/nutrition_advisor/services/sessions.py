"""Per-user wizard sessions kept between requests."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from nutrition_advisor.domain.models import UserRecord
from nutrition_advisor.services.cache import Cache
from nutrition_advisor.services.wizard import WizardController

logger = logging.getLogger(__name__)


@dataclass
class WizardSessionStore:
    """Holds one wizard controller per user with a sliding expiry.

    An expired session is treated like a user who navigated away: unsaved
    answers are gone and the next request starts from the stored profile.
    """

    cache: Cache
    factory: Callable[[UserRecord], WizardController]
    ttl_seconds: int

    async def open(self, user: UserRecord) -> WizardController:
        """Return the user's controller, loading a fresh one if needed."""
        key = _session_key(user)
        controller = self.cache.get(key)
        if isinstance(controller, WizardController):
            controller.access.access_token = user.access_token
        else:
            logger.info("Starting wizard session", extra={"user_id": str(user.id)})
            controller = self.factory(user)
            if not await controller.load():
                logger.warning(
                    "Not keeping wizard session after failed profile load",
                    extra={"user_id": str(user.id)},
                )
                return controller
        self.cache.set(key, controller, self.ttl_seconds)
        return controller

    def close(self, user: UserRecord) -> None:
        """Forget the user's session."""
        self.cache.delete(_session_key(user))


def _session_key(user: UserRecord) -> str:
    return f"wizard:{user.id}"
