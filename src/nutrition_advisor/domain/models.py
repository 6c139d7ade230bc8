"""Domain models shared across the advisor."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Authenticated user as reported by the identity provider."""

    id: UUID
    email: str | None
    access_token: str
