"""Supabase Auth adapter resolving access tokens to users."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from supabase import Client

from nutrition_advisor.domain.models import UserRecord


class AuthClient(Protocol):
    """Interface for resolving bearer tokens."""

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning the token, or None if it is invalid."""


@dataclass
class SupabaseAuthClient(AuthClient):
    """Token lookup through Supabase Auth."""

    client: Client

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning the token, or None if it is invalid."""
        response = self.client.auth.get_user(access_token)
        user = response.user if response else None
        if user is None:
            return None
        return UserRecord(
            id=UUID(str(user.id)),
            email=user.email,
            access_token=access_token,
        )
