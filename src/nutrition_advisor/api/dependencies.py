"""Request dependencies resolving the user and their wizard session."""

import logging

from fastapi import Depends, Header, HTTPException, Request, status

from nutrition_advisor.containers import AppContainer
from nutrition_advisor.domain.models import UserRecord
from nutrition_advisor.services.wizard import WizardController

logger = logging.getLogger(__name__)


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the app."""
    return request.app.state.container


async def require_user(
    authorization: str | None = Header(default=None),
    container: AppContainer = Depends(get_container),
) -> UserRecord:
    """Resolve the bearer token to a user or reject the request."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        user = container.auth_client.get_user(token.strip())
    except Exception:
        logger.warning("Access token lookup failed", exc_info=True)
        user = None
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user


async def wizard_session(
    user: UserRecord = Depends(require_user),
    container: AppContainer = Depends(get_container),
) -> WizardController:
    """Return the wizard controller for the requesting user."""
    return await container.wizard_sessions.open(user)
