"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse

from nutrition_advisor.api.dependencies import (
    get_container,
    require_user,
    wizard_session,
)
from nutrition_advisor.api.models import (
    ProfileUpdate,
    RedirectUrl,
    RestrictionToggle,
)
from nutrition_advisor.app_logging import configure_logging
from nutrition_advisor.containers import AppContainer
from nutrition_advisor.domain.models import UserRecord
from nutrition_advisor.domain.profiles import DIETARY_RESTRICTIONS
from nutrition_advisor.errors import (
    AdvisorError,
    BillingError,
    GenerationError,
    PersistenceError,
    QuotaExceededError,
    SubscriptionCheckError,
    ValidationError,
)
from nutrition_advisor.markdown import print_document
from nutrition_advisor.services.dashboard import (
    serialize_recommendation,
    serialize_subscription,
)
from nutrition_advisor.services.wizard import STEP_TITLES, WizardController

_ERROR_STATUS: dict[type[AdvisorError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    QuotaExceededError: status.HTTP_402_PAYMENT_REQUIRED,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
    GenerationError: status.HTTP_502_BAD_GATEWAY,
    SubscriptionCheckError: status.HTTP_502_BAD_GATEWAY,
    BillingError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(AdvisorError)
    async def advisor_error(request: Request, exc: AdvisorError) -> JSONResponse:
        status_code = error_status(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning(
                "Request failed",
                extra={"path": request.url.path, "error": exc.kind},
            )
        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.kind,
                "message": exc.message,
                "retryable": exc.retryable,
            },
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/dashboard")
    async def dashboard(
        controller: WizardController = Depends(wizard_session),
        state_container: AppContainer = Depends(get_container),
    ) -> dict[str, object]:
        """Return the dashboard view for the signed-in user."""
        return state_container.dashboard_service.build(controller)

    @app.get("/wizard")
    async def wizard_state(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Return the current questionnaire state."""
        return wizard_payload(controller)

    @app.post("/wizard/start")
    async def start_wizard(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Open the questionnaire at the welcome step."""
        controller.start_questionnaire()
        return wizard_payload(controller)

    @app.patch("/wizard/profile")
    async def update_profile(
        update: ProfileUpdate,
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Apply edits to the unsaved answers."""
        controller.update_fields(
            update.model_dump(exclude_unset=True, exclude_none=True)
        )
        return wizard_payload(controller)

    @app.post("/wizard/restrictions/{restriction}")
    async def toggle_restriction(
        restriction: str,
        toggle: RestrictionToggle,
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Check or uncheck a dietary restriction."""
        controller.toggle_restriction(restriction, toggle.checked)
        return wizard_payload(controller)

    @app.post("/wizard/next")
    async def next_step(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Advance when the current step is complete."""
        moved = controller.advance()
        return {**wizard_payload(controller), "moved": moved}

    @app.post("/wizard/back")
    async def previous_step(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Return to the previous question."""
        moved = controller.back()
        return {**wizard_payload(controller), "moved": moved}

    @app.post("/wizard/dashboard")
    async def back_to_dashboard(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Leave the questionnaire without saving."""
        moved = controller.back_to_dashboard()
        return {**wizard_payload(controller), "moved": moved}

    @app.post("/wizard/reset")
    async def reset_wizard(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Clear the answers and start over."""
        controller.reset_form()
        return wizard_payload(controller)

    @app.post("/wizard/generate", response_model=None)
    async def generate(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object] | JSONResponse:
        """Save the profile and generate a recommendation."""
        recommendation = await controller.generate()
        if recommendation is None:
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content=wizard_payload(controller),
            )
        return wizard_payload(controller)

    @app.get("/recommendations/history")
    async def history(
        controller: WizardController = Depends(wizard_session),
        state_container: AppContainer = Depends(get_container),
    ) -> dict[str, object]:
        """Return every stored recommendation, newest first."""
        return {"history": state_container.dashboard_service.history(controller)}

    @app.get("/recommendations/current/print", response_class=HTMLResponse)
    async def print_current(
        controller: WizardController = Depends(wizard_session),
    ) -> HTMLResponse:
        """Return a printable page for the active recommendation."""
        if controller.recommendation is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return HTMLResponse(print_document(controller.recommendation.text))

    @app.get("/subscription")
    async def subscription(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Return the cached plan and quota state."""
        return serialize_subscription(controller.access)

    @app.post("/subscription/refresh")
    async def refresh_subscription(
        controller: WizardController = Depends(wizard_session),
    ) -> dict[str, object]:
        """Re-check the subscription and reload the usage counter."""
        await controller.access.refresh()
        return serialize_subscription(controller.access)

    @app.post("/billing/checkout")
    async def checkout(
        user: UserRecord = Depends(require_user),
        state_container: AppContainer = Depends(get_container),
    ) -> RedirectUrl:
        """Return a checkout URL for the premium plan."""
        url = await state_container.subscription_service.checkout_url(
            user.access_token
        )
        return RedirectUrl(url=url)

    @app.post("/billing/portal")
    async def portal(
        user: UserRecord = Depends(require_user),
        state_container: AppContainer = Depends(get_container),
    ) -> RedirectUrl:
        """Return a customer portal URL for managing the subscription."""
        url = await state_container.subscription_service.portal_url(
            user.access_token
        )
        return RedirectUrl(url=url)

    return app


def error_status(exc: AdvisorError) -> int:
    """Map an application error to its HTTP status."""
    if isinstance(exc, GenerationError) and exc.timed_out:
        return status.HTTP_504_GATEWAY_TIMEOUT
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def wizard_payload(controller: WizardController) -> dict[str, object]:
    """Serialize the questionnaire state for the client."""
    recommendation = controller.recommendation
    return {
        "mode": controller.mode.value,
        "step": int(controller.step),
        "title": STEP_TITLES[controller.step],
        "progress": controller.progress,
        "form": controller.form.model_dump(),
        "restriction_options": list(DIETARY_RESTRICTIONS),
        "has_profile": controller.has_profile,
        "next_enabled": controller.next_enabled,
        "generate_enabled": controller.generate_enabled,
        "can_use_feature": controller.access.can_use_feature(),
        "is_loading": controller.is_loading,
        "notice": controller.notice,
        "recommendation": (
            serialize_recommendation(recommendation) if recommendation else None
        ),
    }
