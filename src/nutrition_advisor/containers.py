"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_advisor.adapters.edge_function_client import HttpxEdgeFunctionClient
from nutrition_advisor.adapters.openai_text_client import OpenAITextClient
from nutrition_advisor.adapters.supabase_auth_client import (
    AuthClient,
    SupabaseAuthClient,
)
from nutrition_advisor.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutrition_advisor.adapters.supabase_recommendation_repository import (
    SupabaseRecommendationRepository,
)
from nutrition_advisor.adapters.supabase_usage_repository import (
    SupabaseUsageRepository,
)
from nutrition_advisor.config import Settings
from nutrition_advisor.domain.models import UserRecord
from nutrition_advisor.services.access import AccessContext
from nutrition_advisor.services.cache import InMemoryCache
from nutrition_advisor.services.dashboard import DashboardService
from nutrition_advisor.services.generation import GenerationService
from nutrition_advisor.services.profiles import ProfileService
from nutrition_advisor.services.recommendations import RecommendationService
from nutrition_advisor.services.sessions import WizardSessionStore
from nutrition_advisor.services.subscriptions import SubscriptionService
from nutrition_advisor.services.usage import UsageService
from nutrition_advisor.services.wizard import WizardController


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_client: AuthClient
    profile_service: ProfileService
    recommendation_service: RecommendationService
    generation_service: GenerationService
    usage_service: UsageService
    subscription_service: SubscriptionService
    dashboard_service: DashboardService
    wizard_sessions: WizardSessionStore
    close_resources: Callable[[], Awaitable[None]]


def wizard_factory(  # noqa: PLR0913
    profile_service: ProfileService,
    recommendation_service: RecommendationService,
    generation_service: GenerationService,
    usage_service: UsageService,
    subscription_service: SubscriptionService,
) -> Callable[[UserRecord], WizardController]:
    """Return a builder for per-user wizard controllers."""

    def build(user: UserRecord) -> WizardController:
        return WizardController(
            user=user,
            profile_service=profile_service,
            recommendation_service=recommendation_service,
            generation_service=generation_service,
            access=AccessContext(
                user_id=user.id,
                access_token=user.access_token,
                usage_service=usage_service,
                subscription_service=subscription_service,
            ),
        )

    return build


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_service = ProfileService(SupabaseProfileRepository(supabase_client))
    recommendation_service = RecommendationService(
        repository=SupabaseRecommendationRepository(supabase_client),
        profile_service=profile_service,
    )
    text_client = OpenAITextClient.create(resolved_settings.openai_api_key)
    generation_service = GenerationService(
        client=text_client,
        model=resolved_settings.openai_model,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
        temperature=resolved_settings.openai_temperature,
        store=resolved_settings.openai_store,
        timeout_seconds=resolved_settings.generation_timeout_seconds,
    )
    usage_service = UsageService(SupabaseUsageRepository(supabase_client))
    billing_client = HttpxEdgeFunctionClient.create(
        base_url=resolved_settings.functions_base_url,
        anon_key=resolved_settings.supabase_anon_key,
    )
    subscription_service = SubscriptionService(billing_client)
    wizard_sessions = WizardSessionStore(
        cache=InMemoryCache(),
        factory=wizard_factory(
            profile_service,
            recommendation_service,
            generation_service,
            usage_service,
            subscription_service,
        ),
        ttl_seconds=resolved_settings.wizard_session_ttl_seconds,
    )

    async def close_resources() -> None:
        await billing_client.close()
        await text_client.close()

    return AppContainer(
        settings=resolved_settings,
        auth_client=SupabaseAuthClient(supabase_client),
        profile_service=profile_service,
        recommendation_service=recommendation_service,
        generation_service=generation_service,
        usage_service=usage_service,
        subscription_service=subscription_service,
        dashboard_service=DashboardService(recommendation_service),
        wizard_sessions=wizard_sessions,
        close_resources=close_resources,
    )
