"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from nutrition_advisor.adapters.supabase_auth_client import AuthClient
from nutrition_advisor.config import Settings
from nutrition_advisor.containers import AppContainer, wizard_factory
from nutrition_advisor.domain.models import UserRecord
from nutrition_advisor.domain.profiles import UserProfile, row_to_profile
from nutrition_advisor.domain.recommendations import (
    HistoryEntry,
    Recommendation,
    RecommendationStatus,
)
from nutrition_advisor.domain.usage import UsageCounter
from nutrition_advisor.services.cache import InMemoryCache
from nutrition_advisor.services.dashboard import DashboardService
from nutrition_advisor.services.generation import (
    GenerationService,
    TextGenerationClient,
)
from nutrition_advisor.services.profiles import ProfileRepository, ProfileService
from nutrition_advisor.services.recommendations import (
    RecommendationRepository,
    RecommendationService,
)
from nutrition_advisor.services.sessions import WizardSessionStore
from nutrition_advisor.services.subscriptions import (
    BillingClient,
    SubscriptionService,
)
from nutrition_advisor.services.usage import UsageRepository, UsageService
from nutrition_advisor.services.wizard import WizardController

TODAY = date(2024, 5, 1)
TOKEN = "user-token"

SAMPLE_RECOMMENDATION = """# Your Plan

## Summary
**Key Points**
- Eat more vegetables
- Drink water
1. Plan meals ahead

*Stay consistent*
Aim for **protein** at every meal."""

FILLED_ANSWERS: dict[str, object] = {
    "name": "Ana",
    "age": "30",
    "gender": "female",
    "weight": "60",
    "height": "165",
    "activity_level": "moderate",
    "dietary_restrictions": ["Vegetarian"],
    "health_goals": "Build muscle",
    "current_diet": "Mostly home cooked",
    "meals_per_day": "3",
    "cooking_time": "moderate",
    "budget": "moderate",
}


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory diet profile repository for tests."""

    rows: dict[UUID, dict[str, object]] = field(default_factory=dict)
    fail_writes: bool = False
    failing_reads: int = 0

    def get_latest(self, user_id: UUID) -> UserProfile | None:
        if self.failing_reads:
            self.failing_reads -= 1
            raise RuntimeError("read failed")
        owned = [row for row in self.rows.values() if row["user_id"] == str(user_id)]
        if not owned:
            return None
        return row_to_profile(max(owned, key=lambda row: str(row["updated_at"])))

    def get_version(self, profile_id: UUID) -> int | None:
        row = self.rows.get(profile_id)
        return int(row["version"]) if row else None

    def insert(self, user_id: UUID, payload: dict[str, object]) -> UserProfile:
        if self.fail_writes:
            raise RuntimeError("insert failed")
        profile_id = uuid4()
        self.rows[profile_id] = {
            **payload,
            "id": str(profile_id),
            "user_id": str(user_id),
        }
        return row_to_profile(self.rows[profile_id])

    def update(self, profile_id: UUID, payload: dict[str, object]) -> UserProfile:
        if self.fail_writes:
            raise RuntimeError("update failed")
        self.rows[profile_id] = {**self.rows[profile_id], **payload}
        return row_to_profile(self.rows[profile_id])

    def set_current_recommendation(
        self, profile_id: UUID, recommendation_id: UUID
    ) -> None:
        self.rows[profile_id]["current_recommendation_id"] = str(recommendation_id)


@dataclass
class InMemoryRecommendationRepository(RecommendationRepository):
    """In-memory recommendation repository for tests."""

    profiles: InMemoryProfileRepository
    records: dict[UUID, Recommendation] = field(default_factory=dict)
    fail_writes: bool = False

    def archive_active(self, user_id: UUID) -> None:
        for record_id, record in list(self.records.items()):
            if (
                record.user_id == user_id
                and record.status is RecommendationStatus.ACTIVE
            ):
                self.records[record_id] = replace(
                    record, status=RecommendationStatus.ARCHIVED
                )

    def create(self, user_id: UUID, profile_id: UUID, text: str) -> Recommendation:
        if self.fail_writes:
            raise RuntimeError("insert failed")
        record = Recommendation(
            id=uuid4(),
            user_id=user_id,
            profile_id=profile_id,
            text=text,
            generated_at=datetime(2024, 5, 1, 8, tzinfo=UTC)
            + timedelta(minutes=len(self.records)),
        )
        self.records[record.id] = record
        return record

    def get(self, recommendation_id: UUID) -> Recommendation | None:
        return self.records.get(recommendation_id)

    def list_history(self, user_id: UUID) -> list[HistoryEntry]:
        owned = [
            record for record in self.records.values() if record.user_id == user_id
        ]
        owned.sort(key=lambda record: record.generated_at, reverse=True)
        return [
            HistoryEntry(
                recommendation=record,
                profile=dict(self.profiles.rows.get(record.profile_id, {})),
            )
            for record in owned
        ]

    def active(self, user_id: UUID) -> list[Recommendation]:
        return [
            record
            for record in self.records.values()
            if record.user_id == user_id
            and record.status is RecommendationStatus.ACTIVE
        ]


@dataclass
class InMemoryUsageRepository(UsageRepository):
    """In-memory usage counter repository for tests."""

    counters: dict[UUID, UsageCounter] = field(default_factory=dict)
    writes: list[UsageCounter] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False

    def get(self, user_id: UUID) -> UsageCounter | None:
        if self.fail_reads:
            raise RuntimeError("read failed")
        return self.counters.get(user_id)

    def upsert(self, user_id: UUID, counter: UsageCounter) -> UsageCounter:
        if self.fail_writes:
            raise RuntimeError("write failed")
        self.counters[user_id] = counter
        self.writes.append(counter)
        return counter


@dataclass
class FakeBillingClient(BillingClient):
    """Fake billing edge functions returning canned payloads."""

    status: dict[str, object] = field(default_factory=lambda: {"subscribed": False})
    fail: bool = False
    calls: list[str] = field(default_factory=list)

    async def check_subscription(self, access_token: str) -> dict[str, object]:
        self.calls.append("check-subscription")
        if self.fail:
            raise RuntimeError("edge function unavailable")
        return self.status

    async def create_checkout(self, access_token: str) -> dict[str, object]:
        self.calls.append("create-checkout")
        if self.fail:
            raise RuntimeError("edge function unavailable")
        return {"url": "https://billing.example/checkout"}

    async def customer_portal(self, access_token: str) -> dict[str, object]:
        self.calls.append("customer-portal")
        if self.fail:
            raise RuntimeError("edge function unavailable")
        return {"url": "https://billing.example/portal"}


@dataclass
class FakeTextClient(TextGenerationClient):
    """Fake text generation client returning a fixed recommendation."""

    text: str = SAMPLE_RECOMMENDATION
    error: Exception | None = None
    delay_seconds: float = 0.0
    prompts: list[str] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
        store: bool,
    ) -> str:
        self.prompts.append(prompt)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.text


@dataclass
class FakeAuthClient(AuthClient):
    """Fake auth client mapping tokens to users."""

    users: dict[str, UserRecord] = field(default_factory=dict)

    def get_user(self, access_token: str) -> UserRecord | None:
        return self.users.get(access_token)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        supabase_anon_key="anon-key",
        openai_api_key="openai-key",
        generation_timeout_seconds=1.0,
    )


@pytest.fixture
def user() -> UserRecord:
    return UserRecord(id=uuid4(), email="ana@example.com", access_token=TOKEN)


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def recommendation_repository(
    profile_repository: InMemoryProfileRepository,
) -> InMemoryRecommendationRepository:
    return InMemoryRecommendationRepository(profiles=profile_repository)


@pytest.fixture
def usage_repository() -> InMemoryUsageRepository:
    return InMemoryUsageRepository()


@pytest.fixture
def billing_client() -> FakeBillingClient:
    return FakeBillingClient()


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def auth_client(user: UserRecord) -> FakeAuthClient:
    return FakeAuthClient(users={TOKEN: user})


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    auth_client: FakeAuthClient,
    profile_repository: InMemoryProfileRepository,
    recommendation_repository: InMemoryRecommendationRepository,
    usage_repository: InMemoryUsageRepository,
    billing_client: FakeBillingClient,
    text_client: FakeTextClient,
) -> AppContainer:
    profile_service = ProfileService(profile_repository)
    recommendation_service = RecommendationService(
        repository=recommendation_repository,
        profile_service=profile_service,
    )
    generation_service = GenerationService(
        client=text_client,
        model=settings.openai_model,
        max_output_tokens=settings.openai_max_output_tokens,
        temperature=settings.openai_temperature,
        store=settings.openai_store,
        timeout_seconds=settings.generation_timeout_seconds,
    )
    usage_service = UsageService(usage_repository, today=lambda: TODAY)
    subscription_service = SubscriptionService(billing_client)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        auth_client=auth_client,
        profile_service=profile_service,
        recommendation_service=recommendation_service,
        generation_service=generation_service,
        usage_service=usage_service,
        subscription_service=subscription_service,
        dashboard_service=DashboardService(recommendation_service),
        wizard_sessions=WizardSessionStore(
            cache=InMemoryCache(),
            factory=wizard_factory(
                profile_service,
                recommendation_service,
                generation_service,
                usage_service,
                subscription_service,
            ),
            ttl_seconds=settings.wizard_session_ttl_seconds,
        ),
        close_resources=close_resources,
    )


@pytest.fixture
def controller(container: AppContainer, user: UserRecord) -> WizardController:
    return asyncio.run(container.wizard_sessions.open(user))


def walk_to_additional_info(controller: WizardController) -> None:
    """Fill every answer and step through to the last question."""
    controller.start_questionnaire()
    controller.update_fields(FILLED_ANSWERS)
    while controller.advance():
        pass
