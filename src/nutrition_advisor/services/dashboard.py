"""Dashboard and history views."""

from dataclasses import dataclass

from nutrition_advisor.domain.profiles import completion_percentage
from nutrition_advisor.domain.recommendations import (
    HistoryEntry,
    Recommendation,
    format_profile_snapshot,
)
from nutrition_advisor.markdown import (
    blocks_payload,
    parse_blocks,
    preview_text,
    preview_words,
    truncate_lines,
)
from nutrition_advisor.services.access import AccessContext
from nutrition_advisor.services.recommendations import RecommendationService
from nutrition_advisor.services.wizard import WizardController

NOT_SET = "Not set"
UNLIMITED = "∞"
FULL = 100
UPGRADE_HINT = "Upgrade to Premium for unlimited recommendations"


@dataclass
class DashboardService:
    """Service for the dashboard and the recommendation history."""

    recommendation_service: RecommendationService

    def build(self, controller: WizardController) -> dict[str, object]:
        """Return everything the dashboard shows for the session."""
        form = controller.saved_form
        access = controller.access
        usage = access.current_usage()
        remaining = access.remaining_recommendations
        can_use = access.can_use_feature()
        recommendation = controller.recommendation
        completion = completion_percentage(form)
        return {
            "greeting": f"Welcome back, {form.name}!" if form.name else "Welcome back!",
            "profile": {
                "age": form.age or NOT_SET,
                "gender": form.gender or NOT_SET,
                "activity_level": form.activity_level or NOT_SET,
                "health_goals": form.health_goals or NOT_SET,
                "version": controller.profile_version,
            },
            "completion": {"percent": completion, "complete": completion == FULL},
            "stats": {
                "recommendations_used": usage.recommendations_used,
                "remaining_today": UNLIMITED if remaining is None else remaining,
                "profile_status": "Active" if recommendation else "Setup",
                "last_reset": usage.last_reset_date.isoformat(),
            },
            "subscription": serialize_subscription(access),
            "show_upgrade_prompt": not access.subscription.subscribed and not can_use,
            "call_to_action": {
                "label": (
                    "Get New Recommendation"
                    if recommendation
                    else "Get Your First Recommendation"
                ),
                "enabled": can_use,
                "hint": None if can_use else UPGRADE_HINT,
            },
            "recommendation": (
                serialize_recommendation(recommendation) if recommendation else None
            ),
            "notice": controller.notice,
        }

    def history(self, controller: WizardController) -> list[dict[str, object]]:
        """Return all recommendations, newest first, flagging the active one."""
        current_id = controller.recommendation.id if controller.recommendation else None
        entries = self.recommendation_service.history(controller.user.id, current_id)
        return [_serialize_history_entry(entry) for entry in entries]


def serialize_subscription(access: AccessContext) -> dict[str, object]:
    """Describe the plan and the remaining quota."""
    subscription = access.subscription
    remaining = access.remaining_recommendations
    return {
        "subscribed": subscription.subscribed,
        "plan": _plan_label(access),
        "tier": subscription.tier,
        "renews_on": subscription.period_end.date().isoformat()
        if subscription.period_end
        else None,
        "remaining_today": remaining,
        "can_use_feature": access.can_use_feature(),
    }


def serialize_recommendation(recommendation: Recommendation) -> dict[str, object]:
    """Full and collapsed renderings of a recommendation."""
    text = recommendation.text
    collapsed = preview_words(text)
    return {
        "id": str(recommendation.id),
        "generated_at": recommendation.generated_at.isoformat(),
        "status": recommendation.status.value,
        "blocks": blocks_payload(parse_blocks(text)),
        "preview_blocks": blocks_payload(parse_blocks(collapsed)),
        "has_more": collapsed != text,
        "share_text": preview_text(text),
    }


def _plan_label(access: AccessContext) -> str:
    subscription = access.subscription
    if not subscription.subscribed:
        return "Free Plan"
    return f"{subscription.tier or 'Premium'} Plan"


def _serialize_history_entry(entry: HistoryEntry) -> dict[str, object]:
    recommendation = entry.recommendation
    head, truncated = truncate_lines(recommendation.text)
    return {
        "id": str(recommendation.id),
        "generated_at": recommendation.generated_at.isoformat(),
        "status": recommendation.status.value,
        "is_current": entry.is_current,
        "profile_summary": format_profile_snapshot(entry.profile),
        "profile_version": entry.profile.get("version"),
        "blocks": blocks_payload(parse_blocks(head)),
        "truncated": truncated,
    }
