"""Tests for dashboard and history views."""

import asyncio

from tests.conftest import walk_to_additional_info


def test_dashboard_before_first_recommendation(container, controller) -> None:
    view = container.dashboard_service.build(controller)

    assert view["greeting"] == "Welcome back!"
    assert view["profile"]["age"] == "Not set"
    assert view["completion"] == {"percent": 0, "complete": False}
    assert view["stats"]["recommendations_used"] == 0
    assert view["stats"]["remaining_today"] == 1
    assert view["stats"]["profile_status"] == "Setup"
    assert view["call_to_action"]["label"] == "Get Your First Recommendation"
    assert view["call_to_action"]["enabled"]
    assert view["recommendation"] is None
    assert view["subscription"]["plan"] == "Free Plan"


def test_dashboard_after_generation(container, controller) -> None:
    walk_to_additional_info(controller)
    asyncio.run(controller.generate())

    view = container.dashboard_service.build(controller)

    assert view["greeting"] == "Welcome back, Ana!"
    assert view["completion"]["complete"]
    assert view["stats"]["remaining_today"] == 0
    assert view["stats"]["profile_status"] == "Active"
    assert view["show_upgrade_prompt"]
    assert view["call_to_action"]["label"] == "Get New Recommendation"
    assert not view["call_to_action"]["enabled"]
    assert view["call_to_action"]["hint"]
    recommendation = view["recommendation"]
    assert recommendation["blocks"][0] == {
        "kind": "heading",
        "text": "Your Plan",
        "level": 1,
    }
    assert not recommendation["has_more"]
    assert recommendation["share_text"].startswith("Your Plan\n\nSummary")


def test_dashboard_for_subscriber(container, controller, billing_client) -> None:
    billing_client.status = {"subscribed": True, "subscription_tier": "Premium"}
    asyncio.run(controller.access.refresh())

    view = container.dashboard_service.build(controller)

    assert view["stats"]["remaining_today"] == "∞"
    assert view["subscription"]["plan"] == "Premium Plan"
    assert not view["show_upgrade_prompt"]


def test_history_marks_current_and_truncates(container, controller) -> None:
    walk_to_additional_info(controller)
    asyncio.run(controller.generate())

    (entry,) = container.dashboard_service.history(controller)

    assert entry["is_current"]
    assert entry["status"] == "active"
    assert entry["truncated"]
    assert len(entry["blocks"]) == 5
    assert entry["profile_version"] == 1
    assert "Dietary Restrictions: Vegetarian" in entry["profile_summary"]


def test_dashboard_ignores_unsaved_edits(container, controller) -> None:
    walk_to_additional_info(controller)
    asyncio.run(controller.generate())
    controller.start_questionnaire()
    controller.update_fields({"name": "Bea", "budget": ""})

    view = container.dashboard_service.build(controller)

    assert view["greeting"] == "Welcome back, Ana!"
    assert view["completion"]["complete"]
