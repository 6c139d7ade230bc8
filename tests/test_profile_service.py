"""Tests for profile conversion and persistence."""

from uuid import uuid4

import pytest

from nutrition_advisor.domain.profiles import (
    ProfileForm,
    completion_percentage,
    form_to_row,
    profile_to_form,
)
from nutrition_advisor.errors import PersistenceError, ValidationError
from nutrition_advisor.services.profiles import ProfileService
from tests.conftest import FILLED_ANSWERS, InMemoryProfileRepository


def _form(**overrides: object) -> ProfileForm:
    return ProfileForm.model_validate({**FILLED_ANSWERS, **overrides})


def test_form_to_row_converts_numbers() -> None:
    row = form_to_row(_form(weight="72.5", dietary_restrictions=["Vegan", "Vegan"]))

    assert row["age"] == 30
    assert row["weight"] == 72.5
    assert row["height"] == 165.0
    assert row["dietary_restrictions"] == ["Vegan"]


def test_form_to_row_allows_blank_optional_numbers() -> None:
    row = form_to_row(ProfileForm(name="Ana"))

    assert row["age"] is None
    assert row["weight"] is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"age": "thirty"},
        {"age": "-1"},
        {"weight": "0"},
        {"height": "inf"},
        {"gender": "robot"},
        {"meals_per_day": "7"},
        {"activity_level": "extreme"},
    ],
)
def test_form_to_row_rejects_bad_values(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        form_to_row(_form(**overrides))


def test_save_profile_inserts_then_bumps_version() -> None:
    repository = InMemoryProfileRepository()
    service = ProfileService(repository)
    user_id = uuid4()

    created = service.save_profile(user_id, _form(), None)
    updated = service.save_profile(user_id, _form(name="Bea"), created.id)
    again = service.save_profile(user_id, _form(name="Cy"), created.id)

    assert created.version == 1
    assert updated.version == 2
    assert again.version == 3
    assert len(repository.rows) == 1
    assert service.load_profile(user_id).name == "Cy"


def test_save_profile_failure_raises_persistence_error() -> None:
    service = ProfileService(InMemoryProfileRepository(fail_writes=True))

    with pytest.raises(PersistenceError):
        service.save_profile(uuid4(), _form(), None)


def test_profile_roundtrips_to_form() -> None:
    repository = InMemoryProfileRepository()
    service = ProfileService(repository)
    user_id = uuid4()
    service.save_profile(user_id, _form(), None)

    form = profile_to_form(service.load_profile(user_id))

    assert form == _form()


def test_completion_percentage() -> None:
    assert completion_percentage(ProfileForm()) == 0
    assert completion_percentage(_form()) == 100
    assert completion_percentage(_form(budget="", cooking_time="")) == 80


def test_save_profile_without_id_updates_stored_profile() -> None:
    repository = InMemoryProfileRepository()
    service = ProfileService(repository)
    user_id = uuid4()
    created = service.save_profile(user_id, _form(), None)

    again = service.save_profile(user_id, _form(name="Bea"), None)

    assert again.id == created.id
    assert again.version == 2
    assert len(repository.rows) == 1
