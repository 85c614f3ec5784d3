"""Tests for MasterDataUseCase referential checks."""

from __future__ import annotations

import pytest

from ctmap.application.use_cases.master_data import MasterDataUseCase
from ctmap.domain.errors import NotFoundError, ReferentialIntegrityError
from ctmap.domain.value_objects.enums import ProductType, UserRole


@pytest.fixture
def master_data(seeded_store):
    return MasterDataUseCase(seeded_store)


def test_add_hub(master_data, seeded_store):
    hub = master_data.add_hub("HUB-HYD-01", "Hyderabad Hub", "hyd@x", "Telangana", "Hyderabad")
    assert seeded_store.get_hub(hub.id) is hub


def test_delete_unreferenced_hub(master_data, seeded_store):
    hub = master_data.add_hub("HUB-X", "X", "x@x", "Goa", "Panaji")
    master_data.delete_hub(hub.id)
    assert seeded_store.find_hub(hub.id) is None


def test_delete_referenced_hub_blocked(master_data):
    with pytest.raises(ReferentialIntegrityError):
        master_data.delete_hub("h1")


def test_add_user_with_defaults(master_data):
    user = master_data.add_user("New Advocate", "new@legal", UserRole.ADVOCATE)
    assert user.states == []
    assert user.expertise == []
    assert user.tags == []


def test_add_user_unknown_hub(master_data):
    with pytest.raises(NotFoundError):
        master_data.add_user("X", "x@x", UserRole.BANK_USER, hub_id="h99")


def test_new_advocate_is_allocatable(master_data, seeded_store):
    user = master_data.add_user(
        "Goa Advocate", "goa@legal", UserRole.ADVOCATE,
        states=["Goa"], districts=["Panaji"], expertise=[ProductType.HL],
    )
    assert user.id in [a.id for a in seeded_store.advocates()]


def test_update_user(master_data, seeded_store):
    user = seeded_store.get_user("adv2")
    user.tags.append("Fast TAT")
    master_data.update_user(user)
    assert seeded_store.get_user("adv2").has_tag("Fast TAT")


def test_delete_referenced_advocate_blocked(master_data):
    with pytest.raises(ReferentialIntegrityError):
        master_data.delete_user("adv1")


def test_delete_referenced_owner_blocked(master_data):
    with pytest.raises(ReferentialIntegrityError):
        master_data.delete_user("u4")


def test_delete_unreferenced_user(master_data, seeded_store):
    master_data.delete_user("u3")
    assert seeded_store.find_user("u3") is None
