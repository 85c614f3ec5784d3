"""Tests for RecordStore lookups and search."""

from __future__ import annotations

import pytest

from ctmap.application.record_store import RecordStore
from ctmap.domain.errors import NotFoundError
from ctmap.domain.value_objects.enums import AssignmentStatus, UserRole


def test_seed_counts(seeded_store):
    assert len(seeded_store.assignments()) == 11
    assert len(seeded_store.hubs()) == 4
    assert [a.id for a in seeded_store.advocates()] == ["adv1", "adv2", "adv6", "adv10"]
    assert len(seeded_store.users(UserRole.CT_OPS)) == 2


def test_filter_by_status(seeded_store):
    unclaimed = seeded_store.assignments(AssignmentStatus.UNCLAIMED)
    assert {a.id for a in unclaimed} == {"asn_001", "asn_010", "asn_002", "asn_004"}


def test_search_by_pan_finds_all_properties(seeded_store):
    assert {a.id for a in seeded_store.search_assignments("abcde1234f")} == {"asn_001", "asn_010"}


def test_search_by_lan_is_exact(seeded_store):
    assert [a.id for a in seeded_store.search_assignments("LN10001")] == ["asn_001"]


def test_search_by_borrower_substring(seeded_store):
    assert [a.id for a in seeded_store.search_assignments(" gupta ")] == ["asn_002"]


def test_empty_search(seeded_store):
    assert seeded_store.search_assignments("   ") == []


def test_get_advocate_rejects_other_roles(seeded_store):
    with pytest.raises(NotFoundError):
        seeded_store.get_advocate("u1")


def test_missing_records(seeded_store):
    with pytest.raises(NotFoundError):
        seeded_store.get_assignment("nope")
    with pytest.raises(NotFoundError):
        seeded_store.get_hub("nope")
    assert seeded_store.find_user(None) is None


def test_writes_stamp_last_updated(clock):
    store = RecordStore(clock=clock)
    first = store.last_updated
    clock.advance(minutes=5)
    store.clear()
    assert store.last_updated == clock()
    assert store.last_updated > first
