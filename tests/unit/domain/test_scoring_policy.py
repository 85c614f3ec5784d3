"""Tests for ScoringPolicy."""

from datetime import datetime, timezone

import pytest

from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.user import User
from ctmap.domain.errors import CapacityViolation
from ctmap.domain.policies.scoring import (
    BULK,
    INTERACTIVE,
    NO_ADVOCATES_AVAILABLE,
    eligible_advocates,
    in_target_state,
    pick_best,
    rank_advocates,
    score,
    target_location,
)
from ctmap.domain.value_objects.enums import (
    MatchStrategy,
    Priority,
    ProductType,
    Scope,
    UserRole,
)

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
PROPERTY = MatchStrategy.PROPERTY


def _asn(**kwargs) -> Assignment:
    defaults = dict(
        id="a1", lan="LN1", pan="PAN1", borrower_name="B",
        property_address="Flat 1", state="Maharashtra", district="Mumbai",
        product_type=ProductType.HL, scope=Scope.TSR, created_at=NOW,
    )
    defaults.update(kwargs)
    return Assignment(**defaults)


def _adv(aid: str, states=(), districts=(), expertise=(), tags=(), hub_id=None) -> User:
    return User(
        id=aid, name=aid.upper(), email=f"{aid}@x", role=UserRole.ADVOCATE,
        hub_id=hub_id, states=list(states), districts=list(districts),
        expertise=list(expertise), tags=list(tags),
    )


def _idle(_advocate_id: str) -> int:
    return 0


# ─── score ──────────────────────────────────────────────────────────


def test_district_match_with_expertise():
    adv = _adv("d", ["Maharashtra"], ["Mumbai"], [ProductType.HL])
    assert score(_asn(), adv, PROPERTY, 0) == 50 + 30


def test_state_match_without_district():
    adv = _adv("s", ["Maharashtra"], ["Pune"])
    assert score(_asn(), adv, PROPERTY, 0) == 20


def test_district_and_state_never_both_count():
    adv = _adv("d", ["Maharashtra"], ["Mumbai"])
    assert score(_asn(), adv, PROPERTY, 0, weights=BULK, capacity=5) == 100 + 5 * 10


def test_no_location_match():
    adv = _adv("x", ["Delhi"], ["New Delhi"], [ProductType.HL])
    assert score(_asn(), adv, PROPERTY, 0) == 30


def test_interactive_workload_penalty():
    adv = _adv("d", ["Maharashtra"], ["Mumbai"])
    assert score(_asn(), adv, PROPERTY, 3) == 50 - 15


def test_bulk_idle_capacity_bonus():
    adv = _adv("d", ["Maharashtra"], ["Mumbai"])
    assert score(_asn(), adv, PROPERTY, 2, weights=BULK, capacity=5) == 100 + 30


def test_bulk_hub_alignment():
    adv = _adv("d", hub_id="h1")
    a = _asn(hub_id="h1")
    assert score(a, adv, PROPERTY, 5, weights=BULK, capacity=5) == 20
    # interactive weights ignore hubs
    assert score(a, adv, PROPERTY, 0) == 0


@pytest.mark.parametrize(
    "priority,product,tag,bonus",
    [
        (Priority.HIGH_VALUE, ProductType.HL, "High Value Expert", 15),
        (Priority.URGENT, ProductType.HL, "Fast TAT", 20),
        (Priority.STANDARD, ProductType.BL, "Commercial Specialist", 15),
        (Priority.STANDARD, ProductType.HL, "Fast TAT", 0),
    ],
)
def test_tag_affinities(priority, product, tag, bonus):
    adv = _adv("t", tags=[tag])
    assert score(_asn(priority=priority, product_type=product), adv, PROPERTY, 0) == bonus


# ─── strategies ─────────────────────────────────────────────────────


def test_borrower_strategy_uses_borrower_location():
    a = _asn(borrower_state="Maharashtra", borrower_district="Pune")
    pune = _adv("p", ["Maharashtra"], ["Pune"])
    mumbai = _adv("m", ["Maharashtra"], ["Mumbai"])
    assert score(a, pune, MatchStrategy.BORROWER, 0) == 50
    assert score(a, mumbai, MatchStrategy.BORROWER, 0) == 20


def test_borrower_strategy_falls_back_to_property():
    target = target_location(_asn(), MatchStrategy.BORROWER)
    assert (target.state, target.district) == ("Maharashtra", "Mumbai")


def test_hub_strategy_matches_hub_state_only():
    hub = Hub(id="h3", code="BLR", name="Bangalore", email="h@x", state="Karnataka", district="Bangalore")
    adv = _adv("k", ["Karnataka"], ["Bangalore"])
    assert score(_asn(), adv, MatchStrategy.HUB, 0, hub=hub) == 20


def test_hub_strategy_without_hub_uses_property():
    target = target_location(_asn(), MatchStrategy.HUB, None)
    assert target.district == "Mumbai"


# ─── ranking ────────────────────────────────────────────────────────


def test_rank_orders_by_score_desc():
    advs = [
        _adv("none"),
        _adv("state", ["Maharashtra"]),
        _adv("district", ["Maharashtra"], ["Mumbai"]),
    ]
    ranked = rank_advocates(_asn(), advs, PROPERTY, _idle)
    assert [r.advocate.id for r in ranked] == ["district", "state", "none"]
    assert [r.score for r in ranked] == [50, 20, 0]


def test_rank_ties_keep_input_order():
    advs = [_adv("b", ["Maharashtra"]), _adv("a", ["Maharashtra"]), _adv("c", ["Maharashtra"])]
    ranked = rank_advocates(_asn(), advs, PROPERTY, _idle)
    assert [r.advocate.id for r in ranked] == ["b", "a", "c"]


def test_rank_reports_workload():
    loads = {"a": 2}
    ranked = rank_advocates(_asn(), [_adv("a")], PROPERTY, lambda i: loads.get(i, 0))
    assert ranked[0].workload == 2
    assert ranked[0].score == -10


def test_pick_best_empty_raises():
    with pytest.raises(CapacityViolation, match=NO_ADVOCATES_AVAILABLE):
        pick_best(_asn(), [], PROPERTY, _idle)


def test_pick_best_uses_bulk_weights():
    near_busy = _adv("near", ["Maharashtra"], ["Mumbai"])
    far_idle = _adv("far", ["Maharashtra"])
    loads = {"near": 4}
    best = pick_best(_asn(), [far_idle, near_busy], PROPERTY, lambda i: loads.get(i, 0))
    # near: 100 + 10, far: 50 + 50
    assert best.advocate.id == "near"
    assert best.score == 110


# ─── eligibility ────────────────────────────────────────────────────


def test_eligible_excludes_full_and_excluded():
    advs = [_adv("a"), _adv("b"), _adv("c")]
    loads = {"b": 5}
    eligible = eligible_advocates(advs, lambda i: loads.get(i, 0), capacity=5, exclude=["c"])
    assert [a.id for a in eligible] == ["a"]


def test_eligible_skips_non_advocates():
    ops = User(id="ops", name="Ops", email="o@x", role=UserRole.CT_OPS)
    assert [a.id for a in eligible_advocates([ops, _adv("a")], _idle)] == ["a"]


# ─── in_target_state ────────────────────────────────────────────────


def test_target_state_filter_per_strategy():
    advs = [_adv("mh", ["Maharashtra"]), _adv("ka", ["Karnataka"]), _adv("none")]
    asn = _asn(borrower_state="Karnataka")
    hub = Hub(id="h", code="H", name="H", email="h@x", state="Karnataka", district="Bangalore")

    assert [a.id for a in in_target_state(advs, asn, PROPERTY)] == ["mh"]
    assert [a.id for a in in_target_state(advs, asn, MatchStrategy.BORROWER)] == ["ka"]
    assert [a.id for a in in_target_state(advs, asn, MatchStrategy.HUB, hub)] == ["ka"]


def test_hub_strategy_without_hub_keeps_everyone():
    advs = [_adv("mh", ["Maharashtra"]), _adv("none")]
    assert in_target_state(advs, _asn(), MatchStrategy.HUB) == advs
