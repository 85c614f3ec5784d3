"""ScoringPolicy — match score between one assignment and one advocate.

One additive scoring function, parameterised by a named WeightSet:

  INTERACTIVE  ranking shown to an ops user choosing by hand. District +50,
               state-only +20, workload costs 5 points per active case.
  BULK         automatic top-1 selection. District +100, state-only +50,
               +10 per free slot below capacity, +20 for the same hub.

Expertise (+30) and the tag affinities are the same in both sets. The
strategy picks which geography is matched:

  property  the property's own state / district
  borrower  borrower state / district, each falling back to the property's
  hub       the state of the assignment's routing hub (property if no hub)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.user import User
from ctmap.domain.errors import CapacityViolation
from ctmap.domain.value_objects.enums import MatchStrategy, Priority, ProductType

DEFAULT_CAPACITY = 5
NO_ADVOCATES_AVAILABLE = "no advocates available"

HIGH_VALUE_TAG = "High Value Expert"
FAST_TURNAROUND_TAG = "Fast TAT"
COMMERCIAL_TAG = "Commercial Specialist"


@dataclass(frozen=True)
class WeightSet:
    name: str
    district_match: int
    state_match: int
    expertise_match: int = 30
    high_value_tag: int = 15
    fast_turnaround_tag: int = 20
    commercial_tag: int = 15
    workload_penalty: int = 0  # per active assignment
    idle_capacity_bonus: int = 0  # per free slot below capacity
    hub_alignment: int = 0


INTERACTIVE = WeightSet(
    name="interactive",
    district_match=50,
    state_match=20,
    workload_penalty=5,
)

BULK = WeightSet(
    name="bulk",
    district_match=100,
    state_match=50,
    idle_capacity_bonus=10,
    hub_alignment=20,
)

WEIGHT_SETS: dict[str, WeightSet] = {w.name: w for w in (INTERACTIVE, BULK)}


@dataclass(frozen=True)
class TargetLocation:
    state: str | None
    district: str | None


@dataclass(frozen=True)
class ScoredAdvocate:
    advocate: User
    score: int
    workload: int


def target_location(
    assignment: Assignment,
    strategy: MatchStrategy,
    hub: Hub | None = None,
) -> TargetLocation:
    """Resolve the geography an advocate is matched against."""
    if strategy == MatchStrategy.BORROWER:
        return TargetLocation(
            state=assignment.borrower_state or assignment.state,
            district=assignment.borrower_district or assignment.district,
        )
    if strategy == MatchStrategy.HUB and hub is not None:
        return TargetLocation(state=hub.state, district=None)
    return TargetLocation(state=assignment.state, district=assignment.district)


def in_target_state(
    advocates: Iterable[User],
    assignment: Assignment,
    strategy: MatchStrategy,
    hub: Hub | None = None,
) -> list[User]:
    """Advocates practising in the strategy's target state, input order kept.

    The hub strategy without a known hub filters nothing.
    """
    if strategy == MatchStrategy.HUB and hub is None:
        return list(advocates)
    state = target_location(assignment, strategy, hub).state
    return [a for a in advocates if a.operates_in_state(state)]


def score(
    assignment: Assignment,
    advocate: User,
    strategy: MatchStrategy,
    workload: int,
    *,
    hub: Hub | None = None,
    weights: WeightSet = INTERACTIVE,
    capacity: int = DEFAULT_CAPACITY,
) -> int:
    """Additive match score, no normalisation. Higher is better."""
    total = 0
    target = target_location(assignment, strategy, hub)

    # Location: district beats state, never both
    if advocate.operates_in_district(target.district):
        total += weights.district_match
    elif advocate.operates_in_state(target.state):
        total += weights.state_match

    if assignment.product_type in advocate.expertise:
        total += weights.expertise_match

    # Tag affinities
    if assignment.priority == Priority.HIGH_VALUE and advocate.has_tag(HIGH_VALUE_TAG):
        total += weights.high_value_tag
    if assignment.priority == Priority.URGENT and advocate.has_tag(FAST_TURNAROUND_TAG):
        total += weights.fast_turnaround_tag
    if assignment.product_type == ProductType.BL and advocate.has_tag(COMMERCIAL_TAG):
        total += weights.commercial_tag

    # Prefer idle advocates
    total -= weights.workload_penalty * workload
    total += weights.idle_capacity_bonus * max(0, capacity - workload)

    if (
        weights.hub_alignment
        and assignment.hub_id is not None
        and advocate.hub_id == assignment.hub_id
    ):
        total += weights.hub_alignment

    return total


def eligible_advocates(
    advocates: Iterable[User],
    workload_of: Callable[[str], int],
    capacity: int = DEFAULT_CAPACITY,
    exclude: Iterable[str] = (),
) -> list[User]:
    """Advocates under the capacity ceiling and not in *exclude*, input order kept."""
    excluded = set(exclude)
    return [
        a for a in advocates
        if a.is_advocate() and a.id not in excluded and workload_of(a.id) < capacity
    ]


def rank_advocates(
    assignment: Assignment,
    candidates: Iterable[User],
    strategy: MatchStrategy,
    workload_of: Callable[[str], int],
    *,
    hub: Hub | None = None,
    weights: WeightSet = INTERACTIVE,
    capacity: int = DEFAULT_CAPACITY,
) -> list[ScoredAdvocate]:
    """Score every candidate and sort by score, highest first.

    The sort is stable: candidates with equal scores keep their input order.
    """
    scored = []
    for advocate in candidates:
        load = workload_of(advocate.id)
        scored.append(ScoredAdvocate(
            advocate=advocate,
            score=score(
                assignment, advocate, strategy, load,
                hub=hub, weights=weights, capacity=capacity,
            ),
            workload=load,
        ))
    return sorted(scored, key=lambda s: s.score, reverse=True)


def pick_best(
    assignment: Assignment,
    candidates: Iterable[User],
    strategy: MatchStrategy,
    workload_of: Callable[[str], int],
    *,
    hub: Hub | None = None,
    weights: WeightSet = BULK,
    capacity: int = DEFAULT_CAPACITY,
) -> ScoredAdvocate:
    """Top-1 of rank_advocates.

    Raises:
        CapacityViolation: if there are no candidates.
    """
    ranked = rank_advocates(
        assignment, candidates, strategy, workload_of,
        hub=hub, weights=weights, capacity=capacity,
    )
    if not ranked:
        raise CapacityViolation(NO_ADVOCATES_AVAILABLE)
    return ranked[0]
