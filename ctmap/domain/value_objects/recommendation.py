"""Recommendation value object — a remote recommender's pick for one assignment."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Recommendation:
    advocate_id: str
    advocate_name: str
    confidence: int  # 1..10
    reason: str
    factors: tuple[str, ...] = field(default_factory=tuple)
