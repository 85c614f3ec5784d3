"""ForfeitDetails value object — why and by whom an assignment was released."""

from dataclasses import dataclass
from datetime import datetime

from ctmap.domain.value_objects.enums import ForfeitReason


@dataclass(frozen=True)
class ForfeitDetails:
    reason: ForfeitReason
    details: str
    forfeited_by: str
    forfeited_by_name: str
    forfeited_at: datetime
    previous_advocate_id: str
    forfeit_count: int
