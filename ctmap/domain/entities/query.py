"""Query entity — a question raised on an assignment and its answer."""

from dataclasses import dataclass, field
from datetime import datetime

from ctmap.domain.value_objects.enums import UserRole


@dataclass
class Query:
    id: str
    text: str
    raised_by: str
    raised_at: datetime
    attachments: list[str] = field(default_factory=list)
    directed_to: UserRole | None = None
    response: str | None = None
    responded_by: str | None = None
    responded_at: datetime | None = None
    response_attachments: list[str] = field(default_factory=list)

    def is_answered(self) -> bool:
        return self.response is not None
