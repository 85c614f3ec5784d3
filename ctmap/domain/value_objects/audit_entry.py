"""AuditLogEntry value object — one immutable line of an assignment's history."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuditLogEntry:
    action: str
    performed_by: str
    timestamp: datetime
    details: str | None = None
