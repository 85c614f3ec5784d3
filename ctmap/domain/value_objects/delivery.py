"""Report versions and the delivery record built on approval.

The delivery record is data only: sending the report to the recipients is the
job of an external collaborator.
"""

from dataclasses import dataclass, field
from datetime import datetime

from ctmap.domain.value_objects.enums import RecipientRole


@dataclass(frozen=True)
class ReportVersion:
    url: str
    date: datetime
    remarks: str = ""


@dataclass(frozen=True)
class DeliveryRecipient:
    name: str
    email: str
    role: RecipientRole


@dataclass(frozen=True)
class ReportDelivery:
    delivered_at: datetime
    delivered_by: str
    delivered_by_name: str
    report_url: str
    delivered_to: tuple[DeliveryRecipient, ...] = field(default_factory=tuple)
