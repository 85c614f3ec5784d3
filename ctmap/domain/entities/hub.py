"""Hub entity — a regional routing unit of the bank."""

from dataclasses import dataclass


@dataclass
class Hub:
    id: str
    code: str
    name: str
    email: str
    state: str
    district: str
