"""User entity — bank users, ops staff and advocates share one record type."""

from dataclasses import dataclass, field

from ctmap.domain.value_objects.enums import ProductType, UserRole


@dataclass
class User:
    id: str
    name: str
    email: str
    role: UserRole
    hub_id: str | None = None
    firm_name: str | None = None
    states: list[str] = field(default_factory=list)
    districts: list[str] = field(default_factory=list)
    expertise: list[ProductType] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    def is_advocate(self) -> bool:
        return self.role == UserRole.ADVOCATE

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def operates_in_state(self, state: str | None) -> bool:
        return bool(state) and state in self.states

    def operates_in_district(self, district: str | None) -> bool:
        return bool(district) and district in self.districts
