"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class UserRole(str, Enum):
    BANK_USER = "BANK_USER"
    CT_OPS = "CT_OPS"
    ADVOCATE = "ADVOCATE"
    ADMIN = "ADMIN"


class AssignmentStatus(str, Enum):
    UNCLAIMED = "UNCLAIMED"
    DRAFT = "DRAFT"
    PENDING_ALLOCATION = "PENDING_ALLOCATION"
    ALLOCATED = "ALLOCATED"
    IN_PROGRESS = "IN_PROGRESS"
    QUERY_RAISED = "QUERY_RAISED"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    FORFEITED = "FORFEITED"


class ProductType(str, Enum):
    HL = "Home Loan"
    LAP = "Loan Against Property"
    BL = "Business Loan"


class Scope(str, Enum):
    TSR = "TSR"
    LOR = "LOR"
    PRR = "PRR"


class Priority(str, Enum):
    STANDARD = "Standard"
    URGENT = "Urgent"
    HIGH_VALUE = "High Value"


class ForfeitReason(str, Enum):
    TOO_COMPLEX = "Too Complex / Beyond Expertise"
    CONFLICT_OF_INTEREST = "Conflict of Interest"
    OVERLOADED = "Overloaded with Work"
    EMERGENCY = "Personal/Medical Emergency"
    ACCESS_ISSUES = "Property Access Issues"
    CLIENT_ISSUES = "Client Relationship Issues"
    OTHER = "Other"


class MatchStrategy(str, Enum):
    PROPERTY = "property"
    BORROWER = "borrower"
    HUB = "hub"


class RecipientRole(str, Enum):
    OWNER = "Owner"
    HUB = "Hub"
    CC = "CC"
