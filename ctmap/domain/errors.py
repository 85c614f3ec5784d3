"""Domain error taxonomy.

Every guard in the lifecycle raises one of these. None of them is transient:
callers must change the request (or the record) before trying again. The only
retried failure is ExternalCallError, and only inside the AI orchestrator.
"""


class DomainError(Exception):
    """Base class for all engine errors."""


class NotFoundError(DomainError):
    """Referenced assignment, user, hub, query or document does not exist."""


class PreconditionViolation(DomainError):
    """A status / ownership guard rejected the operation."""


class CapacityViolation(DomainError):
    """Target advocate is at or over the workload ceiling, or nobody is eligible."""


class ExternalCallError(DomainError):
    """Remote recommendation call failed or returned an unusable reply."""


class ReferentialIntegrityError(DomainError):
    """A master-data record is still referenced and cannot be removed."""


class SnapshotError(DomainError):
    """A persisted or imported snapshot is malformed or has the wrong version."""
