"""AssignmentDocument entity — metadata for a file handed over by the bank user.

The engine never opens the file itself; `file_ref` is whatever opaque handle
the document collaborator supplied.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DocumentUpload:
    """What the file collaborator passes to upload_documents."""

    name: str
    category: str
    size_bytes: int | None = None
    file_ref: str | None = None


@dataclass
class AssignmentDocument:
    id: str
    name: str
    category: str
    uploaded_by: str
    date: datetime
    size_bytes: int | None = None
    file_ref: str | None = None
    extracted_data: dict[str, Any] | None = None
