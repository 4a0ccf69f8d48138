"""Time-tracking records.

These models mirror the subset of the Toggl API payloads the reconciler
relies on. Wire names (``pid``, ``cid``) are kept as aliases so payloads can
be validated directly.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from toggl_billing.models.base import BaseDataModel

DEFAULT_DESCRIPTION = "Other"


class MalformedRecordError(ValueError):
    """Raised when an upstream record lacks data the reconciler cannot do without."""


class TimeEntry(BaseDataModel):
    """Represents a single tracked time entry.

    Attributes:
        id: Entry identifier, also the key of the billed-entry store
        description: Trimmed description, ``"Other"`` when blank or absent
        duration: Duration in seconds; negative while the timer is running,
            ``None`` when the payload omits it
        project_id: Project the entry was logged against, if any

    Example:
        >>> entry = TimeEntry.model_validate(
        ...     {"id": 1, "description": "  Review ", "duration": 60, "pid": 10}
        ... )
        >>> entry.description, entry.project_id
        ('Review', 10)
    """

    id: int
    description: str = Field(DEFAULT_DESCRIPTION)
    duration: Optional[int] = None
    project_id: Optional[int] = Field(None, alias="pid")

    @field_validator("description", mode="before")
    @classmethod
    def normalize_description(cls, v: Any) -> str:
        """Trim the description and fall back to ``"Other"`` when blank."""
        if v is None:
            return DEFAULT_DESCRIPTION
        text = str(v).strip()
        return text or DEFAULT_DESCRIPTION

    @property
    def is_running(self) -> bool:
        """A negative duration marks a timer that is still running."""
        return self.duration is not None and self.duration < 0


class Project(BaseDataModel):
    """Project record; ``client_id`` is absent for projects without a client."""

    id: int
    name: Optional[str] = None
    client_id: Optional[int] = Field(None, alias="cid")


class Client(BaseDataModel):
    """Client record."""

    id: int
    name: Optional[str] = None

    def require_name(self) -> str:
        """Return the client name.

        Raises:
            MalformedRecordError: If the record carries no name
        """
        if not self.name:
            raise MalformedRecordError(f"Client {self.id} has no name")
        return self.name


class Account(BaseDataModel):
    """The authenticated account, as returned by ``GET /me``."""

    id: Optional[int] = None
    email: Optional[str] = None
    timezone: Optional[str] = None
