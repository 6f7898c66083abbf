"""CRM record models (Contact, Company, Task, Activity).

Records are pydantic models whose python attributes are snake_case and whose
aliases are the record names persisted in the local store (camelCase). The
wire names used by the remote service are declared separately in
``relcrm.crm.mapping``.

Every model allows extra fields so a record round-trips through the local
store without losing anything it was written with. Timestamps and dates are
kept as the ISO-8601 strings they were stored as.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from relcrm.crm.ids import make_record_id


class ActivityType(str, Enum):
    """Type of contact activity."""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"
    TASK = "task"
    FOLLOW_UP = "follow-up"


class ContactStatus(str, Enum):
    """Classification of a contact."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    LEAD = "lead"


class PreferredContact(str, Enum):
    """Preferred contact channel."""

    EMAIL = "email"
    PHONE = "phone"
    TEXT = "text"
    LINKEDIN = "linkedin"


class CompanySize(str, Enum):
    """Company size classification."""

    STARTUP = "startup"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class CompanyStatus(str, Enum):
    """Relationship status with a company."""

    PROSPECT = "prospect"
    ACTIVE = "active"
    INACTIVE = "inactive"
    PARTNER = "partner"


class TaskType(str, Enum):
    """Type of task."""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    FOLLOW_UP = "follow-up"
    OTHER = "other"


class TaskPriority(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Task workflow status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class StoredModel(BaseModel):
    """Base for anything persisted, records and their embedded parts.

    A stored ``null`` in a field that has a non-null default reads back as
    that default, so one empty column never makes a whole record unreadable.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        filled = dict(data)
        for name, info in cls.model_fields.items():
            if info.is_required():
                continue
            for key in {name, info.alias or name}:
                if key in filled and filled[key] is None:
                    default = info.get_default(call_default_factory=True)
                    if default is not None:
                        filled[key] = default
        return filled


class RecordModel(StoredModel):
    """Base for every stored record.

    ``id`` and ``created_at`` are generated by whichever source stores the
    record (the local store, or the remote service), so drafts leave them
    unset.
    """

    id: Optional[str] = Field(None, description="Unique identifier")
    created_at: Optional[str] = Field(None, alias="createdAt", description="Creation timestamp")

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the persisted (camelCase) record form."""
        record = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        # Unknown keys stored as null are kept as null
        for key, value in (self.model_extra or {}).items():
            if value is None:
                record[key] = None
        return record

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "RecordModel":
        """Build a model from the persisted record form."""
        return cls.model_validate(data)

    def stamped(self, now: str) -> "RecordModel":
        """Return a copy with fields the local store refreshes on every write."""
        return self


class Activity(StoredModel):
    """An interaction logged against a contact.

    Activities stored without an id get one when their contact is read.
    """

    id: str = ""
    type: ActivityType = ActivityType.NOTE
    description: str = ""
    date: str = ""
    created_at: Optional[str] = Field(None, alias="createdAt")


class Address(StoredModel):
    """Postal address of a contact."""

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")
    country: Optional[str] = None


class Contact(RecordModel):
    """A person the user keeps a relationship with."""

    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    company: str = ""
    position: str = ""
    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    status: ContactStatus = ContactStatus.ACTIVE
    last_contact: Optional[str] = Field(None, alias="lastContact")

    address: Optional[Address] = None
    birthday: Optional[str] = None
    website: Optional[str] = None
    linked_in: Optional[str] = Field(None, alias="linkedIn")
    twitter: Optional[str] = None
    lead_source: Optional[str] = Field(None, alias="leadSource")
    preferred_contact: Optional[PreferredContact] = Field(None, alias="preferredContact")

    activities: List[Activity] = Field(default_factory=list)

    @field_validator("preferred_contact", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        return None if value == "" else value

    @model_validator(mode="after")
    def _assign_activity_ids(self) -> "Contact":
        taken = [activity.id for activity in self.activities if activity.id]
        for activity in self.activities:
            if not activity.id:
                activity.id = make_record_id(taken)
                taken.append(activity.id)
        return self

    @property
    def full_name(self) -> str:
        """First and last name joined for display."""
        return f"{self.first_name} {self.last_name}".strip()

    def stamped(self, now: str) -> "Contact":
        """Local writes refresh ``last_contact``."""
        return self.model_copy(update={"last_contact": now})


class Company(RecordModel):
    """An organisation the user tracks."""

    name: str = ""
    industry: str = ""
    website: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    size: CompanySize = CompanySize.SMALL
    status: CompanyStatus = CompanyStatus.PROSPECT
    notes: str = ""


class Task(RecordModel):
    """A to-do item, optionally linked to a contact.

    ``contact_name`` and ``company_name`` are display copies taken when the
    task is saved. They are not kept in step with later contact edits.
    """

    title: str = ""
    description: str = ""
    type: TaskType = TaskType.CALL
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    contact_id: Optional[str] = Field(None, alias="contactId")
    contact_name: Optional[str] = Field(None, alias="contactName")
    company_name: Optional[str] = Field(None, alias="companyName")
    due_date: str = Field("", alias="dueDate")
    completed: bool = False
    completed_at: Optional[str] = Field(None, alias="completedAt")
