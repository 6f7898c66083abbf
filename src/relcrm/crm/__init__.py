"""CRM records and data access.

This module provides:
- Record models (Contact, Company, Task, Activity)
- Named collections with their storage keys and wire field maps
- Local id and timestamp generation

Record sources, the query cache and the data source selector live in the
submodules and are imported from there.
"""

from relcrm.crm.collections import Collection
from relcrm.crm.ids import make_record_id, now_iso
from relcrm.crm.models import (
    Activity,
    ActivityType,
    Address,
    Company,
    CompanySize,
    CompanyStatus,
    Contact,
    ContactStatus,
    PreferredContact,
    RecordModel,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)

__all__ = [
    "Collection",
    "RecordModel",
    "Contact",
    "Company",
    "Task",
    "Activity",
    "Address",
    "ActivityType",
    "ContactStatus",
    "PreferredContact",
    "CompanySize",
    "CompanyStatus",
    "TaskType",
    "TaskPriority",
    "TaskStatus",
    "make_record_id",
    "now_iso",
]
