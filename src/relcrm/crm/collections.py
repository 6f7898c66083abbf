"""Named record collections and their storage and wire metadata."""

from enum import Enum
from typing import Type

from relcrm.crm.mapping import COMPANY_FIELDS, CONTACT_FIELDS, TASK_FIELDS, FieldMap
from relcrm.crm.models import Company, Contact, RecordModel, Task


class Collection(str, Enum):
    """A named collection of records.

    The value doubles as the remote endpoint path and the query cache key.
    """

    CONTACTS = "contacts"
    COMPANIES = "companies"
    TASKS = "tasks"

    @property
    def storage_key(self) -> str:
        """Local store key holding this collection's records."""
        return f"crm-{self.value}"

    @property
    def singular(self) -> str:
        """Envelope key for a single record in remote responses."""
        return _SINGULAR[self]

    @property
    def model(self) -> Type[RecordModel]:
        """Record model class."""
        return _MODELS[self]

    @property
    def field_map(self) -> FieldMap:
        """Record <-> wire field mapping."""
        return _FIELD_MAPS[self]


_SINGULAR = {
    Collection.CONTACTS: "contact",
    Collection.COMPANIES: "company",
    Collection.TASKS: "task",
}

_MODELS = {
    Collection.CONTACTS: Contact,
    Collection.COMPANIES: Company,
    Collection.TASKS: Task,
}

_FIELD_MAPS = {
    Collection.CONTACTS: CONTACT_FIELDS,
    Collection.COMPANIES: COMPANY_FIELDS,
    Collection.TASKS: TASK_FIELDS,
}
