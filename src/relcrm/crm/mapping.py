"""Field-name mapping between stored records and the remote wire format.

Records are persisted with camelCase names; the remote service speaks
snake_case. Each record type declares its own ``FieldMap`` listing every
known field pair, with nested maps for embedded records (a contact's
address and activities). Keys a map does not know about pass through
unchanged in both directions, so encode followed by decode returns the
original mapping.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class FieldMap:
    """Bidirectional record <-> wire field-name mapping for one record type.

    Attributes:
        record_type: Name used in error messages
        fields: Record field name -> wire field name
        nested: Record field name -> (FieldMap, is_list) for embedded records
    """

    record_type: str
    fields: Dict[str, str]
    nested: Dict[str, Tuple["FieldMap", bool]] = field(default_factory=dict)

    def __post_init__(self):
        wire_names = list(self.fields.values())
        if len(wire_names) != len(set(wire_names)):
            raise ValueError(f"{self.record_type}: wire field names must be unique")
        unknown = set(self.nested) - set(self.fields)
        if unknown:
            raise ValueError(
                f"{self.record_type}: nested fields not declared: {sorted(unknown)}"
            )

    @property
    def wire_to_record(self) -> Dict[str, str]:
        """Inverse of ``fields``."""
        return {wire: name for name, wire in self.fields.items()}

    def encode(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Convert a record mapping to wire field names."""
        return self._convert(record, self.fields, encode=True)

    def decode(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Convert a wire mapping back to record field names."""
        return self._convert(payload, self.wire_to_record, encode=False)

    def _convert(
        self,
        source: Mapping[str, Any],
        names: Dict[str, str],
        *,
        encode: bool,
    ) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in source.items():
            target = names.get(key, key)
            record_name = key if encode else target
            if record_name in self.nested:
                value = self._convert_nested(record_name, value, encode=encode)
            result[target] = value
        return result

    def _convert_nested(self, record_name: str, value: Any, *, encode: bool) -> Any:
        nested_map, is_list = self.nested[record_name]
        convert = nested_map.encode if encode else nested_map.decode
        if is_list and isinstance(value, list):
            return [convert(item) if isinstance(item, Mapping) else item for item in value]
        if not is_list and isinstance(value, Mapping):
            return convert(value)
        return value


ACTIVITY_FIELDS = FieldMap(
    record_type="activity",
    fields={
        "id": "id",
        "type": "type",
        "description": "description",
        "date": "date",
        "createdAt": "created_at",
    },
)

ADDRESS_FIELDS = FieldMap(
    record_type="address",
    fields={
        "street": "street",
        "city": "city",
        "state": "state",
        "zipCode": "zip_code",
        "country": "country",
    },
)

CONTACT_FIELDS = FieldMap(
    record_type="contact",
    fields={
        "id": "id",
        "firstName": "first_name",
        "lastName": "last_name",
        "email": "email",
        "phone": "phone",
        "company": "company",
        "position": "position",
        "tags": "tags",
        "notes": "notes",
        "status": "status",
        "createdAt": "created_at",
        "lastContact": "last_contact",
        "address": "address",
        "birthday": "birthday",
        "website": "website",
        "linkedIn": "linked_in",
        "twitter": "twitter",
        "leadSource": "lead_source",
        "preferredContact": "preferred_contact",
        "activities": "activities",
    },
    nested={
        "address": (ADDRESS_FIELDS, False),
        "activities": (ACTIVITY_FIELDS, True),
    },
)

COMPANY_FIELDS = FieldMap(
    record_type="company",
    fields={
        "id": "id",
        "name": "name",
        "industry": "industry",
        "website": "website",
        "phone": "phone",
        "email": "email",
        "address": "address",
        "city": "city",
        "country": "country",
        "size": "size",
        "status": "status",
        "notes": "notes",
        "createdAt": "created_at",
    },
)

TASK_FIELDS = FieldMap(
    record_type="task",
    fields={
        "id": "id",
        "title": "title",
        "description": "description",
        "type": "type",
        "priority": "priority",
        "status": "status",
        "contactId": "contact_id",
        "contactName": "contact_name",
        "companyName": "company_name",
        "dueDate": "due_date",
        "completed": "completed",
        "createdAt": "created_at",
        "completedAt": "completed_at",
    },
)
