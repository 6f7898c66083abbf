"""Tests for record <-> wire field maps.

Every record type declares its mapping; encode and decode must be exact
inverses, nested records included, and unknown keys pass through.
"""

import pytest

from relcrm.crm.collections import Collection
from relcrm.crm.mapping import CONTACT_FIELDS, TASK_FIELDS, FieldMap
from relcrm.crm.models import Activity, Address, Contact


@pytest.fixture
def full_contact_record():
    """A contact record with every optional field and nested records set."""
    return {
        "id": "1760875200123",
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 0000",
        "company": "Analytical Engines",
        "position": "Engineer",
        "tags": ["vip"],
        "notes": "",
        "status": "active",
        "createdAt": "2026-10-01T09:00:00.000Z",
        "lastContact": "2026-10-02T09:00:00.000Z",
        "address": {"street": "1 Main St", "zipCode": "N1", "country": "UK"},
        "birthday": "1815-12-10",
        "linkedIn": "ada",
        "leadSource": "referral",
        "preferredContact": "email",
        "activities": [
            {
                "id": "a1",
                "type": "call",
                "description": "Intro",
                "date": "2026-10-02",
                "createdAt": "2026-10-02T09:00:00.000Z",
            }
        ],
    }


class TestFieldMapDeclarations:
    """Tests that maps cover their models."""

    @pytest.mark.parametrize("collection", list(Collection))
    def test_every_model_alias_is_mapped(self, collection):
        """Each stored field name of a record type has a wire name."""
        aliases = {
            info.alias or name for name, info in collection.model.model_fields.items()
        }

        assert aliases <= set(collection.field_map.fields)

    def test_nested_models_are_mapped(self):
        """Address and activity aliases are covered by the nested maps."""
        address_map, _ = CONTACT_FIELDS.nested["address"]
        activity_map, is_list = CONTACT_FIELDS.nested["activities"]

        assert {i.alias or n for n, i in Address.model_fields.items()} <= set(address_map.fields)
        assert {i.alias or n for n, i in Activity.model_fields.items()} <= set(activity_map.fields)
        assert is_list is True

    def test_duplicate_wire_names_rejected(self):
        """Two record fields cannot share a wire name."""
        with pytest.raises(ValueError):
            FieldMap(record_type="bad", fields={"a": "x", "b": "x"})

    def test_undeclared_nested_field_rejected(self):
        """Nested maps must hang off a declared field."""
        with pytest.raises(ValueError):
            FieldMap(record_type="bad", fields={"a": "a"}, nested={"b": (TASK_FIELDS, False)})


class TestFieldMapConversion:
    """Tests for encode/decode."""

    def test_contact_encodes_to_snake_case(self, full_contact_record):
        """Top-level and nested names are converted."""
        wire = CONTACT_FIELDS.encode(full_contact_record)

        assert wire["first_name"] == "Ada"
        assert wire["last_contact"] == "2026-10-02T09:00:00.000Z"
        assert wire["address"]["zip_code"] == "N1"
        assert wire["activities"][0]["created_at"] == "2026-10-02T09:00:00.000Z"
        assert "firstName" not in wire

    def test_contact_round_trip(self, full_contact_record):
        """decode(encode(record)) is the record."""
        assert CONTACT_FIELDS.decode(CONTACT_FIELDS.encode(full_contact_record)) == (
            full_contact_record
        )

    def test_unknown_keys_pass_through(self):
        """Keys absent from the map are kept as they are."""
        wire = TASK_FIELDS.encode({"dueDate": "2026-11-01", "customFlag": True})

        assert wire == {"due_date": "2026-11-01", "customFlag": True}
        assert TASK_FIELDS.decode(wire) == {"dueDate": "2026-11-01", "customFlag": True}

    def test_nested_non_objects_pass_through(self):
        """Malformed nested values are not converted, and not dropped."""
        wire = CONTACT_FIELDS.encode({"address": None, "activities": ["junk"]})

        assert wire == {"address": None, "activities": ["junk"]}

    def test_model_record_round_trips_through_wire(self, full_contact_record):
        """A model's stored form survives a trip through the wire format."""
        record = Contact.from_record(full_contact_record).to_record()
        decoded = CONTACT_FIELDS.decode(CONTACT_FIELDS.encode(record))

        assert Contact.from_record(decoded) == Contact.from_record(full_contact_record)
