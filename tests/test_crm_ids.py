"""Tests for local id and timestamp generation."""

from datetime import timezone

from relcrm.crm.ids import make_record_id, now_iso, parse_timestamp


class TestMakeRecordId:
    """Tests for make_record_id."""

    def test_uses_epoch_milliseconds(self):
        """The id is the given millisecond value as text."""
        assert make_record_id(now_ms=1760875200123) == "1760875200123"

    def test_skips_taken_ids(self):
        """Ids already in the collection are not reused."""
        taken = ["1760875200123", "1760875200124"]

        assert make_record_id(taken, now_ms=1760875200123) == "1760875200125"

    def test_current_time_by_default(self):
        """Without a clock value the id is numeric and current."""
        assert make_record_id().isdigit()


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_now_iso_is_utc_with_milliseconds(self):
        """Timestamps end in Z and carry milliseconds."""
        value = now_iso()

        assert value.endswith("Z")
        assert len(value.split(".")[1]) == 4  # "123Z"

    def test_parse_timestamp_accepts_z_suffix(self):
        """Stored timestamps parse to aware datetimes."""
        parsed = parse_timestamp("2026-10-19T10:00:00.000Z")

        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timezone.utc.utcoffset(None)

    def test_parse_timestamp_accepts_dates(self):
        """Plain dates are taken as midnight UTC."""
        parsed = parse_timestamp("2026-11-01")

        assert (parsed.year, parsed.month, parsed.day, parsed.hour) == (2026, 11, 1, 0)

    def test_parse_timestamp_rejects_garbage(self):
        """Empty or malformed values parse to None."""
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp("next tuesday") is None
