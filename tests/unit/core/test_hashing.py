"""Unit tests for row fingerprinting."""

import hashlib
import json

from src.core.feed import FeedRow
from src.core.hashing import fingerprint, fingerprint_cells


def _row(**overrides) -> FeedRow:
    values = {
        "name": "Ad",
        "headline": "Headline",
        "body": "Body",
        "url": "example.com",
        "asset": "https://img.example.com/a.jpg",
        "filename": "a.jpg",
        "width": "300",
        "height": "250",
        "call_to_action": "Go",
        "creative_id": "",
        "line_item_id": "1,2",
    }
    values.update(overrides)
    return FeedRow(row_number=2, **values)


class TestFingerprint:
    """Tests for fingerprint and fingerprint_cells."""

    def test_matches_md5_of_compact_json(self):
        """The digest covers headline through remove, serialized compactly."""
        row = _row()
        expected_payload = json.dumps(row.to_cells()[2:-1], separators=(",", ":"))

        assert fingerprint(row) == hashlib.md5(expected_payload.encode("utf-8")).hexdigest()

    def test_stable_for_equal_rows(self):
        assert fingerprint(_row()) == fingerprint(_row())

    def test_ignores_status_name_and_hash(self):
        """Status, name and the hash cell itself never change the fingerprint."""
        base = fingerprint(_row())

        assert fingerprint(_row(status="Failed")) == base
        assert fingerprint(_row(name="Renamed")) == base
        assert fingerprint(_row(hash="deadbeef")) == base

    def test_changes_with_content(self):
        base = fingerprint(_row())

        assert fingerprint(_row(headline="Other")) != base
        assert fingerprint(_row(creative_id="77")) != base
        assert fingerprint(_row(line_item_id="1")) != base

    def test_non_ascii_is_hashed_as_utf8(self):
        """Non-ASCII text is serialized literally, not escaped."""
        cells = ["", "", "Café"] + [""] * 11
        payload = '["Café"' + ',""' * 10 + "]"

        assert fingerprint_cells(cells) == hashlib.md5(payload.encode("utf-8")).hexdigest()
