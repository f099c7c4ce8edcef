"""Tests for about-text generation.

Covers:
- Lookup file parsing (header, multiline entries, missing file)
- Lookup hit vs. generated fallback
- Audit event records the source
"""

import pytest

from beauty_crm.errors import NotFound
from beauty_crm.extensions import db
from beauty_crm.models.audit import AuditEvent
from beauty_crm.services import about_service
from beauty_crm.services.lifecycle import MERCHANT, PROSPECT


@pytest.fixture
def lookup_file(tmp_path):
    def _write(content):
        path = tmp_path / "about_lookup.csv"
        path.write_text(content, encoding="utf-8")
        return str(path)
    return _write


class TestLoadLookup:

    def test_multiline_entries(self, lookup_file):
        path = lookup_file(
            "ID;about\n"
            "11111111-2222-3333-4444-555555555555;First line\n"
            "• second line\n"
            "\n"
            "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee;Only line\n"
        )
        entries = about_service.load_about_lookup(path)
        assert entries == {
            "11111111-2222-3333-4444-555555555555": "First line\n• second line",
            "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee": "Only line",
        }

    def test_header_only(self, lookup_file):
        assert about_service.load_about_lookup(lookup_file("ID;about\n")) == {}

    def test_missing_file(self, tmp_path):
        assert about_service.load_about_lookup(str(tmp_path / "nope.csv")) == {}
        assert about_service.load_about_lookup(None) == {}

    def test_bundled_file_parses(self, app):
        entries = about_service.load_about_lookup(app.config["CRM_ABOUT_LOOKUP_PATH"])
        assert "1b9d6bcd-bbfd-4b2d-9b5d-ab8dfbbd4bed" in entries


class TestGenerateAbout:

    def test_lookup_hit(self, app, seed_data, lookup_file, monkeypatch):
        path = lookup_file(f"ID;about\n{seed_data['prospect_id']};Curated text\nmore detail\n")
        monkeypatch.setitem(app.config, "CRM_ABOUT_LOOKUP_PATH", path)

        prospect = about_service.generate_about(PROSPECT, seed_data["prospect_id"])
        db.session.commit()

        assert prospect.about == "Curated text\nmore detail"
        event = AuditEvent.query.filter_by(action="prospect.about_generated").one()
        assert event.metadata_["source"] == "lookup"

    def test_generated_fallback(self, app, seed_data, tmp_path, monkeypatch):
        monkeypatch.setitem(app.config, "CRM_ABOUT_LOOKUP_PATH", str(tmp_path / "none.csv"))

        prospect = about_service.generate_about(PROSPECT, seed_data["prospect_id"])

        assert "• Business Type: Salon" in prospect.about
        assert "• City: Kuala Lumpur" in prospect.about
        assert "Prospect Score: 75/100 (Good Potential - Follow Up Recommended)" in prospect.about
        assert "• Assigned To: Sarah Tan" in prospect.about
        assert "• Business Focus: Professional beauty services and treatments" in prospect.about
        assert "High-value prospect - prioritize engagement and opportunity creation" in prospect.about

    def test_merchant_fallback(self, app, seed_data, tmp_path, monkeypatch):
        monkeypatch.setitem(app.config, "CRM_ABOUT_LOOKUP_PATH", str(tmp_path / "none.csv"))

        merchant = about_service.generate_about(MERCHANT, seed_data["qualified_merchant_id"])

        assert "Merchant Score: 85/100 (High Potential - Priority Account)" in merchant.about
        assert "Ready for outreach and partnership discussion" in merchant.about

    def test_missing(self, app, seed_data):
        with pytest.raises(NotFound):
            about_service.generate_about(PROSPECT, "missing-id")
