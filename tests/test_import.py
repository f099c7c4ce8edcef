"""Tests for bulk import.

Covers:
- Payload validation (missing, bad JSON, non-array, non-object rows)
- Scoring, initial status and territory auto-assignment per row
- Rows without a name are skipped and counted
- Contact JSON split into columns
"""

import json

import pytest

from beauty_crm.errors import InvalidArgument
from beauty_crm.extensions import db
from beauty_crm.models.audit import AuditEvent
from beauty_crm.models.merchant import MerchantDiscovery
from beauty_crm.models.prospect import Prospect
from beauty_crm.services import import_service
from beauty_crm.services.assignment import infer_region, pick_sales_rep
from beauty_crm.services.lifecycle import MERCHANT, PROSPECT


class TestParsePayload:

    @pytest.mark.parametrize("payload", [None, ""])
    def test_missing(self, payload):
        with pytest.raises(InvalidArgument) as exc:
            import_service.parse_payload(payload, "prospects")
        assert "required" in exc.value.message

    def test_bad_json(self):
        with pytest.raises(InvalidArgument) as exc:
            import_service.parse_payload("[{", "prospects")
        assert "Invalid JSON" in exc.value.message

    def test_not_an_array(self):
        with pytest.raises(InvalidArgument) as exc:
            import_service.parse_payload('{"prospectName": "X"}', "discoveries")
        assert "must be an array" in exc.value.message

    def test_rows_must_be_objects(self):
        with pytest.raises(InvalidArgument):
            import_service.parse_payload('["just a string"]', "prospects")

    def test_accepts_decoded_list(self):
        assert import_service.parse_payload([{"a": 1}], "prospects") == [{"a": 1}]


class TestAssignment:

    @pytest.mark.parametrize("city, region", [
        ("Johor Bahru", "South"),
        ("Melaka", "South"),
        ("Penang", "North"),
        ("Ipoh", "North"),
        ("Kuala Lumpur", "Central"),
        (None, "Central"),
    ])
    def test_infer_region(self, city, region):
        assert infer_region(city) == region

    def test_highest_quota_active_rep(self, app, seed_data):
        assert pick_sales_rep("Kuala Lumpur").id == seed_data["rep_id"]
        assert pick_sales_rep("Penang").id == seed_data["north_rep_id"]

    def test_no_active_rep_in_region(self, app, seed_data):
        # South has only an inactive rep and a manager
        assert pick_sales_rep("Johor Bahru") is None


class TestBulkImport:

    def test_import_prospects(self, app, seed_data):
        payload = json.dumps([
            {
                "prospectName": "Radiance Retail",
                "businessType": "Retailer",
                "discoverySource": "Online Web",
                "city": "Kuala Lumpur",
                "contactInfo": {"name": "Aina", "email": "aina@radiance.my"},
                "estimatedValue": "25000",
            },
            {
                "prospectName": "Penang Glow",
                "businessType": "Spa",
                "city": "Penang",
            },
        ])

        result = import_service.bulk_import(PROSPECT, payload)
        db.session.commit()

        assert result["count"] == 2
        assert result["skipped"] == 0
        assert len(result["ids"]) == 2

        radiance = db.session.get(Prospect, result["ids"][0])
        assert radiance.status == "New"
        assert radiance.prospect_score == 87  # 50 + 20 + 12 + 5
        assert radiance.auto_assigned_to_id == seed_data["rep_id"]
        assert radiance.contact_name == "Aina"
        assert radiance.contact_email == "aina@radiance.my"
        assert radiance.country == "Malaysia"
        assert float(radiance.estimated_value) == 25000.0
        assert json.loads(radiance.discovery_metadata)["prospectName"] == "Radiance Retail"

        penang = db.session.get(Prospect, result["ids"][1])
        assert penang.auto_assigned_to_id == seed_data["north_rep_id"]

        event = AuditEvent.query.filter_by(action="prospect.bulk_imported").one()
        assert event.metadata_["count"] == 2

    def test_rows_without_name_are_skipped(self, app, seed_data):
        result = import_service.bulk_import(PROSPECT, [
            {"prospectName": "Keeper"},
            {"businessType": "Salon"},
            {"prospectName": "   "},
        ])
        assert result["count"] == 1
        assert result["skipped"] == 2

    def test_non_text_fields_are_coerced(self, app, seed_data):
        result = import_service.bulk_import(PROSPECT, [
            {"prospectName": "Numbered Outlet", "city": 12345, "businessType": ["Salon"]},
        ])
        db.session.commit()

        assert result["count"] == 1
        prospect = db.session.get(Prospect, result["ids"][0])
        assert prospect.city == "12345"
        assert "Salon" in prospect.business_type
        assert 0 <= prospect.prospect_score <= 100
        assert prospect.auto_assigned_to_id == seed_data["rep_id"]  # Central by default

    def test_invalid_payload_inserts_nothing(self, app, seed_data):
        before = Prospect.query.count()
        with pytest.raises(InvalidArgument):
            import_service.bulk_import(PROSPECT, "not json")
        assert Prospect.query.count() == before

    def test_html_is_stripped(self, app, seed_data):
        result = import_service.bulk_import(PROSPECT, [
            {"prospectName": "<script>alert(1)</script>Clean Name"},
        ])
        prospect = db.session.get(Prospect, result["ids"][0])
        assert "<script>" not in prospect.prospect_name
        assert prospect.prospect_name.endswith("Clean Name")

    def test_import_merchants(self, app, seed_data):
        result = import_service.bulk_import(MERCHANT, [
            {
                "merchantName": "Melaka Nail House",
                "businessType": "Salon",
                "discoverySource": "Lead Conversion",
                "city": "Melaka",
                "contactInfo": "Name: Wei, wei@nails.my",
            },
        ])
        db.session.commit()

        merchant = db.session.get(MerchantDiscovery, result["ids"][0])
        assert merchant.status == "Discovered"
        assert merchant.merchant_score == 70  # no Lead Conversion bonus for merchants
        assert merchant.auto_assigned_to_id is None
        assert merchant.contact_info == "Name: Wei, wei@nails.my"

    def test_merchant_payload_error_names_discoveries(self, app, seed_data):
        with pytest.raises(InvalidArgument) as exc:
            import_service.bulk_import(MERCHANT, {"merchantName": "x"})
        assert "discoveries" in exc.value.message
