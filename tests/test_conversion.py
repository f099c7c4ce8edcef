"""Tests for prospect conversion.

Covers:
- convert_to_account: linked Account / Contact / Opportunity, defaults,
  overrides, contact-name parsing
- Double conversion conflict (no new rows)
- Atomicity: a failure while inserting the Opportunity leaves nothing behind
- Concurrent update (stale version) surfaces as Conflict
- Non-finite amounts rejected
- create_opportunity defaults and validation
- Meeting script
"""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from beauty_crm.errors import Conflict, Internal, InvalidArgument, NotFound
from beauty_crm.extensions import db
from beauty_crm.models.account import Account, Contact
from beauty_crm.models.audit import AuditEvent
from beauty_crm.models.opportunity import Opportunity
from beauty_crm.models.prospect import Prospect
from beauty_crm.services import lifecycle, prospect_service
from beauty_crm.services.lifecycle import PROSPECT


class TestParseContactName:

    def test_full_name_split(self):
        assert prospect_service.parse_contact_name(full_name="Ahmad Bin Ali") == ("Ahmad", "Bin Ali")

    def test_single_token(self):
        assert prospect_service.parse_contact_name(full_name="Siti") == ("Siti", "")

    def test_nothing(self):
        assert prospect_service.parse_contact_name() == ("Contact", "")
        assert prospect_service.parse_contact_name(full_name="   ") == ("Contact", "")

    def test_explicit_parts_win(self):
        assert prospect_service.parse_contact_name("Mei", "Ling", "Ahmad Bin Ali") == ("Mei", "Ling")

    def test_account_type_mapping(self):
        assert prospect_service.map_business_type_to_account_type("Kiosk") == "Retailer"
        assert prospect_service.map_business_type_to_account_type("Spa") == "Spa"
        assert prospect_service.map_business_type_to_account_type(None) == "Retailer"


class TestConvertToAccount:

    def test_creates_linked_records(self, app, seed_data):
        result = prospect_service.convert_to_account(seed_data["prospect_id"])
        db.session.commit()

        account = db.session.get(Account, result["account_id"])
        contact = db.session.get(Contact, result["contact_id"])
        opportunity = db.session.get(Opportunity, result["opportunity_id"])
        prospect = db.session.get(Prospect, seed_data["prospect_id"])

        assert prospect.status == "Converted"
        assert prospect.converted_to_opportunity_id == opportunity.id

        assert account.account_name == "Glow Beauty Bar"
        assert account.account_type == "Salon"
        assert account.industry == "Beauty & Wellness"
        assert account.country == "Malaysia"
        assert account.health_score == 75
        assert account.source_prospect_id == prospect.id

        assert contact.account_id == account.id
        assert contact.is_primary is True
        assert contact.first_name == "Ahmad"
        assert contact.last_name == "Bin Ali"
        assert contact.email == "ahmad@glowbeauty.my"
        assert contact.title == "Business Owner"

        assert opportunity.account_id == account.id
        assert opportunity.primary_contact_id == contact.id
        assert opportunity.source_prospect_id == prospect.id
        assert opportunity.name == "Glow Beauty Bar - Partnership Deal"
        assert opportunity.probability == 75
        assert opportunity.amount == Decimal("45000")
        assert opportunity.currency == "MYR"
        assert opportunity.owner_id == seed_data["rep_id"]
        assert opportunity.close_date == date.today() + timedelta(days=90)
        assert opportunity.ai_win_score == 82

        assert AuditEvent.query.filter_by(action="prospect.converted").count() == 1

    def test_defaults_without_score_or_contact(self, app, seed_data):
        result = prospect_service.convert_to_account(seed_data["bare_prospect_id"])
        db.session.commit()

        account = db.session.get(Account, result["account_id"])
        contact = db.session.get(Contact, result["contact_id"])
        opportunity = db.session.get(Opportunity, result["opportunity_id"])

        assert account.account_type == "Retailer"  # Kiosk maps to Retailer
        assert account.health_score == 70
        assert contact.first_name == "Contact"
        assert contact.last_name == ""
        assert opportunity.probability == 50
        assert opportunity.amount == Decimal("0")
        assert db.session.get(Prospect, seed_data["bare_prospect_id"]).prospect_score is None

    def test_overrides(self, app, seed_data):
        result = prospect_service.convert_to_account(seed_data["prospect_id"], {
            "account_name": "Glow Beauty Sdn Bhd",
            "contact_first_name": "Nurul",
            "contact_last_name": "Aisyah",
            "contact_title": "<b>Director</b>",
            "opportunity_probability": 90,
            "opportunity_amount": "60000",
            "opportunity_close_date": "2027-01-31",
            "opportunity_stage": "Proposal",
        })
        db.session.commit()

        account = db.session.get(Account, result["account_id"])
        contact = db.session.get(Contact, result["contact_id"])
        opportunity = db.session.get(Opportunity, result["opportunity_id"])

        assert account.account_name == "Glow Beauty Sdn Bhd"
        assert contact.full_name == "Nurul Aisyah"
        assert contact.title == "Director"
        assert opportunity.probability == 90
        assert opportunity.amount == Decimal("60000")
        assert opportunity.close_date == date(2027, 1, 31)
        assert opportunity.stage == "Proposal"

    def test_second_conversion_conflicts(self, app, seed_data):
        prospect_service.convert_to_account(seed_data["prospect_id"])
        db.session.commit()

        with pytest.raises(Conflict):
            prospect_service.convert_to_account(seed_data["prospect_id"])
        db.session.rollback()

        assert Account.query.count() == 1
        assert Contact.query.count() == 1
        assert Opportunity.query.count() == 1

    def test_lost_prospect_cannot_convert(self, app, seed_data):
        lifecycle.change_status(PROSPECT, seed_data["prospect_id"], "Lost")
        db.session.commit()
        with pytest.raises(Conflict):
            prospect_service.convert_to_account(seed_data["prospect_id"])

    def test_missing_prospect(self, app, seed_data):
        with pytest.raises(NotFound):
            prospect_service.convert_to_account("missing-id")

    def test_invalid_probability_rejected_before_writes(self, app, seed_data):
        with pytest.raises(InvalidArgument):
            prospect_service.convert_to_account(
                seed_data["prospect_id"], {"opportunity_probability": 150}
            )
        db.session.rollback()
        assert Account.query.count() == 0
        assert db.session.get(Prospect, seed_data["prospect_id"]).status == "New"

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", "sNaN"])
    def test_non_finite_amount_rejected(self, app, seed_data, amount):
        with pytest.raises(InvalidArgument) as exc:
            prospect_service.convert_to_account(
                seed_data["prospect_id"], {"opportunity_amount": amount}
            )
        assert "finite" in exc.value.message
        db.session.rollback()
        assert Account.query.count() == 0

    def test_failure_rolls_back_everything(self, app, seed_data):
        real_persist = prospect_service._persist

        def failing_persist(record):
            if isinstance(record, Opportunity):
                raise SQLAlchemyError("disk full")
            real_persist(record)

        with patch.object(prospect_service, "_persist", side_effect=failing_persist):
            with pytest.raises(Internal) as exc:
                prospect_service.convert_to_account(seed_data["prospect_id"])

        assert exc.value.message.startswith("Conversion failed")
        assert Account.query.count() == 0
        assert Contact.query.count() == 0
        assert Opportunity.query.count() == 0

        prospect = db.session.get(Prospect, seed_data["prospect_id"])
        assert prospect.status == "New"
        assert prospect.converted_to_opportunity_id is None

    def test_concurrent_update_is_conflict(self, app, seed_data):
        prospect_id = seed_data["prospect_id"]
        real_persist = prospect_service._persist

        def persist_after_concurrent_edit(record):
            if isinstance(record, Opportunity):
                # another writer bumps the row version under us
                db.session.execute(
                    text("UPDATE prospects SET version_id = version_id + 1 WHERE id = :id"),
                    {"id": prospect_id},
                )
            real_persist(record)

        with patch.object(
            prospect_service, "_persist", side_effect=persist_after_concurrent_edit
        ):
            with pytest.raises(Conflict):
                prospect_service.convert_to_account(prospect_id)

        assert Account.query.count() == 0
        assert Contact.query.count() == 0
        assert Opportunity.query.count() == 0
        prospect = db.session.get(Prospect, prospect_id)
        assert prospect.status == "New"
        assert prospect.converted_to_opportunity_id is None

    def test_stale_data_error_is_conflict(self, app, seed_data):
        with patch.object(
            prospect_service, "_mark_converted",
            side_effect=StaleDataError("version mismatch"),
        ):
            with pytest.raises(Conflict):
                prospect_service.convert_to_account(seed_data["prospect_id"])

        assert Account.query.count() == 0
        assert db.session.get(Prospect, seed_data["prospect_id"]).status == "New"


class TestCreateOpportunity:

    def test_defaults(self, app, seed_data):
        result = prospect_service.create_opportunity(seed_data["prospect_id"])
        db.session.commit()

        opportunity = db.session.get(Opportunity, result["opportunity_id"])
        prospect = db.session.get(Prospect, seed_data["prospect_id"])

        assert opportunity.name == "Glow Beauty Bar - Opportunity"
        assert opportunity.description == "Opportunity created from prospect: Glow Beauty Bar"
        assert opportunity.stage == "Prospecting"
        assert opportunity.probability == 75
        assert opportunity.account_id is None
        assert opportunity.source_prospect_id == prospect.id
        assert prospect.status == "Converted"
        assert prospect.converted_to_opportunity_id == opportunity.id
        assert Account.query.count() == 0

    def test_invalid_stage(self, app, seed_data):
        with pytest.raises(InvalidArgument):
            prospect_service.create_opportunity(seed_data["prospect_id"], {"stage": "Dreaming"})

    def test_invalid_close_date(self, app, seed_data):
        with pytest.raises(InvalidArgument):
            prospect_service.create_opportunity(
                seed_data["prospect_id"], {"close_date": "next tuesday"}
            )

    def test_unknown_owner(self, app, seed_data):
        with pytest.raises(NotFound):
            prospect_service.create_opportunity(
                seed_data["prospect_id"], {"owner_id": "no-such-user"}
            )

    def test_then_convert_conflicts(self, app, seed_data):
        prospect_service.create_opportunity(seed_data["prospect_id"])
        db.session.commit()
        with pytest.raises(Conflict):
            prospect_service.convert_to_account(seed_data["prospect_id"])


class TestMeetingScript:

    def test_script_content(self, app, seed_data):
        script = prospect_service.generate_meeting_script(seed_data["prospect_id"])
        assert "GLOW BEAUTY BAR" in script
        assert "Good [morning/afternoon], Ahmad Bin Ali!" in script
        assert "Our mutual partner" in script  # Partnership source
        assert "training and certification" in script  # Salon talking points
        assert "Premium Partner package" in script  # score 75
        assert "ahmad@glowbeauty.my" in script

    def test_script_is_deterministic(self, app, seed_data):
        first = prospect_service.generate_meeting_script(seed_data["bare_prospect_id"])
        second = prospect_service.generate_meeting_script(seed_data["bare_prospect_id"])
        assert first == second
        assert "Standard Partnership" in first  # no score -> 50

    def test_missing(self, app, seed_data):
        with pytest.raises(NotFound):
            prospect_service.generate_meeting_script("missing-id")
