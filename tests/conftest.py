"""Shared test fixtures for the Beauty CRM test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, rate limits off)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- seed_data: sales reps in every region, prospects and merchant discoveries
- api_headers: Bearer auth headers for the API
"""

import json

import pytest
from werkzeug.security import generate_password_hash

from beauty_crm import create_app
from beauty_crm.extensions import db as _db
from beauty_crm.models.merchant import MerchantDiscovery
from beauty_crm.models.prospect import Prospect
from beauty_crm.models.user import User


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def api_headers(app):
    return {"Authorization": f"Bearer {app.config['CRM_API_KEY']}"}


@pytest.fixture
def seed_data(app, db_session):
    """Seed reps, prospects and merchants.

    Returns a dict of plain ids so tests can use them across sessions.
    """
    # --- Reps ---
    central_top = User(
        email="sarah@beautycrm.test",
        password_hash=generate_password_hash("reppass123"),
        full_name="Sarah Tan",
        role="Sales Rep",
        region="Central",
        quota=500000,
    )
    central_low = User(
        email="kevin@beautycrm.test",
        password_hash=generate_password_hash("reppass123"),
        full_name="Kevin Tan",
        role="Sales Rep",
        region="Central",
        quota=100000,
    )
    north = User(
        email="lisa@beautycrm.test",
        password_hash=generate_password_hash("reppass123"),
        full_name="Lisa Wong",
        role="Sales Rep",
        region="North",
        quota=300000,
    )
    south_inactive = User(
        email="david@beautycrm.test",
        password_hash=generate_password_hash("reppass123"),
        full_name="David Lee",
        role="Sales Rep",
        region="South",
        quota=900000,
        is_active=False,
    )
    manager = User(
        email="manager@beautycrm.test",
        password_hash=generate_password_hash("managerpass"),
        full_name="Mona Manager",
        role="Sales Manager",
        region="South",
        quota=999999,
    )
    db_session.add_all([central_top, central_low, north, south_inactive, manager])
    db_session.flush()

    # --- Prospects ---
    new_prospect = Prospect(
        prospect_name="Glow Beauty Bar",
        business_type="Salon",
        discovery_source="Partnership",
        city="Kuala Lumpur",
        location="Bangsar, Kuala Lumpur",
        country="Malaysia",
        contact_info=json.dumps({
            "name": "Ahmad Bin Ali",
            "email": "ahmad@glowbeauty.my",
            "phone": "+60 12-345 6789",
        }),
        contact_name="Ahmad Bin Ali",
        contact_email="ahmad@glowbeauty.my",
        contact_phone="+60 12-345 6789",
        social_media_links="https://instagram.com/glowbeautybar",
        prospect_score=75,
        estimated_value=45000,
        ai_score=82,
        status="New",
        auto_assigned_to_id=central_top.id,
    )
    qualified_prospect = Prospect(
        prospect_name="Serene Day Spa",
        business_type="Spa",
        discovery_source="Online Web",
        city="Penang",
        status="Qualified",
        prospect_score=70,
        auto_assigned_to_id=north.id,
    )
    bare_prospect = Prospect(
        prospect_name="Nameless Kiosk",
        business_type="Kiosk",
        discovery_source="Offline",
        status="Contacted",
        prospect_score=None,
    )
    db_session.add_all([new_prospect, qualified_prospect, bare_prospect])

    # --- Merchant discoveries ---
    discovered = MerchantDiscovery(
        merchant_name="Luxe Lash Studio",
        business_type="Salon",
        discovery_source="Instagram",
        city="Petaling Jaya",
        location="SS2, Petaling Jaya",
        contact_info="Name: Mei Ling, meiling@luxelash.my, 012-888 7777",
        social_media_links="https://instagram.com/luxelashstudio",
        merchant_score=70,
        status="Discovered",
    )
    qualified_merchant = MerchantDiscovery(
        merchant_name="Skin Deep Online",
        business_type="E-commerce",
        discovery_source="Shopee",
        city="Ipoh",
        location="Ipoh, Perak",
        contact_info="Contact: Farah, hello@skindeep.my",
        merchant_score=85,
        status="Qualified",
        auto_assigned_to_id=north.id,
    )
    db_session.add_all([discovered, qualified_merchant])

    db_session.commit()

    return {
        "rep_id": central_top.id,
        "rep_low_id": central_low.id,
        "north_rep_id": north.id,
        "inactive_rep_id": south_inactive.id,
        "manager_id": manager.id,
        "prospect_id": new_prospect.id,
        "qualified_prospect_id": qualified_prospect.id,
        "bare_prospect_id": bare_prospect.id,
        "merchant_id": discovered.id,
        "qualified_merchant_id": qualified_merchant.id,
    }
