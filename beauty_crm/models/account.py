"""Account and Contact models.

- Account: a customer business, created when a Prospect converts.
- Contact: a person at an Account. The conversion contact is primary.
"""

import uuid

from beauty_crm.extensions import db


class Account(db.Model):
    __tablename__ = "accounts"

    ACCOUNT_TYPES = ["Salon", "Spa", "Retailer", "E-commerce", "Distributor"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    account_name = db.Column(db.String(255), nullable=False)
    account_type = db.Column(db.String(50), default="Retailer")
    industry = db.Column(db.String(100), nullable=True)
    website = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(50), default="Active")

    address = db.Column(db.String(500), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    postal_code = db.Column(db.String(20), nullable=True)

    source_prospect_id = db.Column(
        db.String(36), db.ForeignKey("prospects.id"), nullable=True, index=True
    )
    health_score = db.Column(db.Integer, nullable=True)
    risk_level = db.Column(db.String(20), default="Low")
    date_created = db.Column(db.Date, nullable=True)
    description = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    contacts = db.relationship("Contact", back_populates="account", lazy="dynamic")
    source_prospect = db.relationship("Prospect", foreign_keys=[source_prospect_id])

    def __repr__(self):
        return f"<Account {self.account_name}>"


class Contact(db.Model):
    __tablename__ = "contacts"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    first_name = db.Column(db.String(100), nullable=False, default="")
    last_name = db.Column(db.String(100), nullable=False, default="")
    full_name = db.Column(db.String(255), nullable=True)
    title = db.Column(db.String(100), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    account_id = db.Column(
        db.String(36), db.ForeignKey("accounts.id"), nullable=False, index=True
    )
    is_primary = db.Column(db.Boolean, default=False)
    status = db.Column(db.String(50), default="Active")
    preferred_channel = db.Column(db.String(50), default="Email")
    language = db.Column(db.String(50), default="English")
    engagement_score = db.Column(db.Integer, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    account = db.relationship("Account", back_populates="contacts")

    def __repr__(self):
        return f"<Contact {self.full_name}>"
