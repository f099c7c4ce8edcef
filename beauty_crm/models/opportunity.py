"""Opportunity model.

A qualified deal in the sales pipeline, usually created from a Prospect.
"""

import uuid

from beauty_crm.extensions import db


class Opportunity(db.Model):
    __tablename__ = "opportunities"

    STAGES = [
        "Prospecting",
        "Qualification",
        "Needs Analysis",
        "Proposal",
        "Negotiation",
        "Closed Won",
        "Closed Lost",
    ]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    stage = db.Column(db.String(50), default="Prospecting", nullable=False)
    probability = db.Column(db.Integer, default=50)
    amount = db.Column(db.Numeric(14, 2), default=0)
    expected_revenue = db.Column(db.Numeric(14, 2), default=0)
    currency = db.Column(db.String(3), default="MYR")
    close_date = db.Column(db.Date, nullable=True)

    owner_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    account_id = db.Column(
        db.String(36), db.ForeignKey("accounts.id"), nullable=True, index=True
    )
    primary_contact_id = db.Column(
        db.String(36), db.ForeignKey("contacts.id"), nullable=True
    )
    source_prospect_id = db.Column(
        db.String(36), db.ForeignKey("prospects.id"), nullable=True, index=True
    )

    competitors = db.Column(db.Text, nullable=True)
    win_strategy = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    ai_win_score = db.Column(db.Integer, nullable=True)
    ai_recommendation = db.Column(db.Text, nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __table_args__ = (
        db.CheckConstraint(
            "probability >= 0 AND probability <= 100",
            name="ck_opportunities_probability_range",
        ),
    )

    # --- Relationships ---
    owner = db.relationship("User", foreign_keys=[owner_id])
    account = db.relationship("Account", foreign_keys=[account_id])
    primary_contact = db.relationship("Contact", foreign_keys=[primary_contact_id])
    source_prospect = db.relationship("Prospect", foreign_keys=[source_prospect_id])

    def __repr__(self):
        return f"<Opportunity {self.name} ({self.stage})>"
