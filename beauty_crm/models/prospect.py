"""Prospect model.

A beauty business in the pre-opportunity pipeline.
Pipeline: New -> Contacted -> Qualified -> Negotiating -> In Review -> Converted
"Lost" may be entered from any open stage.
"""

import uuid

from beauty_crm.extensions import db


class Prospect(db.Model):
    __tablename__ = "prospects"

    # -- Ordered pipeline; position matters for forward-only transitions --
    STATUSES = [
        "New",
        "Contacted",
        "Qualified",
        "Negotiating",
        "In Review",
        "Converted",
    ]
    NEGATIVE_STATUSES = ["Lost"]

    BUSINESS_TYPES = ["Salon", "Spa", "Retailer", "E-commerce", "Kiosk", "Distributor"]
    DISCOVERY_SOURCES = ["Online Web", "Partnership", "Offline", "Lead Conversion", "Other"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    prospect_name = db.Column(db.String(255), nullable=False)
    business_type = db.Column(db.String(50), default="Retailer")
    discovery_source = db.Column(db.String(50), default="Other")
    discovery_date = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Location ---
    location = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    postal_code = db.Column(db.String(20), nullable=True)

    # --- Contact ---
    contact_info = db.Column(db.Text, nullable=True)  # raw JSON {"name", "email", "phone"}
    contact_name = db.Column(db.String(255), nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(50), nullable=True)
    social_media_links = db.Column(db.Text, nullable=True)

    # --- Scoring ---
    prospect_score = db.Column(db.Integer, nullable=True)  # 0-100, None until scored
    estimated_value = db.Column(db.Numeric(14, 2), nullable=True)
    ai_score = db.Column(db.Integer, nullable=True)
    discovery_metadata = db.Column(db.Text, nullable=True)  # raw JSON of the imported row

    status = db.Column(db.String(50), default="New", nullable=False, index=True)
    about = db.Column(db.Text, nullable=True)

    auto_assigned_to_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    converted_to_opportunity_id = db.Column(
        db.String(36),
        db.ForeignKey(
            "opportunities.id",
            use_alter=True,
            name="fk_prospects_converted_to_opportunity_id",
        ),
        nullable=True,
    )  # set when converted

    # Optimistic lock: bumped on every UPDATE, a stale write raises StaleDataError
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    # --- Relationships ---
    auto_assigned_to = db.relationship("User", foreign_keys=[auto_assigned_to_id])
    # NOT a back_populates of Opportunity.source_prospect, they use different FKs.
    converted_to_opportunity = db.relationship(
        "Opportunity",
        foreign_keys=[converted_to_opportunity_id],
        uselist=False,
    )

    def __repr__(self):
        return f"<Prospect {self.prospect_name} ({self.status})>"
