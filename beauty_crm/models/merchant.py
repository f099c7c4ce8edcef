"""MerchantDiscovery model.

Merchants found by discovery ingestion (web scraping, partner feeds, field
visits) before they become Leads.
Pipeline: Discovered -> Qualified -> Contacted -> Onboarded
"Rejected" may be entered from any open stage.
"""

import uuid

from beauty_crm.extensions import db


class MerchantDiscovery(db.Model):
    __tablename__ = "merchant_discoveries"

    STATUSES = [
        "Discovered",
        "Qualified",
        "Contacted",
        "Onboarded",
    ]
    NEGATIVE_STATUSES = ["Rejected"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    merchant_name = db.Column(db.String(255), nullable=False)
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

    contact_info = db.Column(db.Text, nullable=True)  # free text, e.g. "Name: Mei, mei@x.my"
    social_media_links = db.Column(db.Text, nullable=True)

    merchant_score = db.Column(db.Integer, nullable=True)
    discovery_metadata = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(50), default="Discovered", nullable=False, index=True)
    about = db.Column(db.Text, nullable=True)

    auto_assigned_to_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    converted_to_lead_id = db.Column(
        db.String(36),
        db.ForeignKey(
            "leads.id",
            use_alter=True,
            name="fk_merchant_discoveries_converted_to_lead_id",
        ),
        nullable=True,
    )

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
    converted_to_lead = db.relationship(
        "Lead", foreign_keys=[converted_to_lead_id], uselist=False
    )

    def __repr__(self):
        return f"<MerchantDiscovery {self.merchant_name} ({self.status})>"
