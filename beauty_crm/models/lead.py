"""Lead model.

Created when a MerchantDiscovery is handed over to sales.
"""

import uuid

from beauty_crm.extensions import db


class Lead(db.Model):
    __tablename__ = "leads"

    QUALITIES = ["Hot", "Warm", "Medium", "Cold"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    outlet_name = db.Column(db.String(255), nullable=False)
    brand_to_pitch = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(50), default="New", nullable=False)
    platform = db.Column(db.String(50), nullable=True)

    contact_name = db.Column(db.String(255), nullable=True)
    contact_email = db.Column(db.String(255), nullable=True)
    contact_phone = db.Column(db.String(50), nullable=True)

    address = db.Column(db.String(500), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    postal_code = db.Column(db.String(20), nullable=True)

    source = db.Column(db.String(50), nullable=True)
    source_detail = db.Column(db.String(255), nullable=True)
    lead_quality = db.Column(db.String(20), nullable=True)  # Hot | Warm | Medium | Cold
    estimated_value = db.Column(db.Numeric(14, 2), nullable=True)
    assigned_to_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    discovery_source = db.Column(db.String(50), nullable=True)
    auto_discovered = db.Column(db.Boolean, default=False)
    merchant_discovery_id = db.Column(
        db.String(36), db.ForeignKey("merchant_discoveries.id"), nullable=True
    )
    ai_score = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])
    merchant_discovery = db.relationship(
        "MerchantDiscovery", foreign_keys=[merchant_discovery_id]
    )

    def __repr__(self):
        return f"<Lead {self.outlet_name} ({self.status})>"
