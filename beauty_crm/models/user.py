"""User model.

Sales reps and admins. Reps are picked for territory auto-assignment by
region, active flag and quota. Flask-Login integration via UserMixin.
"""

import uuid

from flask_login import UserMixin

from beauty_crm.extensions import db


class User(UserMixin, db.Model):
    __tablename__ = "users"

    ROLES = ["Sales Rep", "Sales Manager", "Admin"]
    REGIONS = ["Central", "North", "South"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255))
    role = db.Column(db.String(50), default="Sales Rep", nullable=False)
    region = db.Column(db.String(50), nullable=True)  # Central | North | South
    quota = db.Column(db.Numeric(14, 2), default=0)  # tie-break for auto-assignment
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    audit_events = db.relationship(
        "AuditEvent", back_populates="actor", lazy="dynamic"
    )

    def __repr__(self):
        return f"<User {self.email}>"
