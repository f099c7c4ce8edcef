"""Merchant discovery service - hand-over of a merchant to sales as a Lead.

Functions flush but do NOT commit - the caller commits.
"""

import json
import logging
import re
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from beauty_crm.errors import Conflict, Internal
from beauty_crm.extensions import db
from beauty_crm.models.lead import Lead
from beauty_crm.services.lifecycle import MERCHANT, get_entity, log_audit_event

logger = logging.getLogger(__name__)

CONVERTIBLE_STATUSES = ("Qualified", "Contacted")
STATUS_AFTER_CONVERSION = "Contacted"

# (minimum score, quality) checked top-down
LEAD_QUALITY_TIERS = [
    (80, "Hot"),
    (65, "Warm"),
    (50, "Medium"),
]

PLATFORM_BY_SOURCE = {
    "Instagram": "Instagram",
    "TikTok": "TikTok",
    "Facebook": "Facebook",
    "Shopee": "Web",
    "Lazada": "Web",
}

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
NAME_RE = re.compile(r"(?:Name|Contact):\s*([^,\n]+)", re.IGNORECASE)
PHONE_RE = re.compile(r"\+?\d[\d\s-]{8,}")


def lead_quality(score):
    score = score or 0
    for minimum, quality in LEAD_QUALITY_TIERS:
        if score >= minimum:
            return quality
    return "Cold"


def map_source_to_platform(source):
    return PLATFORM_BY_SOURCE.get(source, "Other")


def extract_contact(contact_info):
    """Pull (name, email, phone) out of free-text contact info.

    JSON objects with name/email/phone keys are accepted too.
    """
    if not contact_info:
        return None, None, None

    try:
        parsed = json.loads(contact_info)
    except (TypeError, ValueError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed.get("name"), parsed.get("email"), parsed.get("phone")

    email = EMAIL_RE.search(contact_info)
    name = NAME_RE.search(contact_info)
    phone = PHONE_RE.search(contact_info)
    return (
        name.group(1).strip() if name else None,
        email.group(0) if email else None,
        phone.group(0).strip() if phone else None,
    )


def convert_to_lead(merchant_id, actor_user_id=None):
    """Create a Lead from a merchant and move the merchant to Contacted.

    Returns:
        dict with key ``lead_id``.

    Raises:
        NotFound: merchant missing.
        Conflict: already converted, or not Qualified/Contacted.
        Internal: database failure (nothing is kept).
    """
    merchant = get_entity(MERCHANT, merchant_id, for_update=True)

    if merchant.converted_to_lead_id:
        raise Conflict("This merchant has already been converted to a lead")
    if merchant.status not in CONVERTIBLE_STATUSES:
        raise Conflict(
            f"Merchant must be {' or '.join(CONVERTIBLE_STATUSES)} to convert to a lead "
            f"(current status: {merchant.status})"
        )

    score = merchant.merchant_score or 0
    contact_name, contact_email, contact_phone = extract_contact(merchant.contact_info)
    source = merchant.discovery_source or "Other"

    lead = Lead(
        id=str(uuid.uuid4()),
        outlet_name=merchant.merchant_name,
        brand_to_pitch="TBD",
        status="New",
        platform=map_source_to_platform(source),
        contact_name=contact_name,
        contact_email=contact_email,
        contact_phone=contact_phone,
        address=merchant.address or merchant.location,
        city=merchant.city,
        state=merchant.state,
        country=merchant.country,
        postal_code=merchant.postal_code,
        source="Import",
        source_detail=f"Auto-discovered from {source}",
        lead_quality=lead_quality(score),
        estimated_value=score * 1000,
        assigned_to_id=merchant.auto_assigned_to_id,
        discovery_source=source,
        auto_discovered=True,
        merchant_discovery_id=merchant.id,
        ai_score=score,
        notes=(
            f"Converted from Merchant Discovery. Original source: {source}. "
            f"Location: {merchant.location or merchant.city or '-'}"
        ),
    )

    old_status = merchant.status
    try:
        db.session.add(lead)
        db.session.flush()
        merchant.converted_to_lead_id = lead.id
        merchant.status = STATUS_AFTER_CONVERSION
        merchant.updated_at = datetime.now(timezone.utc)
        db.session.flush()
    except StaleDataError as e:
        db.session.rollback()
        logger.warning(f"Lead conversion for merchant {merchant_id} lost a concurrent update")
        raise Conflict("This merchant was modified by another request; reload and retry") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Lead conversion failed for merchant {merchant_id}: {e}")
        raise Internal(f"Conversion failed: {e}") from e

    log_audit_event(
        "merchant.converted_to_lead",
        actor_user_id,
        entity_id=merchant_id,
        lead_id=lead.id,
        old_status=old_status,
    )
    db.session.flush()

    logger.info(f"Merchant {merchant_id} converted to lead {lead.id}")
    return {"lead_id": lead.id}
