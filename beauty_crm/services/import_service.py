"""Bulk import of prospects and merchant discoveries.

Accepts the JSON array produced by discovery ingestion (camelCase keys, as
sent by the Fiori frontend and the scrapers). Every row is scored, assigned
to a territory rep and inserted with the pipeline's initial status.

Rows without a name are skipped rather than failing the whole batch.

Functions flush but do NOT commit - the caller commits.
"""

import json
import logging
from datetime import datetime, timezone

from flask import current_app

from beauty_crm.errors import InvalidArgument
from beauty_crm.extensions import db
from beauty_crm.models.merchant import MerchantDiscovery
from beauty_crm.models.prospect import Prospect
from beauty_crm.services.assignment import pick_sales_rep
from beauty_crm.services.lifecycle import MERCHANT, PROSPECT, log_audit_event, sanitize
from beauty_crm.services.scoring import score_from_data

logger = logging.getLogger(__name__)

SCORED_KEYS = ("businessType", "discoverySource", "socialMediaLinks", "city")


def parse_payload(payload, field_name):
    """Decode a bulk payload into a list of dicts.

    Args:
        payload: JSON text or an already-decoded list.
        field_name: Name used in error messages ("prospects", "discoveries").

    Raises:
        InvalidArgument: missing, malformed JSON, not an array, or rows that
            are not objects.
    """
    if payload is None or payload == "":
        raise InvalidArgument(f"{field_name} parameter is required")

    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            raise InvalidArgument(f"Invalid JSON format for {field_name}")

    if not isinstance(payload, list):
        raise InvalidArgument(f"{field_name} must be an array")

    if any(not isinstance(row, dict) for row in payload):
        raise InvalidArgument(f"every entry in {field_name} must be an object")

    return payload


def _text(row, key, default=""):
    value = row.get(key)
    if value is None or value == "":
        return default
    return sanitize(value)


def _number(value, cast=float):
    """Coerce a numeric import field, None when absent or not a number."""
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        return None


def _location_fields(row):
    return {
        "location": _text(row, "location"),
        "address": _text(row, "address"),
        "city": _text(row, "city"),
        "state": _text(row, "state"),
        "country": _text(row, "country", current_app.config["CRM_DEFAULT_COUNTRY"]),
        "postal_code": _text(row, "postalCode"),
    }


def _parse_contact(contact_info):
    """Return (raw_text, {"name", "email", "phone"}) from a dict or JSON text."""
    if not contact_info:
        return json.dumps({}), {}
    if isinstance(contact_info, dict):
        return json.dumps(contact_info), contact_info
    try:
        parsed = json.loads(contact_info)
    except (TypeError, ValueError):
        return str(contact_info), {}
    return str(contact_info), parsed if isinstance(parsed, dict) else {}


def _build_prospect(row, score, rep):
    contact_raw, contact = _parse_contact(row.get("contactInfo"))
    return Prospect(
        prospect_name=_text(row, "prospectName"),
        discovery_source=_text(row, "discoverySource", "Other"),
        discovery_date=datetime.now(timezone.utc),
        business_type=_text(row, "businessType", "Retailer"),
        contact_info=contact_raw,
        contact_name=sanitize(contact.get("name")) or None,
        contact_email=sanitize(contact.get("email")) or None,
        contact_phone=sanitize(contact.get("phone")) or None,
        social_media_links=_text(row, "socialMediaLinks"),
        prospect_score=score,
        estimated_value=_number(row.get("estimatedValue")),
        ai_score=_number(row.get("aiScore"), int),
        auto_assigned_to_id=rep.id if rep else None,
        discovery_metadata=json.dumps(row),
        status=PROSPECT.initial_status,
        **_location_fields(row),
    )


def _build_merchant(row, score, rep):
    return MerchantDiscovery(
        merchant_name=_text(row, "merchantName"),
        discovery_source=_text(row, "discoverySource", "Other"),
        discovery_date=datetime.now(timezone.utc),
        business_type=_text(row, "businessType", "Retailer"),
        contact_info=_text(row, "contactInfo"),
        social_media_links=_text(row, "socialMediaLinks"),
        merchant_score=score,
        auto_assigned_to_id=rep.id if rep else None,
        discovery_metadata=json.dumps(row),
        status=MERCHANT.initial_status,
        **_location_fields(row),
    )


_BUILDERS = {
    "prospect": ("prospectName", _build_prospect),
    "merchant": ("merchantName", _build_merchant),
}


def bulk_import(lifecycle, payload, actor_user_id=None, keep_ids=False):
    """Insert a batch of prospects or merchants.

    Args:
        lifecycle: PROSPECT or MERCHANT.
        payload: JSON array text or list of row dicts.
        actor_user_id: User performing the import, if any.
        keep_ids: Use each row's "id" as the primary key when present
            (demo seeding with fixed ids).

    Returns:
        dict with keys ``count``, ``ids`` and ``skipped``.

    Raises:
        InvalidArgument: see parse_payload(). Nothing is inserted.
    """
    field_name = "prospects" if lifecycle is PROSPECT else "discoveries"
    rows = parse_payload(payload, field_name)
    name_key, build = _BUILDERS[lifecycle.kind]

    created = []
    skipped = 0
    for row in rows:
        if not _text(row, name_key):
            skipped += 1
            continue

        # score and assign from the same cleaned text that gets stored
        cleaned = {key: _text(row, key) for key in SCORED_KEYS}
        score = score_from_data(cleaned, source_bonuses=lifecycle.source_bonuses)
        rep = pick_sales_rep(cleaned["city"])
        entity = build(row, score, rep)
        if keep_ids and row.get("id"):
            entity.id = str(row["id"])
        db.session.add(entity)
        db.session.flush()
        created.append(entity.id)

    log_audit_event(
        f"{lifecycle.kind}.bulk_imported",
        actor_user_id,
        count=len(created),
        skipped=skipped,
    )
    db.session.flush()

    logger.info(
        f"Bulk import: {len(created)} {lifecycle.kind}(s) created, {skipped} skipped"
    )
    return {"count": len(created), "ids": created, "skipped": skipped}
