"""About-text synthesis for prospects and merchants.

Looks the entity up in a curated lookup file first (CRM_ABOUT_LOOKUP_PATH),
then falls back to a bullet summary built from the entity's own fields.

Lookup file format (";"-separated, first line is a header):

    ID;about
    1b9d6bcd-bbfd-4b2d-9b5d-ab8dfbbd4bed;First line of text
    continuation lines belong to the previous ID until the next ID line
"""

import logging
import os
import re
from datetime import datetime, timezone

from flask import current_app

from beauty_crm.extensions import db
from beauty_crm.services.lifecycle import get_entity, log_audit_event

logger = logging.getLogger(__name__)

ID_LINE_RE = re.compile(
    r"^([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12});"
)

STATUS_NOTES = {
    "prospect": {
        "New": "Awaiting qualification and assignment",
        "Contacted": "Initial contact made, follow-up required",
        "Qualified": "Ready for opportunity creation",
        "Negotiating": "Currently in negotiation phase",
        "In Review": "Under review for final approval",
        "Converted": "Successfully converted to opportunity",
        "Lost": "Closed without conversion",
    },
    "merchant": {
        "Discovered": "Awaiting qualification and assignment",
        "Qualified": "Ready for outreach and partnership discussion",
        "Contacted": "Initial contact made, follow-up required",
        "Onboarded": "Successfully onboarded as partner",
        "Rejected": "Not a fit for partnership",
    },
}

HIGH_POTENTIAL_LABELS = {
    "prospect": "High Potential - Priority Prospect",
    "merchant": "High Potential - Priority Account",
}

HIGH_VALUE_RECOMMENDATIONS = {
    "prospect": "High-value prospect - prioritize engagement and opportunity creation",
    "merchant": "High-value prospect - prioritize engagement and partnership discussions",
}

BUSINESS_FOCUS = {
    "Salon": "Professional beauty services and treatments",
    "Spa": "Professional beauty services and treatments",
    "Retailer": "Beauty product retail and distribution",
    "E-commerce": "Online beauty product sales",
}


def load_about_lookup(path):
    """Parse the lookup file into {id: about_text}.

    Returns an empty dict when the file is missing or unreadable.
    """
    if not path or not os.path.exists(path):
        return {}

    entries = {}
    current_id = None
    current_lines = []

    try:
        with open(path, encoding="utf-8") as fh:
            lines = fh.read().splitlines()
    except OSError as e:
        logger.error(f"About lookup file {path} could not be read: {e}")
        return {}

    for line in lines[1:]:  # skip header
        match = ID_LINE_RE.match(line)
        if match:
            if current_id and current_lines:
                entries[current_id] = "\n".join(current_lines)
            current_id = match.group(1)
            rest = line[match.end():]
            current_lines = [rest] if rest else []
        elif current_id and line.strip():
            current_lines.append(line)

    if current_id and current_lines:
        entries[current_id] = "\n".join(current_lines)

    return entries


def _score_label(kind, score):
    if score >= 80:
        return HIGH_POTENTIAL_LABELS[kind]
    if score >= 65:
        return "Good Potential - Follow Up Recommended"
    if score >= 50:
        return "Moderate Potential - Monitor Progress"
    return "Low Potential - Standard Follow Up"


def build_about_text(lifecycle, entity):
    """Bullet summary of an entity's own fields."""
    kind = lifecycle.kind
    score = lifecycle.score_of(entity) or 0
    notes = []

    if entity.business_type:
        notes.append(f"• Business Type: {entity.business_type}")
    if entity.location:
        notes.append(f"• Location: {entity.location}")
    if entity.city:
        notes.append(f"• City: {entity.city}")
    if entity.country:
        notes.append(f"• Country: {entity.country}")

    if score:
        notes.append(
            f"• {lifecycle.label} Score: {score}/100 ({_score_label(kind, score)})"
        )

    if entity.discovery_source:
        notes.append(f"• Discovery Source: {entity.discovery_source}")
    if entity.contact_info:
        notes.append(f"• Contact: {entity.contact_info}")
    if entity.social_media_links:
        notes.append(f"• Social Media: {entity.social_media_links}")

    if entity.status:
        status_note = f"• Current Status: {entity.status}"
        detail = STATUS_NOTES[kind].get(entity.status)
        if detail:
            status_note += f" - {detail}"
        notes.append(status_note)

    rep = entity.auto_assigned_to
    if rep is not None and rep.full_name:
        notes.append(f"• Assigned To: {rep.full_name}")

    focus = BUSINESS_FOCUS.get(entity.business_type)
    if focus:
        notes.append(f"• Business Focus: {focus}")

    if score >= 70:
        notes.append(f"• Recommendation: {HIGH_VALUE_RECOMMENDATIONS[kind]}")
    elif score >= 50:
        notes.append(
            "• Recommendation: Moderate value - standard outreach and relationship building"
        )

    if not notes:
        return (
            f"• {lifecycle.name_of(entity)} is a beauty and wellness business "
            f"with potential for partnership opportunities."
        )
    return "\n".join(notes)


def generate_about(lifecycle, entity_id, actor_user_id=None):
    """Fill an entity's ``about`` field and return the entity.

    Raises:
        NotFound: entity missing.
    """
    entity = get_entity(lifecycle, entity_id)

    lookup = load_about_lookup(current_app.config.get("CRM_ABOUT_LOOKUP_PATH"))
    about = lookup.get(entity.id)
    source = "lookup"
    if not about:
        about = build_about_text(lifecycle, entity)
        source = "generated"

    entity.about = about
    entity.updated_at = datetime.now(timezone.utc)
    db.session.flush()

    log_audit_event(
        f"{lifecycle.kind}.about_generated",
        actor_user_id,
        entity_id=entity_id,
        source=source,
    )
    db.session.flush()

    logger.info(f"{lifecycle.label} {entity_id} about text {source}")
    return entity
