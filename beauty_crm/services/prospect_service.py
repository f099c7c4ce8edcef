"""Prospect service - opportunity creation, conversion, meeting scripts.

Conversion turns one Prospect into an Account + primary Contact +
Opportunity and marks the prospect Converted. It is all-or-nothing: any
database error rolls the whole session back, so callers must not have
unrelated pending work in the session when they call it.

Concurrent conversions of the same prospect are serialized by the row lock
taken when the prospect is loaded and by Prospect.version_id; the loser gets
a Conflict.

Functions flush but do NOT commit - the caller commits.
"""

import json
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from beauty_crm.errors import Conflict, Internal, InvalidArgument, NotFound
from beauty_crm.extensions import db
from beauty_crm.models.account import Account, Contact
from beauty_crm.models.opportunity import Opportunity
from beauty_crm.models.user import User
from beauty_crm.services.lifecycle import PROSPECT, get_entity, log_audit_event, sanitize

logger = logging.getLogger(__name__)

CONVERTED = "Converted"

ACCOUNT_TYPE_BY_BUSINESS_TYPE = {
    "Salon": "Salon",
    "Spa": "Spa",
    "Retailer": "Retailer",
    "E-commerce": "E-commerce",
    "Kiosk": "Retailer",
    "Distributor": "Distributor",
}
DEFAULT_ACCOUNT_TYPE = "Retailer"
DEFAULT_INDUSTRY = "Beauty & Wellness"


# ─── Helpers ───────────────────────────────────────────────

def map_business_type_to_account_type(business_type):
    return ACCOUNT_TYPE_BY_BUSINESS_TYPE.get(business_type, DEFAULT_ACCOUNT_TYPE)


def parse_contact_name(first_name=None, last_name=None, full_name=None):
    """Split a contact name into (first, last).

    Explicit first/last values win. Otherwise the first whitespace token of
    ``full_name`` is the first name and the rest the last name.

    >>> parse_contact_name(full_name="Ahmad Bin Ali")
    ('Ahmad', 'Bin Ali')
    """
    if first_name or last_name:
        return first_name or "", last_name or ""

    parts = (full_name or "").split()
    if len(parts) >= 2:
        return parts[0], " ".join(parts[1:])
    if len(parts) == 1:
        return parts[0], ""
    return "Contact", ""


def expected_close_date(today=None):
    today = today or date.today()
    return today + timedelta(days=current_app.config["CRM_CLOSE_DATE_DAYS"])


def _first(*values):
    """First value that is not None (0 and "" count as given)."""
    for value in values:
        if value is not None:
            return value
    return None


def _text_override(overrides, key):
    value = overrides.get(key)
    if value is None:
        return None
    return sanitize(value) or None


def _probability(value):
    if value is None:
        return None
    try:
        probability = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"probability must be an integer, got {value!r}")
    if not 0 <= probability <= 100:
        raise InvalidArgument(f"probability must be between 0 and 100, got {probability}")
    return probability


def _amount(value, field):
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidArgument(f"{field} must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidArgument(f"{field} must be a finite number, got {value!r}")
    if amount < 0:
        raise InvalidArgument(f"{field} cannot be negative")
    return amount


def _close_date(value):
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise InvalidArgument(f"close date must be an ISO date (YYYY-MM-DD), got {value!r}")


def _stage(value):
    if value is None:
        return None
    if value not in Opportunity.STAGES:
        raise InvalidArgument(
            f"Invalid stage: {value}. Valid values are: {', '.join(Opportunity.STAGES)}"
        )
    return value


def _contact_details(prospect):
    """(name, email, phone) from the columns, else from the contact_info JSON."""
    name, email, phone = prospect.contact_name, prospect.contact_email, prospect.contact_phone
    if not name and prospect.contact_info:
        try:
            info = json.loads(prospect.contact_info)
        except (TypeError, ValueError):
            info = {}
        if isinstance(info, dict):
            name = info.get("name")
            email = email or info.get("email")
            phone = phone or info.get("phone")
    return name, email, phone


def _load_convertible(prospect_id):
    """Load a prospect under a row lock and make sure it can still convert."""
    prospect = get_entity(PROSPECT, prospect_id, for_update=True)

    if prospect.status == CONVERTED or prospect.converted_to_opportunity_id:
        raise Conflict("This prospect has already been converted")
    if PROSPECT.is_terminal(prospect.status):
        raise Conflict(f"This prospect is closed as '{prospect.status}' and cannot be converted")
    return prospect


def _persist(record):
    db.session.add(record)
    db.session.flush()


def _mark_converted(prospect, opportunity_id):
    prospect.status = CONVERTED
    prospect.converted_to_opportunity_id = opportunity_id
    prospect.updated_at = datetime.now(timezone.utc)
    db.session.flush()


def _fail(prospect_id, action, error):
    """Roll back a half-applied conversion and translate the error."""
    db.session.rollback()
    if isinstance(error, StaleDataError):
        logger.warning(f"{action} for prospect {prospect_id} lost a concurrent update")
        return Conflict("This prospect was modified by another request; reload and retry")
    logger.error(f"{action} failed for prospect {prospect_id}: {error}")
    return Internal(f"Conversion failed: {error}")


# ─── Actions ───────────────────────────────────────────────

def create_opportunity(prospect_id, overrides=None, actor_user_id=None):
    """Create an Opportunity from a prospect and mark the prospect Converted.

    Args:
        prospect_id: Prospect UUID string.
        overrides: Optional dict with any of name, description, stage,
            probability, amount, expected_revenue, close_date, owner_id,
            competitors, win_strategy, notes.
        actor_user_id: User performing the action.

    Returns:
        dict with key ``opportunity_id``.

    Raises:
        NotFound: prospect or owner missing.
        Conflict: prospect already converted or closed.
        InvalidArgument: bad probability / amount / date / stage.
        Internal: database failure (nothing is kept).
    """
    overrides = overrides or {}
    prospect = _load_convertible(prospect_id)

    # --- Validate everything before touching the session ---
    stage = _stage(overrides.get("stage"))
    probability = _probability(overrides.get("probability"))
    amount = _amount(overrides.get("amount"), "amount")
    expected_revenue = _amount(overrides.get("expected_revenue"), "expected_revenue")
    close_date = _close_date(overrides.get("close_date"))

    owner_id = overrides.get("owner_id") or prospect.auto_assigned_to_id
    if overrides.get("owner_id") and db.session.get(User, owner_id) is None:
        raise NotFound(f"Owner {owner_id} not found")

    name = prospect.prospect_name
    opportunity = Opportunity(
        id=str(uuid.uuid4()),
        name=_text_override(overrides, "name") or f"{name} - Opportunity",
        description=(
            _text_override(overrides, "description")
            or f"Opportunity created from prospect: {name}"
        ),
        source_prospect_id=prospect.id,
        stage=stage or "Prospecting",
        probability=_first(probability, prospect.prospect_score, 50),
        amount=_first(amount, prospect.estimated_value, 0),
        expected_revenue=_first(expected_revenue, prospect.estimated_value, 0),
        currency=current_app.config["CRM_DEFAULT_CURRENCY"],
        close_date=close_date or expected_close_date(),
        owner_id=owner_id,
        competitors=_text_override(overrides, "competitors"),
        win_strategy=_text_override(overrides, "win_strategy"),
        notes=_text_override(overrides, "notes"),
        ai_win_score=prospect.ai_score,
    )

    try:
        _persist(opportunity)
        _mark_converted(prospect, opportunity.id)
    except SQLAlchemyError as e:
        raise _fail(prospect_id, "Create opportunity", e) from e

    log_audit_event(
        "prospect.opportunity_created",
        actor_user_id,
        entity_id=prospect_id,
        opportunity_id=opportunity.id,
    )
    db.session.flush()

    logger.info(f"Prospect {prospect_id} converted to opportunity {opportunity.id}")
    return {"opportunity_id": opportunity.id}


def convert_to_account(prospect_id, overrides=None, actor_user_id=None):
    """Convert a prospect into Account, primary Contact and Opportunity.

    Args:
        prospect_id: Prospect UUID string.
        overrides: Optional dict. Account: account_name, account_type,
            industry, website, address, city, state, country, postal_code.
            Contact: contact_first_name, contact_last_name, contact_title,
            contact_email, contact_phone. Opportunity: opportunity_name,
            opportunity_description, opportunity_stage,
            opportunity_probability, opportunity_amount,
            opportunity_close_date.
        actor_user_id: User performing the conversion.

    Returns:
        dict with keys ``account_id``, ``contact_id``, ``opportunity_id``.

    Raises:
        NotFound: prospect missing.
        Conflict: already converted, closed, or converted concurrently.
        InvalidArgument: bad probability / amount / date / stage.
        Internal: database failure. The session is rolled back, so no
            Account, Contact or Opportunity row survives.
    """
    overrides = overrides or {}
    prospect = _load_convertible(prospect_id)

    stage = _stage(overrides.get("opportunity_stage"))
    probability = _probability(overrides.get("opportunity_probability"))
    amount = _amount(overrides.get("opportunity_amount"), "opportunity_amount")
    close_date = _close_date(overrides.get("opportunity_close_date"))

    account_id = str(uuid.uuid4())
    contact_id = str(uuid.uuid4())
    opportunity_id = str(uuid.uuid4())

    name = prospect.prospect_name
    score = prospect.prospect_score
    default_country = current_app.config["CRM_DEFAULT_COUNTRY"]

    account = Account(
        id=account_id,
        account_name=_text_override(overrides, "account_name") or name,
        account_type=map_business_type_to_account_type(
            overrides.get("account_type") or prospect.business_type
        ),
        industry=_text_override(overrides, "industry") or DEFAULT_INDUSTRY,
        website=_text_override(overrides, "website") or "",
        status="Active",
        address=_text_override(overrides, "address") or prospect.address or "",
        city=_text_override(overrides, "city") or prospect.city or "",
        state=_text_override(overrides, "state") or prospect.state or "",
        country=_text_override(overrides, "country") or prospect.country or default_country,
        postal_code=_text_override(overrides, "postal_code") or prospect.postal_code or "",
        source_prospect_id=prospect.id,
        health_score=score or 70,
        risk_level="Low",
        date_created=date.today(),
        description=f"Account created from prospect: {name}",
        notes=prospect.about or "",
    )

    contact_name, contact_email, contact_phone = _contact_details(prospect)
    override_first = _text_override(overrides, "contact_first_name")
    override_last = _text_override(overrides, "contact_last_name")
    first_name, last_name = parse_contact_name(override_first, override_last, contact_name)
    if override_first and override_last:
        full_name = f"{override_first} {override_last}"
    else:
        full_name = contact_name or f"{first_name} {last_name}".strip()

    contact = Contact(
        id=contact_id,
        first_name=first_name,
        last_name=last_name,
        full_name=full_name,
        title=_text_override(overrides, "contact_title") or "Business Owner",
        email=_text_override(overrides, "contact_email") or contact_email or "",
        phone=_text_override(overrides, "contact_phone") or contact_phone or "",
        account_id=account_id,
        is_primary=True,
        status="Active",
        preferred_channel="Email",
        language="English",
        engagement_score=score or 50,
    )

    opportunity = Opportunity(
        id=opportunity_id,
        name=_text_override(overrides, "opportunity_name") or f"{name} - Partnership Deal",
        description=(
            _text_override(overrides, "opportunity_description")
            or f"Opportunity created from prospect conversion: {name}"
        ),
        account_id=account_id,
        primary_contact_id=contact_id,
        source_prospect_id=prospect.id,
        stage=stage or "Prospecting",
        probability=_first(probability, score, 50),
        amount=_first(amount, prospect.estimated_value, 0),
        expected_revenue=_first(amount, prospect.estimated_value, 0),
        currency=current_app.config["CRM_DEFAULT_CURRENCY"],
        close_date=close_date or expected_close_date(),
        owner_id=prospect.auto_assigned_to_id,
        ai_win_score=prospect.ai_score or score or 50,
        ai_recommendation=(
            f"Based on prospect score of {score or 50}%, "
            f"this opportunity shows good potential."
        ),
    )

    try:
        _persist(account)
        _persist(contact)
        _persist(opportunity)
        _mark_converted(prospect, opportunity_id)
    except SQLAlchemyError as e:
        raise _fail(prospect_id, "Convert to account", e) from e

    log_audit_event(
        "prospect.converted",
        actor_user_id,
        entity_id=prospect_id,
        account_id=account_id,
        contact_id=contact_id,
        opportunity_id=opportunity_id,
    )
    db.session.flush()

    logger.info(
        f"Prospect {prospect_id} converted: account={account_id} "
        f"contact={contact_id} opportunity={opportunity_id}"
    )
    return {
        "account_id": account_id,
        "contact_id": contact_id,
        "opportunity_id": opportunity_id,
    }


# ─── Meeting script ────────────────────────────────────────

TALKING_POINTS = {
    ("Salon", "Spa"): [
        "Discuss professional-grade products for treatments",
        "Highlight training and certification programs available",
        "Present exclusive salon/spa pricing tiers",
        "Mention marketing support for service promotions",
    ],
    ("Retailer", "E-commerce"): [
        "Present retail margin opportunities",
        "Discuss shelf presence and POP display options",
        "Highlight consumer marketing campaigns",
        "Explain dropship or consignment options if applicable",
    ],
    ("Distributor",): [
        "Present territory exclusivity options",
        "Discuss volume-based pricing tiers",
        "Explain logistics and fulfillment support",
        "Highlight B2B marketing materials available",
    ],
}
DEFAULT_TALKING_POINTS = [
    "Present product portfolio overview",
    "Discuss partnership benefits and pricing",
    "Highlight support and marketing materials",
    "Explain ordering and fulfillment process",
]

DISCOVERY_QUESTIONS = [
    "What beauty brands are you currently carrying?",
    "What challenges are you facing with your current suppliers?",
    "What are your customers asking for that you can't provide?",
    "What's your typical order volume and frequency?",
    "How do you prefer to receive marketing support?",
]

AGENDA = [
    "Introduction & Rapport Building (5 mins)",
    "Understanding Their Business Needs (10 mins)",
    "Product Presentation (15 mins)",
    "Addressing Concerns & Questions (10 mins)",
    "Next Steps & Close (5 mins)",
]


def _talking_points(business_type):
    for types, points in TALKING_POINTS.items():
        if business_type in types:
            return points
    return DEFAULT_TALKING_POINTS


def _section(title):
    return [title, "─" * 30]


def build_meeting_script(prospect):
    """Render a sales meeting script for a prospect as plain text."""
    name = prospect.prospect_name or "the prospect"
    business_type = prospect.business_type or "business"
    source = prospect.discovery_source or "referral"
    location = prospect.city or prospect.location or "the area"
    score = prospect.prospect_score if prospect.prospect_score is not None else 50
    contact_name, contact_email, _ = _contact_details(prospect)

    lines = [f"📋 AI MEETING SCRIPT FOR: {name.upper()}", "━" * 50, ""]

    lines += _section("🎯 PRE-MEETING PREPARATION")
    lines += [
        f"• Research {name}'s current product lineup",
        "• Review their social media presence and recent posts",
        f"• Prepare product samples relevant to {business_type} operations",
        "• Check competitor products they may be carrying",
        "",
    ]

    lines += _section("📅 SUGGESTED MEETING AGENDA (45 mins)")
    lines += [f"{i}. {item}" for i, item in enumerate(AGENDA, start=1)]
    lines.append("")

    lines += _section("💬 OPENING SCRIPT")
    greeting = f"Good [morning/afternoon], {contact_name}!" if contact_name else "Good [morning/afternoon]!"
    lines.append(f"\"{greeting} Thank you for taking the time to meet with me today.")
    lines.append(f"I understand {name} is a {business_type} in {location}.")
    if source == "Lead Conversion":
        lines.append("I've been looking forward to this meeting since we first connected through our lead program.\"")
    elif source == "Partnership":
        lines.append("Our mutual partner spoke highly of your business, and I'm excited to explore how we can work together.\"")
    else:
        lines.append("I've heard great things about your business and I'm excited to explore how we can work together.\"")
    lines.append("")

    lines += _section("🔑 KEY TALKING POINTS")
    lines += [f"• {point}" for point in _talking_points(prospect.business_type)]
    lines.append("")

    lines += _section("❓ DISCOVERY QUESTIONS TO ASK")
    lines += [f"• \"{question}\"" for question in DISCOVERY_QUESTIONS]
    lines.append("")

    lines += _section("✅ CLOSING SCRIPT")
    lines.append(f"\"Based on what we've discussed today, I believe our partnership could really benefit {name}.")
    if score >= 70:
        lines.append("Given your business profile, I'd like to offer you our Premium Partner package.")
        lines.append("Can we schedule a follow-up meeting to finalize the partnership details?\"")
    elif score >= 50:
        lines.append("I think our Standard Partnership program would be a great fit to start.")
        lines.append("Would you like me to prepare a proposal for your review?\"")
    else:
        lines.append("Let me put together some information and samples for you to review.")
        lines.append("Can I follow up with you next week to discuss further?\"")
    lines.append("")

    lines += _section("📌 POST-MEETING FOLLOW-UP")
    lines += [
        "• Send thank you email within 24 hours",
        "• Prepare and send proposal/quote within 3 business days",
        "• Schedule follow-up call for next week",
        "• Update CRM with meeting notes and next steps",
    ]
    if contact_email:
        lines.append(f"• Primary contact for follow-up: {contact_email}")

    return "\n".join(lines)


def generate_meeting_script(prospect_id):
    """Return the meeting script text for a prospect.

    Raises:
        NotFound: prospect missing.
    """
    prospect = get_entity(PROSPECT, prospect_id)
    return build_meeting_script(prospect)
