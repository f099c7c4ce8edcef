"""Read-side display fields (phase, priority tier, follow-up hints).

Nothing here is persisted: every read recomputes the fields from the stored
row. decorate_prospect() / decorate_merchant() return JSON-ready dicts.

Placeholder values picked from the record id (follow-up age, pending items,
assignee name) are only produced when CRM_DEMO_MODE is on. With the flag
off those columns come from real data or stay empty.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

from flask import current_app

from beauty_crm.services.lifecycle import MERCHANT, PROSPECT

PHASE_CRITICALITY = {1: 2, 2: 2, 3: 3}

# (minimum score, tier) checked top-down
PRIORITY_TIERS = [
    (80, 5),
    (60, 4),
    (40, 3),
    (20, 2),
]

PRIORITY_CRITICALITY = {5: 1, 4: 2, 3: 2, 2: 3, 1: 3}
PRIORITY_COLORS = {
    5: "red",
    4: "orange",
    3: "yellow",
    2: "light green",
    1: "dark green",
}

DEMO_FOLLOW_UPS = [
    "4 hours ago",
    "2 days ago",
    "1 week ago",
    "3 days ago",
    "6 hours ago",
    "5 days ago",
    "2 weeks ago",
    "1 day ago",
    "8 hours ago",
    "4 days ago",
]

DEMO_PENDING_ITEMS = [
    "📄 2 Documents",
    "✉️ 1 Email",
    "📞 1 Call",
    "🛒 1 Order",
    "📄 1 Document, ✉️ 1 Email",
    "📞 2 Calls",
    "📄 1 Document, 🛒 1 Order",
    "✉️ 2 Emails",
    "📞 1 Call, ✉️ 1 Email",
    "📄 2 Documents, ✉️ 1 Email",
    "🛒 2 Orders",
    "📞 1 Call, 📄 1 Document",
    "No pending items",
    "✉️ 1 Email, 🛒 1 Order",
]

DEMO_REP_NAMES = [
    "Sarah Tan",
    "Kevin Tan",
    "Lisa Wong",
    "David Lee",
    "Amy Chen",
    "Michael Lim",
    "Jennifer Ng",
    "James Ho",
    "Rachel Yap",
    "Tommy Ong",
]

NO_PENDING_ITEMS = "No pending items"


def _demo_mode():
    return bool(current_app.config.get("CRM_DEMO_MODE"))


def id_hash(identifier):
    """Sum of character codes. Stable across processes, unlike hash()."""
    return sum(ord(ch) for ch in identifier or "")


def pick_demo_value(identifier, values):
    if not identifier:
        return values[0]
    return values[id_hash(identifier) % len(values)]


# ─── Phase / priority ──────────────────────────────────────

def map_status_to_phase(lifecycle, status, score=None, identifier=None, demo_mode=False):
    """Map a status to phase 1-3.

    Falls back to score buckets (>=85 -> 3, >=70 -> 2, else 1) for statuses
    without a phase, then to the id hash in demo mode, then to phase 1.
    """
    if status in lifecycle.phase_by_status:
        return lifecycle.phase_by_status[status]

    if score is not None:
        if score >= 85:
            return 3
        if score >= 70:
            return 2
        return 1

    if demo_mode and identifier:
        return id_hash(identifier) % 3 + 1

    return 1


def phase_criticality(phase):
    return PHASE_CRITICALITY.get(phase, 2)


def status_criticality(lifecycle, status):
    return lifecycle.status_criticality.get(status, 2)


def priority_tier(score):
    """Convert a 0-100 score to a 1-5 tier. Monotonic non-decreasing."""
    score = score or 0
    for minimum, tier in PRIORITY_TIERS:
        if score >= minimum:
            return tier
    return 1


def priority_criticality(tier):
    return PRIORITY_CRITICALITY.get(tier, 0)


# ─── Follow-up hints ───────────────────────────────────────

def time_ago(dt):
    """Human-readable age like '3 days ago'."""
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    seconds = (datetime.now(timezone.utc) - dt).total_seconds()
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return _plural(int(seconds // 60), "minute")
    if seconds < 86400:
        return _plural(int(seconds // 3600), "hour")
    if seconds < 14 * 86400:
        return _plural(int(seconds // 86400), "day")
    return _plural(int(seconds // (7 * 86400)), "week")


def _plural(n, unit):
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


def _assigned_to(entity, demo_mode):
    rep = entity.auto_assigned_to
    if rep is not None and rep.full_name:
        return rep.full_name
    if demo_mode:
        return pick_demo_value(entity.id, DEMO_REP_NAMES)
    return None


def _json_field(raw):
    """Parse a JSON text column, returning {} for empty or invalid content."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return {}
    return value if isinstance(value, dict) else {}


def _plain(value):
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "isoformat"):  # date / datetime
        return value.isoformat()
    return value


def _row_dict(entity):
    return {
        column.key: _plain(getattr(entity, column.key))
        for column in entity.__mapper__.column_attrs
    }


def _decorate(lifecycle, entity):
    demo_mode = _demo_mode()
    data = _row_dict(entity)
    score = lifecycle.score_of(entity)

    phase = map_status_to_phase(
        lifecycle, entity.status, score=score, identifier=entity.id, demo_mode=demo_mode
    )
    tier = priority_tier(score)

    data["status_criticality"] = status_criticality(lifecycle, entity.status)
    data["phase"] = phase
    data["phase_label"] = f"Phase {phase}"
    data["phase_criticality"] = phase_criticality(phase)
    data["priority_score"] = tier
    data["priority_score_criticality"] = priority_criticality(tier)
    data["priority_color"] = PRIORITY_COLORS[tier]
    data["assigned_to"] = _assigned_to(entity, demo_mode)

    if demo_mode:
        data["last_follow_up"] = pick_demo_value(entity.id, DEMO_FOLLOW_UPS)
        data["pending_items"] = pick_demo_value(entity.id, DEMO_PENDING_ITEMS)
    else:
        data["last_follow_up"] = time_ago(entity.updated_at)
        data["pending_items"] = NO_PENDING_ITEMS

    if not data.get("about") or not str(data["about"]).strip():
        data["about"] = "-"

    return data


def decorate_prospect(prospect):
    """Stored prospect fields plus display-only fields."""
    data = _decorate(PROSPECT, prospect)

    if prospect.contact_info and not prospect.contact_name:
        contact = _json_field(prospect.contact_info)
        data["contact_name"] = contact.get("name")
        data["contact_email"] = contact.get("email")
        data["contact_phone"] = contact.get("phone")

    metadata = _json_field(prospect.discovery_metadata)
    data["converted_from_lead_id"] = metadata.get("convertedFromLeadID")
    data["lead_quality"] = metadata.get("leadQuality")
    data["brand_to_pitch"] = metadata.get("brandToPitch")
    if data.get("estimated_value") is None:
        data["estimated_value"] = metadata.get("estimatedValue")

    return data


def decorate_merchant(merchant):
    """Stored merchant fields plus display-only fields."""
    return _decorate(MERCHANT, merchant)
