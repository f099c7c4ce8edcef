"""Entity lifecycle: status machine, qualification, assignment.

Prospects and merchant discoveries share the same pipeline mechanics and
differ only in table, field names, status list and scoring table. Each is
described by one EntityLifecycle instance (PROSPECT, MERCHANT) that the
handlers below take as their first argument.

Transitions are forward-only through ``model.STATUSES``. A status in
``model.NEGATIVE_STATUSES`` can be entered from any open stage. The last
positive status and every negative status are terminal.

Functions flush but do NOT commit - the caller commits.
"""

import logging
from datetime import datetime, timezone

import bleach

from beauty_crm.errors import Conflict, InvalidArgument, NotFound
from beauty_crm.extensions import db
from beauty_crm.models.audit import AuditEvent
from beauty_crm.models.merchant import MerchantDiscovery
from beauty_crm.models.prospect import Prospect
from beauty_crm.models.user import User
from beauty_crm.services.scoring import DEFAULT_SOURCE_BONUSES, calculate_score

logger = logging.getLogger(__name__)


class EntityLifecycle:
    """Per-entity-type configuration consumed by the shared handlers."""

    def __init__(self, model, kind, name_field, score_field, qualified_status,
                 phase_by_status, status_criticality, source_bonuses,
                 conversion_statuses=(), conversion_actions=""):
        self.model = model
        self.kind = kind  # "prospect" | "merchant", used in messages and audit actions
        self.name_field = name_field
        self.score_field = score_field
        self.qualified_status = qualified_status
        self.phase_by_status = phase_by_status
        self.status_criticality = status_criticality
        self.source_bonuses = source_bonuses
        # Statuses that only a conversion action may set
        self.conversion_statuses = tuple(conversion_statuses)
        self.conversion_actions = conversion_actions

    @property
    def statuses(self):
        return self.model.STATUSES

    @property
    def negative_statuses(self):
        return self.model.NEGATIVE_STATUSES

    @property
    def allowed_statuses(self):
        return list(self.model.STATUSES) + list(self.model.NEGATIVE_STATUSES)

    @property
    def initial_status(self):
        return self.model.STATUSES[0]

    @property
    def label(self):
        return self.kind.capitalize()

    def position(self, status):
        """Index in the ordered pipeline, -1 for negative or unknown statuses."""
        try:
            return self.statuses.index(status)
        except ValueError:
            return -1

    def is_terminal(self, status):
        return status == self.statuses[-1] or status in self.negative_statuses

    def name_of(self, entity):
        return getattr(entity, self.name_field)

    def score_of(self, entity):
        return getattr(entity, self.score_field)

    def compute_score(self, entity):
        return calculate_score(
            business_type=entity.business_type,
            discovery_source=entity.discovery_source,
            social_media_links=entity.social_media_links,
            city=entity.city,
            source_bonuses=self.source_bonuses,
        )

    def __repr__(self):
        return f"<EntityLifecycle {self.kind}>"


PROSPECT = EntityLifecycle(
    model=Prospect,
    kind="prospect",
    name_field="prospect_name",
    score_field="prospect_score",
    qualified_status="Qualified",
    phase_by_status={
        "New": 1,
        "Contacted": 1,
        "Qualified": 2,
        "Negotiating": 2,
        "In Review": 3,
        "Converted": 3,
    },
    status_criticality={
        "New": 2,
        "Contacted": 2,
        "Qualified": 3,
        "Negotiating": 2,
        "In Review": 3,
        "Converted": 3,
        "Lost": 1,
    },
    source_bonuses=DEFAULT_SOURCE_BONUSES,
    conversion_statuses=["Converted"],
    conversion_actions="convert or opportunity",
)

# Merchants are never produced by lead conversion, so that source earns
# only the unknown-source bonus.
MERCHANT = EntityLifecycle(
    model=MerchantDiscovery,
    kind="merchant",
    name_field="merchant_name",
    score_field="merchant_score",
    qualified_status="Qualified",
    phase_by_status={
        "Discovered": 1,
        "Qualified": 2,
        "Contacted": 2,
        "Onboarded": 3,
    },
    status_criticality={
        "Discovered": 2,
        "Qualified": 3,
        "Contacted": 2,
        "Onboarded": 3,
        "Rejected": 1,
    },
    source_bonuses={
        key: bonus
        for key, bonus in DEFAULT_SOURCE_BONUSES.items()
        if key != "Lead Conversion"
    },
)


# ─── Shared helpers ────────────────────────────────────────

def sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(str(text), tags=[], strip=True).strip()


def log_audit_event(action, actor_user_id=None, **metadata):
    """Add an AuditEvent to the session (flushed by the caller)."""
    audit = AuditEvent(
        actor_user_id=actor_user_id,
        action=action,
        metadata_=metadata,
    )
    db.session.add(audit)
    return audit


def get_entity(lifecycle, entity_id, for_update=False):
    """Load an entity by id or raise NotFound.

    ``for_update`` takes a row lock (SELECT ... FOR UPDATE) on databases that
    support it; SQLite ignores it.
    """
    entity = db.session.get(
        lifecycle.model, entity_id, with_for_update=True if for_update else None
    )
    if entity is None:
        raise NotFound(f"{lifecycle.label} {entity_id} not found")
    return entity


def check_transition(lifecycle, old_status, new_status):
    """Raise Conflict unless old_status -> new_status moves forward.

    Negative statuses may be entered from any non-terminal stage.
    """
    if lifecycle.is_terminal(old_status):
        raise Conflict(
            f"{lifecycle.label} is in terminal status '{old_status}' and cannot move to '{new_status}'"
        )
    if new_status in lifecycle.negative_statuses:
        return
    if lifecycle.position(new_status) < lifecycle.position(old_status):
        raise Conflict(
            f"Cannot move {lifecycle.kind} back from '{old_status}' to '{new_status}'. "
            f"Allowed: {', '.join(_forward_statuses(lifecycle, old_status))}"
        )


def _forward_statuses(lifecycle, current_status):
    start = lifecycle.position(current_status) + 1
    forward = [
        s for s in lifecycle.statuses[start:]
        if s not in lifecycle.conversion_statuses
    ]
    return forward + list(lifecycle.negative_statuses)


# ─── Actions ───────────────────────────────────────────────

def change_status(lifecycle, entity_id, new_status, actor_user_id=None):
    """Move an entity to a new pipeline status.

    Args:
        lifecycle: PROSPECT or MERCHANT.
        entity_id: Entity UUID string.
        new_status: Target status, must be in lifecycle.allowed_statuses.
        actor_user_id: User performing the change, if any.

    Returns:
        The updated entity.

    Raises:
        InvalidArgument: status not in the allow-list.
        NotFound: entity missing.
        Conflict: backwards move, terminal source status, or a status that
            only a conversion action may set.
    """
    allowed = lifecycle.allowed_statuses
    if new_status not in allowed:
        raise InvalidArgument(
            f"Invalid status: {new_status}. Valid values are: {', '.join(allowed)}"
        )

    entity = get_entity(lifecycle, entity_id, for_update=True)
    old_status = entity.status

    if old_status == new_status:
        return entity  # no-op

    check_transition(lifecycle, old_status, new_status)

    if new_status in lifecycle.conversion_statuses:
        raise Conflict(
            f"Status '{new_status}' is set by the {lifecycle.conversion_actions} action, "
            f"not by a status change"
        )

    entity.status = new_status
    entity.updated_at = datetime.now(timezone.utc)

    if new_status == lifecycle.qualified_status:
        setattr(entity, lifecycle.score_field, lifecycle.compute_score(entity))

    db.session.flush()

    log_audit_event(
        f"{lifecycle.kind}.status_changed",
        actor_user_id,
        entity_id=entity_id,
        old_status=old_status,
        new_status=new_status,
    )
    db.session.flush()

    logger.info(
        f"{lifecycle.label} {entity_id} status changed from {old_status} to {new_status}"
    )
    return entity


def qualify(lifecycle, entity_id, actor_user_id=None):
    """Mark an entity Qualified and store its freshly computed score.

    Returns:
        dict with keys ``status`` and ``score``.

    Raises:
        NotFound: entity missing.
        Conflict: already qualified, past qualification, or terminal.
    """
    entity = get_entity(lifecycle, entity_id, for_update=True)
    old_status = entity.status

    if old_status == lifecycle.qualified_status:
        raise Conflict(f"{lifecycle.label} is already qualified")
    check_transition(lifecycle, old_status, lifecycle.qualified_status)

    score = lifecycle.compute_score(entity)
    entity.status = lifecycle.qualified_status
    setattr(entity, lifecycle.score_field, score)
    entity.updated_at = datetime.now(timezone.utc)
    db.session.flush()

    log_audit_event(
        f"{lifecycle.kind}.qualified",
        actor_user_id,
        entity_id=entity_id,
        old_status=old_status,
        score=score,
    )
    db.session.flush()

    logger.info(f"{lifecycle.label} {entity_id} qualified with score {score}")
    return {"status": lifecycle.qualified_status, "score": score}


def assign_to_sales_rep(lifecycle, entity_id, sales_rep_id, actor_user_id=None):
    """Assign an entity to a sales rep.

    Returns:
        dict with key ``sales_rep_name``.

    Raises:
        NotFound: entity or sales rep missing.
    """
    entity = get_entity(lifecycle, entity_id)

    sales_rep = db.session.get(User, sales_rep_id) if sales_rep_id else None
    if sales_rep is None:
        raise NotFound(f"Sales rep {sales_rep_id} not found")

    old_assignee = entity.auto_assigned_to_id
    entity.auto_assigned_to_id = sales_rep.id
    entity.updated_at = datetime.now(timezone.utc)
    db.session.flush()

    log_audit_event(
        f"{lifecycle.kind}.assigned",
        actor_user_id,
        entity_id=entity_id,
        old_assignee=old_assignee,
        new_assignee=sales_rep.id,
    )
    db.session.flush()

    return {"sales_rep_name": sales_rep.full_name}
