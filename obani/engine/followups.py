"""
Follow-Up Categorizer
Buckets contacts by how overdue they are for a check-in, and collects the
open action items across logged interactions.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from obani.engine.filters import days_since
from obani.models import ActionItem, Contact, Interaction

logger = logging.getLogger(__name__)

URGENT_DAYS = 90
URGENT_GRACE_DAYS = 30


def follow_up_threshold(strength: Optional[int]) -> int:
    """Days of silence tolerated before a contact is due, by relationship strength."""
    s = strength or 0
    if s >= 5:
        return 45
    if s >= 4:
        return 60
    if s >= 3:
        return 75
    return 90


@dataclass
class FollowUp:
    contact: Contact
    days_since: int
    threshold: int


@dataclass
class FollowUpBuckets:
    urgent: List[FollowUp] = field(default_factory=list)
    due_soon: List[FollowUp] = field(default_factory=list)
    on_track: List[FollowUp] = field(default_factory=list)


def classify(days: int, threshold: int) -> str:
    """'urgent', 'due_soon' or 'on_track'."""
    # Both urgent conditions are kept even though they overlap for threshold=90
    if days >= URGENT_DAYS or days >= threshold + URGENT_GRACE_DAYS:
        return 'urgent'
    if days >= threshold:
        return 'due_soon'
    return 'on_track'


def categorize_follow_ups(contacts: List[Contact], now: Optional[datetime] = None) -> FollowUpBuckets:
    """
    Sort non-archived contacts into urgency buckets.
    Each bucket lists the most overdue contact first.
    """
    now = now or datetime.now(timezone.utc)
    buckets = FollowUpBuckets()

    for contact in contacts:
        if contact.is_archived:
            continue
        days = days_since(contact.last_contacted_at, now)
        threshold = follow_up_threshold(contact.relationship_strength)
        entry = FollowUp(contact=contact, days_since=days, threshold=threshold)
        getattr(buckets, classify(days, threshold)).append(entry)

    for bucket in (buckets.urgent, buckets.due_soon, buckets.on_track):
        bucket.sort(key=lambda f: f.days_since, reverse=True)

    logger.debug(
        f"categorize_follow_ups: urgent={len(buckets.urgent)} "
        f"due_soon={len(buckets.due_soon)} on_track={len(buckets.on_track)}"
    )
    return buckets


# =============================================================================
# PENDING ACTIONS
# =============================================================================

@dataclass
class PendingAction:
    item: ActionItem
    contact_id: str
    contact_name: str
    interaction_id: Optional[str] = None


def pending_actions(interactions: List[Interaction],
                    contacts: Optional[List[Contact]] = None) -> List[PendingAction]:
    """
    Every incomplete action item, soonest due date first.
    Items without a due date follow, in the order they were found.
    """
    names: Dict[str, str] = {c.id: c.display_name for c in contacts or [] if c.id}

    found: List[PendingAction] = []
    for interaction in interactions:
        name = names.get(interaction.contact_id)
        if not name and interaction.contact is not None:
            name = interaction.contact.display_name
        for item in interaction.action_items or []:
            if item.completed:
                continue
            found.append(PendingAction(
                item=item,
                contact_id=interaction.contact_id,
                contact_name=name or 'Unknown',
                interaction_id=interaction.id,
            ))

    dated = sorted((p for p in found if p.item.due_date is not None), key=lambda p: p.item.due_date)
    undated = [p for p in found if p.item.due_date is None]
    return dated + undated
