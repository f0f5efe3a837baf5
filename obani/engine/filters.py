"""
Contact Filter & Sort Engine
Pure functions over an in-memory contact list. No network, no storage.

Filter state is an immutable FilterConfig snapshot; every transition returns
the next snapshot instead of mutating the current one.
"""

import logging
import math
import unicodedata
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional

from obani.models import Contact, FilterPreset

logger = logging.getLogger(__name__)

NEVER_CONTACTED_DAYS = 999
SECONDS_PER_DAY = 86400

LAST_CONTACT_BUCKETS = ('', '30', '60', '90', '90+')
SORT_CHOICES = ('name', 'recent', 'strength')

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class FilterConfig:
    """Current contact-list filters. Empty/zero values mean 'no filter'."""
    query: str = ''
    min_strength: int = 0
    sector: str = ''
    last_contact: str = ''

    def __post_init__(self):
        if self.last_contact not in LAST_CONTACT_BUCKETS:
            raise ValueError(
                f"Invalid last-contact bucket {self.last_contact!r}. "
                f"Choose from: {', '.join(repr(b) for b in LAST_CONTACT_BUCKETS)}"
            )


# =============================================================================
# STATE TRANSITIONS
# =============================================================================

def with_query(cfg: FilterConfig, query: str) -> FilterConfig:
    return replace(cfg, query=query)


def with_min_strength(cfg: FilterConfig, min_strength: int) -> FilterConfig:
    return replace(cfg, min_strength=min_strength)


def with_sector(cfg: FilterConfig, sector: str) -> FilterConfig:
    return replace(cfg, sector=sector)


def with_last_contact(cfg: FilterConfig, bucket: str) -> FilterConfig:
    return replace(cfg, last_contact=bucket)


def clear_filters(cfg: FilterConfig) -> FilterConfig:
    """Reset the three structured filters; the search text stays."""
    return replace(cfg, min_strength=0, sector='', last_contact='')


def apply_preset(cfg: FilterConfig, preset: FilterPreset) -> FilterConfig:
    """Overwrite the structured filters from a preset. Search text is untouched."""
    return replace(
        cfg,
        min_strength=preset.min_strength,
        sector=preset.sector,
        last_contact=preset.last_contact,
    )


def active_filter_count(cfg: FilterConfig) -> int:
    """How many structured filters are on (search text not counted)."""
    return sum(1 for active in (cfg.min_strength > 0, cfg.sector, cfg.last_contact) if active)


# =============================================================================
# PREDICATES
# =============================================================================

def days_since(moment: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Whole days elapsed since `moment`; NEVER_CONTACTED_DAYS when missing."""
    if moment is None:
        return NEVER_CONTACTED_DAYS
    now = now or datetime.now(timezone.utc)
    return math.floor((now - moment).total_seconds() / SECONDS_PER_DAY)


def matches_query(contact: Contact, query: str) -> bool:
    if not query:
        return True
    q = query.lower()
    fields = [contact.first_name, contact.last_name, contact.email, contact.company, contact.notes]
    if any(f and q in f.lower() for f in fields):
        return True
    return any(q in tag.lower() for tag in contact.tags or [])


def matches_strength(contact: Contact, min_strength: int) -> bool:
    if min_strength <= 0:
        return True
    return (contact.relationship_strength or 0) >= min_strength


def matches_sector(contact: Contact, sector: str) -> bool:
    if not sector:
        return True
    return sector in (contact.sectors or [])


def matches_last_contact(contact: Contact, bucket: str, now: Optional[datetime] = None) -> bool:
    """
    '30'/'60'/'90' keep contacts reached within N days (inclusive);
    '90+' keeps those silent for more than 90 days. The two 90 buckets
    partition every contact.
    """
    if not bucket:
        return True
    days = days_since(contact.last_contacted_at, now)
    if bucket == '90+':
        return days > 90
    return days <= int(bucket)


def filter_contacts(contacts: List[Contact], cfg: FilterConfig,
                    now: Optional[datetime] = None) -> List[Contact]:
    """Contacts satisfying every active filter, in input order."""
    now = now or datetime.now(timezone.utc)
    result = [
        c for c in contacts
        if matches_query(c, cfg.query)
        and matches_strength(c, cfg.min_strength)
        and matches_sector(c, cfg.sector)
        and matches_last_contact(c, cfg.last_contact, now)
    ]
    logger.debug(f"filter_contacts: {len(result)}/{len(contacts)} kept ({cfg})")
    return result


# =============================================================================
# SORTING
# =============================================================================

def _collation_key(text: str) -> str:
    """Accent- and case-insensitive key so 'élodie' sorts with 'Elodie'."""
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def sort_contacts(contacts: List[Contact], sort_by: str = 'name') -> List[Contact]:
    """
    Stable sort.
      name     : "first last", collated
      recent   : updated_at, newest first (missing last)
      strength : relationship strength, highest first (missing = 0)
    """
    if sort_by == 'recent':
        return sorted(contacts, key=lambda c: c.updated_at or _EPOCH, reverse=True)
    if sort_by == 'strength':
        return sorted(contacts, key=lambda c: c.relationship_strength or 0, reverse=True)
    if sort_by == 'name':
        return sorted(contacts, key=lambda c: _collation_key(c.display_name))
    raise ValueError(f"Unknown sort '{sort_by}'. Choose from: {', '.join(SORT_CHOICES)}")


def all_sectors(contacts: List[Contact]) -> List[str]:
    """Sorted unique sectors across the list (the sector filter's choices)."""
    return sorted({s for c in contacts for s in c.sectors or []})
