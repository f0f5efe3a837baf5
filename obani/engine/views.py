"""
View helpers for the interaction, introduction and contact screens.
Grouping and formatting only; nothing here fetches or mutates data.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from obani.models import Contact, Interaction, Introduction

DEFAULT_MATCH_SCORE = 85
MAX_STARS = 5

INTERACTION_ICONS = {
    'MEETING': '☕',
    'CALL': '📞',
    'EMAIL': '✉️',
    'MESSAGE': '💬',
    'SOCIAL': '🌐',
    'EVENT': '🎟',
    'OTHER': '📝',
}

OWNER_ICONS = {'me': '👤', 'them': '👥', 'both': '🤝'}


def strength_stars(strength: Optional[int]) -> str:
    """Five-slot star indicator. Out-of-range strengths are clamped."""
    filled = max(0, min(MAX_STARS, int(strength or 0)))
    return '★' * filled + '☆' * (MAX_STARS - filled)


def format_date(value: Optional[datetime], never: str = 'Never') -> str:
    """'Oct 16, 2026'"""
    if value is None:
        return never
    return f"{value:%b} {value.day}, {value.year}"


def day_label(value: datetime) -> str:
    """'Friday, Oct 16'"""
    return f"{value:%A, %b} {value.day}"


def time_label(value: datetime) -> str:
    """'9:05 AM'"""
    hour = value.hour % 12 or 12
    return f"{hour}:{value:%M %p}"


def filter_interactions(interactions: List[Interaction], type_filter: str = 'all') -> List[Interaction]:
    if type_filter == 'all':
        return list(interactions)
    return [i for i in interactions if i.type == type_filter]


def group_interactions_by_date(interactions: List[Interaction]) -> List[Tuple[str, List[Interaction]]]:
    """
    Group by calendar-day label, keeping the server's order both across and
    within groups. Interactions without a date collect under 'Undated'.
    """
    groups: List[Tuple[str, List[Interaction]]] = []
    index = {}
    for interaction in interactions:
        label = day_label(interaction.date) if interaction.date else 'Undated'
        if label not in index:
            index[label] = len(groups)
            groups.append((label, []))
        groups[index[label]][1].append(interaction)
    return groups


def match_score(intro: Introduction) -> int:
    return DEFAULT_MATCH_SCORE if intro.match_score is None else intro.match_score


def _side(contact: Optional[Contact]) -> str:
    if contact is None or not contact.display_name:
        return '?'
    return contact.display_name


def introduction_pairing(intro: Introduction) -> str:
    """'Ana Silva ↔ Ben Okafor'; '?' stands in for a side the server didn't embed."""
    return f"{_side(intro.source_contact)} ↔ {_side(intro.target_contact)}"

