"""
Data Models
Dataclasses for all entities. Pure Python objects, no network logic.

The remote API speaks camelCase JSON; from_dict/to_dict translate between the
wire shape and these snake_case attributes. Timestamps are parsed into
timezone-aware datetimes (naive values are taken as UTC).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar('T')

INTERACTION_TYPES = ('MEETING', 'CALL', 'EMAIL', 'MESSAGE', 'SOCIAL', 'EVENT', 'OTHER')
SENTIMENTS = ('POSITIVE', 'NEUTRAL', 'NEGATIVE')
INTRODUCTION_STATUSES = ('SUGGESTED', 'PENDING', 'MADE', 'COMPLETED', 'DECLINED')
ACTION_OWNERS = ('me', 'them', 'both')


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (with or without 'Z') into an aware datetime."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value)
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Inverse of parse_timestamp: UTC ISO-8601 with a trailing 'Z'."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def _list(value: Any) -> List[str]:
    return list(value) if value else []


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class User:
    """Authenticated account holder"""
    id: str = ''
    email: str = ''
    name: str = ''
    avatar_url: Optional[str] = None
    timezone: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            name=data.get('name', ''),
            avatar_url=data.get('avatarUrl'),
            timezone=data.get('timezone'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'avatarUrl': self.avatar_url,
            'timezone': self.timezone,
        })


@dataclass
class Contact:
    """A person in the user's network"""
    id: Optional[str] = None
    user_id: Optional[str] = None
    first_name: str = ''
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    avatar_url: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    sectors: List[str] = field(default_factory=list)
    needs: List[str] = field(default_factory=list)
    offers: List[str] = field(default_factory=list)
    how_we_met: Optional[str] = None
    investment_ticket_min: Optional[int] = None
    investment_ticket_max: Optional[int] = None
    linkedin_url: Optional[str] = None
    twitter_url: Optional[str] = None
    website_url: Optional[str] = None
    birthday: Optional[str] = None
    relationship_strength: Optional[int] = 0
    last_contacted_at: Optional[datetime] = None
    next_follow_up_at: Optional[datetime] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Contact':
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            first_name=data.get('firstName') or '',
            last_name=data.get('lastName'),
            email=data.get('email'),
            phone=data.get('phone'),
            company=data.get('company'),
            title=data.get('title'),
            location=data.get('location'),
            avatar_url=data.get('avatarUrl'),
            notes=data.get('notes'),
            tags=_list(data.get('tags')),
            sectors=_list(data.get('sectors')),
            needs=_list(data.get('needs')),
            offers=_list(data.get('offers')),
            how_we_met=data.get('howWeMet'),
            investment_ticket_min=data.get('investmentTicketMin'),
            investment_ticket_max=data.get('investmentTicketMax'),
            linkedin_url=data.get('linkedinUrl'),
            twitter_url=data.get('twitterUrl'),
            website_url=data.get('websiteUrl'),
            birthday=data.get('birthday'),
            relationship_strength=data.get('relationshipStrength'),
            last_contacted_at=parse_timestamp(data.get('lastContactedAt')),
            next_follow_up_at=parse_timestamp(data.get('nextFollowUpAt')),
            is_archived=bool(data.get('isArchived', False)),
            created_at=parse_timestamp(data.get('createdAt')),
            updated_at=parse_timestamp(data.get('updatedAt')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Writable fields in wire shape; server-owned fields are left out."""
        return _drop_none({
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'company': self.company,
            'title': self.title,
            'location': self.location,
            'notes': self.notes,
            'tags': self.tags,
            'sectors': self.sectors,
            'needs': self.needs,
            'offers': self.offers,
            'howWeMet': self.how_we_met,
            'investmentTicketMin': self.investment_ticket_min,
            'investmentTicketMax': self.investment_ticket_max,
            'linkedinUrl': self.linkedin_url,
            'twitterUrl': self.twitter_url,
            'websiteUrl': self.website_url,
            'birthday': self.birthday,
            'relationshipStrength': self.relationship_strength,
            'isArchived': self.is_archived,
        })


@dataclass
class ActionItem:
    """Task attached to a logged interaction"""
    text: str = ''
    owner: str = 'me'
    id: Optional[str] = None
    due_date: Optional[datetime] = None
    completed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ActionItem':
        return cls(
            id=data.get('id'),
            text=data.get('text', ''),
            owner=data.get('owner', 'me'),
            due_date=parse_timestamp(data.get('dueDate')),
            completed=bool(data.get('completed', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            'id': self.id,
            'text': self.text,
            'owner': self.owner,
            'dueDate': format_timestamp(self.due_date),
            'completed': self.completed,
        })


@dataclass
class Interaction:
    """A logged conversation with a contact"""
    id: Optional[str] = None
    user_id: Optional[str] = None
    contact_id: str = ''
    type: str = 'MEETING'
    date: Optional[datetime] = None
    sentiment: str = 'NEUTRAL'
    notes: Optional[str] = None
    key_topics: List[str] = field(default_factory=list)
    action_items: List[ActionItem] = field(default_factory=list)
    follow_up_date: Optional[datetime] = None
    follow_up_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    contact: Optional[Contact] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Interaction':
        contact = data.get('contact')
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            contact_id=data.get('contactId', ''),
            type=data.get('type', 'OTHER'),
            date=parse_timestamp(data.get('date')),
            sentiment=data.get('sentiment', 'NEUTRAL'),
            notes=data.get('notes'),
            key_topics=_list(data.get('keyTopics')),
            action_items=[ActionItem.from_dict(a) for a in data.get('actionItems') or []],
            follow_up_date=parse_timestamp(data.get('followUpDate')),
            follow_up_notes=data.get('followUpNotes'),
            created_at=parse_timestamp(data.get('createdAt')),
            updated_at=parse_timestamp(data.get('updatedAt')),
            contact=Contact.from_dict(contact) if contact else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            'contactId': self.contact_id,
            'type': self.type,
            'date': format_timestamp(self.date),
            'sentiment': self.sentiment,
            'notes': self.notes,
            'keyTopics': self.key_topics,
            'actionItems': [a.to_dict() for a in self.action_items] or None,
            'followUpDate': format_timestamp(self.follow_up_date),
            'followUpNotes': self.follow_up_notes,
        })


@dataclass
class Introduction:
    """A suggested or completed connection between two contacts"""
    id: Optional[str] = None
    user_id: Optional[str] = None
    source_contact_id: str = ''
    target_contact_id: str = ''
    status: str = 'SUGGESTED'
    reason: Optional[str] = None
    context: Optional[str] = None
    match_score: Optional[int] = None
    match_type: Optional[str] = None
    introduced_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    outcome: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    source_contact: Optional[Contact] = None
    target_contact: Optional[Contact] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Introduction':
        source = data.get('sourceContact')
        target = data.get('targetContact')
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            source_contact_id=data.get('sourceContactId', ''),
            target_contact_id=data.get('targetContactId', ''),
            status=data.get('status', 'SUGGESTED'),
            reason=data.get('reason'),
            context=data.get('context'),
            match_score=data.get('matchScore'),
            match_type=data.get('matchType'),
            introduced_at=parse_timestamp(data.get('introducedAt')),
            completed_at=parse_timestamp(data.get('completedAt')),
            outcome=data.get('outcome'),
            notes=data.get('notes'),
            created_at=parse_timestamp(data.get('createdAt')),
            updated_at=parse_timestamp(data.get('updatedAt')),
            source_contact=Contact.from_dict(source) if source else None,
            target_contact=Contact.from_dict(target) if target else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            'sourceContactId': self.source_contact_id,
            'targetContactId': self.target_contact_id,
            'status': self.status,
            'reason': self.reason,
            'context': self.context,
            'matchScore': self.match_score,
            'matchType': self.match_type,
            'outcome': self.outcome,
            'notes': self.notes,
        })


@dataclass
class AuthState:
    """Who is logged in. The token is the only authorization gate."""
    user: Optional[User] = None
    token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user': self.user.to_dict() if self.user else None,
            'token': self.token,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuthState':
        user = data.get('user')
        return cls(user=User.from_dict(user) if user else None, token=data.get('token'))


@dataclass(frozen=True)
class FilterPreset:
    """Named snapshot of the contact-list filters. Client-local only."""
    name: str
    min_strength: int = 0
    sector: str = ''
    last_contact: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'minStrength': self.min_strength,
            'sector': self.sector,
            'lastContact': self.last_contact,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FilterPreset':
        return cls(
            name=str(data['name']),
            min_strength=int(data.get('minStrength') or 0),
            sector=data.get('sector') or '',
            last_contact=data.get('lastContact') or '',
        )


@dataclass
class Page(Generic[T]):
    """One page of a paginated listing"""
    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0
    total_pages: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any], parse_item: Callable[[Dict[str, Any]], T]) -> 'Page[T]':
        items = [parse_item(i) for i in data.get('items') or []]
        return cls(
            items=items,
            total=data.get('total', len(items)),
            page=data.get('page', 1),
            page_size=data.get('pageSize', len(items)),
            total_pages=data.get('totalPages', 1),
        )


@dataclass
class ApiResult(Generic[T]):
    """Uniform envelope every API call resolves to."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status: Optional[int] = None  # HTTP status when a response arrived

    @property
    def unauthorized(self) -> bool:
        return self.status == 401

    def error_or(self, fallback: str) -> str:
        """Server-supplied error if any, else the per-action fallback."""
        return self.error or fallback
