"""
Unit tests for data models (obani/models/__init__.py).
Pure Python, no network or mocking.
"""

from datetime import datetime, timedelta, timezone
import pytest
from obani.models import (
    ActionItem, ApiResult, AuthState, Contact, FilterPreset, Interaction,
    Introduction, Page, User, format_timestamp, parse_timestamp,
)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

def test_parse_timestamp_with_z_suffix():
    dt = parse_timestamp('2026-10-16T09:05:00.000Z')
    assert dt == datetime(2026, 10, 16, 9, 5, tzinfo=timezone.utc)


def test_parse_timestamp_naive_is_utc():
    dt = parse_timestamp('2026-10-16T09:05:00')
    assert dt.tzinfo is not None
    assert dt.utcoffset() == timedelta(0)


def test_parse_timestamp_keeps_offset():
    dt = parse_timestamp('2026-10-16T11:05:00+02:00')
    assert dt == datetime(2026, 10, 16, 9, 5, tzinfo=timezone.utc)


@pytest.mark.parametrize('value', [None, ''])
def test_parse_timestamp_empty_is_none(value):
    assert parse_timestamp(value) is None


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        parse_timestamp('last tuesday')


def test_format_timestamp_is_utc_with_z():
    dt = datetime(2026, 10, 16, 11, 5, tzinfo=timezone(timedelta(hours=2)))
    assert format_timestamp(dt) == '2026-10-16T09:05:00Z'


def test_format_timestamp_none():
    assert format_timestamp(None) is None


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

def test_contact_defaults():
    c = Contact()
    assert c.first_name == ''
    assert c.tags == [] and c.sectors == [] and c.needs == [] and c.offers == []
    assert c.relationship_strength == 0
    assert c.is_archived is False


def test_contact_list_defaults_are_not_shared():
    a, b = Contact(), Contact()
    a.tags.append('vc')
    assert b.tags == []


def test_contact_display_name():
    assert Contact(first_name='Ana', last_name='Silva').display_name == 'Ana Silva'
    assert Contact(first_name='Ana').display_name == 'Ana'


def test_contact_from_dict_maps_camel_case():
    c = Contact.from_dict({
        'id': 'c1',
        'firstName': 'Ana',
        'lastName': 'Silva',
        'sectors': ['Fintech'],
        'howWeMet': 'Web Summit',
        'relationshipStrength': 4,
        'investmentTicketMin': 50000,
        'lastContactedAt': '2026-10-01T00:00:00Z',
        'isArchived': True,
    })
    assert c.id == 'c1'
    assert c.display_name == 'Ana Silva'
    assert c.sectors == ['Fintech']
    assert c.how_we_met == 'Web Summit'
    assert c.relationship_strength == 4
    assert c.investment_ticket_min == 50000
    assert c.last_contacted_at == datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert c.is_archived is True


def test_contact_from_dict_null_lists_become_empty():
    c = Contact.from_dict({'firstName': 'Ana', 'tags': None})
    assert c.tags == []


def test_contact_to_dict_omits_none_and_server_fields():
    c = Contact(id='c1', first_name='Ana', email=None, relationship_strength=3)
    d = c.to_dict()
    assert d['firstName'] == 'Ana'
    assert d['relationshipStrength'] == 3
    assert 'email' not in d
    assert 'id' not in d


# ---------------------------------------------------------------------------
# Interaction / ActionItem
# ---------------------------------------------------------------------------

def test_action_item_defaults():
    a = ActionItem(text='Send deck')
    assert a.owner == 'me'
    assert a.completed is False
    assert a.due_date is None


def test_interaction_from_dict_embeds_contact_and_items():
    i = Interaction.from_dict({
        'id': 'i1',
        'contactId': 'c1',
        'type': 'CALL',
        'date': '2026-10-16T09:05:00Z',
        'sentiment': 'POSITIVE',
        'actionItems': [{'id': 'a1', 'text': 'Send deck', 'owner': 'them', 'dueDate': '2026-10-20T00:00:00Z'}],
        'contact': {'id': 'c1', 'firstName': 'Ana'},
    })
    assert i.type == 'CALL'
    assert i.contact.display_name == 'Ana'
    assert i.action_items[0].owner == 'them'
    assert i.action_items[0].due_date == datetime(2026, 10, 20, tzinfo=timezone.utc)


def test_interaction_to_dict_serializes_dates():
    i = Interaction(
        contact_id='c1', type='MEETING',
        date=datetime(2026, 10, 16, 9, 5, tzinfo=timezone.utc),
        action_items=[ActionItem(text='Intro to Ben')],
    )
    d = i.to_dict()
    assert d['date'] == '2026-10-16T09:05:00Z'
    assert d['actionItems'] == [{'text': 'Intro to Ben', 'owner': 'me', 'completed': False}]


# ---------------------------------------------------------------------------
# Introduction
# ---------------------------------------------------------------------------

def test_introduction_from_dict():
    intro = Introduction.from_dict({
        'id': 'n1',
        'sourceContactId': 'c1',
        'targetContactId': 'c2',
        'status': 'MADE',
        'matchScore': 92,
        'sourceContact': {'firstName': 'Ana'},
    })
    assert intro.status == 'MADE'
    assert intro.match_score == 92
    assert intro.source_contact.first_name == 'Ana'
    assert intro.target_contact is None


# ---------------------------------------------------------------------------
# AuthState / User
# ---------------------------------------------------------------------------

def test_auth_state_round_trip():
    state = AuthState(user=User(id='u1', email='a@b.io', name='Ana'), token='tok')
    restored = AuthState.from_dict(state.to_dict())
    assert restored == state


def test_user_from_dict_requires_id():
    with pytest.raises(KeyError):
        User.from_dict({'email': 'a@b.io'})


# ---------------------------------------------------------------------------
# FilterPreset
# ---------------------------------------------------------------------------

def test_filter_preset_wire_keys():
    p = FilterPreset(name='Hot', min_strength=4, sector='Fintech', last_contact='30')
    assert p.to_dict() == {'name': 'Hot', 'minStrength': 4, 'sector': 'Fintech', 'lastContact': '30'}


def test_filter_preset_from_dict_fills_defaults():
    p = FilterPreset.from_dict({'name': 'All'})
    assert p == FilterPreset(name='All')


def test_filter_preset_is_frozen():
    p = FilterPreset(name='Hot')
    with pytest.raises(Exception):
        p.name = 'Cold'


# ---------------------------------------------------------------------------
# Page / ApiResult
# ---------------------------------------------------------------------------

def test_page_from_dict():
    page = Page.from_dict(
        {'items': [{'firstName': 'Ana'}, {'firstName': 'Ben'}], 'total': 7, 'page': 2,
         'pageSize': 2, 'totalPages': 4},
        Contact.from_dict,
    )
    assert [c.first_name for c in page.items] == ['Ana', 'Ben']
    assert page.total == 7
    assert page.total_pages == 4


def test_api_result_error_or_prefers_server_message():
    assert ApiResult(success=False, error='Email taken').error_or('Registration failed') == 'Email taken'
    assert ApiResult(success=False).error_or('Registration failed') == 'Registration failed'


def test_api_result_unauthorized():
    assert ApiResult(success=False, status=401).unauthorized
    assert not ApiResult(success=False, status=500).unauthorized
    assert not ApiResult(success=False).unauthorized
