"""
Contact Export
Serializes a (filtered) contact list to CSV or JSON text and writes
contacts-<YYYY-MM-DD>.<ext> files.
"""

import csv
import io
import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from obani.models import Contact, format_timestamp

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ('csv', 'json')

CSV_HEADERS = [
    'First Name', 'Last Name', 'Email', 'Phone', 'Company', 'Title', 'Location',
    'Sectors', 'Tags', 'Needs', 'Offers', 'How We Met', 'Relationship Strength',
    'Investment Min', 'Investment Max', 'Notes',
]

LIST_SEPARATOR = '; '


def _text(value: Any) -> str:
    return '' if value is None else str(value)


def _csv_row(c: Contact) -> List[str]:
    return [
        c.first_name or '',
        _text(c.last_name),
        _text(c.email),
        _text(c.phone),
        _text(c.company),
        _text(c.title),
        _text(c.location),
        LIST_SEPARATOR.join(c.sectors or []),
        LIST_SEPARATOR.join(c.tags or []),
        LIST_SEPARATOR.join(c.needs or []),
        LIST_SEPARATOR.join(c.offers or []),
        _text(c.how_we_met),
        _text(c.relationship_strength),
        _text(c.investment_ticket_min),
        _text(c.investment_ticket_max),
        (c.notes or '').replace('\n', ' '),
    ]


def contacts_to_csv(contacts: List[Contact]) -> str:
    """
    Header row, then one row per contact with every value double-quoted
    (embedded quotes doubled). Rows end with '\\n'.
    """
    buf = io.StringIO()
    buf.write(','.join(CSV_HEADERS) + '\n')
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for c in contacts:
        writer.writerow(_csv_row(c))
    return buf.getvalue()


def _json_record(c: Contact) -> Dict[str, Any]:
    return {
        'firstName': c.first_name,
        'lastName': c.last_name,
        'email': c.email,
        'phone': c.phone,
        'company': c.company,
        'title': c.title,
        'location': c.location,
        'sectors': c.sectors,
        'tags': c.tags,
        'needs': c.needs,
        'offers': c.offers,
        'howWeMet': c.how_we_met,
        'relationshipStrength': c.relationship_strength,
        'investmentTicketMin': c.investment_ticket_min,
        'investmentTicketMax': c.investment_ticket_max,
        'linkedinUrl': c.linkedin_url,
        'notes': c.notes,
        'lastContactedAt': format_timestamp(c.last_contacted_at),
        'createdAt': format_timestamp(c.created_at),
    }


def contacts_to_json(contacts: List[Contact]) -> str:
    """Array of plain objects with a fixed field set (missing values as null)."""
    return json.dumps([_json_record(c) for c in contacts], indent=2, ensure_ascii=False)


def export_filename(fmt: str, today: Optional[date] = None) -> str:
    """contacts-<YYYY-MM-DD>.<fmt>, dated in UTC."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format '{fmt}'. Choose from: {', '.join(EXPORT_FORMATS)}")
    today = today or datetime.now(timezone.utc).date()
    return f"contacts-{today.isoformat()}.{fmt}"


def write_export(contacts: List[Contact], fmt: str, directory: Path,
                 today: Optional[date] = None) -> Path:
    """
    Write the export file and return its path.
    An existing file for the same day is overwritten.
    """
    filename = export_filename(fmt, today)
    content = contacts_to_csv(contacts) if fmt == 'csv' else contacts_to_json(contacts)

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(content, encoding='utf-8')

    logger.info(f"Exported {len(contacts)} contacts to {path}")
    return path
