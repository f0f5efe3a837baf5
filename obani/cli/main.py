#!/usr/bin/env python3
"""
Obani Terminal CLI
Command-line views over the remote Obani API: contacts, activity,
introductions, follow-ups and analytics.
"""

import logging
import re
import click
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import List, Optional

from obani.api.client import ApiClient, fetch_concurrently
from obani.config import config
from obani.engine import filters as contact_filters
from obani.engine.export import EXPORT_FORMATS, write_export
from obani.engine.followups import categorize_follow_ups, pending_actions
from obani.engine.presets import PresetStore
from obani.engine.views import (
    INTERACTION_ICONS, OWNER_ICONS, filter_interactions, format_date,
    group_interactions_by_date, introduction_pairing, match_score,
    strength_stars, time_label,
)
from obani.logging_config import configure_logging, log_call
from obani.models import (
    ACTION_OWNERS, INTERACTION_TYPES, INTRODUCTION_STATUSES, SENTIMENTS,
    ActionItem, ApiResult, Contact, FilterPreset, Interaction, Introduction,
)
from obani.session import Session
from obani.storage.local_store import JsonFileStore

_EMAIL_RE = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

NOT_LOGGED_IN = "Not logged in. Run 'obani login' first."
SESSION_EXPIRED = "Your session has expired. Run 'obani login' again."

BUCKET_CHOICES = [b for b in contact_filters.LAST_CONTACT_BUCKETS if b]


def open_session() -> Session:
    """Wire storage, API client and session together and restore any saved login."""
    store = JsonFileStore(config.DATA_DIR)
    api = ApiClient()
    session = Session(store, api)
    api.token_provider = session.get_token
    session.restore()
    return session


def _require_login(session: Session) -> bool:
    if session.is_authenticated:
        return True
    logging.getLogger("obani").warning("protected command refused: no session token")
    click.echo(NOT_LOGGED_IN, err=True)
    return False


def _report_failure(result: ApiResult, fallback: str) -> None:
    logging.getLogger("obani").warning(f"{fallback}: {result.error}")
    click.echo(f"Error: {result.error_or(fallback)}", err=True)
    if result.unauthorized:
        click.echo(SESSION_EXPIRED, err=True)


def _split_list(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(',') if part.strip()]


@log_call
def _prompt_date(label: str) -> Optional[datetime]:
    """Prompt for a YYYY-MM-DD date, re-prompting on bad format. Blank means none."""
    logger = logging.getLogger("obani")
    while True:
        raw = click.prompt(label, default="", show_default=False) or ""
        if not raw:
            return None
        try:
            return datetime.combine(date.fromisoformat(raw), time(), tzinfo=timezone.utc)
        except ValueError:
            logger.debug(f"_prompt_date | rejected input={raw!r}")
            click.echo("  Not a date. Use YYYY-MM-DD or leave blank.", err=True)


@log_call
def _prompt_email() -> Optional[str]:
    """Ask until the answer looks like an email address. Blank skips (None)."""
    logger = logging.getLogger("obani")
    while True:
        raw = click.prompt("Email", default="", show_default=False) or None
        if raw is None:
            return None
        if _EMAIL_RE.match(raw):
            return raw
        logger.debug(f"_prompt_email | rejected input={raw!r}")
        click.echo("  That is not an email address. Try again or press Enter to skip.", err=True)


@click.group()
def cli():
    """Obani - The Relationship Operating System"""
    configure_logging()


# =============================================================================
# AUTH COMMANDS
# =============================================================================

@cli.command('login')
@click.option('--email', prompt=True, help='Account email')
@click.option('--password', prompt=True, hide_input=True, help='Account password')
@log_call
def login(email, password):
    """Sign in and remember the session"""
    session = open_session()
    error = session.login(email, password)
    if error:
        click.echo(f"Error: {error}", err=True)
        return
    click.echo(f"✓ Signed in as {session.user.name if session.user else email}")


@cli.command('register')
@click.option('--name', prompt='Full name', help='Your name')
@click.option('--email', prompt=True, help='Account email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True,
              help='Account password')
@log_call
def register(name, email, password):
    """Create an account and sign in"""
    session = open_session()
    error = session.register(email, password, name)
    if error:
        click.echo(f"Error: {error}", err=True)
        return
    click.echo(f"✓ Account created. Signed in as {session.user.name if session.user else name}")


@cli.command('logout')
@log_call
def logout():
    """Forget the saved session"""
    open_session().logout()
    click.echo("Logged out.")


@cli.command('whoami')
@click.option('--verify', is_flag=True, help='Check the token against the server')
@log_call
def whoami(verify):
    """Show the signed-in user"""
    session = open_session()
    if not session.is_authenticated:
        click.echo("Not logged in.")
        return

    user = session.user
    click.echo(f"{user.name} <{user.email}>" if user else "Signed in (no profile stored)")

    if verify:
        result = session.api.me()
        if result.success:
            click.echo("✓ Session is valid")
        else:
            _report_failure(result, 'Could not verify session')


# =============================================================================
# CONTACTS COMMANDS
# =============================================================================

def _filter_options(func):
    """Shared filter/sort options for `contacts list` and `contacts export`."""
    options = [
        click.option('--search', default='', help='Free-text search (name, email, company, tags, notes)'),
        click.option('--min-strength', type=click.IntRange(0, 5), default=None,
                     help='Minimum relationship strength (0 = any)'),
        click.option('--sector', default=None, help='Exact sector'),
        click.option('--last-contact', type=click.Choice(BUCKET_CHOICES), default=None,
                     help="Days since last contact: within 30/60/90, or 90+"),
        click.option('--sort', 'sort_by', type=click.Choice(contact_filters.SORT_CHOICES),
                     default='name', show_default=True, help='Sort order'),
        click.option('--preset', type=int, default=None, help='Apply saved filter preset by index'),
        click.option('--page-size', type=click.IntRange(1, None), default=None,
                     help='How many contacts to load (default: OBANI_CONTACTS_PAGE_SIZE)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_filtered_contacts(session, search, min_strength, sector, last_contact,
                            sort_by, preset, page_size=None) -> Optional[tuple]:
    """
    Fetch contacts and apply filters locally.
    A preset sets the structured filters first; explicit options override it.
    Returns (contacts, total_loaded, filter_config) or None after reporting an error.
    """
    cfg = contact_filters.FilterConfig(query=search or '')

    if preset is not None:
        try:
            cfg = contact_filters.apply_preset(cfg, PresetStore(session.store).get(preset))
        except (IndexError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            return None

    if min_strength is not None:
        cfg = contact_filters.with_min_strength(cfg, min_strength)
    if sector is not None:
        cfg = contact_filters.with_sector(cfg, sector)
    if last_contact is not None:
        cfg = contact_filters.with_last_contact(cfg, last_contact)

    result = session.api.list_contacts(1, page_size or config.CONTACTS_PAGE_SIZE)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to load contacts')
        return None

    loaded = result.data.items
    shown = contact_filters.sort_contacts(contact_filters.filter_contacts(loaded, cfg), sort_by)
    return shown, len(loaded), cfg


@cli.group()
def contacts():
    """Manage contacts"""
    pass


@contacts.command('list')
@_filter_options
@log_call
def contacts_list(search, min_strength, sector, last_contact, sort_by, preset, page_size):
    """List contacts with local search, filters and sorting"""
    session = open_session()
    if not _require_login(session):
        return

    loaded = _load_filtered_contacts(session, search, min_strength, sector, last_contact, sort_by, preset, page_size)
    if loaded is None:
        return
    results, total, cfg = loaded

    if not results:
        click.echo("No contacts found." if total == 0 else "No contacts match these filters.")
        return

    click.echo(f"\nShowing {len(results)} of {total} contacts", nl=False)
    active = contact_filters.active_filter_count(cfg)
    click.echo(f" ({active} filter{'s' if active != 1 else ''} active)\n" if active else "\n")
    click.echo(f"{'ID':<10} {'Name':<28} {'Company':<20} {'Strength':<9} {'Last contact':<14}")
    click.echo("-" * 85)

    for c in results:
        click.echo(
            f"{(c.id or '')[:8]:<10} {c.display_name[:26]:<28} "
            f"{(c.company or '')[:18]:<20} {strength_stars(c.relationship_strength):<9} "
            f"{format_date(c.last_contacted_at):<14}"
        )


@contacts.command('sectors')
@log_call
def contacts_sectors():
    """List the sectors used across your contacts"""
    session = open_session()
    if not _require_login(session):
        return

    result = session.api.list_contacts(1, config.CONTACTS_PAGE_SIZE)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to load contacts')
        return

    sectors = contact_filters.all_sectors(result.data.items)
    if not sectors:
        click.echo("No sectors recorded yet.")
        return
    for s in sectors:
        click.echo(f"  {s}")


@contacts.command('show')
@click.argument('contact_id')
@log_call
def contacts_show(contact_id):
    """Show full contact details and interaction history"""
    session = open_session()
    if not _require_login(session):
        return

    contact_res, history_res = fetch_concurrently(
        lambda: session.api.get_contact(contact_id),
        lambda: session.api.get_contact_interactions(contact_id),
    )

    if not contact_res.success or contact_res.data is None:
        logging.getLogger("obani").warning(f"contacts_show | contact_id={contact_id} not found")
        click.echo(f"Contact {contact_id} not found.", err=True)
        if contact_res.unauthorized:
            click.echo(SESSION_EXPIRED, err=True)
        return

    c: Contact = contact_res.data
    click.echo(f"\n{'='*80}")
    click.echo(f"{c.display_name}  {strength_stars(c.relationship_strength)}")
    click.echo(f"{'='*80}")
    click.echo(f"Title:        {c.title or '(not set)'}")
    click.echo(f"Company:      {c.company or '(not set)'}")
    click.echo(f"Location:     {c.location or '(not set)'}")
    click.echo(f"Email:        {c.email or '(not set)'}")
    click.echo(f"Phone:        {c.phone or '(not set)'}")
    click.echo(f"LinkedIn:     {c.linkedin_url or '(not set)'}")
    click.echo(f"Sectors:      {', '.join(c.sectors) or '(none)'}")
    click.echo(f"Tags:         {', '.join(c.tags) or '(none)'}")
    click.echo(f"Needs:        {', '.join(c.needs) or '(none)'}")
    click.echo(f"Offers:       {', '.join(c.offers) or '(none)'}")
    click.echo(f"How we met:   {c.how_we_met or '(not set)'}")
    if c.investment_ticket_min is not None or c.investment_ticket_max is not None:
        click.echo(f"Ticket:       £{c.investment_ticket_min or 0:,} – £{c.investment_ticket_max or 0:,}")
    click.echo(f"Last contact: {format_date(c.last_contacted_at)}")
    click.echo(f"Added:        {format_date(c.created_at, never='(unknown)')}")
    if c.is_archived:
        click.echo("Archived:     yes")

    if c.notes:
        click.echo(f"\nNotes:\n{c.notes}")

    click.echo(f"\n{'='*80}")
    click.echo("INTERACTION HISTORY")
    click.echo(f"{'='*80}")

    history = history_res.data.items if history_res.success and history_res.data else []
    if not history_res.success:
        click.echo(f"(Could not load interactions: {history_res.error_or('Failed to load interactions')})")
    elif history:
        for i in history:
            click.echo(f"\n[{format_date(i.date)}] {INTERACTION_ICONS.get(i.type, '')} {i.type} ({i.sentiment.lower()})")
            if i.notes:
                click.echo(f"  {i.notes[:100]}")
            for a in i.action_items:
                mark = '✓' if a.completed else '•'
                click.echo(f"  {mark} {OWNER_ICONS.get(a.owner, '')} {a.text}")
    else:
        click.echo("No interactions yet.")

    click.echo()


@contacts.command('add')
@log_call
def contacts_add():
    """Add a new contact (interactive)"""
    session = open_session()
    if not _require_login(session):
        return

    click.echo("\n=== ADD NEW CONTACT ===\n")

    first_name = click.prompt("First name", type=str)
    last_name = click.prompt("Last name", default="", show_default=False) or None
    email = _prompt_email()
    phone = click.prompt("Phone", default="", show_default=False) or None
    company = click.prompt("Company", default="", show_default=False) or None
    title = click.prompt("Title", default="", show_default=False) or None
    location = click.prompt("Location", default="", show_default=False) or None
    tags = click.prompt("Tags (comma separated)", default="", show_default=False)
    sectors = click.prompt("Sectors (comma separated)", default="", show_default=False)
    needs = click.prompt("Needs (comma separated)", default="", show_default=False)
    offers = click.prompt("Offers (comma separated)", default="", show_default=False)
    how_we_met = click.prompt("How we met", default="", show_default=False) or None
    strength = click.prompt("Relationship strength (0-5)", type=click.IntRange(0, 5), default=3)
    notes = click.prompt("Notes", default="", show_default=False) or None

    contact = Contact(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        company=company,
        title=title,
        location=location,
        tags=_split_list(tags),
        sectors=_split_list(sectors),
        needs=_split_list(needs),
        offers=_split_list(offers),
        how_we_met=how_we_met,
        relationship_strength=strength,
        notes=notes,
    )

    result = session.api.create_contact(contact)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to save contact')
        return
    click.echo(f"\n✓ Created contact {result.data.id}: {contact.display_name}")


@contacts.command('edit')
@click.argument('contact_id')
@click.option('--first-name', help='Update first name')
@click.option('--last-name', help='Update last name')
@click.option('--email', help='Update email')
@click.option('--phone', help='Update phone')
@click.option('--company', help='Update company')
@click.option('--title', help='Update title')
@click.option('--location', help='Update location')
@click.option('--notes', help='Update notes')
@click.option('--tags', help='Replace tags (comma separated)')
@click.option('--sectors', help='Replace sectors (comma separated)')
@click.option('--strength', type=click.IntRange(0, 5), help='Update relationship strength')
@click.option('--archive/--unarchive', default=None, help='Archive or restore the contact')
@log_call
def contacts_edit(contact_id, first_name, last_name, email, phone, company, title,
                  location, notes, tags, sectors, strength, archive):
    """Edit a contact (use options to set fields)"""
    session = open_session()
    if not _require_login(session):
        return

    if email and not _EMAIL_RE.match(email):
        click.echo(f"Invalid email address: {email}", err=True)
        return

    fields = {
        'firstName': first_name,
        'lastName': last_name,
        'email': email,
        'phone': phone,
        'company': company,
        'title': title,
        'location': location,
        'notes': notes,
        'tags': _split_list(tags) if tags is not None else None,
        'sectors': _split_list(sectors) if sectors is not None else None,
        'relationshipStrength': strength,
        'isArchived': archive,
    }
    updates = {k: v for k, v in fields.items() if v is not None}

    if not updates:
        click.echo("No updates specified. Use --help to see editable fields.", err=True)
        return

    result = session.api.update_contact(contact_id, updates)
    if result.success:
        click.echo(f"✓ Updated contact {contact_id}")
    else:
        _report_failure(result, 'Failed to save contact')


@contacts.command('delete')
@click.argument('contact_id')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@log_call
def contacts_delete(contact_id, yes):
    """Delete a contact permanently"""
    session = open_session()
    if not _require_login(session):
        return

    if not yes and not click.confirm(f"Delete contact {contact_id}? This cannot be undone."):
        click.echo("Cancelled.")
        return

    result = session.api.delete_contact(contact_id)
    if result.success:
        click.echo(f"✓ Deleted contact {contact_id}")
    else:
        _report_failure(result, 'Failed to delete contact')


@contacts.command('log')
@click.argument('contact_id')
@log_call
def contacts_log(contact_id):
    """Log an interaction with a contact (interactive)"""
    session = open_session()
    if not _require_login(session):
        return

    contact_res = session.api.get_contact(contact_id)
    if not contact_res.success or contact_res.data is None:
        logging.getLogger("obani").warning(f"contacts_log | contact_id={contact_id} not found")
        click.echo(f"Contact {contact_id} not found.", err=True)
        return

    click.echo(f"\n=== LOG INTERACTION: {contact_res.data.display_name} ===\n")

    interaction_type = click.prompt(
        "Type", type=click.Choice(INTERACTION_TYPES, case_sensitive=False), default="MEETING"
    ).upper()
    sentiment = click.prompt(
        "Sentiment", type=click.Choice(SENTIMENTS, case_sensitive=False), default="NEUTRAL"
    ).upper()
    notes = click.prompt("Notes", default="", show_default=False) or None

    action_items: List[ActionItem] = []
    while True:
        text = click.prompt("Action item (Enter to finish)", default="", show_default=False).strip()
        if not text:
            break
        owner = click.prompt("Owner", type=click.Choice(ACTION_OWNERS), default="me")
        due_date = _prompt_date("Due date (YYYY-MM-DD, Enter to skip)")
        action_items.append(ActionItem(
            id=f"temp-{len(action_items)}", text=text, owner=owner, due_date=due_date,
        ))

    interaction = Interaction(
        contact_id=contact_id,
        type=interaction_type,
        date=datetime.now(timezone.utc),
        sentiment=sentiment,
        notes=notes,
        key_topics=[],
        action_items=action_items,
    )

    result = session.api.create_interaction(interaction)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to save interaction')
        return
    click.echo(f"\n✓ Logged interaction {result.data.id}")


@contacts.command('export')
@_filter_options
@click.option('--format', 'fmt', type=click.Choice(EXPORT_FORMATS), default='csv',
              show_default=True, help='File format')
@click.option('--output-dir', type=click.Path(file_okay=False, path_type=Path), default=None,
              help='Directory for the export file (default: OBANI_EXPORT_DIR)')
@log_call
def contacts_export(search, min_strength, sector, last_contact, sort_by, preset, page_size, fmt, output_dir):
    """Export the filtered contact list to CSV or JSON"""
    session = open_session()
    if not _require_login(session):
        return

    loaded = _load_filtered_contacts(session, search, min_strength, sector, last_contact, sort_by, preset, page_size)
    if loaded is None:
        return
    results, _, _ = loaded

    try:
        path = write_export(results, fmt, output_dir or config.EXPORT_DIR)
    except OSError as e:
        click.echo(f"Error: Could not write export: {e}", err=True)
        return
    click.echo(f"✓ Exported {len(results)} contacts to {path}")


# =============================================================================
# FILTER PRESETS
# =============================================================================

def _describe_preset(p: FilterPreset) -> str:
    parts = []
    if p.min_strength:
        parts.append(f"strength≥{p.min_strength}")
    if p.sector:
        parts.append(f"sector={p.sector}")
    if p.last_contact:
        parts.append(f"last contact {p.last_contact}")
    return ', '.join(parts) or 'no filters'


@cli.group()
def presets():
    """Saved contact-list filters (stored locally)"""
    pass


@presets.command('list')
@log_call
def presets_list():
    """List saved presets with their index"""
    saved = PresetStore(open_session().store).list()
    if not saved:
        click.echo("No saved presets.")
        return
    for i, p in enumerate(saved):
        click.echo(f"  [{i}] {p.name:<24} {_describe_preset(p)}")


@presets.command('save')
@click.argument('name')
@click.option('--min-strength', type=click.IntRange(0, 5), default=0, help='Minimum relationship strength')
@click.option('--sector', default=None, help='Exact sector')
@click.option('--last-contact', type=click.Choice(BUCKET_CHOICES), default=None, help='Last-contact bucket')
@log_call
def presets_save(name, min_strength, sector, last_contact):
    """Save a filter preset"""
    store = PresetStore(open_session().store)
    try:
        saved = store.save(FilterPreset(name=name, min_strength=min_strength,
                                        sector=sector or '', last_contact=last_contact or ''))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return
    click.echo(f"✓ Saved preset [{len(saved) - 1}] {name}")


@presets.command('delete')
@click.argument('index', type=int)
@log_call
def presets_delete(index):
    """Delete the preset at INDEX"""
    store = PresetStore(open_session().store)
    try:
        store.delete(index)
    except IndexError as e:
        click.echo(f"Error: {e}", err=True)
        return
    click.echo(f"✓ Deleted preset [{index}]")


# =============================================================================
# FOLLOW-UPS
# =============================================================================

@cli.command('followups')
@log_call
def followups():
    """Who is overdue for a check-in"""
    session = open_session()
    if not _require_login(session):
        return

    result = session.api.get_all_contacts()
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to load contacts')
        return

    buckets = categorize_follow_ups(result.data)
    sections = [
        ("🔴 URGENT", buckets.urgent),
        ("🟡 DUE SOON", buckets.due_soon),
        ("🟢 ON TRACK", buckets.on_track),
    ]

    if not any(entries for _, entries in sections):
        click.echo("No contacts to follow up with yet.")
        return

    for title, entries in sections:
        click.echo(f"\n{title} ({len(entries)})")
        click.echo("-" * 60)
        for f in entries:
            days = "never contacted" if f.contact.last_contacted_at is None else f"{f.days_since} days ago"
            click.echo(f"  {f.contact.display_name[:28]:<30} {days:<18} every {f.threshold}d")


@cli.command('actions')
@log_call
def actions():
    """Open action items across all interactions"""
    session = open_session()
    if not _require_login(session):
        return

    contacts_res, interactions_res = fetch_concurrently(
        session.api.get_all_contacts,
        lambda: session.api.list_interactions(1, config.ACTIVITY_PAGE_SIZE),
    )
    if not interactions_res.success or interactions_res.data is None:
        _report_failure(interactions_res, 'Failed to load interactions')
        return

    known = contacts_res.data if contacts_res.success and contacts_res.data else []
    pending = pending_actions(interactions_res.data.items, known)

    if not pending:
        click.echo("No open action items. You're all caught up! ✓")
        return

    click.echo(f"\n{len(pending)} open action items:\n")
    for p in pending:
        due = format_date(p.item.due_date, never='no due date')
        click.echo(f"  {OWNER_ICONS.get(p.item.owner, '')} {p.item.text[:40]:<42} {p.contact_name[:20]:<22} {due}")


# =============================================================================
# ACTIVITY
# =============================================================================

@cli.command('activity')
@click.option('--type', 'type_filter', type=click.Choice(('all',) + INTERACTION_TYPES, case_sensitive=False),
              default='all', help='Only this interaction type')
@log_call
def activity(type_filter):
    """Recent interactions grouped by day"""
    session = open_session()
    if not _require_login(session):
        return

    result = session.api.list_interactions(1, config.ACTIVITY_PAGE_SIZE)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to load activity')
        return

    type_filter = type_filter if type_filter == 'all' else type_filter.upper()
    shown = filter_interactions(result.data.items, type_filter)
    if not shown:
        click.echo("No Activity Yet. Log interactions with your contacts to see them here.")
        return

    for label, items in group_interactions_by_date(shown):
        click.echo(f"\n{label}")
        click.echo("-" * len(label))
        for i in items:
            who = i.contact.display_name if i.contact else i.contact_id
            when = time_label(i.date) if i.date else ''
            click.echo(f"  {INTERACTION_ICONS.get(i.type, '')} {who:<28} {when}")
            if i.notes:
                click.echo(f"      {i.notes[:100]}")
            for a in i.action_items:
                click.echo(f"      {OWNER_ICONS.get(a.owner, '')} {a.text}")


# =============================================================================
# INTRODUCTIONS
# =============================================================================

@cli.group(invoke_without_command=True)
@click.pass_context
def intros(ctx):
    """Introductions between your contacts (lists them by default)"""
    if ctx.invoked_subcommand is None:
        ctx.invoke(intros_list)


@intros.command('list')
@click.option('--status', type=click.Choice(INTRODUCTION_STATUSES, case_sensitive=False),
              default=None, help='Only introductions with this status')
@log_call
def intros_list(status):
    """Suggested and existing introductions"""
    session = open_session()
    if not _require_login(session):
        return

    list_res, suggested_res = fetch_concurrently(
        lambda: session.api.list_introductions(status.upper() if status else None),
        lambda: session.api.get_suggested_introductions(config.SUGGESTED_LIMIT),
    )

    suggested = suggested_res.data if suggested_res.success and suggested_res.data else []
    if suggested:
        click.echo("\nSUGGESTED INTRODUCTIONS")
        click.echo("-" * 60)
        for intro in suggested:
            click.echo(f"  {introduction_pairing(intro):<44} {match_score(intro)}% match")
            if intro.reason:
                click.echo(f"      {intro.reason}")

    click.echo("\nYOUR INTRODUCTIONS")
    click.echo("-" * 60)
    if not list_res.success or list_res.data is None:
        _report_failure(list_res, 'Failed to load introductions')
        return
    if not list_res.data.items:
        click.echo("No introductions made yet. Start connecting your network!")
        return
    for intro in list_res.data.items:
        click.echo(f"  {(intro.id or '')[:8]:<10} {introduction_pairing(intro):<44} {intro.status}")
        if intro.context:
            click.echo(f"      {intro.context}")


@intros.command('add')
@click.argument('source_contact_id')
@click.argument('target_contact_id')
@click.option('--reason', default=None, help='Why these two should meet')
@click.option('--context', default=None, help='Context for the introduction')
@click.option('--status', type=click.Choice(INTRODUCTION_STATUSES, case_sensitive=False),
              default='PENDING', show_default=True)
@log_call
def intros_add(source_contact_id, target_contact_id, reason, context, status):
    """Record an introduction between two contacts"""
    session = open_session()
    if not _require_login(session):
        return

    if source_contact_id == target_contact_id:
        click.echo("A contact cannot be introduced to themselves.", err=True)
        return

    intro = Introduction(
        source_contact_id=source_contact_id,
        target_contact_id=target_contact_id,
        status=status.upper(),
        reason=reason,
        context=context,
    )
    result = session.api.create_introduction(intro)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to save introduction')
        return
    click.echo(f"✓ Created introduction {result.data.id}")


@intros.command('update')
@click.argument('introduction_id')
@click.option('--status', type=click.Choice(INTRODUCTION_STATUSES, case_sensitive=False),
              required=True, help='New status')
@click.option('--outcome', default=None, help='What came of it')
@log_call
def intros_update(introduction_id, status, outcome):
    """Move an introduction to a new status"""
    session = open_session()
    if not _require_login(session):
        return

    updates = {'status': status.upper()}
    if outcome:
        updates['outcome'] = outcome

    result = session.api.update_introduction(introduction_id, updates)
    if result.success:
        click.echo(f"✓ Introduction {introduction_id} is now {status.upper()}")
    else:
        _report_failure(result, 'Failed to update introduction')


# =============================================================================
# ANALYTICS
# =============================================================================

def _echo_trend(trend) -> None:
    for point in trend or []:
        click.echo(f"    {point.get('month') or '?':<10} {point.get('count', 0)}")


@cli.command('analytics')
@log_call
def analytics():
    """Network health dashboard (as computed by the server)"""
    session = open_session()
    if not _require_login(session):
        return

    result = session.api.get_dashboard()
    data = result.data if result.success else None
    if not data:
        if not result.success:
            logging.getLogger("obani").warning(f"analytics | {result.error}")
        click.echo("No Data Yet. Add contacts and log interactions to see your network analytics.")
        if result.unauthorized:
            click.echo(SESSION_EXPIRED, err=True)
        return

    health = data['networkHealth']
    click.echo("\nNETWORK HEALTH")
    click.echo("-" * 40)
    click.echo(f"  Total contacts:   {health.get('totalContacts', 0)}")
    click.echo(f"  Active:           {health.get('activeContacts', 0)}")
    click.echo(f"  Dormant:          {health.get('dormantContacts', 0)}")
    click.echo(f"  Average strength: {health['averageStrength']:.1f}")
    for bucket in health.get('strengthDistribution') or []:
        click.echo(f"    {strength_stars(bucket.get('strength'))}  {bucket.get('count', 0)}")

    trends = data['interactionTrends']
    click.echo("\nINTERACTION TRENDS")
    click.echo("-" * 40)
    click.echo(f"  Total interactions: {trends.get('totalInteractions', 0)}")
    click.echo(f"  Per contact:        {trends['avgPerContact']:.1f}")
    for t in trends.get('byType') or []:
        click.echo(f"    {INTERACTION_ICONS.get(t.get('type'), '•')} {t.get('type') or '?':<10} {t.get('count', 0)}")
    _echo_trend(trends.get('monthlyTrend'))

    intro_metrics = data['introductionMetrics']
    click.echo("\nINTRODUCTIONS")
    click.echo("-" * 40)
    click.echo(f"  Suggested:    {intro_metrics.get('totalSuggested', 0)}")
    click.echo(f"  Made:         {intro_metrics.get('totalMade', 0)}")
    click.echo(f"  Completed:    {intro_metrics.get('totalCompleted', 0)}")
    click.echo(f"  Success rate: {intro_metrics['successRate'] * 100:.0f}%")

    growth = data['growthMetrics']
    click.echo("\nGROWTH")
    click.echo("-" * 40)
    click.echo(f"  This month:  {growth.get('thisMonth', 0)}")
    click.echo(f"  Last month:  {growth.get('lastMonth', 0)}")
    click.echo(f"  Growth rate: {growth.get('growthRate', 0)}%")
    _echo_trend(growth.get('monthlyTrend'))

    at_risk = data['atRiskContacts']
    if at_risk:
        click.echo("\nAT-RISK CONTACTS")
        click.echo("These contacts haven't been contacted in a while")
        click.echo("-" * 40)
        for c in at_risk[:5]:
            click.echo(f"  {c.display_name[:28]:<30} Last contacted: {format_date(c.last_contacted_at)}")

    click.echo()


@cli.command('at-risk')
@click.option('--limit', type=int, default=None, help='How many to show (default: OBANI_AT_RISK_LIMIT)')
@log_call
def at_risk(limit):
    """Contacts the server flags as drifting away"""
    session = open_session()
    if not _require_login(session):
        return

    result = session.api.get_at_risk(limit or config.AT_RISK_LIMIT)
    if not result.success or result.data is None:
        _report_failure(result, 'Failed to load at-risk contacts')
        return

    if not result.data:
        click.echo("No at-risk contacts. Your network is in good shape. ✓")
        return

    click.echo(f"\n⚠️  {len(result.data)} contacts drifting away:\n")
    for c in result.data:
        click.echo(f"  {c.display_name[:28]:<30} {strength_stars(c.relationship_strength)}  "
                   f"Last contacted: {format_date(c.last_contacted_at)}")


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    cli()
