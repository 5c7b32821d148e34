#!/usr/bin/env python3
"""
PartnerHub Terminal CLI
Command-line interface for partner company management, dashboards and reports.
"""

import json
import logging
import click
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, Optional

from partnerhub.config import config
from partnerhub.db.store import StoreError
from partnerhub.engine import crm, dashboard, lookups, reports
from partnerhub.engine.address import compose_address
from partnerhub.engine.ai_client import MODEL_CHOICES
from partnerhub.engine.crm import CompanyValidationError
from partnerhub.engine.validators import (
    BR_STATES, format_document, mask_cep, mask_phone, validate_document,
    validate_email, validate_phone, validate_postal_code, validate_url,
)
from partnerhub.logging_config import configure_logging, log_call
from partnerhub.models import (
    CompanyStatus, ContactChannel, ContactHistoryEntry, DocType, FilterCriteria,
)

STATUS_CHOICES = [s.value for s in CompanyStatus]
CHANNEL_CHOICES = [c.value for c in ContactChannel]
DATE = click.DateTime(formats=['%Y-%m-%d'])

REGISTER_MODE = 'register'


# =============================================================================
# PROMPT HELPERS
# =============================================================================

@log_call
def _prompt_date(label: str, default: Optional[date] = None) -> Optional[date]:
    """Prompt for a date, re-prompting on bad format. Returns None if left blank."""
    logger = logging.getLogger("partnerhub")
    default_str = str(default) if default else ""
    while True:
        raw = click.prompt(label, default=default_str, show_default=bool(default_str)) or ""
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            logger.debug(f"_prompt_date | rejected input={raw!r}")
            click.echo("  Invalid format - please use YYYY-MM-DD.", err=True)


def _prompt_checked(label: str, check: Callable[[str], Optional[str]], default: Optional[str] = None) -> str:
    """Prompt until check() accepts the value. Blank input is passed to check() too."""
    logger = logging.getLogger("partnerhub")
    default_str = default or ""
    while True:
        raw = (click.prompt(label, default=default_str, show_default=bool(default_str)) or "").strip()
        error = check(raw)
        if error is None:
            return raw
        logger.debug(f"_prompt_checked | {label} rejected input={raw!r}: {error}")
        click.echo(f"  {error}", err=True)


def _prompt_optional(label: str, default: Optional[str] = None) -> Optional[str]:
    return click.prompt(label, default=default or "", show_default=bool(default)).strip() or None


def _run_lookup(kind: str, func, value: str) -> lookups.LookupResult:
    with lookups.LookupDispatcher() as dispatcher:
        return dispatcher.submit(kind, func, value).result()


def _echo_validation_errors(error: CompanyValidationError, context: str) -> None:
    logging.getLogger("partnerhub").warning(f"{context} | rejected: {error}")
    click.echo("\nNot saved. Please fix:", err=True)
    for field_name, reason in error.errors.items():
        click.echo(f"  - {field_name}: {reason}", err=True)


@log_call
def _prompt_company_form(public: bool = False) -> Dict[str, Any]:
    """Interactive company form. Returns submitted fields for crm.create_company."""
    doc_type = DocType(click.prompt(
        "Document type",
        type=click.Choice([d.value for d in DocType], case_sensitive=False),
        default=DocType.CNPJ.value,
    ).upper())

    license_region = None
    if doc_type == DocType.CRECI:
        license_region = click.prompt("Region (UF)", type=click.Choice(BR_STATES, case_sensitive=False)).upper()
        document = _prompt_checked(
            "License number (e.g. 12345-J)",
            lambda v: validate_document(doc_type, v, license_region),
        )
    else:
        document = _prompt_checked(doc_type.value, lambda v: validate_document(doc_type, v))

    prefill: Dict[str, Any] = {}
    if doc_type == DocType.CNPJ and click.confirm("Look up this CNPJ in the public registry?", default=True):
        result = _run_lookup(lookups.KIND_CNPJ, lookups.lookup_cnpj, document)
        if result.ok:
            prefill = result.data
            click.echo(f"  ✓ Found: {prefill['name']}")
        else:
            click.echo(f"  {result.message}", err=True)

    name = click.prompt("Name / legal name", default=prefill.get('name') or None)
    email = _prompt_checked("Email", validate_email)
    phone = _prompt_checked("Phone (WhatsApp)", validate_phone)
    website = _prompt_checked("Website (optional)", validate_url) or None

    postal_code = _prompt_checked("Postal code (CEP)", validate_postal_code, default=prefill.get('postal_code'))
    if not prefill.get('street'):
        result = _run_lookup(lookups.KIND_CEP, lookups.lookup_cep, postal_code)
        if result.ok:
            prefill.update(result.data)

    address = {
        'street': click.prompt("Street", default=prefill.get('street') or None),
        'number': click.prompt("Number", default=prefill.get('number') or None),
        'complement': _prompt_optional("Complement (optional)", prefill.get('complement')),
        'neighborhood': click.prompt("Neighborhood", default=prefill.get('neighborhood') or None),
        'city': click.prompt("City", default=prefill.get('city') or None),
        'state': click.prompt(
            "State (UF)",
            type=click.Choice(BR_STATES, case_sensitive=False),
            default=prefill.get('state') or None,
        ).upper(),
    }

    responsible = _prompt_optional("Operational contact (optional)")
    partnership_manager = _prompt_optional("Partnership manager at the partner (optional)")
    if public:
        account_owner = config.PUBLIC_MODE_OWNER
    else:
        account_owner = click.prompt("Internal account owner")

    broker_count = click.prompt("Number of brokers", type=click.IntRange(min=0), default=0)
    commission_rate = click.prompt(
        "Commission rate (%)", type=click.FloatRange(0, 100), default=config.DEFAULT_COMMISSION_RATE,
    )

    data: Dict[str, Any] = {
        'name': name,
        'doc_type': doc_type,
        'document': document,
        'license_region': license_region,
        'postal_code': postal_code,
        'address': address,
        'email': email,
        'phone': phone,
        'website': website,
        'responsible': responsible,
        'partnership_manager': partnership_manager,
        'account_owner': account_owner,
        'broker_count': broker_count,
        'commission_rate': commission_rate,
    }

    if not public:
        data['status'] = click.prompt("Status", type=click.Choice(STATUS_CHOICES), default='active')
        data['last_contact_date'] = _prompt_date("Last contact (YYYY-MM-DD, Enter to skip)")
        data['next_contact_date'] = _prompt_date("Next contact (YYYY-MM-DD, Enter to skip)")
        data['notes'] = _prompt_optional("Notes (optional)")

    return data


def _save_new_company(public: bool) -> None:
    data = _prompt_company_form(public=public)
    try:
        company = crm.create_company(data)
    except CompanyValidationError as e:
        _echo_validation_errors(e, "create_company")
        return
    click.echo(f"\n✓ Created partner {company.id}: {company.name}")


class HubGroup(click.Group):
    """Root group: storage failures end the command with a message instead of a traceback."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except StoreError as e:
            logging.getLogger("partnerhub").error(f"cli | storage failure: {e}")
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=HubGroup)
@click.option('--mode', default=None, help="Set to 'register' for public self-registration only")
@click.pass_context
def cli(ctx, mode):
    """PartnerHub - Partner Agency Relationship Management"""
    configure_logging()
    mode = (mode or config.APP_MODE or '').lower()
    ctx.obj = {'mode': mode}
    if mode == REGISTER_MODE and ctx.invoked_subcommand not in (None, 'register'):
        logging.getLogger("partnerhub").warning(
            f"cli | blocked '{ctx.invoked_subcommand}' in public registration mode"
        )
        click.echo("Public registration mode: only the 'register' command is available.", err=True)
        ctx.exit(2)


# =============================================================================
# COMPANIES COMMANDS
# =============================================================================

@cli.group()
def companies():
    """Manage partner companies"""
    pass


@companies.command('list')
@click.option('--search', default='', help='Name or document contains')
@click.option('--status', type=click.Choice(STATUS_CHOICES), help='Filter by status')
@click.option('--commission-min', type=float, help='Minimum commission rate (inclusive)')
@click.option('--commission-max', type=float, help='Maximum commission rate (inclusive)')
@click.option('--from', 'date_start', type=DATE, help='Registered on or after (YYYY-MM-DD)')
@click.option('--to', 'date_end', type=DATE, help='Registered on or before (YYYY-MM-DD)')
@click.option('--partnership-manager', default='', help='Partnership manager contains')
@click.option('--owner', default='', help='Internal account owner contains')
@log_call
def companies_list(search, status, commission_min, commission_max, date_start, date_end,
                   partnership_manager, owner):
    """List partner companies"""
    criteria = FilterCriteria(
        search=search,
        status=CompanyStatus(status) if status else None,
        commission_min=commission_min,
        commission_max=commission_max,
        date_start=date_start.date() if date_start else None,
        date_end=date_end.date() if date_end else None,
        partnership_manager=partnership_manager,
        account_owner=owner,
    )
    results = dashboard.filter_companies(crm.list_companies(), criteria)

    if not results:
        click.echo("No partners found with the applied filters.")
        return

    click.echo(f"\nFound {len(results)} partners:\n")
    click.echo(f"{'ID':<10} {'Name':<30} {'Document':<20} {'Owner':<16} {'Status':<9} {'Comm.':>6}")
    click.echo("-" * 96)

    for c in results:
        doc = format_document(c.doc_type, c.document, c.license_region)
        click.echo(
            f"{c.id:<10} {c.name[:28]:<30} {doc[:18]:<20} "
            f"{c.account_owner[:14]:<16} {c.status.value:<9} {c.commission_rate:>5g}%"
        )


@companies.command('show')
@click.argument('company_id')
@log_call
def companies_show(company_id):
    """Show full partner details"""
    logger = logging.getLogger("partnerhub")
    c = crm.get_company(company_id)

    if not c:
        logger.warning(f"companies_show | company_id={company_id} not found")
        click.echo(f"Partner {company_id} not found.", err=True)
        return

    click.echo(f"\n{'='*80}")
    click.echo(f"PARTNER {c.id}: {c.name}")
    click.echo(f"{'='*80}")
    click.echo(f"Document:     {c.doc_type.value} {format_document(c.doc_type, c.document, c.license_region)}")
    click.echo(f"Status:       {c.status.value}")
    click.echo(f"Email:        {c.email}")
    click.echo(f"Phone:        {mask_phone(c.phone)}")
    click.echo(f"Website:      {c.website or '(not set)'}")
    click.echo(f"CEP:          {mask_cep(c.postal_code)}")
    click.echo(f"Address:      {compose_address(c.address)}")
    click.echo(f"Location:     {c.location.lat:.5f}, {c.location.lng:.5f}")
    click.echo(f"Operational:  {c.responsible or '(not set)'}")
    click.echo(f"Partnership:  {c.partnership_manager or '(not set)'}")
    click.echo(f"Owner:        {c.account_owner}")
    click.echo(f"Brokers:      {c.broker_count}")
    click.echo(f"Commission:   {c.commission_rate:g}%")
    click.echo(f"Registered:   {c.registration_date}")
    click.echo(f"Last contact: {c.last_contact_date or '(none)'}")
    click.echo(f"Next contact: {c.next_contact_date or '(none)'}")

    if c.notes:
        click.echo(f"\nNotes:\n{c.notes}")

    click.echo(f"\n{'='*80}")
    click.echo("CONTACT HISTORY")
    click.echo(f"{'='*80}")

    if c.contact_history:
        for entry in c.contact_history:
            click.echo(f"\n[{entry.date}] {entry.channel.value}")
            click.echo(f"  {entry.summary[:100]}")
            if entry.notes:
                click.echo(f"  Notes: {entry.notes[:100]}")
            if entry.next_contact_date:
                click.echo(f"  Follow-up: {entry.next_contact_date}")
    else:
        click.echo("No contacts logged yet.")

    click.echo()


@companies.command('add')
@log_call
def companies_add():
    """Add a new partner (interactive)"""
    click.echo("\n=== NEW PARTNER ===\n")
    _save_new_company(public=False)


@companies.command('edit')
@click.argument('company_id')
@click.option('--name', help='Update name')
@click.option('--doc-type', type=click.Choice([d.value for d in DocType], case_sensitive=False),
              help='Change identifier type')
@click.option('--document', help='Update CNPJ / CPF / CRECI number')
@click.option('--region', help='Update CRECI region (UF)')
@click.option('--email', help='Update email')
@click.option('--phone', help='Update phone')
@click.option('--website', help='Update website')
@click.option('--status', type=click.Choice(STATUS_CHOICES), help='Update status')
@click.option('--commission', type=float, help='Update commission rate (%)')
@click.option('--brokers', type=int, help='Update broker count')
@click.option('--owner', help='Update internal account owner')
@click.option('--partnership-manager', help='Update partnership manager')
@click.option('--responsible', help='Update operational contact')
@click.option('--notes', help='Update notes')
@click.option('--postal-code', help='Update postal code (CEP)')
@click.option('--street', help='Update street')
@click.option('--number', help='Update street number')
@click.option('--complement', help='Update address complement')
@click.option('--neighborhood', help='Update neighborhood')
@click.option('--city', help='Update city')
@click.option('--state', help='Update state (UF)')
@click.option('--lat', type=float, help='Update map latitude')
@click.option('--lng', type=float, help='Update map longitude')
@click.option('--last-contact', type=DATE, help='Update last contact date')
@click.option('--next-contact', type=DATE, help='Update next contact date')
@click.option('--clear-last-contact', is_flag=True, help='Remove the last contact date')
@click.option('--clear-next-contact', is_flag=True, help='Remove the next contact date')
@log_call
def companies_edit(company_id, name, doc_type, document, region, email, phone, website, status,
                   commission, brokers, owner, partnership_manager, responsible, notes, postal_code,
                   street, number, complement, neighborhood, city, state, lat, lng,
                   last_contact, next_contact, clear_last_contact, clear_next_contact):
    """Edit a partner (only the given options are changed)"""
    logger = logging.getLogger("partnerhub")
    if (clear_last_contact and last_contact) or (clear_next_contact and next_contact):
        click.echo("Error: a contact date cannot be both set and cleared.", err=True)
        return

    fields = {
        'name': name, 'doc_type': doc_type.upper() if doc_type else None, 'document': document,
        'license_region': region.upper() if region else None,
        'email': email, 'phone': phone, 'website': website,
        'status': status, 'commission_rate': commission, 'broker_count': brokers,
        'account_owner': owner, 'partnership_manager': partnership_manager,
        'responsible': responsible, 'notes': notes, 'postal_code': postal_code,
        'last_contact_date': last_contact.date() if last_contact else None,
        'next_contact_date': next_contact.date() if next_contact else None,
    }
    updates = {k: v for k, v in fields.items() if v is not None}
    if clear_last_contact:
        updates['last_contact_date'] = None
    if clear_next_contact:
        updates['next_contact_date'] = None

    address_fields = {
        'street': street, 'number': number, 'complement': complement,
        'neighborhood': neighborhood, 'city': city, 'state': state.upper() if state else None,
    }
    address_updates = {k: v for k, v in address_fields.items() if v is not None}
    location_updates = {k: v for k, v in (('lat', lat), ('lng', lng)) if v is not None}
    if address_updates or location_updates:
        existing = crm.get_company(company_id)
        if existing is None:
            logger.warning(f"companies_edit | company_id={company_id} not found")
            click.echo(f"Partner {company_id} not found", err=True)
            return
        if address_updates:
            updates['address'] = replace(existing.address, **address_updates)
        if location_updates:
            updates['location'] = replace(existing.location, **location_updates)

    if not updates:
        click.echo("No updates specified. Use --help to see the editable fields.", err=True)
        return

    try:
        success = crm.update_company(company_id, updates)
    except CompanyValidationError as e:
        _echo_validation_errors(e, "companies_edit")
        return

    if success:
        click.echo(f"✓ Updated partner {company_id}")
    else:
        logger.warning(f"companies_edit | company_id={company_id} not found")
        click.echo(f"Partner {company_id} not found", err=True)


@companies.command('duplicate')
@click.argument('company_id')
@log_call
def companies_duplicate(company_id):
    """Duplicate a partner record under a new ID"""
    clone = crm.duplicate_company(company_id)
    if clone is None:
        logging.getLogger("partnerhub").warning(f"companies_duplicate | company_id={company_id} not found")
        click.echo(f"Partner {company_id} not found", err=True)
        return
    click.echo(f"✓ Duplicated as {clone.id}: {clone.name}")


@companies.command('delete')
@click.argument('company_id')
@click.option('--yes', is_flag=True, help='Skip the confirmation prompt')
@log_call
def companies_delete(company_id, yes):
    """Delete a partner and its contact history"""
    logger = logging.getLogger("partnerhub")
    company = crm.get_company(company_id)
    if company is None:
        logger.warning(f"companies_delete | company_id={company_id} not found")
        click.echo(f"Partner {company_id} not found", err=True)
        return

    if not yes and not click.confirm(
        f"Delete '{company.name}' and its whole contact history? This cannot be undone",
        default=False,
    ):
        click.echo("Cancelled.")
        return

    if crm.delete_company(company_id):
        click.echo(f"✓ Deleted partner {company_id}")
    else:
        click.echo(f"Partner {company_id} not found", err=True)


@companies.command('log')
@click.argument('company_id')
@log_call
def companies_log(company_id):
    """Log a contact with a partner"""
    logger = logging.getLogger("partnerhub")

    company = crm.get_company(company_id)
    if not company:
        logger.warning(f"companies_log | company_id={company_id} not found")
        click.echo(f"Partner {company_id} not found.", err=True)
        return

    click.echo(f"\n=== LOG CONTACT: {company.name} ===\n")

    contact_date = _prompt_date("Date (YYYY-MM-DD)", default=date.today())
    channel = click.prompt(
        "Channel",
        type=click.Choice(CHANNEL_CHOICES, case_sensitive=False),
        default=ContactChannel.PHONE.value,
    )
    summary = click.prompt("Summary")
    notes = _prompt_optional("Notes (optional)")
    follow_up = _prompt_date("Follow-up date (YYYY-MM-DD, Enter to skip)")

    entry = ContactHistoryEntry(
        date=contact_date,
        channel=ContactChannel(channel.lower()),
        summary=summary,
        notes=notes,
        next_contact_date=follow_up,
    )

    try:
        saved = crm.log_contact(company_id, entry)
    except CompanyValidationError as e:
        _echo_validation_errors(e, "companies_log")
        return

    if saved is None:
        click.echo(f"Partner {company_id} not found.", err=True)
        return
    click.echo(f"\n✓ Logged contact {saved.id}")


@companies.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@log_call
def companies_import(path):
    """Import partners from a JSON export (current or browser format)"""
    logger = logging.getLogger("partnerhub")
    try:
        with open(path, encoding='utf-8') as f:
            payload = json.load(f)
    except ValueError as e:
        logger.error(f"companies_import | unreadable file {path}: {e}")
        click.echo(f"Error: {path} is not valid JSON ({e})", err=True)
        return

    if isinstance(payload, dict):
        payload = payload.get(config.STORAGE_KEY, [])

    try:
        stats = crm.import_companies(payload)
    except (KeyError, ValueError, TypeError) as e:
        logger.error(f"companies_import | bad record in {path}: {e}", exc_info=True)
        click.echo(f"Error: unexpected record format ({e})", err=True)
        return

    click.echo(f"✓ Imported {stats['imported']} partners ({stats['skipped']} already present)")
    if stats['rejected']:
        click.echo(f"  {stats['rejected']} rejected for validation errors - see the log", err=True)


# =============================================================================
# PUBLIC SELF-REGISTRATION
# =============================================================================

@cli.command('register')
@log_call
def register():
    """Public self-registration form"""
    click.echo("\n=== PARTNER SELF-REGISTRATION ===\n")
    _save_new_company(public=True)


# =============================================================================
# DASHBOARD COMMANDS
# =============================================================================

@cli.command('dashboard')
@log_call
def dashboard_cmd():
    """Network totals and upcoming follow-ups"""
    all_companies = crm.list_companies()
    stats = dashboard.compute_stats(all_companies)

    click.echo(f"\n{'='*50}")
    click.echo("PARTNER NETWORK")
    click.echo(f"{'='*50}")
    click.echo(f"Total partners:   {stats.total_companies}")
    click.echo(f"Sales force:      {stats.total_brokers} brokers")
    click.echo(f"Active network:   {stats.active_percentage}%")
    click.echo(f"Avg brokers:      {stats.avg_brokers}")

    upcoming = dashboard.upcoming_contacts(all_companies, limit=config.UPCOMING_CONTACTS_LIMIT)
    click.echo(f"\nUPCOMING CONTACTS")
    click.echo("-" * 50)
    if not upcoming:
        click.echo("No follow-ups scheduled.")
    for c in upcoming:
        click.echo(f"{str(c.next_contact_date):<12} {c.name[:28]:<30} {c.account_owner[:14]}")
    click.echo()


@cli.command('managers')
@log_call
def managers():
    """Known partnership managers and account owners"""
    all_companies = crm.list_companies()

    click.echo("\nPartnership managers:")
    for name in dashboard.unique_partnership_managers(all_companies) or ['(none)']:
        click.echo(f"  {name}")

    click.echo("\nAccount owners:")
    for name in dashboard.unique_account_owners(all_companies) or ['(none)']:
        click.echo(f"  {name}")
    click.echo()


# =============================================================================
# LOOKUP COMMANDS
# =============================================================================

@cli.group('lookup')
def lookup_group():
    """Query public registries"""
    pass


@lookup_group.command('cnpj')
@click.argument('cnpj')
@log_call
def lookup_cnpj_cmd(cnpj):
    """Look up a company by CNPJ"""
    result = _run_lookup(lookups.KIND_CNPJ, lookups.lookup_cnpj, cnpj)
    if not result.ok:
        click.echo(result.message, err=True)
        return
    data = result.data
    click.echo(f"\n{data['name']}")
    click.echo(f"  {data['street']}, {data['number']} - {data['neighborhood']} - {data['city']}/{data['state']}")
    click.echo(f"  CEP {mask_cep(data['postal_code'])}\n")


@lookup_group.command('cep')
@click.argument('cep')
@log_call
def lookup_cep_cmd(cep):
    """Look up an address by postal code"""
    result = _run_lookup(lookups.KIND_CEP, lookups.lookup_cep, cep)
    if not result.ok:
        click.echo(result.message, err=True)
        return
    data = result.data
    click.echo(f"\n{data['street']} - {data['neighborhood']} - {data['city']}/{data['state']}\n")


# =============================================================================
# MAP COMMANDS
# =============================================================================

@cli.group('map')
def map_group():
    """Geographic search over partners"""
    pass


@map_group.command('search')
@click.argument('query')
@click.option('--radius', type=float, default=None, help='Radius in meters (default: 2000)')
@log_call
def map_search(query, radius):
    """Find partners near a place or address"""
    result = _run_lookup(lookups.KIND_GEOCODE, lookups.geocode, query)
    if not result.ok:
        click.echo(result.message, err=True)
        return

    lat, lng = result.data['lat'], result.data['lng']
    radius = radius or config.NEARBY_RADIUS_METERS
    nearby = dashboard.companies_near(crm.list_companies(), lat, lng, radius_m=radius)

    click.echo(f"\n📍 {result.data['display_name']} ({lat:.5f}, {lng:.5f})")
    if not nearby:
        click.echo(f"No partners within {radius:g} m.")
        return

    click.echo(f"{len(nearby)} partners within {radius:g} m:\n")
    for c in nearby:
        meters = dashboard.distance_meters(lat, lng, c.location.lat, c.location.lng)
        click.echo(f"  {meters:>7.0f} m  {c.name[:40]:<42} {c.status.value}")
    click.echo()


# =============================================================================
# AI COMMANDS
# =============================================================================

@cli.command('insights')
@click.option('--model', type=click.Choice(MODEL_CHOICES), default=None,
              help='AI model to use (default: DEFAULT_AI_MODEL)')
@log_call
def insights(model):
    """AI strategic summary of the partner network"""
    from partnerhub.engine import insights as network_insights

    click.echo("\nGenerating strategic analysis...\n")
    click.echo(network_insights.generate_network_insights(crm.list_companies(), model=model))
    click.echo()


# =============================================================================
# EXPORT COMMANDS
# =============================================================================

@cli.group('export')
def export_group():
    """Generate reports"""
    pass


def _write(content: str, prefix: str, suffix: str) -> None:
    try:
        path = reports.write_export(content, prefix, suffix)
    except OSError as e:
        logging.getLogger("partnerhub").error(f"export failed for {prefix}: {e}", exc_info=True)
        click.echo(f"Error: could not write export ({e})", err=True)
        return
    click.echo(f"✓ Report saved to: {path}")


@export_group.command('csv')
@log_call
def export_csv():
    """Partner locations as CSV"""
    all_companies = crm.list_companies()
    if not all_companies:
        click.echo("No partners to export.")
        return
    _write(reports.map_csv(all_companies), 'partner_map', 'csv')


@export_group.command('html')
@log_call
def export_html():
    """Standalone HTML web report"""
    _write(reports.html_report(crm.list_companies()), 'partner_web_report', 'html')


@export_group.command('summary')
@log_call
def export_summary():
    """Consolidated partner report (printable text)"""
    _write(reports.summary_report(crm.list_companies()), 'partner_summary', 'txt')


@export_group.command('geo')
@log_call
def export_geo():
    """Geographic partner report (printable text)"""
    _write(reports.geographic_report(crm.list_companies()), 'partner_geographic', 'txt')


@export_group.command('dossier')
@click.argument('company_id')
@log_call
def export_dossier(company_id):
    """Individual partner record (printable text)"""
    company = crm.get_company(company_id)
    if company is None:
        logging.getLogger("partnerhub").warning(f"export_dossier | company_id={company_id} not found")
        click.echo(f"Partner {company_id} not found.", err=True)
        return
    _write(reports.company_dossier(company), reports.dossier_prefix(company), 'txt')


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    cli()
