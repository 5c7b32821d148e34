"""
CRM Engine - Partner company lifecycle.
Create, edit (field-level merge), duplicate, delete and log contacts against
the company store. Validation runs before anything is persisted; a rejected
submission leaves the stored collection untouched.
"""

import copy
import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional

from partnerhub.bus.events import (
    bus, EVENT_COMPANY_CREATED, EVENT_COMPANY_UPDATED, EVENT_COMPANY_DUPLICATED,
    EVENT_COMPANY_DELETED, EVENT_CONTACT_LOGGED, EVENT_COMPANIES_IMPORTED,
)
from partnerhub.db.store import get_store, company_from_dict, company_from_legacy
from partnerhub.engine.validators import (
    only_digits, validate_document, validate_email, validate_phone,
    validate_postal_code, validate_url,
)
from partnerhub.logging_config import log_call
from partnerhub.models import (
    Address, Company, CompanyStatus, ContactChannel, ContactHistoryEntry, DocType, Location,
)

logger = logging.getLogger(__name__)

DUPLICATE_MARKER = " (Copy)"
DATE_ORDER_MESSAGE = "Follow-up date must be after the last contact."

# Fields a form submission may set; id and registration_date are never client-supplied
_COMPANY_FIELDS = {
    'name', 'doc_type', 'document', 'license_region', 'postal_code', 'address',
    'location', 'responsible', 'partnership_manager', 'account_owner', 'website',
    'email', 'phone', 'broker_count', 'commission_rate', 'status', 'notes',
    'last_contact_date', 'last_contact_type', 'contact_summary', 'next_contact_date',
    'contact_history',
}


class CompanyValidationError(ValueError):
    """Submission rejected; errors maps field name to a human-readable reason."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def _validate_columns(updates: Dict[str, Any], allowed: set, entity: str) -> None:
    """Raise ValueError if any key in updates is not an allowed field name."""
    invalid = set(updates.keys()) - allowed
    if invalid:
        raise ValueError(f"Invalid {entity} fields: {invalid}")


def _new_id(taken: Optional[set] = None) -> str:
    taken = taken or set()
    while True:
        candidate = uuid.uuid4().hex[:9]
        if candidate not in taken:
            return candidate


def _coerce(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Turn plain form values (strings, dicts) into model types."""
    out = dict(fields)
    if isinstance(out.get('address'), dict):
        out['address'] = Address(**out['address'])
    if isinstance(out.get('location'), dict):
        out['location'] = Location(**out['location'])
    if isinstance(out.get('doc_type'), str):
        out['doc_type'] = DocType(out['doc_type'].upper())
    if isinstance(out.get('status'), str):
        out['status'] = CompanyStatus(out['status'].lower())
    if isinstance(out.get('last_contact_type'), str):
        out['last_contact_type'] = ContactChannel(out['last_contact_type'].lower())
    if 'broker_count' in out:
        out['broker_count'] = int(out['broker_count'])
    if 'commission_rate' in out:
        out['commission_rate'] = float(out['commission_rate'])
    return out


def normalize_company(company: Company) -> Company:
    """Digit-only storage for numeric identifiers, postal code and phone."""
    document = (company.document or '').strip()
    if company.doc_type in (DocType.CNPJ, DocType.CPF):
        document = only_digits(document)
    region = company.license_region.upper() if company.license_region else None
    if company.doc_type != DocType.CRECI:
        region = None
    return replace(
        company,
        name=company.name.strip(),
        document=document,
        license_region=region,
        postal_code=only_digits(company.postal_code),
        phone=only_digits(company.phone),
        email=(company.email or '').strip(),
        account_owner=(company.account_owner or '').strip(),
        website=company.website.strip() if company.website else None,
    )


def validate_company(company: Company) -> Dict[str, str]:
    """Field-level errors for a company; empty dict when valid."""
    errors: Dict[str, str] = {}

    if not company.name:
        errors['name'] = "Name is required."

    doc_error = validate_document(company.doc_type, company.document, company.license_region)
    if doc_error:
        errors['document'] = doc_error

    for field_name, error in (
        ('email', validate_email(company.email)),
        ('phone', validate_phone(company.phone)),
        ('website', validate_url(company.website)),
        ('postal_code', validate_postal_code(company.postal_code)),
    ):
        if error:
            errors[field_name] = error

    if not company.account_owner:
        errors['account_owner'] = "Internal account owner is required."
    if company.broker_count < 0:
        errors['broker_count'] = "Broker count cannot be negative."
    if not 0 <= company.commission_rate <= 100:
        errors['commission_rate'] = "Commission rate must be between 0 and 100."

    if (company.last_contact_date and company.next_contact_date
            and company.next_contact_date <= company.last_contact_date):
        errors['next_contact_date'] = DATE_ORDER_MESSAGE

    return errors


def _check(company: Company) -> None:
    errors = validate_company(company)
    if errors:
        raise CompanyValidationError(errors)


# =============================================================================
# COMPANY OPERATIONS
# =============================================================================

def list_companies() -> List[Company]:
    return get_store().list()


def get_company(company_id: str) -> Optional[Company]:
    company = get_store().get(company_id)
    if company is None:
        logger.debug(f"get_company: company_id={company_id} not found")
    return company


@log_call
def create_company(data: Dict[str, Any], today: Optional[date] = None) -> Company:
    """
    Create a company from submitted form fields.
    Assigns a fresh id and today's registration date.
    Raises CompanyValidationError; nothing is stored in that case.
    """
    _validate_columns(data, _COMPANY_FIELDS, 'company')
    store = get_store()

    company = normalize_company(Company(
        **_coerce(data),
        id=_new_id({c.id for c in store.list()}),
        registration_date=today or date.today(),
    ))
    _check(company)

    store.insert(company)
    logger.info(f"Created company {company.id}: {company.name}")
    bus.emit(EVENT_COMPANY_CREATED, {'company_id': company.id, 'company': company})
    return company


@log_call
def update_company(company_id: str, updates: Dict[str, Any]) -> bool:
    """
    Merge submitted fields into an existing company.
    id and registration_date are preserved.
    Returns: True if updated, False if not found
    """
    if not updates:
        return False

    # Guard: only known fields may be merged
    _validate_columns(updates, _COMPANY_FIELDS, 'company')

    store = get_store()
    existing = store.get(company_id)
    if existing is None:
        return False

    merged = normalize_company(replace(existing, **_coerce(updates)))
    _check(merged)

    store.update(merged)
    logger.info(f"Updated company {company_id}: {sorted(updates.keys())}")
    bus.emit(EVENT_COMPANY_UPDATED, {'company_id': company_id, 'updates': updates})
    return True


@log_call
def duplicate_company(company_id: str) -> Optional[Company]:
    """Clone a company under a new id with a marked name. Other fields are copied as-is."""
    store = get_store()
    source = store.get(company_id)
    if source is None:
        return None

    clone = copy.deepcopy(source)
    clone.id = _new_id({c.id for c in store.list()})
    clone.name = f"{source.name}{DUPLICATE_MARKER}"

    store.insert(clone)
    logger.info(f"Duplicated company {company_id} as {clone.id}")
    bus.emit(EVENT_COMPANY_DUPLICATED, {'source_id': company_id, 'company_id': clone.id})
    return clone


@log_call
def delete_company(company_id: str) -> bool:
    """Remove a company and its whole contact history. Returns False if not found."""
    if get_store().delete(company_id):
        logger.info(f"Deleted company {company_id}")
        bus.emit(EVENT_COMPANY_DELETED, {'company_id': company_id})
        return True
    return False


# =============================================================================
# CONTACT HISTORY
# =============================================================================

@log_call
def log_contact(
    company_id: str,
    entry: ContactHistoryEntry,
    today: Optional[date] = None,
) -> Optional[ContactHistoryEntry]:
    """
    Append an interaction to a company's history and refresh its quick-access
    contact fields. Returns the stored entry, or None if the company is missing.
    """
    store = get_store()
    existing = store.get(company_id)
    if existing is None:
        return None

    entry = replace(
        entry,
        id=entry.id or _new_id({e.id for e in existing.contact_history}),
        date=entry.date or today or date.today(),
    )

    if not entry.summary.strip():
        raise CompanyValidationError({'summary': "Contact summary is required."})
    if entry.next_contact_date and entry.next_contact_date <= entry.date:
        raise CompanyValidationError({'next_contact_date': DATE_ORDER_MESSAGE})

    updated = replace(existing, contact_history=existing.contact_history + [entry])
    if existing.last_contact_date is None or entry.date >= existing.last_contact_date:
        next_date = entry.next_contact_date
        if next_date is None and existing.next_contact_date and existing.next_contact_date > entry.date:
            next_date = existing.next_contact_date
        updated = replace(
            updated,
            last_contact_date=entry.date,
            last_contact_type=entry.channel,
            contact_summary=entry.summary,
            next_contact_date=next_date,
        )
    _check(updated)

    store.update(updated)
    logger.info(f"Logged {entry.channel.value} contact {entry.id} for company {company_id}")
    bus.emit(EVENT_CONTACT_LOGGED, {'company_id': company_id, 'entry': entry})
    return entry


# =============================================================================
# IMPORT
# =============================================================================

def _is_legacy(record: Dict[str, Any]) -> bool:
    return 'hiringManager' in record or 'docType' in record


@log_call
def import_companies(records: List[Dict[str, Any]]) -> Dict[str, int]:
    """
    Merge exported records into the store in one write.
    Accepts both the current format and the old browser export.
    Records that fail validation are left out and logged with their errors.
    Returns: dict with imported / skipped / rejected counts
    """
    store = get_store()
    current = store.list()
    known_ids = {c.id for c in current}

    stats = {'imported': 0, 'skipped': 0, 'rejected': 0}
    incoming: List[Company] = []

    for record in records:
        company = company_from_legacy(record) if _is_legacy(record) else company_from_dict(record)
        company = normalize_company(company)
        if company.id in known_ids:
            logger.info(f"import_companies: skipping existing id {company.id}")
            stats['skipped'] += 1
            continue

        errors = validate_company(company)
        if errors:
            logger.warning(f"import_companies: rejected {company.id} ({company.name}): {errors}")
            stats['rejected'] += 1
            continue

        known_ids.add(company.id)
        incoming.append(company)

    if incoming:
        store.save(incoming + current)
    stats['imported'] = len(incoming)

    logger.info(f"import_companies: {stats}")
    bus.emit(EVENT_COMPANIES_IMPORTED, stats)
    return stats
