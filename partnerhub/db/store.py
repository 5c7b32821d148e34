"""
Company Store - repository over the whole partner collection.

The collection is persisted as one serialized array under a single key
(config.STORAGE_KEY). Every mutation rewrites the full array; the in-memory
list only changes after the backend write succeeded.

Backends:
    MemoryStore     - dict in process (tests, dry runs)
    JsonFileStore   - {key: [...]} JSON file, written atomically
    PostgresStore   - kv_store(key, value JSONB) row via psycopg2
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2.extras import Json

from partnerhub.config import config
from partnerhub.db.connection import get_db_cursor
from partnerhub.engine.address import parse_legacy_address
from partnerhub.models import (
    Address, Company, CompanyStatus, ContactChannel, ContactHistoryEntry, DocType, Location,
)

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """The backend could not be read or written. The stored data is left as it was."""


# =============================================================================
# SERIALIZATION
# =============================================================================

def _encode(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value[:10]) if value else None


def company_to_dict(company: Company) -> Dict[str, Any]:
    return _encode(asdict(company))


def entry_from_dict(row: Dict[str, Any]) -> ContactHistoryEntry:
    return ContactHistoryEntry(
        id=row.get('id', ''),
        date=_parse_date(row.get('date')),
        channel=ContactChannel(row.get('channel', ContactChannel.PHONE.value)),
        summary=row.get('summary', ''),
        notes=row.get('notes'),
        next_contact_date=_parse_date(row.get('next_contact_date')),
    )


def company_from_dict(row: Dict[str, Any]) -> Company:
    last_type = row.get('last_contact_type')
    return Company(
        id=row['id'],
        name=row.get('name', ''),
        doc_type=DocType(row.get('doc_type', DocType.CNPJ.value)),
        document=row.get('document', ''),
        license_region=row.get('license_region'),
        postal_code=row.get('postal_code', ''),
        address=Address(**row.get('address') or {}),
        location=Location(**row.get('location') or {}),
        responsible=row.get('responsible'),
        partnership_manager=row.get('partnership_manager'),
        account_owner=row.get('account_owner', ''),
        website=row.get('website'),
        email=row.get('email', ''),
        phone=row.get('phone', ''),
        registration_date=_parse_date(row.get('registration_date')),
        broker_count=int(row.get('broker_count', 0)),
        commission_rate=float(row.get('commission_rate', 0)),
        status=CompanyStatus(row.get('status', CompanyStatus.ACTIVE.value)),
        notes=row.get('notes'),
        last_contact_date=_parse_date(row.get('last_contact_date')),
        last_contact_type=ContactChannel(last_type) if last_type else None,
        contact_summary=row.get('contact_summary'),
        next_contact_date=_parse_date(row.get('next_contact_date')),
        contact_history=[entry_from_dict(e) for e in row.get('contact_history') or []],
    )


# Browser-era exports: camelCase keys, Portuguese labels, flat address string
_LEGACY_CHANNELS = {
    'Telefone': ContactChannel.PHONE,
    'WhatsApp': ContactChannel.WHATSAPP,
    'E-mail': ContactChannel.EMAIL,
    'Reunião': ContactChannel.MEETING,
    'Vídeo': ContactChannel.VIDEO,
}
_LEGACY_STATUS = {'Ativo': CompanyStatus.ACTIVE, 'Inativo': CompanyStatus.INACTIVE}


def _legacy_channel(value: Optional[str]) -> Optional[ContactChannel]:
    return _LEGACY_CHANNELS.get(value) if value else None


def company_from_legacy(row: Dict[str, Any]) -> Company:
    """Convert a record exported by the old browser dashboard."""
    doc_type = DocType(row.get('docType', 'CNPJ'))
    document = row.get('cnpj', '') or ''
    if doc_type == DocType.CRECI:
        document = row.get('creci') or document
    else:
        document = ''.join(ch for ch in document if ch.isdigit())

    history = [
        ContactHistoryEntry(
            id=e.get('id', ''),
            date=_parse_date(e.get('date')),
            channel=_legacy_channel(e.get('type')) or ContactChannel.PHONE,
            summary=e.get('summary', ''),
            notes=e.get('notes') or None,
            next_contact_date=_parse_date(e.get('nextContactDate')),
        )
        for e in row.get('contactHistory') or []
    ]

    return Company(
        id=row['id'],
        name=row.get('name', ''),
        doc_type=doc_type,
        document=document,
        license_region=row.get('creciUF') or None,
        postal_code=''.join(ch for ch in row.get('cep', '') if ch.isdigit()),
        address=parse_legacy_address(row.get('address', '')),
        location=Location(**row.get('location') or {}),
        responsible=row.get('responsible') or None,
        partnership_manager=row.get('partnershipManager') or None,
        account_owner=row.get('hiringManager', ''),
        website=row.get('website') or None,
        email=row.get('email', ''),
        phone=row.get('phone', ''),
        registration_date=_parse_date(row.get('registrationDate')),
        broker_count=int(row.get('brokerCount', 0)),
        commission_rate=float(row.get('commissionRate', 0)),
        status=_LEGACY_STATUS.get(row.get('status'), CompanyStatus.ACTIVE),
        notes=row.get('notes') or None,
        last_contact_date=_parse_date(row.get('lastContactDate')),
        last_contact_type=_legacy_channel(row.get('lastContactType')),
        contact_summary=row.get('contactSummary') or None,
        next_contact_date=_parse_date(row.get('nextContactDate')),
        contact_history=history,
    )


# =============================================================================
# REPOSITORY
# =============================================================================

class CompanyStore:
    """
    Repository interface: load, save, list, get, insert, update, delete.
    Subclasses only implement _read() and _write().
    """

    backend = 'abstract'

    def __init__(self, key: Optional[str] = None):
        self.key = key or config.STORAGE_KEY
        self._companies: Optional[List[Company]] = None

    def _read(self) -> Optional[List[Dict[str, Any]]]:
        raise NotImplementedError

    def _write(self, payload: List[Dict[str, Any]]) -> None:
        raise NotImplementedError

    def load(self) -> List[Company]:
        """Rehydrate the collection from the backend."""
        payload = self._read() or []
        try:
            companies = [company_from_dict(row) for row in payload]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unreadable record in {self.backend} store '{self.key}': {e!r}")
            raise StoreError(f"The {self.backend} store '{self.key}' holds a malformed record ({e!r}).") from e
        self._companies = companies
        logger.info(f"Loaded {len(self._companies)} companies from {self.backend} store '{self.key}'")
        return list(self._companies)

    def save(self, companies: Optional[List[Company]] = None) -> None:
        """Persist the full collection; memory is only replaced once the write succeeds."""
        new_state = list(self.list() if companies is None else companies)
        self._write([company_to_dict(c) for c in new_state])
        self._companies = new_state
        logger.debug(f"Saved {len(new_state)} companies to {self.backend} store '{self.key}'")

    def list(self) -> List[Company]:
        if self._companies is None:
            self.load()
        return list(self._companies)

    def get(self, company_id: str) -> Optional[Company]:
        for company in self.list():
            if company.id == company_id:
                return company
        return None

    def insert(self, company: Company) -> None:
        """Newest records go first."""
        self.save([company] + self.list())

    def update(self, company: Company) -> bool:
        current = self.list()
        for index, existing in enumerate(current):
            if existing.id == company.id:
                current[index] = company
                self.save(current)
                return True
        return False

    def delete(self, company_id: str) -> bool:
        current = self.list()
        remaining = [c for c in current if c.id != company_id]
        if len(remaining) == len(current):
            return False
        self.save(remaining)
        return True


class MemoryStore(CompanyStore):
    backend = 'memory'

    def __init__(self, key: Optional[str] = None, companies: Optional[List[Company]] = None):
        super().__init__(key)
        self._data: Dict[str, List[Dict[str, Any]]] = {}
        if companies:
            self._data[self.key] = [company_to_dict(c) for c in companies]

    def _read(self):
        return self._data.get(self.key)

    def _write(self, payload):
        self._data[self.key] = payload


class JsonFileStore(CompanyStore):
    backend = 'json'

    def __init__(self, path: Optional[Path] = None, key: Optional[str] = None):
        super().__init__(key)
        self.path = Path(path or config.DATA_FILE)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            logger.error(f"Data file {self.path} is not valid JSON: {e}")
            raise StoreError(f"Data file {self.path} is corrupt ({e}). Restore it from a backup or move it aside.") from e
        if not isinstance(data, dict):
            logger.error(f"Data file {self.path} holds {type(data).__name__}, expected an object")
            raise StoreError(f"Data file {self.path} is not a PartnerHub data file.")
        return data

    def _read(self):
        return self._read_all().get(self.key)

    def _write(self, payload):
        data = self._read_all()
        data[self.key] = payload
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class PostgresStore(CompanyStore):
    backend = 'postgres'

    def __init__(self, key: Optional[str] = None):
        super().__init__(key)
        self._table_ready = False

    def _ensure_table(self, cur) -> None:
        # The CREATE is part of the caller's transaction; _table_ready is set after commit.
        if self._table_ready:
            return
        cur.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value JSONB NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
        """)

    def _read(self):
        try:
            with get_db_cursor() as cur:
                self._ensure_table(cur)
                cur.execute("SELECT value FROM kv_store WHERE key = %s", (self.key,))
                row = cur.fetchone()
        except psycopg2.Error as e:
            raise StoreError(f"Could not read '{self.key}' from PostgreSQL: {e}") from e
        self._table_ready = True
        return row['value'] if row else None

    def _write(self, payload):
        try:
            with get_db_cursor() as cur:
                self._ensure_table(cur)
                cur.execute("""
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (%s, %s, NOW())
                    ON CONFLICT (key) DO UPDATE
                    SET value = EXCLUDED.value, updated_at = NOW()
                """, (self.key, Json(payload)))
        except psycopg2.Error as e:
            raise StoreError(f"Could not write '{self.key}' to PostgreSQL: {e}") from e
        self._table_ready = True


_BACKENDS = {
    'memory': MemoryStore,
    'json': JsonFileStore,
    'postgres': PostgresStore,
}

_store: Optional[CompanyStore] = None


def create_store(backend: Optional[str] = None) -> CompanyStore:
    name = (backend or config.STORAGE_BACKEND).lower()
    if name not in _BACKENDS:
        raise ValueError(f"Unknown storage backend '{name}'. Choose from: {', '.join(_BACKENDS)}")
    return _BACKENDS[name]()


def get_store() -> CompanyStore:
    """Process-wide store, created on first use from config."""
    global _store
    if _store is None:
        _store = create_store()
    return _store
