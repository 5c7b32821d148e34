"""
Data Models
Dataclasses for all entities. These are pure Python objects, no storage logic.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class DocType(str, Enum):
    """Identifier kind carried by a partner company."""
    CNPJ = 'CNPJ'    # 14-digit tax ID
    CPF = 'CPF'      # 11-digit person ID
    CRECI = 'CRECI'  # broker license number + region code


class CompanyStatus(str, Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'


class ContactChannel(str, Enum):
    PHONE = 'phone'
    WHATSAPP = 'whatsapp'
    EMAIL = 'email'
    MEETING = 'meeting'
    VIDEO = 'video'


@dataclass
class Location:
    """Latitude/longitude pair. Defaults to central São Paulo."""
    lat: float = -23.5505
    lng: float = -46.6333


@dataclass
class Address:
    """Structured postal address. The display string is always derived from this."""
    street: str = ''
    number: str = ''
    complement: Optional[str] = None
    neighborhood: str = ''
    city: str = ''
    state: str = ''


@dataclass
class ContactHistoryEntry:
    """One logged interaction; lives and dies with its parent Company."""
    id: str = ''
    date: Optional[date] = None
    channel: ContactChannel = ContactChannel.PHONE
    summary: str = ''
    notes: Optional[str] = None
    next_contact_date: Optional[date] = None


@dataclass
class Company:
    """Partner organization (brokerage) and its commission agreement."""
    id: str = ''
    name: str = ''
    doc_type: DocType = DocType.CNPJ
    document: str = ''
    license_region: Optional[str] = None
    postal_code: str = ''
    address: Address = field(default_factory=Address)
    location: Location = field(default_factory=Location)
    responsible: Optional[str] = None
    partnership_manager: Optional[str] = None
    account_owner: str = ''
    website: Optional[str] = None
    email: str = ''
    phone: str = ''
    registration_date: Optional[date] = None
    broker_count: int = 0
    commission_rate: float = 5.0
    status: CompanyStatus = CompanyStatus.ACTIVE
    notes: Optional[str] = None
    # Quick-access relationship fields
    last_contact_date: Optional[date] = None
    last_contact_type: Optional[ContactChannel] = None
    contact_summary: Optional[str] = None
    next_contact_date: Optional[date] = None
    contact_history: List[ContactHistoryEntry] = field(default_factory=list)


@dataclass
class DashboardStats:
    total_companies: int = 0
    total_brokers: int = 0
    avg_brokers: int = 0
    active_percentage: int = 0


@dataclass
class FilterCriteria:
    """Active list filters. Empty strings / None mean 'not filtering on this'."""
    search: str = ''
    status: Optional[CompanyStatus] = None
    commission_min: Optional[float] = None
    commission_max: Optional[float] = None
    date_start: Optional[date] = None
    date_end: Optional[date] = None
    partnership_manager: str = ''
    account_owner: str = ''
