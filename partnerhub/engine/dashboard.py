"""
Dashboard - derived view state over the company collection.
Filtering, aggregate stats, upcoming follow-ups, input suggestions and
proximity search. Every function is pure: same input, same output.
"""

import logging
import math
import re
from datetime import date
from typing import Iterable, List, Optional

from partnerhub.engine.validators import only_digits
from partnerhub.models import Company, CompanyStatus, DashboardStats, FilterCriteria

logger = logging.getLogger(__name__)

_EARTH_RADIUS_METERS = 6371008.8
_DOCUMENT_SEARCH_RE = re.compile(r'^[\d.\-/ ]+$')


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# FILTERING
# =============================================================================

def _matches_search(company: Company, term: str) -> bool:
    if term.lower() in company.name.lower() or term.lower() in company.document.lower():
        return True
    # Masked document input ("11.222.333/") still matches digit-only storage
    if _DOCUMENT_SEARCH_RE.match(term):
        digits = only_digits(term)
        return bool(digits) and digits in only_digits(company.document)
    return False


def _contains(value: Optional[str], term: str) -> bool:
    return term.lower() in (value or '').lower()


def matches(company: Company, criteria: FilterCriteria) -> bool:
    """True when the company satisfies every criterion that is set."""
    if criteria.search and not _matches_search(company, criteria.search):
        return False
    if criteria.status is not None and company.status != criteria.status:
        return False
    if criteria.commission_min is not None and company.commission_rate < criteria.commission_min:
        return False
    if criteria.commission_max is not None and company.commission_rate > criteria.commission_max:
        return False
    if criteria.date_start is not None or criteria.date_end is not None:
        registered = company.registration_date
        if registered is None:
            return False
        if criteria.date_start is not None and registered < criteria.date_start:
            return False
        if criteria.date_end is not None and registered > criteria.date_end:
            return False
    if criteria.partnership_manager and not _contains(company.partnership_manager, criteria.partnership_manager):
        return False
    if criteria.account_owner and not _contains(company.account_owner, criteria.account_owner):
        return False
    return True


def filter_companies(companies: Iterable[Company], criteria: FilterCriteria) -> List[Company]:
    """Ordered subset of companies matching all active criteria."""
    result = [c for c in companies if matches(c, criteria)]
    logger.debug(f"filter_companies: {len(result)} match {criteria}")
    return result


# =============================================================================
# AGGREGATION
# =============================================================================

def compute_stats(companies: List[Company]) -> DashboardStats:
    """Headline numbers over the full (unfiltered) collection."""
    total = len(companies)
    if total == 0:
        return DashboardStats()

    total_brokers = sum(c.broker_count for c in companies)
    active = sum(1 for c in companies if c.status == CompanyStatus.ACTIVE)

    return DashboardStats(
        total_companies=total,
        total_brokers=total_brokers,
        avg_brokers=_round_half_up(total_brokers / total),
        active_percentage=_round_half_up(active / total * 100),
    )


def upcoming_contacts(
    companies: Iterable[Company],
    today: Optional[date] = None,
    limit: int = 5,
) -> List[Company]:
    """Companies with a follow-up today or later, soonest first."""
    today = today or date.today()
    upcoming = [
        c for c in companies
        if c.next_contact_date is not None and c.next_contact_date >= today
    ]
    upcoming.sort(key=lambda c: c.next_contact_date)
    return upcoming[:limit]


# =============================================================================
# SUGGESTIONS
# =============================================================================

def _unique_sorted(values: Iterable[Optional[str]]) -> List[str]:
    seen = {}
    for value in values:
        if value and value not in seen:
            seen[value] = None
    return sorted(seen)


def unique_partnership_managers(companies: Iterable[Company]) -> List[str]:
    return _unique_sorted(c.partnership_manager for c in companies)


def unique_account_owners(companies: Iterable[Company]) -> List[str]:
    return _unique_sorted(c.account_owner for c in companies)


# =============================================================================
# PROXIMITY
# =============================================================================

def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle (haversine) distance between two points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * _EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def companies_near(
    companies: Iterable[Company],
    lat: float,
    lng: float,
    radius_m: float = 2000.0,
) -> List[Company]:
    """Companies within radius_m of a point, nearest first."""
    with_distance = [
        (distance_meters(lat, lng, c.location.lat, c.location.lng), c)
        for c in companies
    ]
    nearby = [(d, c) for d, c in with_distance if d <= radius_m]
    nearby.sort(key=lambda pair: pair[0])
    return [c for _, c in nearby]
