"""
Unit tests for partnerhub/engine/dashboard.py.
Pure functions over Company lists - no store, no mocking.
"""

from datetime import date

import pytest

from partnerhub.engine.dashboard import (
    companies_near, compute_stats, distance_meters, filter_companies, matches,
    unique_account_owners, unique_partnership_managers, upcoming_contacts,
)
from partnerhub.models import Company, CompanyStatus, DashboardStats, DocType, FilterCriteria, Location


def _company(**overrides) -> Company:
    fields = dict(
        id='c1', name='Imobiliária Norte', document='11222333000181',
        account_owner='Ana', broker_count=10, commission_rate=5.0,
        registration_date=date(2026, 3, 10),
    )
    fields.update(overrides)
    return Company(**fields)


NORTE = _company()
SUL = _company(
    id='c2', name='Sul Imóveis', document='11444777000161', account_owner='Bruno',
    partnership_manager='Carla', broker_count=5, commission_rate=3.0,
    status=CompanyStatus.INACTIVE, registration_date=date(2026, 5, 1),
)
LESTE = _company(
    id='c3', name='Leste Corretora', document='52998224725', account_owner='Ana',
    partnership_manager='Diego', broker_count=0, commission_rate=8.0,
    registration_date=None,
)
ALL = [NORTE, SUL, LESTE]


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

class TestFilter:

    def test_no_criteria_returns_everything_in_order(self):
        assert filter_companies(ALL, FilterCriteria()) == ALL

    def test_search_name_case_insensitive(self):
        assert filter_companies(ALL, FilterCriteria(search='norte')) == [NORTE]

    def test_search_raw_document(self):
        assert filter_companies(ALL, FilterCriteria(search='114447')) == [SUL]

    def test_search_masked_document(self):
        assert filter_companies(ALL, FilterCriteria(search='11.222.333/')) == [NORTE]

    def test_status(self):
        result = filter_companies(ALL, FilterCriteria(status=CompanyStatus.INACTIVE))
        assert result == [SUL]

    def test_commission_bounds_inclusive(self):
        result = filter_companies(ALL, FilterCriteria(commission_min=3.0, commission_max=5.0))
        assert result == [NORTE, SUL]

    def test_date_range_inclusive(self):
        criteria = FilterCriteria(date_start=date(2026, 3, 10), date_end=date(2026, 4, 30))
        assert filter_companies(ALL, criteria) == [NORTE]

    def test_missing_registration_date_excluded_by_date_filter(self):
        criteria = FilterCriteria(date_end=date(2030, 1, 1))
        assert LESTE not in filter_companies(ALL, criteria)

    def test_partnership_manager_substring(self):
        assert filter_companies(ALL, FilterCriteria(partnership_manager='car')) == [SUL]

    def test_account_owner_substring(self):
        assert filter_companies(ALL, FilterCriteria(account_owner='ANA')) == [NORTE, LESTE]

    def test_all_criteria_combine(self):
        criteria = FilterCriteria(account_owner='ana', commission_min=6)
        assert filter_companies(ALL, criteria) == [LESTE]

    def test_matches_is_pure(self):
        assert matches(NORTE, FilterCriteria(search='Norte'))
        assert not matches(NORTE, FilterCriteria(search='Sul'))

    def test_search_license_number_case_insensitive(self):
        broker = _company(id='c4', name='Corretor Autônomo', doc_type=DocType.CRECI,
                          document='12345-J', license_region='SP')
        assert filter_companies([broker], FilterCriteria(search='12345-j')) == [broker]

    @pytest.mark.parametrize('criteria', [
        FilterCriteria(),
        FilterCriteria(search='imob'),
        FilterCriteria(account_owner='ana', commission_min=3.0),
        FilterCriteria(status=CompanyStatus.INACTIVE, date_start=date(2026, 1, 1)),
    ])
    def test_filtering_is_idempotent(self, criteria):
        once = filter_companies(ALL, criteria)
        assert filter_companies(once, criteria) == once
        assert filter_companies(ALL, criteria) == once


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

class TestStats:

    def test_empty_collection(self):
        assert compute_stats([]) == DashboardStats(0, 0, 0, 0)

    def test_totals(self):
        stats = compute_stats(ALL)
        assert stats.total_companies == 3
        assert stats.total_brokers == 15
        assert stats.avg_brokers == 5
        assert stats.active_percentage == 67

    def test_half_rounds_up(self):
        stats = compute_stats([_company(broker_count=1), _company(id='c2', broker_count=2)])
        assert stats.avg_brokers == 2

    def test_all_active(self):
        assert compute_stats([NORTE]).active_percentage == 100


# ---------------------------------------------------------------------------
# Upcoming follow-ups
# ---------------------------------------------------------------------------

class TestUpcoming:

    TODAY = date(2026, 6, 1)

    def test_sorted_soonest_first_and_limited(self):
        companies = [
            _company(id=str(i), next_contact_date=date(2026, 6, 1 + i))
            for i in (5, 1, 3, 2, 4, 6)
        ]
        result = upcoming_contacts(companies, today=self.TODAY, limit=5)
        assert [c.id for c in result] == ['1', '2', '3', '4', '5']

    def test_includes_today_excludes_past(self):
        today = _company(id='today', next_contact_date=self.TODAY)
        past = _company(id='past', next_contact_date=date(2026, 5, 31))
        assert upcoming_contacts([past, today], today=self.TODAY) == [today]

    def test_skips_companies_without_follow_up(self):
        assert upcoming_contacts([NORTE], today=self.TODAY) == []


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

def test_unique_partnership_managers_sorted_without_blanks():
    assert unique_partnership_managers(ALL + [SUL]) == ['Carla', 'Diego']


def test_unique_account_owners():
    assert unique_account_owners(ALL) == ['Ana', 'Bruno']


# ---------------------------------------------------------------------------
# Proximity
# ---------------------------------------------------------------------------

def test_distance_zero():
    assert distance_meters(-23.55, -46.63, -23.55, -46.63) == 0


def test_distance_one_degree_latitude():
    assert distance_meters(0, 0, 1, 0) == pytest.approx(111195, rel=1e-3)


def test_companies_near_nearest_first():
    here = _company(id='here', location=Location(-23.5505, -46.6333))
    close = _company(id='close', location=Location(-23.5600, -46.6333))
    far = _company(id='far', location=Location(-22.9068, -43.1729))
    result = companies_near([close, far, here], -23.5505, -46.6333, radius_m=2000)
    assert [c.id for c in result] == ['here', 'close']
