"""
Reports - export artifacts built from the company collection.

    map_csv          : location listing, fixed column order, UTF-8 BOM
    summary_rows     : consolidated partner table (general report)
    geographic_rows  : partner table keyed by city/state
    html_report      : standalone HTML page with inline stats + table
    company_dossier  : printable per-company record
"""

import csv
import io
import logging
import re
from datetime import datetime
from html import escape
from pathlib import Path
from typing import List, Optional

from partnerhub.bus.events import bus, EVENT_EXPORT_WRITTEN
from partnerhub.config import config
from partnerhub.engine.address import city_state, compose_address
from partnerhub.engine.dashboard import compute_stats
from partnerhub.engine.validators import format_document, mask_cep, mask_phone
from partnerhub.models import Company, CompanyStatus

logger = logging.getLogger(__name__)

MAP_CSV_HEADERS = ['Company', 'Document', 'Status', 'Latitude', 'Longitude', 'Address', 'Responsible']
SUMMARY_HEADERS = ['Agency', 'Account Owner', 'Partnership Manager', 'Phone', 'Status', 'Commission', 'Brokers']
GEOGRAPHIC_HEADERS = ['Company', 'Document', 'City/State', 'Status', 'Commission']


def _status_label(company: Company) -> str:
    return 'Active' if company.status == CompanyStatus.ACTIVE else 'Inactive'


def _document(company: Company) -> str:
    return format_document(company.doc_type, company.document, company.license_region)


def _rate(company: Company) -> str:
    return f"{company.commission_rate:g}%"


# =============================================================================
# TABLES
# =============================================================================

def map_csv(companies: List[Company]) -> str:
    """Strings quoted (embedded quotes doubled), coordinates left bare."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    writer.writerow(MAP_CSV_HEADERS)
    for c in companies:
        writer.writerow([
            c.name,
            _document(c),
            _status_label(c),
            c.location.lat,
            c.location.lng,
            compose_address(c.address),
            c.responsible or '',
        ])
    return '\ufeff' + buffer.getvalue()


def summary_rows(companies: List[Company]) -> List[List[str]]:
    return [
        [
            c.name,
            c.account_owner,
            c.partnership_manager or c.responsible or '',
            mask_phone(c.phone),
            _status_label(c),
            _rate(c),
            str(c.broker_count),
        ]
        for c in companies
    ]


def geographic_rows(companies: List[Company]) -> List[List[str]]:
    return [
        [c.name, _document(c), city_state(c.address), _status_label(c), _rate(c)]
        for c in companies
    ]


def render_table(headers: List[str], rows: List[List[str]]) -> str:
    """Fixed-width text table for terminal and print output."""
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]
    line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    out = [line, "-" * len(line)]
    out.extend("  ".join(cell.ljust(w) for cell, w in zip(row, widths)) for row in rows)
    return "\n".join(out)


def summary_report(companies: List[Company], generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    active = sum(1 for c in companies if c.status == CompanyStatus.ACTIVE)
    return "\n".join([
        "PartnerHub",
        "Consolidated Partner Report",
        f"Issued: {generated_at:%d/%m/%Y %H:%M}",
        "",
        f"Total partners: {len(companies)} ({active} active)",
        "",
        render_table(SUMMARY_HEADERS, summary_rows(companies)),
        "",
    ])


def geographic_report(companies: List[Company], generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    return "\n".join([
        "PartnerHub",
        "Geographic Partner Report",
        f"Issued: {generated_at:%d/%m/%Y %H:%M}",
        "",
        render_table(GEOGRAPHIC_HEADERS, geographic_rows(companies)),
        "",
    ])


# =============================================================================
# HTML
# =============================================================================

_HTML_ROW = """            <tr>
                <td class="name">{name}</td>
                <td class="doc">{document}</td>
                <td class="owner">{owner}</td>
                <td>{brokers}</td>
                <td class="rate">{rate}</td>
                <td class="status {status_class}">{status}</td>
            </tr>"""

_HTML_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Partner Report - PartnerHub</title>
    <style>
        body {{ background-color: #f8fafc; font-family: sans-serif; padding: 2rem; color: #1e293b; }}
        .card {{ background: white; border-radius: 1rem; box-shadow: 0 4px 6px -1px rgb(0 0 0 / 0.1); padding: 1.5rem; }}
        .stats {{ display: grid; grid-template-columns: repeat(3, 1fr); gap: 1.5rem; margin-bottom: 2rem; }}
        .stats p.value {{ font-size: 2rem; font-weight: bold; margin: 0; }}
        table {{ width: 100%; border-collapse: collapse; }}
        th, td {{ padding: 0.75rem; text-align: left; border-bottom: 1px solid #e2e8f0; }}
        .status.active {{ color: #15803d; }}
        .status.inactive {{ color: #64748b; }}
    </style>
</head>
<body>
    <header>
        <h1>PartnerHub</h1>
        <p>Strategic Report of Partner Agencies</p>
        <p class="generated">Generated: {generated}</p>
    </header>
    <section class="stats">
        <div class="card"><p>Total Partners</p><p class="value">{total}</p></div>
        <div class="card"><p>Total Brokers</p><p class="value">{brokers}</p></div>
        <div class="card"><p>Active</p><p class="value">{active}</p></div>
    </section>
    <section class="card">
        <table>
            <thead>
                <tr><th>Company</th><th>Document</th><th>Account Owner</th><th>Brokers</th><th>Commission</th><th>Status</th></tr>
            </thead>
            <tbody>
{rows}
            </tbody>
        </table>
    </section>
</body>
</html>
"""


def html_report(companies: List[Company], generated_at: Optional[datetime] = None) -> str:
    """Self-contained HTML document; every company value is escaped."""
    generated_at = generated_at or datetime.now()
    stats = compute_stats(companies)
    active = sum(1 for c in companies if c.status == CompanyStatus.ACTIVE)

    rows = "\n".join(
        _HTML_ROW.format(
            name=escape(c.name),
            document=escape(_document(c)),
            owner=escape(c.account_owner),
            brokers=c.broker_count,
            rate=escape(_rate(c)),
            status_class=c.status.value,
            status=_status_label(c),
        )
        for c in companies
    )

    return _HTML_PAGE.format(
        generated=f"{generated_at:%d/%m/%Y %H:%M}",
        total=stats.total_companies,
        brokers=stats.total_brokers,
        active=active,
        rows=rows,
    )


# =============================================================================
# DOSSIER
# =============================================================================

def company_dossier(company: Company) -> str:
    """Printable technical and commercial record for one partner."""
    registered = company.registration_date.strftime('%d/%m/%Y') if company.registration_date else 'N/A'
    lines = [
        "PartnerHub",
        "INDIVIDUAL TECHNICAL AND COMMERCIAL RECORD",
        "=" * 60,
        company.name.upper(),
        f"CURRENT STATUS: {_status_label(company).upper()}",
        "=" * 60,
        "",
        "01. MANAGEMENT AND CONTACTS",
        f"  Operational contact: {company.responsible or 'Not provided'}",
        f"  Partnership manager: {company.partnership_manager or 'Not provided'}",
        f"  Account owner:       {company.account_owner}",
        f"  Email:               {company.email}",
        f"  Phone:               {mask_phone(company.phone)}",
        f"  Partner since:       {registered}",
        "",
        "02. AGREEMENT AND LOCATION",
        f"  Commission rate:     {_rate(company)}",
        f"  Team:                {company.broker_count} brokers",
        f"  Document:            {company.doc_type.value} {_document(company)}",
        f"  Postal code:         {mask_cep(company.postal_code)}",
        f"  Address:             {compose_address(company.address)}",
        f"  Coordinates:         {company.location.lat:.5f}, {company.location.lng:.5f}",
    ]

    if company.contact_history:
        lines += ["", "03. CONTACT HISTORY"]
        for entry in company.contact_history:
            lines.append(f"  [{entry.date}] {entry.channel.value}: {entry.summary}")
            if entry.next_contact_date:
                lines.append(f"      follow-up on {entry.next_contact_date}")

    if company.notes:
        lines += ["", "NOTES", f"  {company.notes}"]

    return "\n".join(lines) + "\n"


def _slug(name: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-') or 'company'


def dossier_prefix(company: Company) -> str:
    return f"record_{_slug(company.name)}"


# =============================================================================
# FILE OUTPUT
# =============================================================================

def write_export(content: str, prefix: str, suffix: str, directory: Optional[Path] = None) -> Path:
    """Write an export under EXPORT_DIR with a timestamped name."""
    directory = Path(directory or config.EXPORT_DIR)
    directory.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    path = directory / f"{prefix}_{timestamp}.{suffix}"
    path.write_text(content, encoding='utf-8')

    logger.info(f"Export written to {path}")
    bus.emit(EVENT_EXPORT_WRITTEN, {'path': str(path), 'kind': suffix})
    return path
