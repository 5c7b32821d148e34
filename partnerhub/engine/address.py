"""
Address formatting.

Addresses are kept as structured components; the one-line display string is
derived from them and never parsed back, except when migrating legacy records
that only carry the flat string.
"""

import logging

from partnerhub.models import Address

logger = logging.getLogger(__name__)


def compose_address(address: Address) -> str:
    """'Street, Number[ - Complement] - Neighborhood - City/ST'"""
    complement = f" - {address.complement}" if address.complement else ""
    return (
        f"{address.street}, {address.number}{complement}"
        f" - {address.neighborhood} - {address.city}/{address.state}"
    )


def city_state(address: Address) -> str:
    if address.city and address.state:
        return f"{address.city}/{address.state}"
    return address.city or address.state or 'N/A'


def parse_legacy_address(text: str) -> Address:
    """
    Best-effort split of a legacy flat address string.

    Lossy: a complement or street containing ' - ' or ', ' lands in the wrong
    field. Only used for importing old records.
    """
    if not text:
        return Address()

    parts = text.split(' - ')
    main = parts[0].split(', ', 1)
    city, _, state = parts[-1].partition('/') if len(parts) > 1 else ('', '', '')
    complement = ' - '.join(parts[1:-2]).strip() if len(parts) > 3 else ''

    address = Address(
        street=main[0].strip(),
        number=main[1].strip() if len(main) > 1 else '',
        neighborhood=parts[-2].strip() if len(parts) > 2 else '',
        complement=complement or None,
        city=city.strip(),
        state=state.strip(),
    )
    logger.debug(f"parse_legacy_address: {text!r} -> {address}")
    return address
