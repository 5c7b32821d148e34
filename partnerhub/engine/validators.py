"""
Validators - document check digits and contact-field formats.
Pure functions, no I/O. Field validators return None when the value is valid,
otherwise a human-readable reason.
"""

import re
from typing import Optional

from partnerhub.models import DocType

BR_STATES = (
    'AC', 'AL', 'AP', 'AM', 'BA', 'CE', 'DF', 'ES', 'GO', 'MA', 'MT', 'MS', 'MG',
    'PA', 'PB', 'PR', 'PE', 'PI', 'RJ', 'RN', 'RS', 'RO', 'RR', 'SC', 'SP', 'SE', 'TO',
)

# Valid Brazilian area codes (DDD)
VALID_AREA_CODES = frozenset({
    11, 12, 13, 14, 15, 16, 17, 18, 19,
    21, 22, 24, 27, 28,
    31, 32, 33, 34, 35, 37, 38,
    41, 42, 43, 44, 45, 46, 47, 48, 49,
    51, 53, 54, 55,
    61, 62, 63, 64, 65, 66, 67, 68, 69,
    71, 73, 74, 75, 77, 79,
    81, 82, 83, 84, 85, 86, 87, 88, 89,
    91, 92, 93, 94, 95, 96, 97, 98, 99,
})

_CNPJ_WEIGHTS_1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
_CNPJ_WEIGHTS_2 = (6,) + _CNPJ_WEIGHTS_1

_EMAIL_RE = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r'@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$'
)

_URL_RE = re.compile(
    r'^(https?://)?'
    r'((([a-z\d]([a-z\d-]*[a-z\d])?)\.)+[a-z]{2,}'   # domain name
    r'|((\d{1,3}\.){3}\d{1,3}))'                      # or IPv4
    r'(:\d+)?'                                        # port
    r'(/[-a-z\d%_.~+]*)*'                             # path
    r'(\?[;&a-z\d%_.~+=-]*)?'                         # query
    r'(#[-a-z\d_]*)?$',                               # fragment
    re.IGNORECASE,
)

_NON_DIGITS = re.compile(r'\D')
_NON_ALNUM = re.compile(r'[^0-9A-Za-z]')


def only_digits(value: Optional[str]) -> str:
    return _NON_DIGITS.sub('', value or '')


def _all_same(digits: str) -> bool:
    return len(set(digits)) == 1


# =============================================================================
# DOCUMENT VALIDATORS
# =============================================================================

def _cnpj_check_digit(digits: str, weights) -> int:
    remainder = sum(int(d) * w for d, w in zip(digits, weights)) % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_cnpj(digits: str) -> bool:
    """14-digit tax ID with two mod-11 check digits (weights cycle 2-9 from the right)."""
    if len(digits) != 14 or not digits.isdigit() or _all_same(digits):
        return False
    first = _cnpj_check_digit(digits[:12], _CNPJ_WEIGHTS_1)
    if first != int(digits[12]):
        return False
    second = _cnpj_check_digit(digits[:13], _CNPJ_WEIGHTS_2)
    return second == int(digits[13])


def _cpf_check_digit(digits: str, start_weight: int) -> int:
    total = sum(int(d) * w for d, w in zip(digits, range(start_weight, 1, -1)))
    remainder = (total * 10) % 11
    return 0 if remainder in (10, 11) else remainder


def is_valid_cpf(digits: str) -> bool:
    """11-digit person ID with two mod-11 check digits (weights 10→2, then 11→2)."""
    if len(digits) != 11 or not digits.isdigit() or _all_same(digits):
        return False
    if _cpf_check_digit(digits[:9], 10) != int(digits[9]):
        return False
    return _cpf_check_digit(digits[:10], 11) == int(digits[10])


def is_valid_creci(number: str, region: Optional[str]) -> bool:
    """Broker license: alphanumeric, at least 3 characters, plus a valid region code."""
    token = _NON_ALNUM.sub('', number or '')
    return len(token) >= 3 and (region or '').upper() in BR_STATES


def validate_document(doc_type: DocType, value: str, region: Optional[str] = None) -> Optional[str]:
    """Check an identifier against its declared type."""
    if not value:
        return f"{doc_type.value} is required."

    if doc_type == DocType.CNPJ:
        digits = only_digits(value)
        if len(digits) != 14:
            return "CNPJ must have 14 digits."
        return None if is_valid_cnpj(digits) else "Invalid CNPJ check digits."

    if doc_type == DocType.CPF:
        digits = only_digits(value)
        if len(digits) != 11:
            return "CPF must have 11 digits."
        return None if is_valid_cpf(digits) else "Invalid CPF check digits."

    if not region or region.upper() not in BR_STATES:
        return "CRECI requires a valid 2-letter region code."
    if not is_valid_creci(value, region):
        return "CRECI number must have at least 3 letters or digits."
    return None


# =============================================================================
# CONTACT-FIELD VALIDATORS
# =============================================================================

def validate_email(value: Optional[str], required: bool = True) -> Optional[str]:
    if not value:
        return "Email is required." if required else None
    if not _EMAIL_RE.match(value):
        return "Invalid email address."
    return None


def validate_phone(value: Optional[str], required: bool = True) -> Optional[str]:
    digits = only_digits(value)
    if not digits:
        return "Phone is required." if required else None
    if len(digits) < 10 or len(digits) > 11:
        return "Phone must have 10 or 11 digits including area code."
    if _all_same(digits):
        return "Phone cannot be a single repeated digit."
    if int(digits[:2]) not in VALID_AREA_CODES:
        return f"Invalid area code: {digits[:2]}."
    if len(digits) == 11 and digits[2] != '9':
        return "Mobile numbers must start with 9 after the area code."
    return None


def validate_url(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if not _URL_RE.match(value):
        return "Invalid website URL."
    return None


def validate_postal_code(value: Optional[str]) -> Optional[str]:
    if len(only_digits(value)) != 8:
        return "Postal code (CEP) must have 8 digits."
    return None


# =============================================================================
# DISPLAY MASKS
# =============================================================================

def mask_cnpj(value: str) -> str:
    d = only_digits(value)[:14]
    if len(d) != 14:
        return d
    return f"{d[:2]}.{d[2:5]}.{d[5:8]}/{d[8:12]}-{d[12:]}"


def mask_cpf(value: str) -> str:
    d = only_digits(value)[:11]
    if len(d) != 11:
        return d
    return f"{d[:3]}.{d[3:6]}.{d[6:9]}-{d[9:]}"


def mask_cep(value: str) -> str:
    d = only_digits(value)[:8]
    if len(d) != 8:
        return d
    return f"{d[:5]}-{d[5:]}"


def mask_phone(value: str) -> str:
    d = only_digits(value)[:11]
    if len(d) == 11:
        return f"({d[:2]}) {d[2:7]}-{d[7:]}"
    if len(d) == 10:
        return f"({d[:2]}) {d[2:6]}-{d[6:]}"
    return d


def format_document(doc_type: DocType, value: str, region: Optional[str] = None) -> str:
    if doc_type == DocType.CNPJ:
        return mask_cnpj(value)
    if doc_type == DocType.CPF:
        return mask_cpf(value)
    return f"{value}/{region}" if region else value
