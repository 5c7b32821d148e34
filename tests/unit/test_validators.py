"""
Unit tests for partnerhub/engine/validators.py.
Pure functions - no I/O, no mocking required.
"""

import pytest

from partnerhub.engine.validators import (
    format_document, is_valid_cnpj, is_valid_cpf, is_valid_creci, mask_cep,
    mask_cnpj, mask_cpf, mask_phone, only_digits, validate_document,
    validate_email, validate_phone, validate_postal_code, validate_url,
)
from partnerhub.models import DocType


def _single_digit_flips(digits):
    """Every string that differs from digits in exactly one position."""
    for i, original in enumerate(digits):
        for replacement in "0123456789":
            if replacement != original:
                yield digits[:i] + replacement + digits[i + 1:]


# ---------------------------------------------------------------------------
# CNPJ
# ---------------------------------------------------------------------------

class TestCnpj:

    @pytest.mark.parametrize("digits", ["11222333000181", "11444777000161"])
    def test_valid(self, digits):
        assert is_valid_cnpj(digits)

    def test_wrong_check_digit(self):
        assert not is_valid_cnpj("11222333000182")

    def test_all_same_digits_rejected(self):
        assert not is_valid_cnpj("11111111111111")

    @pytest.mark.parametrize("digit", "0123456789")
    def test_every_repeated_digit_rejected(self, digit):
        assert not is_valid_cnpj(digit * 14)

    @pytest.mark.parametrize("valid", ["11222333000181", "11444777000161"])
    def test_any_single_digit_change_rejected(self, valid):
        flipped = [d for d in _single_digit_flips(valid) if is_valid_cnpj(d)]
        assert flipped == []

    def test_wrong_length(self):
        assert not is_valid_cnpj("1122233300018")

    def test_validate_document_accepts_masked_input(self):
        assert validate_document(DocType.CNPJ, "11.222.333/0001-81") is None

    def test_validate_document_short(self):
        assert validate_document(DocType.CNPJ, "11.222.333") == "CNPJ must have 14 digits."

    def test_validate_document_bad_check_digits(self):
        assert validate_document(DocType.CNPJ, "11222333000182") == "Invalid CNPJ check digits."


# ---------------------------------------------------------------------------
# CPF
# ---------------------------------------------------------------------------

class TestCpf:

    @pytest.mark.parametrize("digits", ["52998224725", "11144477735", "12345678909"])
    def test_valid(self, digits):
        assert is_valid_cpf(digits)

    @pytest.mark.parametrize("digits", ["52998224726", "12345678900", "00000000000"])
    def test_invalid(self, digits):
        assert not is_valid_cpf(digits)

    @pytest.mark.parametrize("digit", "0123456789")
    def test_every_repeated_digit_rejected(self, digit):
        assert not is_valid_cpf(digit * 11)

    def test_any_single_digit_change_rejected(self):
        flipped = [d for d in _single_digit_flips("52998224725") if is_valid_cpf(d)]
        assert flipped == []

    def test_validate_document_masked(self):
        assert validate_document(DocType.CPF, "529.982.247-25") is None

    def test_validate_document_wrong_length(self):
        assert validate_document(DocType.CPF, "5299822472") == "CPF must have 11 digits."

    def test_validate_document_bad_check_digits(self):
        assert validate_document(DocType.CPF, "52998224726") == "Invalid CPF check digits."


# ---------------------------------------------------------------------------
# CRECI
# ---------------------------------------------------------------------------

class TestCreci:

    def test_valid_with_region(self):
        assert is_valid_creci("12345-J", "SP")

    def test_lowercase_region_accepted(self):
        assert is_valid_creci("12345", "rj")

    def test_too_short(self):
        assert not is_valid_creci("1-2", "SP")

    def test_unknown_region(self):
        assert not is_valid_creci("12345", "XX")

    def test_validate_document_missing_region(self):
        assert validate_document(DocType.CRECI, "12345", None) == "CRECI requires a valid 2-letter region code."

    def test_validate_document_short_number(self):
        assert validate_document(DocType.CRECI, "12", "SP") == "CRECI number must have at least 3 letters or digits."

    def test_validate_document_ok(self):
        assert validate_document(DocType.CRECI, "12345-J", "SP") is None


def test_empty_document_is_required():
    assert validate_document(DocType.CPF, "") == "CPF is required."


# ---------------------------------------------------------------------------
# Email / phone / URL / postal code
# ---------------------------------------------------------------------------

class TestEmail:

    def test_valid(self):
        assert validate_email("contato@imobiliaria.com.br") is None

    def test_missing_at(self):
        assert validate_email("contato.imobiliaria.com") == "Invalid email address."

    def test_missing_tld(self):
        assert validate_email("contato@imobiliaria") == "Invalid email address."

    def test_required(self):
        assert validate_email("") == "Email is required."

    def test_optional_empty(self):
        assert validate_email("", required=False) is None


class TestPhone:

    def test_valid_mobile(self):
        assert validate_phone("(11) 98765-4321") is None

    def test_valid_landline(self):
        assert validate_phone("1133334444") is None

    def test_too_short(self):
        assert validate_phone("113333444") == "Phone must have 10 or 11 digits including area code."

    def test_repeated_digit(self):
        assert validate_phone("11111111111") == "Phone cannot be a single repeated digit."

    def test_invalid_area_code(self):
        assert validate_phone("20987654321") == "Invalid area code: 20."

    def test_mobile_without_leading_nine(self):
        assert validate_phone("11887654321") == "Mobile numbers must start with 9 after the area code."

    def test_required(self):
        assert validate_phone(None) == "Phone is required."

    def test_plain_mobile_digits(self):
        assert validate_phone("11999999999") is None

    def test_zero_area_code(self):
        assert validate_phone("00999999999") == "Invalid area code: 00."

    def test_mobile_with_eight_after_area_code(self):
        assert validate_phone("11899999999") == "Mobile numbers must start with 9 after the area code."


class TestUrl:

    @pytest.mark.parametrize("url", [
        "https://www.imobiliaria.com.br",
        "imobiliaria.com.br/contato",
        "http://192.168.0.1:8080/path?x=1#top",
    ])
    def test_valid(self, url):
        assert validate_url(url) is None

    def test_invalid(self):
        assert validate_url("not a url") == "Invalid website URL."

    def test_empty_is_fine(self):
        assert validate_url(None) is None


def test_postal_code_needs_eight_digits():
    assert validate_postal_code("01310-100") is None
    assert validate_postal_code("0131010") == "Postal code (CEP) must have 8 digits."


# ---------------------------------------------------------------------------
# Masks
# ---------------------------------------------------------------------------

def test_only_digits():
    assert only_digits("11.222.333/0001-81") == "11222333000181"
    assert only_digits(None) == ""


def test_mask_cnpj():
    assert mask_cnpj("11222333000181") == "11.222.333/0001-81"


def test_mask_cpf():
    assert mask_cpf("52998224725") == "529.982.247-25"


def test_mask_cep():
    assert mask_cep("01310100") == "01310-100"


def test_mask_phone_mobile_and_landline():
    assert mask_phone("11987654321") == "(11) 98765-4321"
    assert mask_phone("1133334444") == "(11) 3333-4444"


def test_partial_input_is_left_unmasked():
    assert mask_cnpj("11222") == "11222"


def test_format_document_creci_includes_region():
    assert format_document(DocType.CRECI, "12345-J", "SP") == "12345-J/SP"
    assert format_document(DocType.CNPJ, "11222333000181") == "11.222.333/0001-81"
