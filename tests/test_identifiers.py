from __future__ import annotations

import pytest

from civic_auth.core.errors import ValidationFailed
from civic_auth.modules.accounts.identifiers import (
    IdentifierKind, classify_identifier, is_valid_fin, mask_fin, phone_variants
)


@pytest.mark.parametrize("value", ["123456789012", "000000000000"])
def test_twelve_digits_is_a_fin(value):
    assert is_valid_fin(value)


@pytest.mark.parametrize("value", ["12345678901", "1234567890123", "12345678901a", "", None, "１２３４５６７８９０１２"])
def test_other_values_are_not_fins(value):
    assert not is_valid_fin(value)


def test_twelve_digit_identifier_is_always_a_fin_lookup():
    identifier = classify_identifier("251911223344")
    assert identifier.kind == IdentifierKind.FIN
    assert identifier.candidates == ("251911223344",)


def test_whitespace_is_trimmed_before_classification():
    identifier = classify_identifier("  123456789012\n")
    assert identifier.kind == IdentifierKind.FIN
    assert identifier.value == "123456789012"


def test_local_phone_also_matches_international_form():
    identifier = classify_identifier(" 0911223344 ")
    assert identifier.kind == IdentifierKind.PHONE
    assert set(identifier.candidates) == {"0911223344", "+251911223344"}


def test_international_phone_also_matches_local_form():
    assert set(phone_variants("+251911223344")) == {"+251911223344", "0911223344"}


def test_unrecognised_identifier_is_a_plain_phone_lookup():
    identifier = classify_identifier("alice@example.com")
    assert identifier.kind == IdentifierKind.PHONE
    assert identifier.candidates == ("alice@example.com",)


def test_country_code_is_configurable():
    assert set(phone_variants("0712345678", country_code="254")) == {"0712345678", "+254712345678"}


def test_blank_identifier_is_rejected():
    with pytest.raises(ValidationFailed):
        classify_identifier("   ")


def test_mask_fin_keeps_last_four_digits():
    assert mask_fin("123456789012") == "********9012"
