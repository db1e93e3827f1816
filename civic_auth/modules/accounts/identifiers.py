"""Classification of raw login identifiers into FIN or phone lookups."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from civic_auth.core.errors import ValidationFailed

FIN_PATTERN = re.compile(r"^\d{12}$")
DEFAULT_COUNTRY_CODE = "251"


class IdentifierKind(str, Enum):
    FIN = "fin"
    PHONE = "phone"


@dataclass(frozen=True)
class LoginIdentifier:
    kind: IdentifierKind
    value: str
    candidates: Tuple[str, ...]


def is_valid_fin(value) -> bool:
    # re's \d also matches non-ASCII digits
    return isinstance(value, str) and value.isascii() and bool(FIN_PATTERN.match(value))


def phone_variants(raw: str, country_code: str = DEFAULT_COUNTRY_CODE) -> Tuple[str, ...]:
    """Return every stored representation a phone number may have.

    ``09XXXXXXXX`` also matches ``+2519XXXXXXXX`` and the other way round.
    Anything else is only matched verbatim.
    """
    international = f"+{country_code}9"
    variants = [raw]
    if raw.startswith("09"):
        variants.append(f"+{country_code}{raw[1:]}")
    elif raw.startswith(international):
        variants.append("0" + raw[len(country_code) + 1:])
    return tuple(variants)


def classify_identifier(raw: str, country_code: str = DEFAULT_COUNTRY_CODE) -> LoginIdentifier:
    value = (raw or "").strip()
    if not value:
        raise ValidationFailed("Login input and password are required")
    if is_valid_fin(value):
        return LoginIdentifier(IdentifierKind.FIN, value, (value,))
    return LoginIdentifier(IdentifierKind.PHONE, value, phone_variants(value, country_code))


def mask_fin(fin: str) -> str:
    """Keep only the last four digits, for log lines."""
    if not fin:
        return ""
    return "*" * max(len(fin) - 4, 0) + fin[-4:]
