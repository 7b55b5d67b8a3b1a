"""
Text normalization for contact fields.

Phone numbers, e-mail domains and names arrive in inconsistent shapes
from the two sources. The helpers here are pure and never raise; the
rules use them to decide fixability and the correctors to repair.
"""

import math
import re
from typing import Any

from conformer.constants import PHONE_PATTERN

# Separators people type into phone numbers
_PHONE_SEPARATORS = re.compile(r"[\s.\-()/]")

# Domain misspellings seen in customer exports
DOMAIN_TYPOS: dict[str, str] = {
    "gmial.com": "gmail.com",
    "gmai.com": "gmail.com",
    "gmail.con": "gmail.com",
    "yahooo.com": "yahoo.com",
    "yaho.com": "yahoo.com",
    "hotmial.com": "hotmail.com",
    "outloook.com": "outlook.com",
}

# UTF-8 text decoded once as Windows-1252 or Latin-1
MOJIBAKE: dict[str, str] = {
    "Ã¡": "á",
    "Ã ": "à",
    "Ã£": "ã",
    "Ã¢": "â",
    "Ãª": "ê",
    "Ã©": "é",
    "Ã´": "ô",
    "Ã³": "ó",
    "Ãº": "ú",
    "Ã­": "í",
    "Ã½": "ý",
    "áº¡": "ạ",
    "áº£": "ả",
    "á»‹": "ị",
    "á»¯": "ữ",
    "Æ°": "ư",
    "Æ¡": "ơ",
    "Ä‘": "đ",
    "Ä\x91": "đ",
    "Ä\x90": "Đ",
}


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def collapse_whitespace(text: str) -> str:
    """Trim and reduce every whitespace run to a single space."""
    return " ".join(text.split())


def repair_mojibake(text: str) -> str:
    """Undo common double-encoding artifacts in Vietnamese text."""
    for wrong, right in MOJIBAKE.items():
        text = text.replace(wrong, right)
    return text


def normalize_phone(value: Any) -> str | None:
    """
    Normalize a phone number to the domestic ``0xxxxxxxxx`` form.

    Separators are removed and an international ``+84``/``84`` prefix is
    replaced by ``0``. Returns None when the result is still not a valid
    number.
    """
    if is_blank(value):
        return None
    digits = _PHONE_SEPARATORS.sub("", str(value))
    if digits.startswith("+84"):
        digits = "0" + digits[3:]
    elif digits.startswith("84") and len(digits) in (11, 12):
        digits = "0" + digits[2:]
    if PHONE_PATTERN.fullmatch(digits):
        return digits
    return None


def fix_email_domain(email: str) -> str:
    """Replace a misspelled domain from DOMAIN_TYPOS, if any."""
    local, sep, domain = email.rpartition("@")
    if not sep:
        return email
    return f"{local}@{DOMAIN_TYPOS.get(domain, domain)}"
