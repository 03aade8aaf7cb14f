"""
Title parsing for operational task titles.

Titles follow the convention "<ordinal>º <COMPANY> (<details>)", e.g.
"661º UNIVAR (PO 4527659420)". Two extraction modes exist:

- strict: requires the ordinal marker "º"; used to build the company list
  that drives tenant selection.
- lenient: ordered patterns that also accept "661 - UNIVAR" and
  "661 UNIVAR"; used for the ref/company of a record and for company sync.

Nothing here raises; absence is signalled with None or "".
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass

STRICT_COMPANY_PATTERN = re.compile(r"^\d+[º°](?:\.\d+)?\s+([^(]+?)(?:\s*\(.*)?$")

# Most specific first
TITLE_PATTERNS = [
    re.compile(r"^(\d+)[º°]?\s+([^(\-–]+?)(?:\s*[(\-–]|$)"),
    re.compile(r"^(\d+)\s*[-–]\s*([^(\-–]+)"),
    re.compile(r"^(\d+)\s+([A-Z][^(\-–\d]*)"),
]

LEADING_ORDINAL = re.compile(r"^\s*(\d+)")

MIN_COMPANY_LENGTH = 2
MAX_COMPANY_LENGTH = 50
COMPANY_ID_MAX_LENGTH = 20


@dataclass(frozen=True)
class TitleParts:
    """Ordinal reference and company name parsed from a title."""

    ref: str
    company: str


def is_valid_company_name(name: str, max_length: int | None = None) -> bool:
    """Sanity checks shared by both extraction modes."""
    if len(name) < MIN_COMPANY_LENGTH:
        return False
    if max_length is not None and len(name) > max_length:
        return False
    if re.fullmatch(r"[\d\s]+", name):
        return False
    return bool(re.search(r"[A-Za-zÀ-ÿ]", name))


def extract_company_strict(title: str | None) -> str | None:
    """
    Company name from a title with a leading "<n>º" ordinal.

    "122º WCB" -> "WCB"; "DURI TRADING" -> None.
    """
    if not title:
        return None

    match = STRICT_COMPANY_PATTERN.match(title.strip())
    if not match:
        return None

    name = match.group(1).strip().upper()
    return name if is_valid_company_name(name) else None


def parse_title(title: str | None) -> TitleParts | None:
    """Apply the lenient patterns in order; first valid match wins."""
    if not title:
        return None

    text = title.strip()
    for pattern in TITLE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        name = match.group(2).strip().upper()
        if is_valid_company_name(name, MAX_COMPANY_LENGTH):
            return TitleParts(ref=match.group(1), company=name)
    return None


def extract_reference(title: str | None) -> str:
    """Leading ordinal number of a title, or ""."""
    if not title:
        return ""
    match = LEADING_ORDINAL.match(title)
    return match.group(1) if match else ""


def generate_company_id(name: str) -> str:
    """Compact id used for the company selection ("Porto Alegre" -> "portoalegre")."""
    return re.sub(r"[^a-z0-9]", "", name.lower())[:COMPANY_ID_MAX_LENGTH]


def company_slug(name: str) -> str:
    """URL slug ("WCB & CIA" -> "wcb-cia")."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def format_display_name(name: str) -> str:
    """Short names (acronyms) stay as-is; longer names get words over 3 chars capitalized."""
    if len(name) <= 6:
        return name
    words = [word for word in re.split(r"[\s&-]+", name) if word]
    return " ".join(word.capitalize() if len(word) > 3 else word for word in words)


def strip_accents(text: str) -> str:
    normalized = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def generate_tracking_id(title: str) -> str:
    """Stable record id derived from the title ("661º UNIVAR (PO 1)" -> "661univarpo1")."""
    text = strip_accents(title.lower())
    text = re.sub(r"[°\s\-()]", "", text)
    return re.sub(r"[^a-z0-9]", "", text)
