"""
Company list derivation from tracking data.

The selector list is built from strict title extraction only: a title
without a leading "<n>º" contributes no company. Sync into the companies
table uses the lenient parse plus the EMPRESA custom field.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from maritime_tracking.asana.field_mapper import map_field, parse_custom_fields
from maritime_tracking.companies.models import CompanyOption
from maritime_tracking.tracking.models import TrackingRecord
from maritime_tracking.tracking.title_parser import (
    MAX_COMPANY_LENGTH,
    MIN_COMPANY_LENGTH,
    extract_company_strict,
    format_display_name,
    generate_company_id,
    parse_title,
)

UNIDENTIFIED_COMPANY = "NÃO_IDENTIFICADO"


def extract_companies(records: Iterable[TrackingRecord]) -> list[CompanyOption]:
    """Distinct companies (strict extraction), sorted by name."""
    names = {name for record in records if (name := extract_company_strict(record.title))}
    return [
        CompanyOption(id=generate_company_id(name), name=name, display_name=format_display_name(name))
        for name in sorted(names)
    ]


def extract_company_names_loose(tasks: Iterable[Mapping[str, Any]]) -> list[str]:
    """Company names from raw tasks: lenient title parse and the EMPRESA field."""
    names: set[str] = set()
    for task in tasks:
        title = task.get("name")
        if not title:
            continue

        parts = parse_title(title)
        if parts:
            names.add(parts.company)

        empresa = map_field(parse_custom_fields(task.get("custom_fields")), "empresa").upper()
        if MIN_COMPANY_LENGTH <= len(empresa) <= MAX_COMPANY_LENGTH:
            names.add(empresa)

    names.discard(UNIDENTIFIED_COMPANY)
    return sorted(names)


def get_company_stats(records: Iterable[TrackingRecord]) -> dict[str, int]:
    """Record count per company, highest first."""
    counts = Counter(record.company for record in records)
    return dict(counts.most_common())
