"""
Custom field mapping from Asana tasks to the tracking schema.

Asana custom fields arrive as name/value pairs whose value may live in
text_value, number_value, enum_value or display_value. Each field is parsed
once into a CustomFieldValue tagged with its kind, then looked up by logical
key through FIELD_MAPPINGS (names in the workspace are Portuguese and not
consistently cased or accented, hence the alias lists).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldKind(str, Enum):
    """Which representation carried the value."""

    TEXT = "text"
    NUMBER = "number"
    ENUM = "enum"
    DISPLAY = "display"
    EMPTY = "empty"


@dataclass(frozen=True)
class CustomFieldValue:
    kind: FieldKind
    text: str | None = None
    number: float | None = None

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> CustomFieldValue:
        """Pick the first populated representation: text, number, enum name, display."""
        text_value = raw.get("text_value")
        if text_value:
            return cls(FieldKind.TEXT, text=str(text_value))

        number_value = raw.get("number_value")
        if number_value is not None and not isinstance(number_value, bool):
            return cls(FieldKind.NUMBER, number=float(number_value))

        enum_value = raw.get("enum_value")
        if isinstance(enum_value, Mapping) and enum_value.get("name"):
            return cls(FieldKind.ENUM, text=str(enum_value["name"]))

        display_value = raw.get("display_value")
        if display_value:
            return cls(FieldKind.DISPLAY, text=str(display_value))

        return cls(FieldKind.EMPTY)

    def as_text(self) -> str:
        if self.kind is FieldKind.EMPTY:
            return ""
        if self.kind is FieldKind.NUMBER:
            if self.number is None:
                return ""
            if self.number.is_integer():
                return str(int(self.number))
            return str(self.number)
        if self.kind in (FieldKind.TEXT, FieldKind.ENUM, FieldKind.DISPLAY):
            return self.text or ""
        raise ValueError(f"Unhandled field kind: {self.kind}")


@dataclass(frozen=True)
class CustomField:
    name: str
    value: CustomFieldValue

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> CustomField:
        return cls(name=str(raw.get("name") or ""), value=CustomFieldValue.from_api(raw))


# Logical key -> accepted field names in the Asana workspace
FIELD_MAPPINGS: dict[str, tuple[str, ...]] = {
    "prioridade": ("Prioridade",),
    "status": ("Status",),
    "adiantamento": ("Adiantamento",),
    "empresa": ("EMPRESA",),
    "servicos": ("SERVICOS", "SERVIÇOS"),
    "beneficio_fiscal": ("Benefício Fiscal",),
    "produto": ("PRODUTO",),
    "etd": ("ETD",),
    "eta": ("ETA",),
    "cntr": ("CNTR",),
    "bl_awb": ("Nº BL/AWB", "N° BL/AWB"),
    "invoice": ("INVOICE",),
    "canal": ("Canal",),
    "exportador": ("Exportador",),
    "cia_transporte": ("CIA DE TRANSPORTE",),
    "navio": ("NAVIO",),
    "terminal": ("Terminal",),
    "orgaos_anuentes": ("Órgãos Anuentes",),
    "despachante": ("Despachante",),
    "transportadora": ("TRANSPORTADORA",),
    "fim_freetime": ("Fim do Freetime",),
    "fim_armazenagem": ("Fim da armazenagem",),
    "email_cliente": ("E-mail Cliente",),
    "email_analista": ("E-mail Analista",),
}

MULTI_VALUE_SEPARATORS = re.compile(r"[,;\n|/]")


def parse_custom_fields(raw_fields: Iterable[Mapping[str, Any]] | None) -> list[CustomField]:
    return [CustomField.from_api(raw) for raw in raw_fields or [] if raw]


def find_field_value(fields: Iterable[CustomField], aliases: Iterable[str]) -> str:
    """
    First non-empty value among fields named in ``aliases``, in input order.

    Returns "" when no field matches.
    """
    accepted = set(aliases)
    for field in fields:
        if field.name not in accepted:
            continue
        value = field.value.as_text().strip()
        if value:
            return value
    return ""


def map_field(fields: Iterable[CustomField], key: str) -> str:
    """find_field_value() for a logical key of FIELD_MAPPINGS."""
    return find_field_value(fields, FIELD_MAPPINGS[key])


def parse_multi_value(value: str | None) -> list[str]:
    """Split "A, B; C" -> ["A", "B", "C"], dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in MULTI_VALUE_SEPARATORS.split(value) if part.strip()]


def custom_fields_dict(fields: Iterable[CustomField]) -> dict[str, str]:
    """Every named field as text; the first non-empty occurrence of a name wins."""
    result: dict[str, str] = {}
    for field in fields:
        if not field.name:
            continue
        text = field.value.as_text().strip()
        if field.name not in result or (not result[field.name] and text):
            result[field.name] = text
    return result
