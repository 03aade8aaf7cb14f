"""Tests for Asana custom field mapping"""

from __future__ import annotations

import pytest

from maritime_tracking.asana.field_mapper import (
    CustomFieldValue,
    FieldKind,
    custom_fields_dict,
    map_field,
    parse_custom_fields,
    parse_multi_value,
)


def test_text_value_wins_over_other_representations():
    value = CustomFieldValue.from_api({"text_value": "MSC", "number_value": 3, "display_value": "x"})
    assert value.kind is FieldKind.TEXT
    assert value.as_text() == "MSC"


def test_integral_numbers_render_without_decimal():
    assert CustomFieldValue.from_api({"number_value": 12.0}).as_text() == "12"
    assert CustomFieldValue.from_api({"number_value": 12.5}).as_text() == "12.5"
    assert CustomFieldValue(FieldKind.NUMBER).as_text() == ""


def test_enum_and_display_values():
    assert CustomFieldValue.from_api({"enum_value": {"name": "Alta"}}).as_text() == "Alta"
    assert CustomFieldValue.from_api({"display_value": "Verde"}).as_text() == "Verde"


def test_empty_field():
    value = CustomFieldValue.from_api({"text_value": None, "enum_value": None})
    assert value.kind is FieldKind.EMPTY
    assert value.as_text() == ""


def test_map_field_accepts_aliases():
    fields = parse_custom_fields([{"name": "SERVIÇOS", "text_value": "Frete, Seguro"}])
    assert map_field(fields, "servicos") == "Frete, Seguro"


def test_map_field_skips_empty_duplicates():
    fields = parse_custom_fields(
        [
            {"name": "Nº BL/AWB", "text_value": ""},
            {"name": "N° BL/AWB", "text_value": "MSCU123"},
        ]
    )
    assert map_field(fields, "bl_awb") == "MSCU123"


def test_map_field_missing_is_empty_string():
    assert map_field(parse_custom_fields(None), "navio") == ""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("A, B; C|D/E\nF", ["A", "B", "C", "D", "E", "F"]),
        (" MAPA ,, ANVISA ", ["MAPA", "ANVISA"]),
        ("", []),
        (None, []),
    ],
)
def test_parse_multi_value(raw, expected):
    assert parse_multi_value(raw) == expected


def test_custom_fields_dict_keeps_first_non_empty():
    fields = parse_custom_fields(
        [
            {"name": "Canal", "text_value": ""},
            {"name": "Canal", "enum_value": {"name": "Verde"}},
            {"name": "Canal", "text_value": "Vermelho"},
            {"name": "", "text_value": "ignored"},
        ]
    )
    assert custom_fields_dict(fields) == {"Canal": "Verde"}
