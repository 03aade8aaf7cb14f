"""Tests for operational task title parsing"""

from __future__ import annotations

import pytest

from maritime_tracking.tracking.title_parser import (
    TitleParts,
    company_slug,
    extract_company_strict,
    extract_reference,
    format_display_name,
    generate_company_id,
    generate_tracking_id,
    parse_title,
)


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("661º UNIVAR (PO 4527659420)", "UNIVAR"),
        ("122º WCB", "WCB"),
        ("12º.1 agrivale (BL 123)", "AGRIVALE"),
        ("  45º   Duri Trading  ", "DURI TRADING"),
        ("122° WCB", "WCB"),
        ("663° PORCELANOSA (BL 9)", "PORCELANOSA"),
    ],
)
def test_strict_extraction_accepts_ordinal_titles(title, expected):
    assert extract_company_strict(title) == expected


@pytest.mark.parametrize(
    "title",
    ["DURI TRADING", "661 UNIVAR", "661 - UNIVAR", "5º 12345", "7º X", "", None],
)
def test_strict_extraction_rejects(title):
    assert extract_company_strict(title) is None


def test_parse_title_ordinal_with_details():
    assert parse_title("661º UNIVAR (PO 4527659420)") == TitleParts(ref="661", company="UNIVAR")


def test_parse_title_degree_sign_ordinal():
    assert parse_title("122° WCB (PO 1)") == TitleParts(ref="122", company="WCB")


def test_parse_title_dash_separator():
    assert parse_title("661 - UNIVAR") == TitleParts(ref="661", company="UNIVAR")


def test_parse_title_plain_space():
    assert parse_title("661 UNIVAR") == TitleParts(ref="661", company="UNIVAR")


def test_parse_title_stops_at_dash_after_company():
    assert parse_title("88º WCB - urgente") == TitleParts(ref="88", company="WCB")


def test_parse_title_without_ordinal_is_none():
    assert parse_title("AGRIVALE importação") is None
    assert parse_title("") is None


def test_extract_reference():
    assert extract_reference("661º UNIVAR") == "661"
    assert extract_reference("UNIVAR") == ""


def test_generate_tracking_id_is_compact_and_stable():
    title = "661º UNIVAR (PO 4527659420)"
    assert generate_tracking_id(title) == "661univarpo4527659420"
    assert generate_tracking_id(title) == generate_tracking_id(title)


def test_generate_tracking_id_strips_accents():
    assert generate_tracking_id("12º AÇÚCAR") == "12acucar"


def test_company_helpers():
    assert generate_company_id("Porto Alegre") == "portoalegre"
    assert len(generate_company_id("A" * 40)) == 20
    assert company_slug("WCB & CIA") == "wcb-cia"
    assert format_display_name("WCB") == "WCB"
    assert format_display_name("DURI TRADING") == "Duri Trading"
