"""Tests for company derivation and the company session"""

from __future__ import annotations

from maritime_tracking.companies import (
    CompanyOption,
    CompanySession,
    effective_company,
    extract_companies,
    extract_company_names_loose,
    get_company_stats,
)
from maritime_tracking.tracking.transform import build_trackings


def test_extract_companies_uses_strict_titles_only(task_factory):
    records = build_trackings(
        [
            task_factory("1", "661º UNIVAR (PO 1)"),
            task_factory("2", "662º UNIVAR (PO 2)"),
            task_factory("3", "663 - WCB"),
            task_factory("4", "664º duri trading"),
        ]
    )
    companies = extract_companies(records)

    assert [c.name for c in companies] == ["DURI TRADING", "UNIVAR"]
    assert companies[0] == CompanyOption(id="duritrading", name="DURI TRADING", display_name="Duri Trading")


def test_extract_company_names_loose(task_factory):
    tasks = [
        task_factory("1", "661º UNIVAR (PO 1)"),
        task_factory("2", "663 - WCB"),
        task_factory("3", "Reunião", fields={"EMPRESA": "agrivale"}),
        task_factory("4", "Sem dono", fields={"EMPRESA": "NÃO_IDENTIFICADO"}),
        {"gid": "5", "name": None},
    ]
    assert extract_company_names_loose(tasks) == ["AGRIVALE", "UNIVAR", "WCB"]


def test_company_stats(task_factory):
    records = build_trackings(
        [task_factory("1", "1º WCB"), task_factory("2", "2º WCB"), task_factory("3", "3º UNIVAR")]
    )
    assert get_company_stats(records) == {"WCB": 2, "UNIVAR": 1}


def test_company_session_select_and_clear():
    session = CompanySession()
    assert not session.is_selected

    session.select(CompanyOption(id="univar", name="UNIVAR", display_name="UNIVAR"))
    assert session.is_selected
    assert CompanySession.decode(session.encode()) == session

    session.clear()
    assert session.to_dict() == {"company_id": None, "company_name": None, "display_name": None}


def test_company_session_decode_garbage():
    assert not CompanySession.decode("not json").is_selected
    assert not CompanySession.decode("[1, 2]").is_selected
    assert not CompanySession.decode(None).is_selected


def test_effective_company_prefers_selection():
    assert effective_company("WCB", "UNIVAR") == "WCB"
    assert effective_company(None, "UNIVAR") == "UNIVAR"
    assert effective_company("", None) is None
