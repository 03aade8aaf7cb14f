"""Integration tests for the companies table and company sync"""

from __future__ import annotations

from maritime_tracking.companies import CompanyRepository
from maritime_tracking.companies.service import sync_companies


def test_upsert_creates_then_updates(db):
    company, created = CompanyRepository.upsert_by_name("DURI TRADING")
    assert created
    assert company.display_name == "Duri Trading"
    assert company.slug == "duri-trading"

    again, created = CompanyRepository.upsert_by_name("DURI TRADING")
    assert not created
    assert again.id == company.id


def test_ensure_default_is_idempotent(db):
    first = CompanyRepository.ensure_default()
    second = CompanyRepository.ensure_default()

    assert first.id == second.id
    assert (first.name, first.display_name, first.slug) == ("EMPRESA_PADRAO", "Empresa Padrão", "empresa-padrao")


def test_list_active_sorted(db):
    CompanyRepository.create("WCB")
    CompanyRepository.create("AGRIVALE")
    assert [c.name for c in CompanyRepository.list_active()] == ["AGRIVALE", "WCB"]


def test_sync_companies_counts(db):
    CompanyRepository.create("UNIVAR")

    result = sync_companies(["UNIVAR", "WCB", "AGRIVALE"])

    assert (result.total_processed, result.created, result.updated, result.errors) == (3, 2, 1, 0)
    assert {d["name"]: d["action"] for d in result.details} == {
        "UNIVAR": "updated",
        "WCB": "created",
        "AGRIVALE": "created",
    }
    assert result.to_dict()["stats"]["created"] == 2


def test_sync_slug_conflict_is_counted_not_raised(db):
    CompanyRepository.create("WCB CIA")

    result = sync_companies(["WCB-CIA", "UNIVAR"])

    assert result.errors == 1
    assert result.created == 1
    assert result.details[0]["action"] == "error"
