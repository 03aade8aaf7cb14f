"""Tests for dashboard metrics, KPIs and filters"""

from __future__ import annotations

import pytest

from maritime_tracking.tracking.metrics import (
    calculate_kpis,
    calculate_metrics,
    filter_trackings,
    get_filter_options,
    get_tracking_by_id,
    get_trackings_by_company,
    is_operation_cancelled,
)
from maritime_tracking.tracking.models import MaritimeStage
from maritime_tracking.tracking.transform import build_trackings


@pytest.fixture
def records(task_factory):
    return build_trackings(
        [
            task_factory(
                "1",
                "661º UNIVAR (PO 1)",
                fields={"Exportador": "UNIVAR USA", "CIA DE TRANSPORTE": "MSC", "CNTR": "A1, A2", "PRODUTO": "Soda"},
                section="Rastreio da Carga",
            ),
            task_factory(
                "2",
                "662º AGRIVALE (BL 9)",
                fields={"Exportador": "AGRI BR", "CIA DE TRANSPORTE": "MSC", "Órgãos Anuentes": "MAPA"},
                completed=True,
            ),
            task_factory("3", "663º WCB (CANCELADO)", fields={"Terminal": "BTP"}),
            task_factory("4", "664º UNIVAR (PO 2)", fields={"PRODUTO": "Glicerina, Soda"}),
        ]
    )


def test_calculate_metrics(records):
    metrics = calculate_metrics(records)
    assert metrics["total_operations"] == 4
    assert metrics["completed_operations"] == 1
    assert metrics["active_operations"] == 3
    assert metrics["effective_rate"] == 25
    assert metrics["armador_distribution"] == {"MSC": 2}
    assert metrics["product_distribution"] == {"Soda": 2, "Glicerina": 1}
    assert metrics["unique_exporters"] == 2
    assert metrics["unique_shipping_lines"] == 1
    assert metrics["all_terminals"] == ["BTP"]
    assert metrics["total_containers"] == 2


def test_calculate_metrics_empty():
    metrics = calculate_metrics([])
    assert metrics["total_operations"] == 0
    assert metrics["effective_rate"] == 0


def test_cancellation_detected_from_title(records):
    assert is_operation_cancelled(records[2])
    assert not is_operation_cancelled(records[0])


def test_calculate_kpis(records):
    kpis = calculate_kpis(records)
    assert kpis["total"] == 4
    assert kpis["canceladas"] == 1
    assert kpis["processos_finalizados"] == 1
    assert kpis["ativas"] == 2
    assert kpis["by_stage"][MaritimeStage.RASTREIO.value] == 1
    assert kpis["by_stage"][MaritimeStage.ABERTURA.value] == 1
    assert set(kpis["by_stage"]) == {stage.value for stage in MaritimeStage}


def test_filters_are_case_insensitive_contains(records):
    assert [r.asana_id for r in filter_trackings(records, exporter="univar")] == ["1"]
    assert [r.asana_id for r in filter_trackings(records, product="glic")] == ["4"]
    assert [r.asana_id for r in filter_trackings(records, orgao_anuente="mapa")] == ["2"]
    assert [r.asana_id for r in filter_trackings(records, reference="662")] == ["2"]
    assert [r.asana_id for r in filter_trackings(records, status="rastreio")] == ["1"]
    assert len(filter_trackings(records)) == 4


def test_filter_options(records):
    options = get_filter_options(records)
    assert options["products"] == ["Glicerina", "Soda"]
    assert options["orgaos_anuentes"] == ["MAPA"]
    assert MaritimeStage.FINALIZADOS.value in options["statuses"]


def test_lookup_helpers(records):
    assert get_tracking_by_id(records, "1").title == "661º UNIVAR (PO 1)"
    assert get_tracking_by_id(records, "661univarpo1").asana_id == "1"
    assert get_tracking_by_id(records, "missing") is None
    assert [r.asana_id for r in get_trackings_by_company(records, "univar")] == ["1", "4"]
