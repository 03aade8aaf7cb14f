"""Tests for Asana task -> TrackingRecord transformation"""

from __future__ import annotations

from maritime_tracking.tracking.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    UNASSIGNED,
    MaritimeStage,
)
from maritime_tracking.tracking.transform import (
    build_trackings,
    extract_from_notes,
    is_subtask,
    transform_task,
)


def test_transform_maps_fields_into_groups(task_factory):
    task = task_factory(
        "1",
        "661º UNIVAR (PO 4527659420)",
        fields={
            "Exportador": "UNIVAR USA",
            "CIA DE TRANSPORTE": "MSC",
            "CNTR": "MSKU1, MSKU2",
            "PRODUTO": "Soda; Glicerina",
            "Órgãos Anuentes": "MAPA/ANVISA",
            "ETA": "2024-02-15",
            "Canal": "Verde",
        },
    )
    record = transform_task(task)

    assert record.id == "661univarpo4527659420"
    assert record.asana_id == "1"
    assert record.company == "UNIVAR"
    assert record.ref == "661"
    assert record.transport.exporter == "UNIVAR USA"
    assert record.transport.shipping_company == "MSC"
    assert record.transport.containers == ["MSKU1", "MSKU2"]
    assert record.transport.products == ["Soda", "Glicerina"]
    assert record.regulatory.orgaos_anuentes == ["MAPA", "ANVISA"]
    assert record.regulatory.canal == "Verde"
    assert record.schedule.eta == "2024-02-15"
    assert record.meta.responsible == UNASSIGNED
    assert record.custom_fields["Exportador"] == "UNIVAR USA"
    assert record.last_update == "2024-03-01T12:00:00.000Z"


def test_section_decides_stage(task_factory):
    task = task_factory("1", "1º WCB", section="Rastreio da Carga", fields={"Status": "Entrega"})
    assert transform_task(task).maritime_status == MaritimeStage.RASTREIO.value


def test_status_field_decides_stage_without_section(task_factory):
    task = task_factory("1", "1º WCB", fields={"Status": "chegada  da carga"})
    record = transform_task(task)
    assert record.maritime_status == MaritimeStage.CHEGADA.value
    assert record.status == "chegada  da carga"


def test_completed_task_without_stage_is_finalized(task_factory):
    record = transform_task(task_factory("1", "1º WCB", completed=True))
    assert record.maritime_status == MaritimeStage.FINALIZADOS.value
    assert record.status == STATUS_COMPLETED


def test_open_task_defaults(task_factory):
    record = transform_task(task_factory("1", "1º WCB"))
    assert record.maritime_status == MaritimeStage.ABERTURA.value
    assert record.status == STATUS_IN_PROGRESS


def test_notes_fill_missing_fields(task_factory):
    task = task_factory("1", "1º WCB", notes="Navio: MSC ANNA\nArmador: HAPAG")
    record = transform_task(task)
    assert record.transport.vessel == "MSC ANNA"
    assert record.transport.shipping_company == "HAPAG"


def test_custom_field_wins_over_notes(task_factory):
    task = task_factory("1", "1º WCB", fields={"NAVIO": "MAERSK ONE"}, notes="Navio: MSC ANNA")
    assert transform_task(task).transport.vessel == "MAERSK ONE"


def test_extract_from_notes_empty():
    assert extract_from_notes(None) == {}
    assert extract_from_notes("") == {}


def test_empresa_field_used_when_title_has_no_company(task_factory):
    record = transform_task(task_factory("1", "DURI TRADING", fields={"EMPRESA": "duri"}))
    assert record.company == "DURI"
    assert record.ref == ""


def test_build_trackings_skips_subtasks_untitled_and_unknown_company(task_factory):
    tasks = [
        task_factory("1", "661º UNIVAR (PO 1)"),
        task_factory("2", "662º AGRIVALE", parent={"gid": "1", "resource_type": "task"}),
        task_factory("3", "   "),
        task_factory("4", "Reunião semanal"),
        task_factory("5", "663 - WCB"),
    ]
    records = build_trackings(tasks)
    assert [r.asana_id for r in records] == ["1", "5"]
    assert records[1].company == "WCB"


def test_is_subtask():
    assert is_subtask({"parent": {"resource_type": "task"}})
    assert not is_subtask({"parent": None})
