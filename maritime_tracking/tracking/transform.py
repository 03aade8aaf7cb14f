"""
Asana task -> TrackingRecord.

Sources, in precedence order: mapped custom fields, then "key: value" lines
in the task notes for the few fields operators sometimes type there, then
the title itself (ref and company).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from maritime_tracking.asana.field_mapper import (
    CustomField,
    custom_fields_dict,
    map_field,
    parse_custom_fields,
    parse_multi_value,
)
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter
from maritime_tracking.tracking.models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    UNASSIGNED,
    UNKNOWN_COMPANY,
    CommunicationInfo,
    FinancialInfo,
    MaritimeStage,
    RegulatoryInfo,
    ScheduleInfo,
    TrackingMeta,
    TrackingRecord,
    TransportInfo,
    utc_now,
)
from maritime_tracking.tracking.title_parser import (
    extract_company_strict,
    extract_reference,
    generate_tracking_id,
    parse_title,
)

logger = get_logger(__name__)

NOTES_PATTERNS = {
    "armador": re.compile(r"(?:armador|carrier|shipping[\s_]?company)[\s:]+([^\n\r]+)", re.IGNORECASE),
    "navio": re.compile(r"(?:navio|vessel|ship)[\s:]+([^\n\r]+)", re.IGNORECASE),
    "exportador": re.compile(r"(?:exportador|exporter|shipper)[\s:]+([^\n\r]+)", re.IGNORECASE),
    "eta": re.compile(r"(?:eta|chegada|arrival)[\s:]+([^\n\r]+)", re.IGNORECASE),
    "terminal": re.compile(r"(?:terminal|porto|port)[\s:]+([^\n\r]+)", re.IGNORECASE),
}


def is_valid_task(task: Mapping[str, Any]) -> bool:
    name = task.get("name")
    return isinstance(name, str) and bool(name.strip())


def is_subtask(task: Mapping[str, Any]) -> bool:
    parent = task.get("parent")
    return isinstance(parent, Mapping) and parent.get("resource_type") == "task"


def extract_from_notes(notes: str | None) -> dict[str, str]:
    """Values typed as "Navio: MSC ANNA" in the task description."""
    if not notes:
        return {}
    found: dict[str, str] = {}
    for key, pattern in NOTES_PATTERNS.items():
        match = pattern.search(notes)
        if match:
            found[key] = match.group(1).strip()
    return found


def _section_names(task: Mapping[str, Any]) -> list[str]:
    names = []
    for membership in task.get("memberships") or []:
        section = (membership or {}).get("section") or {}
        if section.get("name"):
            names.append(section["name"])
    return names


def determine_status(task: Mapping[str, Any], fields: list[CustomField]) -> str:
    if task.get("completed"):
        return STATUS_COMPLETED
    return map_field(fields, "status") or STATUS_IN_PROGRESS


def determine_maritime_stage(task: Mapping[str, Any], fields: list[CustomField]) -> MaritimeStage:
    """Board section first, then the Status field, then completion."""
    for name in _section_names(task):
        stage = MaritimeStage.from_label(name)
        if stage:
            return stage

    stage = MaritimeStage.from_label(map_field(fields, "status"))
    if stage:
        return stage

    return MaritimeStage.FINALIZADOS if task.get("completed") else MaritimeStage.ABERTURA


def determine_company(title: str, fields: list[CustomField]) -> str:
    strict = extract_company_strict(title)
    if strict:
        return strict
    parts = parse_title(title)
    if parts:
        return parts.company
    empresa = map_field(fields, "empresa").upper()
    return empresa or UNKNOWN_COMPANY


def transform_task(task: Mapping[str, Any]) -> TrackingRecord:
    """Build the record for one (valid, top-level) task."""
    title = task["name"].strip()
    fields = parse_custom_fields(task.get("custom_fields"))
    notes = extract_from_notes(task.get("notes"))

    def field_or_note(key: str, note_key: str) -> str:
        return map_field(fields, key) or notes.get(note_key, "")

    parts = parse_title(title)
    assignee = task.get("assignee") or {}

    return TrackingRecord(
        id=generate_tracking_id(title),
        asana_id=str(task.get("gid") or ""),
        title=title,
        company=determine_company(title, fields),
        ref=parts.ref if parts else extract_reference(title),
        status=determine_status(task, fields),
        maritime_status=determine_maritime_stage(task, fields).value,
        completed=bool(task.get("completed")),
        transport=TransportInfo(
            exporter=field_or_note("exportador", "exportador"),
            shipping_company=field_or_note("cia_transporte", "armador"),
            vessel=field_or_note("navio", "navio"),
            terminal=field_or_note("terminal", "terminal"),
            bl_awb=map_field(fields, "bl_awb"),
            containers=parse_multi_value(map_field(fields, "cntr")),
            products=parse_multi_value(map_field(fields, "produto")),
            invoice=map_field(fields, "invoice"),
            transportadora=map_field(fields, "transportadora"),
        ),
        schedule=ScheduleInfo(
            etd=map_field(fields, "etd"),
            eta=field_or_note("eta", "eta"),
            freetime_end=map_field(fields, "fim_freetime"),
            storage_end=map_field(fields, "fim_armazenagem"),
        ),
        regulatory=RegulatoryInfo(
            orgaos_anuentes=parse_multi_value(map_field(fields, "orgaos_anuentes")),
            despachante=map_field(fields, "despachante"),
            canal=map_field(fields, "canal"),
            beneficio_fiscal=map_field(fields, "beneficio_fiscal"),
        ),
        financial=FinancialInfo(
            adiantamento=map_field(fields, "adiantamento"),
            servicos=parse_multi_value(map_field(fields, "servicos")),
        ),
        communication=CommunicationInfo(
            email_cliente=map_field(fields, "email_cliente"),
            email_analista=map_field(fields, "email_analista"),
        ),
        meta=TrackingMeta(
            prioridade=map_field(fields, "prioridade"),
            empresa=map_field(fields, "empresa"),
            responsible=assignee.get("name") or UNASSIGNED,
        ),
        custom_fields=custom_fields_dict(fields),
        last_update=task.get("modified_at") or utc_now().isoformat(),
    )


def build_trackings(tasks: Iterable[Mapping[str, Any]]) -> list[TrackingRecord]:
    """
    Records for every top-level task with a usable title and company.

    Subtasks, untitled tasks and tasks whose company cannot be determined
    are skipped.
    """
    records: list[TrackingRecord] = []
    skipped = 0
    for task in tasks:
        if not is_valid_task(task) or is_subtask(task):
            skipped += 1
            continue
        record = transform_task(task)
        if record.company == UNKNOWN_COMPANY:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        counter("tracking.tasks_skipped", skipped)
        logger.debug("Skipped %d tasks while building trackings", skipped)
    return records
