"""
Dashboard aggregates over tracking records: operational metrics, maritime
KPIs and the filter options/filters of the operations table.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any

from maritime_tracking.tracking.models import STATUS_COMPLETED, MaritimeStage, TrackingRecord

CANCELLATION_KEYWORDS = ("cancel", "suspens", "abort", "parad")


def calculate_metrics(records: Sequence[TrackingRecord]) -> dict[str, Any]:
    """Totals, completion rate and per-dimension distributions."""
    total = len(records)
    completed = sum(1 for record in records if record.status == STATUS_COMPLETED)

    status_distribution: Counter[str] = Counter()
    exporter_distribution: Counter[str] = Counter()
    armador_distribution: Counter[str] = Counter()
    product_distribution: Counter[str] = Counter()
    shipping_lines: list[str] = []
    terminals: list[str] = []
    total_containers = 0

    for record in records:
        transport = record.transport
        status_distribution[record.status] += 1
        if transport.exporter:
            exporter_distribution[transport.exporter] += 1
        if transport.shipping_company:
            armador_distribution[transport.shipping_company] += 1
            if transport.shipping_company not in shipping_lines:
                shipping_lines.append(transport.shipping_company)
        if transport.terminal and transport.terminal not in terminals:
            terminals.append(transport.terminal)
        for product in transport.products:
            product_distribution[product] += 1
        total_containers += len(transport.containers)

    return {
        "total_operations": total,
        "active_operations": total - completed,
        "completed_operations": completed,
        "effective_rate": round(completed / total * 100) if total else 0,
        "status_distribution": dict(status_distribution),
        "exporter_distribution": dict(exporter_distribution),
        "armador_distribution": dict(armador_distribution),
        "product_distribution": dict(product_distribution),
        "unique_exporters": len(exporter_distribution),
        "unique_shipping_lines": len(shipping_lines),
        "unique_terminals": len(terminals),
        "total_containers": total_containers,
        "all_shipping_lines": shipping_lines,
        "all_terminals": terminals,
    }


def is_operation_cancelled(record: TrackingRecord) -> bool:
    """Cancelled/suspended/aborted/stopped, judging by stage, title and field values."""
    haystacks = [record.maritime_status, record.title, *record.custom_fields.values()]
    for text in haystacks:
        lowered = (text or "").lower()
        if any(keyword in lowered for keyword in CANCELLATION_KEYWORDS):
            return True
    return False


def calculate_kpis(records: Sequence[TrackingRecord]) -> dict[str, Any]:
    """
    Maritime KPIs.

    Stage counts only consider non-cancelled records; "ativas" are the
    non-cancelled records that are not in the final stage.
    """
    cancelled = [record for record in records if is_operation_cancelled(record)]
    live = [record for record in records if not is_operation_cancelled(record)]

    by_stage = Counter(record.maritime_status for record in live)
    stages = {stage.value: by_stage.get(stage.value, 0) for stage in MaritimeStage}
    finalizados = stages[MaritimeStage.FINALIZADOS.value]

    return {
        "total": len(records),
        "ativas": len(live) - finalizados,
        "processos_finalizados": finalizados,
        "canceladas": len(cancelled),
        "by_stage": stages,
    }


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def filter_trackings(
    records: Iterable[TrackingRecord],
    reference: str | None = None,
    status: str | None = None,
    exporter: str | None = None,
    product: str | None = None,
    orgao_anuente: str | None = None,
) -> list[TrackingRecord]:
    """Case-insensitive "contains" filters; empty criteria are ignored."""
    result = []
    for record in records:
        if reference and not (_contains(record.ref, reference) or _contains(record.title, reference)):
            continue
        if status and not _contains(record.maritime_status, status):
            continue
        if exporter and not _contains(record.transport.exporter, exporter):
            continue
        if product and not any(_contains(p, product) for p in record.transport.products):
            continue
        if orgao_anuente and not any(
            _contains(o, orgao_anuente) for o in record.regulatory.orgaos_anuentes
        ):
            continue
        result.append(record)
    return result


def get_filter_options(records: Iterable[TrackingRecord]) -> dict[str, list[str]]:
    """Distinct values for the dashboard filter dropdowns, sorted."""
    statuses: set[str] = set()
    exporters: set[str] = set()
    products: set[str] = set()
    orgaos: set[str] = set()
    for record in records:
        statuses.add(record.maritime_status)
        if record.transport.exporter:
            exporters.add(record.transport.exporter)
        products.update(record.transport.products)
        orgaos.update(record.regulatory.orgaos_anuentes)
    return {
        "statuses": sorted(statuses),
        "exporters": sorted(exporters),
        "products": sorted(products),
        "orgaos_anuentes": sorted(orgaos),
    }


def get_tracking_by_id(records: Iterable[TrackingRecord], tracking_id: str) -> TrackingRecord | None:
    """Match on the slug id or the Asana gid."""
    for record in records:
        if record.id == tracking_id or record.asana_id == tracking_id:
            return record
    return None


def get_trackings_by_company(records: Iterable[TrackingRecord], company: str) -> list[TrackingRecord]:
    return [record for record in records if _contains(record.company, company)]
