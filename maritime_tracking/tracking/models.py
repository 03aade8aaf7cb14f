"""
Tracking domain models.

A TrackingRecord is derived from one Asana task on every fetch; it is never
edited in place. Fields are grouped the way the dashboard cards show them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

STATUS_COMPLETED = "Concluído"
STATUS_IN_PROGRESS = "Em Progresso"
UNKNOWN_COMPANY = "UNKNOWN"
UNASSIGNED = "Não atribuído"


def utc_now() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


class MaritimeStage(str, Enum):
    """Stages of an import process, in pipeline order."""

    ABERTURA = "Abertura do Processo"
    PRE_EMBARQUE = "Pré Embarque"
    RASTREIO = "Rastreio da Carga"
    CHEGADA = "Chegada da Carga"
    ENTREGA = "Entrega"
    FECHAMENTO = "Fechamento"
    FINALIZADOS = "Processos Finalizados"

    @classmethod
    def from_label(cls, label: str | None) -> MaritimeStage | None:
        """Case/whitespace-insensitive lookup of a stage by its label."""
        if not label:
            return None
        normalized = " ".join(label.split()).lower()
        for stage in cls:
            if stage.value.lower() == normalized:
                return stage
        return None


class TransportInfo(BaseModel):
    exporter: str = ""
    shipping_company: str = ""
    vessel: str = ""
    terminal: str = ""
    bl_awb: str = ""
    containers: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)
    invoice: str = ""
    transportadora: str = ""


class ScheduleInfo(BaseModel):
    etd: str = ""
    eta: str = ""
    freetime_end: str = ""
    storage_end: str = ""


class RegulatoryInfo(BaseModel):
    orgaos_anuentes: list[str] = Field(default_factory=list)
    despachante: str = ""
    canal: str = ""
    beneficio_fiscal: str = ""


class FinancialInfo(BaseModel):
    adiantamento: str = ""
    servicos: list[str] = Field(default_factory=list)


class CommunicationInfo(BaseModel):
    email_cliente: str = ""
    email_analista: str = ""


class TrackingMeta(BaseModel):
    prioridade: str = ""
    empresa: str = ""
    responsible: str = UNASSIGNED


class TrackingRecord(BaseModel):
    """One import operation as shown on the dashboard."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Slug derived from the task title")
    asana_id: str = Field(..., description="Asana task gid")
    title: str
    company: str
    ref: str = ""
    status: str = STATUS_IN_PROGRESS
    maritime_status: str = MaritimeStage.ABERTURA.value
    completed: bool = False

    transport: TransportInfo = Field(default_factory=TransportInfo)
    schedule: ScheduleInfo = Field(default_factory=ScheduleInfo)
    regulatory: RegulatoryInfo = Field(default_factory=RegulatoryInfo)
    financial: FinancialInfo = Field(default_factory=FinancialInfo)
    communication: CommunicationInfo = Field(default_factory=CommunicationInfo)
    meta: TrackingMeta = Field(default_factory=TrackingMeta)

    custom_fields: dict[str, str] = Field(default_factory=dict)
    last_update: str = ""

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackingRecord:
        return cls.model_validate(data)
