"""
Notification request monitor - success rate, latency and recent errors.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from maritime_tracking.tracking.models import utc_now

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"

HEALTHY_SUCCESS_RATE = 0.9
DEGRADED_SUCCESS_RATE = 0.7
SLOW_RESPONSE_MS = 5000


@dataclass(frozen=True)
class ErrorRecord:
    timestamp: str
    error: str
    user_id: str


class NotificationsMonitor:
    def __init__(self, latency_window: int = 100, error_window: int = 50) -> None:
        self.latency_window = latency_window
        self.error_window = error_window
        self.reset()

    def reset(self) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.last_error: str | None = None
        self.last_success: str | None = None
        self._response_times: deque[float] = deque(maxlen=self.latency_window)
        self._errors: deque[ErrorRecord] = deque(maxlen=self.error_window)

    def record_request(
        self,
        success: bool,
        response_time_ms: float,
        error: str | None = None,
        user_id: str | None = None,
    ) -> None:
        self.total_requests += 1
        self._response_times.append(response_time_ms)
        now = utc_now().isoformat()

        if success:
            self.successful_requests += 1
            self.last_success = now
            return

        self.failed_requests += 1
        self.last_error = error or "Erro desconhecido"
        self._errors.append(ErrorRecord(timestamp=now, error=self.last_error, user_id=user_id or "unknown"))

    @property
    def average_response_time(self) -> float:
        if not self._response_times:
            return 0.0
        return sum(self._response_times) / len(self._response_times)

    @property
    def success_rate(self) -> float:
        if not self.total_requests:
            return 1.0
        return self.successful_requests / self.total_requests

    @property
    def error_history(self) -> list[ErrorRecord]:
        return list(self._errors)

    def health_status(self) -> str:
        rate = self.success_rate
        if rate >= HEALTHY_SUCCESS_RATE:
            return HEALTHY
        if rate >= DEGRADED_SUCCESS_RATE:
            return DEGRADED
        return UNHEALTHY

    def diagnosis(self) -> list[str]:
        """Likely causes, judged from latency and recent error texts."""
        if self.health_status() == HEALTHY:
            return ["Sistema funcionando normalmente"]

        errors = " ".join(record.error for record in self._errors)
        findings = []
        if self.average_response_time > SLOW_RESPONSE_MS:
            findings.append("Tempo de resposta alto - possível problema de rede ou API")
        if "token" in errors.lower():
            findings.append("Problema com token do Asana - verificar configuração")
        if "500" in errors:
            findings.append("Erros de servidor - verificar logs do backend")
        return findings or ["Falhas intermitentes - monitorar por mais tempo"]

    def report(self) -> dict:
        return {
            "health": self.health_status(),
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "success_rate": round(self.success_rate * 100, 1),
            "average_response_time_ms": round(self.average_response_time, 1),
            "last_success": self.last_success,
            "last_error": self.last_error,
            "recent_errors": [record.__dict__ for record in list(self._errors)[-5:]],
            "diagnosis": self.diagnosis(),
        }
