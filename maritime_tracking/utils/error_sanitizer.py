"""
Error message sanitization.

Keeps stack traces, file paths, SQL errors and credentials out of the JSON
error envelope returned to clients.
"""

from __future__ import annotations

import re

from maritime_tracking.observability.logging import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    # File paths
    r"/[^\s]+\.py",
    r"[A-Za-z]:\\[^\s]+",
    # Stack trace indicators
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    # Database errors
    r"sqlite3?\.",
    r"UNIQUE constraint",
    r"FOREIGN KEY constraint",
    r"no such table",
    r"no such column",
    # Tokens
    r"Bearer [A-Za-z0-9._-]+",
    r"\b[0-9]/[0-9a-f]{20,}",  # Asana personal access tokens
    r"eyJ[A-Za-z0-9_-]{10,}",  # JWTs
    # Internal module names
    r"maritime_tracking\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Requisição inválida. Verifique os dados enviados.",
    401: "Autenticação necessária.",
    403: "Acesso negado.",
    404: "Recurso não encontrado.",
    409: "Conflito com o estado atual do recurso.",
    422: "Formato de dados inválido.",
    429: "Muitas requisições. Tente novamente mais tarde.",
    500: "Erro interno do servidor.",
    502: "Falha ao comunicar com o serviço externo.",
    503: "Serviço temporariamente indisponível.",
}


def sanitize_error_message(message: str, status_code: int = 500) -> str:
    """
    Return ``message`` if it is safe to show a client, else a generic text.

    Client errors (4xx) keep short single-line business messages such as
    "Usuário não encontrado". Server errors always collapse to the generic
    message for the status.
    """
    fallback = GENERIC_MESSAGES.get(status_code, "Ocorreu um erro.")
    if not message:
        return fallback

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, message):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return fallback

    if (
        400 <= status_code < 500
        and len(message) < 200
        and not any(c in message for c in ["{", "}", "\n"])
    ):
        return message

    return fallback


def get_safe_error_detail(error: Exception, status_code: int = 500, context: str | None = None) -> str:
    """Log the full error and return what may be sent to the client."""
    logger.error("Error (status=%d): %s - %s", status_code, type(error).__name__, str(error))
    if context and status_code >= 500:
        return context
    return sanitize_error_message(str(error), status_code)
