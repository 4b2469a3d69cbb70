"""
Exceptions personnalisées pour NIM Proxy.
"""
import json
from typing import Optional


class NimProxyError(Exception):
    """Exception de base pour toutes les erreurs du proxy."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or "unknown_error"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} - Détails: {self.details}"
        return f"[{self.code}] {self.message}"


class ConfigurationError(NimProxyError):
    """Erreur de configuration (fichier invalide, valeur invalide)."""

    def __init__(self, message: str, config_key: str = None):
        super().__init__(
            message=message,
            code="config_error",
            details={"key": config_key} if config_key else {}
        )


class InvalidRequestError(NimProxyError):
    """Requête client mal formée (body non JSON, champ obligatoire absent)."""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message=message,
            code="invalid_request",
            details={"field": field} if field else {}
        )
        self.field = field


class UpstreamHTTPError(NimProxyError):
    """Le backend NIM a répondu avec un statut non-2xx."""

    def __init__(self, status_code: int, body: bytes = b""):
        self.status_code = status_code
        self.body = body or b""
        super().__init__(
            message=f"Backend a répondu {status_code}",
            code="upstream_http_error",
            details={"status_code": status_code}
        )

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def detail(self) -> Optional[str]:
        """
        Extrait le message d'erreur fourni par le backend.

        Ordre: `detail` (format NIM), puis `error.message` (format OpenAI),
        puis le texte brut du body.
        """
        text = self.text.strip()
        if not text:
            return None
        try:
            data = json.loads(text)
        except ValueError:
            return text[:500]

        if isinstance(data, dict):
            detail = data.get("detail")
            if isinstance(detail, str) and detail:
                return detail
            error = data.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(error, str) and error:
                return error
        return text[:500]


class StreamingError(NimProxyError):
    """Erreur lors du streaming de réponse backend."""

    def __init__(
        self,
        message: str,
        model: str = None,
        error_type: str = None,
        events_sent: int = 0,
        details: dict = None
    ):
        super().__init__(
            message=message,
            code="streaming_error",
            details={
                "model": model,
                "error_type": error_type,
                "events_sent": events_sent,
                **(details or {})
            }
        )
        self.error_type = error_type
        self.events_sent = events_sent
