"""
Transcodage du stream SSE NIM vers le stream SSE OpenAI.

Pourquoi cette complexité:
- Les fragments reçus du backend ne sont pas alignés sur les lignes SSE
- Un événement ne doit jamais être émis avant d'avoir reçu son '\\n'
- Les événements de raisonnement peuvent être filtrés
- Le stream doit toujours se terminer par exactement un [DONE]
  (sauf en cas d'erreur backend)
- Une déconnexion client doit libérer immédiatement la connexion backend
"""
import asyncio
import json
import logging
from datetime import datetime
from typing import AsyncGenerator, Awaitable, Callable, List, Optional

import httpx

from ..core.constants import SSE_DATA_PREFIX, SSE_DONE_PAYLOAD, SSE_EVENT_TERMINATOR
from ..core.exceptions import StreamingError
from ..core.models import ChoiceDelta

logger = logging.getLogger(__name__)


# Types d'erreurs streaming connus
STREAMING_ERROR_TYPES = {
    "read_error": "Connexion interrompue par le backend",
    "timeout_error": "Timeout lors de la lecture du stream",
    "protocol_error": "Réponse backend mal formée",
    "unknown": "Erreur streaming inconnue"
}


class SSELineBuffer:
    """
    Accumulateur d'octets qui ne rend que des lignes complètes.

    Seule la fin de la dernière ligne (sans '\\n') reste en mémoire: la
    taille du buffer est bornée par l'écart entre deux retours à la ligne,
    pas par la longueur du stream.
    """

    def __init__(self):
        self._buffer = b""

    @property
    def pending(self) -> bytes:
        """Octets reçus dont la ligne n'est pas encore terminée."""
        return self._buffer

    def feed(self, fragment: bytes) -> List[bytes]:
        """
        Ajoute un fragment et retourne les lignes désormais complètes.

        Args:
            fragment: Octets bruts reçus du backend

        Returns:
            Lignes terminées (sans le '\\n'), dans l'ordre d'arrivée
        """
        self._buffer += fragment
        *lines, self._buffer = self._buffer.split(b"\n")
        return lines

    def clear(self) -> None:
        self._buffer = b""


class StreamTranscoder:
    """
    Convertit les lignes SSE du backend en événements SSE pour le client.

    Mode par défaut: chaque ligne `data: ` est émise dès qu'elle est
    complète, les autres lignes sont ignorées.

    Mode fidèle (`passthrough_non_data`): les lignes d'un événement
    (`event:`, `id:`, commentaires, `data:`) sont retenues jusqu'à la
    ligne vide qui le termine, puis émises ou supprimées ensemble.

    Args:
        suppress_reasoning: Supprime les événements dont le delta porte
            `reasoning_content`
        passthrough_non_data: Renvoie les lignes non `data: ` avec leur
            événement au lieu de les ignorer
    """

    def __init__(self, suppress_reasoning: bool = False, passthrough_non_data: bool = False):
        self.suppress_reasoning = suppress_reasoning
        self.passthrough_non_data = passthrough_non_data
        self.done_sent = False
        self.events_sent = 0
        self.suppressed_count = 0
        self.malformed_count = 0
        # Mode fidèle: événement en cours
        self._event_lines: List[bytes] = []
        self._event_dropped = False

    def _frame(self, payload: bytes) -> bytes:
        self.events_sent += 1
        return SSE_DATA_PREFIX + payload + SSE_EVENT_TERMINATOR

    def _accept(self, payload: bytes) -> bool:
        """Décide si un payload `data: ` doit être transmis."""
        if payload == SSE_DONE_PAYLOAD:
            if self.done_sent:
                return False
            self.done_sent = True
            return True

        # Le JSON n'est décodé que pour décider du filtrage; le texte
        # original est renvoyé tel quel
        if self.suppress_reasoning:
            try:
                chunk = json.loads(payload)
            except ValueError:
                self.malformed_count += 1
                logger.debug(f"Payload SSE non JSON transmis brut: {payload[:200]!r}")
                return True

            delta = ChoiceDelta.from_chunk(chunk)
            if delta is not None and delta.has_reasoning:
                self.suppressed_count += 1
                return False

        return True

    def transcode_line(self, raw_line: bytes) -> Optional[bytes]:
        """
        Transcode une ligne complète.

        Args:
            raw_line: Ligne SSE terminée reçue du backend

        Returns:
            Événement prêt à écrire, ou None si rien n'est à émettre
        """
        line = raw_line.strip()

        if self.passthrough_non_data:
            return self._hold_line(line)

        if not line.startswith(SSE_DATA_PREFIX):
            # Séparateurs vides et commentaires SSE
            return None

        payload = line[len(SSE_DATA_PREFIX):]
        if not self._accept(payload):
            return None
        return self._frame(payload)

    def _hold_line(self, line: bytes) -> Optional[bytes]:
        if not line:
            return self._flush_event()
        if self._event_dropped:
            return None
        if line.startswith(SSE_DATA_PREFIX) and not self._accept(line[len(SSE_DATA_PREFIX):]):
            # L'événement entier est supprimé, champs déjà reçus compris
            self._event_dropped = True
            self._event_lines = []
            return None
        self._event_lines.append(line)
        return None

    def _flush_event(self) -> Optional[bytes]:
        lines, dropped = self._event_lines, self._event_dropped
        self._event_lines = []
        self._event_dropped = False
        if dropped or not lines:
            return None
        self.events_sent += 1
        return b"\n".join(lines) + SSE_EVENT_TERMINATOR

    def finish(self) -> Optional[bytes]:
        """
        Fin gracieuse du stream.

        Émet l'événement retenu sans ligne vide finale (mode fidèle), puis
        [DONE] si le backend ne l'a pas déjà envoyé.
        """
        pending = self._flush_event() or b""
        if self.done_sent:
            return pending or None
        self.done_sent = True
        return pending + self._frame(SSE_DONE_PAYLOAD)


def _classify_error(error: httpx.HTTPError) -> str:
    if isinstance(error, httpx.TimeoutException):
        return "timeout_error"
    if isinstance(error, httpx.RemoteProtocolError):
        return "protocol_error"
    if isinstance(error, (httpx.ReadError, httpx.NetworkError)):
        return "read_error"
    return "unknown"


async def stream_generator(
    response: httpx.Response,
    transcoder: StreamTranscoder,
    client_model: str = "",
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None
) -> AsyncGenerator[bytes, None]:
    """
    Générateur de streaming SSE transcodé.

    Chaque événement est yieldé dès qu'il est complet: pas de
    batching, pas de réordonnancement. Le fragment suivant n'est lu
    qu'une fois les événements précédents consommés par le serveur ASGI.

    Args:
        response: Réponse HTTPX en streaming (déjà ouverte, statut 2xx)
        transcoder: Transcodeur propre à cette requête
        client_model: Modèle demandé par le client (logs)
        is_disconnected: Coroutine indiquant si le client est parti

    Yields:
        Événements SSE `data: ...\\n\\n`

    Raises:
        Aucune erreur backend: elles sont loggées et le stream se termine
        sans [DONE]. L'annulation (déconnexion client) est propagée.
    """
    line_buffer = SSELineBuffer()
    chunk_count = 0
    stream_start_time = datetime.now()

    try:
        async for fragment in response.aiter_bytes():
            if is_disconnected is not None and await is_disconnected():
                print(f"⚠️  [STREAM] Client déconnecté, arrêt de la lecture backend ({client_model})")
                return

            chunk_count += 1
            for line in line_buffer.feed(fragment):
                event = transcoder.transcode_line(line)
                if event is not None:
                    yield event

    except httpx.HTTPError as e:
        _log_streaming_error(
            StreamingError(
                message=str(e),
                model=client_model,
                error_type=_classify_error(e),
                events_sent=transcoder.events_sent,
                details={"chunks_received": chunk_count}
            ),
            start_time=stream_start_time
        )
        return

    except (asyncio.CancelledError, GeneratorExit):
        print(f"⚠️  [STREAM] Stream annulé par le client ({client_model})")
        raise

    finally:
        if line_buffer.pending:
            logger.debug(f"Ligne incomplète abandonnée en fin de stream: {line_buffer.pending[:200]!r}")
        line_buffer.clear()
        await response.aclose()

    if not transcoder.done_sent:
        logger.debug("Backend sans [DONE], ajout en fin de stream")
    done_event = transcoder.finish()
    if done_event is not None:
        yield done_event

    if transcoder.suppressed_count:
        logger.info(f"{transcoder.suppressed_count} événement(s) de raisonnement filtré(s) pour {client_model}")
    print(f"✅ [SUCCESS] Streaming terminé pour {client_model} ({transcoder.events_sent} événements)")


def _log_streaming_error(error: StreamingError, start_time: datetime) -> None:
    """
    Log structuré d'une erreur streaming.

    Pourquoi cette structure: permet de parser les logs
    pour des dashboards de monitoring backend.
    """
    duration = (datetime.now() - start_time).total_seconds()
    error_msg = STREAMING_ERROR_TYPES.get(error.error_type, STREAMING_ERROR_TYPES["unknown"])

    print(
        f"🔴 [STREAM_ERROR] {error_msg}\n"
        f"   Modèle: {error.details.get('model')}\n"
        f"   Chunks reçus: {error.details.get('chunks_received', 0)}\n"
        f"   Événements envoyés: {error.events_sent}\n"
        f"   Durée: {duration:.2f}s\n"
        f"   Détail: {error.message[:200]}"
    )
