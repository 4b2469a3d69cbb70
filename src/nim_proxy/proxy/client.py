"""
Client HTTPX vers l'API NVIDIA NIM.

Pourquoi un client partagé:
- Le pool de connexions est réutilisé entre requêtes
- Le timeout dépend du modèle: il est fixé par requête, pas par client
- Aucun retry: un échec backend remonte directement au client
"""
from typing import Optional

import httpx

from ..core.constants import CONNECT_TIMEOUT, DEFAULT_REQUEST_TIMEOUT
from ..core.exceptions import UpstreamHTTPError
from ..core.models import BackendRequest
from .router import get_chat_completions_url


def _build_timeout(timeout: Optional[float]) -> httpx.Timeout:
    if timeout is None:
        return httpx.Timeout(None)
    return httpx.Timeout(timeout, connect=min(CONNECT_TIMEOUT, timeout))


class ProxyClient:
    """
    Client HTTP vers le backend NIM.

    Gère:
    - Authentification Bearer
    - Timeouts par requête (None = illimité)
    - Conversion des réponses non-2xx en UpstreamHTTPError
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ProxyClient":
        self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def open(self) -> httpx.AsyncClient:
        """Crée le client HTTPX si nécessaire et le retourne."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=_build_timeout(self.timeout),
                # Pourquoi ces limits: évite l'épuisement des connexions
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=50
                ),
                transport=self._transport
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def url(self) -> str:
        return get_chat_completions_url(self.base_url)

    def build_headers(self, stream: bool) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if stream else "application/json",
            "User-Agent": "NIM-Proxy/1.0"
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_request(self, backend_request: BackendRequest) -> httpx.Request:
        """Construit la requête HTTPX (body JSON, timeout propre au modèle)."""
        client = self.open()
        return client.build_request(
            "POST",
            self.url,
            headers=self.build_headers(backend_request.stream),
            json=backend_request.to_dict(),
            timeout=_build_timeout(backend_request.timeout)
        )

    async def send_streaming(self, request: httpx.Request) -> httpx.Response:
        """
        Envoie une requête en mode streaming.

        Returns:
            Réponse ouverte (statut 2xx); l'appelant doit la fermer avec
            `aclose()` pour rendre la connexion au pool

        Raises:
            UpstreamHTTPError: Si le backend répond non-2xx
            httpx.HTTPError: Erreur de transport ou timeout
        """
        client = self.open()
        response = await client.send(request, stream=True)

        if not response.is_success:
            try:
                body = await response.aread()
            finally:
                await response.aclose()
            raise UpstreamHTTPError(response.status_code, body)

        return response

    async def send(self, request: httpx.Request) -> httpx.Response:
        """
        Envoie une requête et retourne la réponse complète.

        Raises:
            UpstreamHTTPError: Si le backend répond non-2xx
            httpx.HTTPError: Erreur de transport ou timeout
        """
        client = self.open()
        response = await client.send(request)

        if not response.is_success:
            raise UpstreamHTTPError(response.status_code, response.content)

        return response


def create_proxy_client(
    base_url: str,
    api_key: str = "",
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> ProxyClient:
    """
    Crée un client proxy.

    Args:
        base_url: URL de base du backend NIM
        api_key: Clé API (Bearer)
        timeout: Timeout par défaut en secondes
        transport: Transport HTTPX (tests: httpx.MockTransport)

    Returns:
        Instance de ProxyClient
    """
    return ProxyClient(
        base_url=base_url,
        api_key=api_key,
        timeout=timeout,
        transport=transport
    )
