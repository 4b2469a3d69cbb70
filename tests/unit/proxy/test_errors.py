"""
Tests unitaires pour la conversion des erreurs au format OpenAI.
"""
import json

import httpx

from nim_proxy.core.exceptions import InvalidRequestError, UpstreamHTTPError
from nim_proxy.proxy.errors import map_error, not_found_envelope


class TestMapError:
    """Tests de l'enveloppe d'erreur."""

    def test_upstream_status_and_detail(self):
        """429 backend → 429 client, message du backend, modèle demandé."""
        error = UpstreamHTTPError(429, json.dumps({"detail": "Rate limit exceeded"}).encode())
        status, body = map_error(error, "gpt-4o")

        assert status == 429
        assert body == {
            "error": {
                "message": "NVIDIA API Error: Rate limit exceeded",
                "type": "invalid_request_error",
                "code": 429,
                "model_attempted": "gpt-4o"
            }
        }

    def test_upstream_without_body(self):
        status, body = map_error(UpstreamHTTPError(503), "gpt-4o")
        assert status == 503
        assert body["error"]["message"].startswith("NVIDIA API Error: ")
        assert body["error"]["code"] == 503

    def test_timeout_is_500(self):
        status, body = map_error(httpx.ReadTimeout(""), "llama-3.1-405b")

        assert status == 500
        assert body["error"]["code"] == 500
        assert "ReadTimeout" in body["error"]["message"]
        assert body["error"]["model_attempted"] == "llama-3.1-405b"

    def test_connection_error_is_500(self):
        status, body = map_error(httpx.ConnectError("Connection refused"), "gpt-4o")
        assert status == 500
        assert body["error"]["message"] == "NVIDIA API Error: Connection refused"

    def test_invalid_json_is_500(self):
        try:
            json.loads("not json")
        except ValueError as e:
            status, body = map_error(e, "gpt-4o")
        assert status == 500
        assert body["error"]["type"] == "invalid_request_error"

    def test_invalid_request_is_400(self):
        status, body = map_error(InvalidRequestError("Champ 'model' requis", field="model"), None)

        assert status == 400
        assert body["error"]["message"] == "Champ 'model' requis"
        assert "model_attempted" not in body["error"]

    def test_not_found_envelope(self):
        body = not_found_envelope("/v1/unknown")
        assert body == {
            "error": {
                "message": "Endpoint /v1/unknown not found",
                "type": "invalid_request_error",
                "code": 404
            }
        }
