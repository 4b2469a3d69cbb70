"""
Dataclasses pour la configuration.

La configuration est immuable: elle est construite une seule fois au
démarrage puis injectée dans les transcodeurs.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional

from ..core.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_MAPPING,
    DEFAULT_NIM_API_BASE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TEMPERATURE,
    DEFAULT_UNBOUNDED_LATENCY_MODELS,
)
from ..core.exceptions import ConfigurationError


class StreamingPolicy(str, Enum):
    """Décision du mode streaming effectif."""
    CLIENT_CONTROLLED = "client"
    FORCE_ON = "force"

    @classmethod
    def parse(cls, value: Any) -> "StreamingPolicy":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {
                "client": cls.CLIENT_CONTROLLED,
                "client_controlled": cls.CLIENT_CONTROLLED,
                "force": cls.FORCE_ON,
                "force_on": cls.FORCE_ON,
                "always": cls.FORCE_ON,
            }
            if normalized in aliases:
                return aliases[normalized]
        raise ConfigurationError(
            message=f"Politique de streaming inconnue: {value!r} (attendu: 'client' ou 'force')",
            config_key="streaming.policy"
        )


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(message=f"Valeur numérique attendue: {value!r}", config_key=key)
    return float(value)


def _as_positive_float(value: Any, key: str) -> float:
    number = _as_float(value, key)
    if not number > 0:
        raise ConfigurationError(message=f"Valeur strictement positive attendue: {value!r}", config_key=key)
    return number


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(message=f"Entier positif attendu: {value!r}", config_key=key)
    return value


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"1", "true", "yes", "on", "0", "false", "no", "off"}:
        return value.strip().lower() in {"1", "true", "yes", "on"}
    raise ConfigurationError(message=f"Booléen attendu: {value!r}", config_key=key)


def _build_model_map(overrides: Any) -> Mapping[str, str]:
    if overrides is None:
        overrides = {}
    if not isinstance(overrides, dict):
        raise ConfigurationError(message="La section [models] doit être une table", config_key="models")

    model_map = dict(DEFAULT_MODEL_MAPPING)
    for client_model, backend_model in overrides.items():
        if not isinstance(backend_model, str) or not backend_model:
            raise ConfigurationError(
                message=f"Modèle backend invalide pour '{client_model}': {backend_model!r}",
                config_key=f"models.{client_model}"
            )
        model_map[client_model] = backend_model
    return MappingProxyType(model_map)


@dataclass(frozen=True)
class Settings:
    """Configuration globale de l'application."""
    nim_api_base: str = DEFAULT_NIM_API_BASE
    nim_api_key: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    unbounded_latency_models: FrozenSet[str] = frozenset(DEFAULT_UNBOUNDED_LATENCY_MODELS)
    default_temperature: float = DEFAULT_TEMPERATURE
    default_max_tokens: int = DEFAULT_MAX_TOKENS
    streaming_policy: StreamingPolicy = StreamingPolicy.CLIENT_CONTROLLED
    suppress_reasoning: bool = False
    passthrough_non_data_lines: bool = False
    model_map: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_MODEL_MAPPING)))
    # Prédicat injectable; remplace la table `unbounded_latency_models`
    latency_predicate: Optional[Callable[[str], bool]] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """
        Crée une instance depuis la configuration chargée.

        Args:
            config: Dictionnaire issu de config.toml (sections backend,
                defaults, streaming, models)

        Returns:
            Settings immuables

        Raises:
            ConfigurationError: Si une valeur est invalide
        """
        backend = config.get("backend", {}) or {}
        defaults = config.get("defaults", {}) or {}
        streaming = config.get("streaming", {}) or {}

        unbounded = backend.get("unbounded_latency_models", list(DEFAULT_UNBOUNDED_LATENCY_MODELS))
        if not isinstance(unbounded, (list, tuple)) or not all(isinstance(m, str) for m in unbounded):
            raise ConfigurationError(
                message="unbounded_latency_models doit être une liste de chaînes",
                config_key="backend.unbounded_latency_models"
            )

        return cls(
            nim_api_base=(backend.get("base_url") or DEFAULT_NIM_API_BASE).rstrip("/"),
            nim_api_key=backend.get("api_key") or "",
            request_timeout=_as_positive_float(
                backend.get("request_timeout", DEFAULT_REQUEST_TIMEOUT), "backend.request_timeout"
            ),
            unbounded_latency_models=frozenset(unbounded),
            default_temperature=_as_float(
                defaults.get("temperature", DEFAULT_TEMPERATURE), "defaults.temperature"
            ),
            default_max_tokens=_as_int(
                defaults.get("max_tokens", DEFAULT_MAX_TOKENS), "defaults.max_tokens"
            ),
            streaming_policy=StreamingPolicy.parse(streaming.get("policy", StreamingPolicy.CLIENT_CONTROLLED)),
            suppress_reasoning=_as_bool(
                streaming.get("suppress_reasoning", False), "streaming.suppress_reasoning"
            ),
            passthrough_non_data_lines=_as_bool(
                streaming.get("passthrough_non_data_lines", False), "streaming.passthrough_non_data_lines"
            ),
            model_map=_build_model_map(config.get("models"))
        )

    def is_unbounded_latency_model(self, backend_model: str) -> bool:
        """True si le modèle backend ne doit pas avoir de timeout."""
        if self.latency_predicate is not None:
            return self.latency_predicate(backend_model)
        return backend_model in self.unbounded_latency_models

    def to_public_dict(self) -> Dict[str, Any]:
        """Vue affichable (clé API masquée)."""
        key = self.nim_api_key
        masked_key = key[:10] + "..." if len(key) > 10 else ("***" if key else "")
        return {
            "backend": self.nim_api_base,
            "api_key": masked_key,
            "request_timeout": self.request_timeout,
            "streaming_policy": self.streaming_policy.value,
            "suppress_reasoning": self.suppress_reasoning,
            "passthrough_non_data_lines": self.passthrough_non_data_lines,
            "total_models": len(self.model_map),
        }
