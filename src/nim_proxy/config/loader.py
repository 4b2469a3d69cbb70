"""src.nim_proxy.config.loader

Chargement de la configuration TOML.

Priorité: variables d'environnement > config.toml > valeurs par défaut.
Sans fichier config.toml, le proxy démarre sur l'environnement seul
(NIM_API_BASE, NIM_API_KEY).
"""
import os
import re
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from ..core.exceptions import ConfigurationError
from .settings import Settings

CONFIG_ENV_VAR = "NIM_PROXY_CONFIG"

# Variables d'environnement → (section, clé)
ENV_OVERRIDES = {
    "NIM_API_BASE": ("backend", "base_url"),
    "NIM_API_KEY": ("backend", "api_key"),
}

# Cache global de configuration
_config_cache: Optional[Dict[str, Any]] = None

_ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')


def _expand_env_vars(obj: Any) -> Any:
    """
    Récursivement étend les variables d'environnement ${VAR} dans la config.

    Une variable non définie est remplacée par une chaîne vide, ce qui
    laisse la valeur par défaut s'appliquer.
    """
    if isinstance(obj, str):
        return _ENV_VAR_PATTERN.sub(lambda match: os.environ.get(match.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            config.setdefault(section, {})[key] = value
    return config


def _default_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    # Structure: project/src/nim_proxy/config/loader.py
    return Path(__file__).resolve().parents[3] / "config.toml"


def _clear_config_cache():
    """Vide le cache de configuration."""
    global _config_cache
    _config_cache = None


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Charge la configuration depuis config.toml.

    Args:
        config_path: Chemin vers le fichier config (optionnel). Un chemin
            explicite doit exister; le chemin par défaut est facultatif.

    Returns:
        Dictionnaire de configuration

    Raises:
        ConfigurationError: Si le fichier explicite n'existe pas ou est invalide
    """
    global _config_cache

    if _config_cache is not None and config_path is None:
        return _config_cache

    explicit = config_path is not None or CONFIG_ENV_VAR in os.environ
    path = Path(config_path) if config_path is not None else _default_config_path()

    raw_config: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(
                message=f"config.toml invalide ({path}): {e}",
                config_key="config_path"
            ) from e
    elif explicit:
        raise ConfigurationError(
            message=f"Fichier de configuration non trouvé: {path}",
            config_key="config_path"
        )

    _config_cache = _apply_env_overrides(_expand_env_vars(raw_config))
    return _config_cache


def reload_config(config_path: str = None) -> Dict[str, Any]:
    """
    Recharge la configuration depuis le fichier.

    Returns:
        Nouvelle configuration chargée
    """
    _clear_config_cache()
    return load_config(config_path)


def get_config() -> Dict[str, Any]:
    """Retourne la configuration en cache."""
    if _config_cache is None:
        return load_config()
    return _config_cache


def load_settings(config_path: str = None) -> Settings:
    """
    Charge la configuration et construit les Settings immuables.

    Raises:
        ConfigurationError: Si le fichier ou une valeur est invalide
    """
    return Settings.from_config(load_config(config_path))
