"""
Tests unitaires pour le chargement de la configuration.
"""
import dataclasses

import pytest

from nim_proxy.config import loader
from nim_proxy.config.settings import Settings, StreamingPolicy
from nim_proxy.core.constants import DEFAULT_MODEL_MAPPING, DEFAULT_NIM_API_BASE
from nim_proxy.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isole chaque test de l'environnement et du cache."""
    for var in ("NIM_API_BASE", "NIM_API_KEY", loader.CONFIG_ENV_VAR):
        monkeypatch.delenv(var, raising=False)
    loader._clear_config_cache()
    yield
    loader._clear_config_cache()


@pytest.fixture
def config_file(tmp_path):
    def _write(content: str):
        path = tmp_path / "config.toml"
        path.write_text(content, encoding="utf-8")
        return str(path)
    return _write


class TestSettings:
    """Tests des Settings immuables."""

    def test_defaults(self):
        settings = Settings.from_config({})

        assert settings.nim_api_base == DEFAULT_NIM_API_BASE
        assert settings.nim_api_key == ""
        assert settings.request_timeout == 180.0
        assert settings.default_temperature == 0.7
        assert settings.default_max_tokens == 4096
        assert settings.streaming_policy is StreamingPolicy.CLIENT_CONTROLLED
        assert settings.suppress_reasoning is False
        assert settings.passthrough_non_data_lines is False
        assert dict(settings.model_map) == DEFAULT_MODEL_MAPPING

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.suppress_reasoning = True

    def test_model_map_read_only(self):
        settings = Settings.from_config({})
        with pytest.raises(TypeError):
            settings.model_map["gpt-4o"] = "autre"

    def test_model_overrides_merged(self):
        settings = Settings.from_config({"models": {"mon-alias": "meta/llama-3.1-8b-instruct"}})

        assert settings.model_map["mon-alias"] == "meta/llama-3.1-8b-instruct"
        assert settings.model_map["gpt-4o"] == DEFAULT_MODEL_MAPPING["gpt-4o"]

    def test_invalid_model_override(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_config({"models": {"alias": 42}})
        assert exc_info.value.details["key"] == "models.alias"

    @pytest.mark.parametrize("value,expected", [
        ("client", StreamingPolicy.CLIENT_CONTROLLED),
        ("FORCE", StreamingPolicy.FORCE_ON),
        ("always", StreamingPolicy.FORCE_ON),
    ])
    def test_streaming_policy_parse(self, value, expected):
        settings = Settings.from_config({"streaming": {"policy": value}})
        assert settings.streaming_policy is expected

    def test_unknown_streaming_policy(self):
        with pytest.raises(ConfigurationError):
            Settings.from_config({"streaming": {"policy": "sometimes"}})

    @pytest.mark.parametrize("section,key,value", [
        ("backend", "request_timeout", "lent"),
        ("backend", "request_timeout", 0),
        ("backend", "request_timeout", -5),
        ("backend", "request_timeout", float("nan")),
        ("defaults", "temperature", True),
        ("defaults", "max_tokens", 0),
        ("streaming", "suppress_reasoning", "peut-être"),
    ])
    def test_invalid_values(self, section, key, value):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_config({section: {key: value}})
        assert exc_info.value.details["key"] == f"{section}.{key}"

    def test_public_dict_masks_key(self):
        settings = Settings(nim_api_key="nvapi-secret-abcdef")
        public = settings.to_public_dict()
        assert public["api_key"] == "nvapi-secr..."
        assert "secret-abcdef" not in str(public)


class TestLoader:
    """Tests du chargement TOML."""

    def test_load_file(self, config_file):
        path = config_file(
            '[backend]\n'
            'base_url = "http://localhost:8000/v1/"\n'
            'api_key = "nvapi-file"\n'
            'unbounded_latency_models = ["slow/model"]\n'
            '[streaming]\n'
            'policy = "force"\n'
            'suppress_reasoning = true\n'
        )
        settings = loader.load_settings(path)

        assert settings.nim_api_base == "http://localhost:8000/v1"
        assert settings.nim_api_key == "nvapi-file"
        assert settings.is_unbounded_latency_model("slow/model")
        assert not settings.is_unbounded_latency_model("moonshotai/kimi-k2-thinking")
        assert settings.streaming_policy is StreamingPolicy.FORCE_ON
        assert settings.suppress_reasoning is True

    def test_env_var_expansion(self, config_file, monkeypatch):
        monkeypatch.setenv("MY_NIM_KEY", "nvapi-from-env")
        path = config_file('[backend]\napi_key = "${MY_NIM_KEY}"\nbase_url = "${UNSET_NIM_BASE}"\n')

        settings = loader.load_settings(path)

        assert settings.nim_api_key == "nvapi-from-env"
        # Variable absente → valeur par défaut
        assert settings.nim_api_base == DEFAULT_NIM_API_BASE

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("NIM_API_BASE", "http://override.test")
        monkeypatch.setenv("NIM_API_KEY", "nvapi-override")
        path = config_file('[backend]\nbase_url = "http://file.test"\napi_key = "nvapi-file"\n')

        settings = loader.load_settings(path)

        assert settings.nim_api_base == "http://override.test"
        assert settings.nim_api_key == "nvapi-override"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            loader.load_config(str(tmp_path / "absent.toml"))

    def test_missing_file_from_env_var(self, tmp_path, monkeypatch):
        monkeypatch.setenv(loader.CONFIG_ENV_VAR, str(tmp_path / "absent.toml"))
        with pytest.raises(ConfigurationError):
            loader.load_config()

    def test_invalid_toml(self, config_file):
        path = config_file("[backend\nbase_url = ")
        with pytest.raises(ConfigurationError) as exc_info:
            loader.load_config(path)
        assert "invalide" in exc_info.value.message

    def test_cache_and_reload(self, config_file, monkeypatch):
        path = config_file('[defaults]\nmax_tokens = 100\n')
        monkeypatch.setenv(loader.CONFIG_ENV_VAR, path)

        first = loader.get_config()
        assert loader.get_config() is first

        config_file('[defaults]\nmax_tokens = 200\n')
        assert loader.get_config()["defaults"]["max_tokens"] == 100
        assert loader.reload_config()["defaults"]["max_tokens"] == 200
