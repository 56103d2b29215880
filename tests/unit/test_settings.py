import pytest

from radical.flowcontext.errors import ConfigError
from radical.flowcontext.settings import ContextSettings, StoreDeclaration


class TestContextSettings:
    def test_defaults(self):
        settings = ContextSettings.from_mapping(None)

        assert settings.user_dir is None
        assert settings.function_global_context == {}
        assert settings.context_storage == {}

    def test_camel_case_keys(self):
        settings = ContextSettings.from_mapping(
            {
                "userDir": "/home/flows",
                "functionGlobalContext": {"os": "linux"},
                "contextStorage": {"default": "file"},
            }
        )

        assert settings.user_dir == "/home/flows"
        assert settings.function_global_context == {"os": "linux"}
        assert settings.context_storage == {"default": "file"}

    def test_snake_case_keys(self):
        settings = ContextSettings.from_mapping(
            {"user_dir": "/tmp", "context_storage": {"a": {"module": "memory"}}}
        )

        assert settings.user_dir == "/tmp"
        assert "a" in settings.context_storage

    def test_unrelated_settings_ignored(self):
        settings = ContextSettings.from_mapping({"uiPort": 1880})

        assert not hasattr(settings, "uiPort")

    def test_invalid_settings(self):
        with pytest.raises(ConfigError, match="Invalid context settings"):
            ContextSettings.from_mapping({"functionGlobalContext": "nope"})

    def test_model_instance_passthrough(self):
        settings = ContextSettings(user_dir="/x")

        assert ContextSettings.from_mapping(settings) is settings

    def test_approved_settings_are_copies(self):
        settings = ContextSettings.from_mapping({"userDir": "/x"})

        approved = settings.approved_settings()

        assert approved == {"user_dir": "/x"}
        approved["user_dir"] = "/y"
        assert settings.user_dir == "/x"


class TestStoreDeclaration:
    def test_parse_with_string_module(self):
        declaration = StoreDeclaration.from_raw("s", {"module": "memory"})

        assert declaration.module == "memory"
        assert declaration.config == {}

    def test_parse_with_callable_module(self):
        def make_store(config):
            return None

        declaration = StoreDeclaration.from_raw(
            "s", {"module": make_store, "config": {"dir": "/x"}}
        )

        assert declaration.module is make_store
        assert declaration.config == {"dir": "/x"}

    def test_missing_module(self):
        with pytest.raises(ConfigError, match="No module specified for context storage 's'"):
            StoreDeclaration.from_raw("s", {"config": {}})

    def test_extra_fields_ignored(self):
        declaration = StoreDeclaration.from_raw(
            "s", {"module": "memory", "description": "scratch space"}
        )

        assert declaration.module == "memory"
        assert not hasattr(declaration, "description")

    def test_null_config_becomes_empty(self):
        declaration = StoreDeclaration.from_raw("s", {"module": "memory", "config": None})

        assert declaration.config == {}

    def test_invalid_config(self):
        with pytest.raises(ConfigError, match="Invalid context storage 's'"):
            StoreDeclaration.from_raw("s", {"module": "memory", "config": "fast"})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            StoreDeclaration.from_raw("s", ["memory"])
