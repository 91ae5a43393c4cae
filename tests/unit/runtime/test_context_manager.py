"""Unit tests for the configuration context manager."""

import pytest

from src.user_service.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    DatabaseConfig,
)
from src.user_service.runtime.context import (
    AppContext,
    get_config,
    get_context,
    with_context,
)


class TestContextManager:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        context = get_context()
        config = get_config()

        assert isinstance(context, AppContext)
        assert isinstance(config, ConfigData)
        assert context.config is config

    def test_with_context_override_single_level(self):
        original_config = get_config()
        original_port = original_config.app.port

        test_config = ConfigData()
        test_config.app.port = 9999

        with with_context(test_config):
            override_config = get_config()
            assert override_config.app.port == 9999
            assert override_config is not original_config

        after_config = get_config()
        assert after_config.app.port == original_port
        assert after_config is original_config

    def test_partial_override_inherits_other_fields(self):
        original = get_config()

        override = ConfigData(app=AppConfig(expose_error_details=False))
        with with_context(override):
            config = get_config()
            assert config.app.expose_error_details is False
            assert config.app.port == original.app.port
            assert config.database.url == original.database.url

    def test_nested_overrides(self):
        original_port = get_config().app.port

        with with_context(ConfigData(database=DatabaseConfig(url="sqlite://"))):
            with with_context(ConfigData(app=AppConfig(port=1234))):
                config = get_config()
                assert config.database.url == "sqlite://"
                assert config.app.port == 1234

            # Inner override is gone, outer one remains
            assert get_config().app.port == original_port
            assert get_config().database.url == "sqlite://"

    def test_none_override_is_noop(self):
        original = get_config()
        with with_context(None):
            assert get_config() is original

    def test_rejects_non_config(self):
        with pytest.raises(ValueError, match="config_override must be ConfigData"):
            with with_context({"app": {"port": 1}}):
                pass
