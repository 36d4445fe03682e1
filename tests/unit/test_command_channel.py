"""
Tests for the CommandRouter command channel.
"""

from unittest.mock import Mock

import pytest

from core.command_channel import (
    BACKEND_COMMANDS,
    CommandRouter,
    create_default_router,
    install_backend,
    load_backend_installer,
)
from core.errors import BackendError, ConfigError, ErrorCode


class TestCommandRouter:
    """Test cases for CommandRouter."""

    def test_dispatches_to_registered_handler(self) -> None:
        router = CommandRouter()
        router.register("encode_text", lambda args: args["text"].upper())

        assert router("encode_text", {"text": "abc"}) == "ABC"

    def test_unknown_command_raises_backend_error(self) -> None:
        router = CommandRouter()

        with pytest.raises(BackendError) as exc_info:
            router("decode_text", {"text": "x"})

        assert exc_info.value.code is ErrorCode.COMMAND_UNAVAILABLE
        assert exc_info.value.command == "decode_text"
        assert "not available" in exc_info.value.user_message

    def test_register_replaces_existing_handler(self) -> None:
        router = CommandRouter()
        router.register("encode_text", lambda args: "old")
        router.register("encode_text", lambda args: "new")

        assert router("encode_text", {}) == "new"

    def test_unregister_and_has_command(self) -> None:
        router = CommandRouter()
        router.register("encode_text", lambda args: None)

        assert router.has_command("encode_text")
        router.unregister("encode_text")
        router.unregister("encode_text")
        assert not router.has_command("encode_text")

    def test_commands_are_sorted(self) -> None:
        router = CommandRouter()
        router.register("save_preferences", lambda args: None)
        router.register("load_preferences", lambda args: None)

        assert router.commands() == ["load_preferences", "save_preferences"]

    def test_handler_exceptions_propagate(self) -> None:
        router = CommandRouter()

        def broken(args):
            raise OSError("disk gone")

        router.register("get_supported_files", broken)

        with pytest.raises(OSError, match="disk gone"):
            router("get_supported_files", {"dir": "/x"})


class TestDefaultRouter:
    def test_serves_preference_commands_from_config_manager(self) -> None:
        config_manager = Mock()
        config_manager.load_preferences.return_value = {"theme_mode": "dark"}
        config_manager.save_preferences.return_value = True

        router = create_default_router(config_manager)

        assert router("load_preferences", {}) == {"theme_mode": "dark"}
        assert router("save_preferences", {"prefs": {"theme_mode": "light"}}) is True
        config_manager.save_preferences.assert_called_once_with({"theme_mode": "light"})

    def test_watermark_commands_not_registered_by_default(self) -> None:
        router = create_default_router(Mock())

        registered = set(router.commands())
        assert registered == {"load_preferences", "save_preferences"}
        assert registered < set(BACKEND_COMMANDS)


class TestBackendInstaller:
    """Test cases for plugging a backend in by module:callable reference."""

    def test_installs_full_backend(self) -> None:
        router = create_default_router(Mock())

        missing = install_backend(router, "backend_fixtures:install_backend")

        assert missing == []
        assert set(BACKEND_COMMANDS) <= set(router.commands())
        assert router("get_supported_files", {"dir": "/photos"}) == ["/photos/a.jpg"]

    def test_partial_backend_reports_missing_commands(self) -> None:
        router = create_default_router(Mock())

        missing = install_backend(router, "backend_fixtures:install_encoder_only")

        assert "encode_text" not in missing
        assert "load_preferences" not in missing
        assert "get_supported_files" in missing
        assert router("encode_text", {"text": "abc"}) == "cba"

    def test_resolves_callable(self) -> None:
        from backend_fixtures import install_encoder_only

        assert load_backend_installer(" backend_fixtures:install_encoder_only ") is install_encoder_only

    @pytest.mark.parametrize("reference", ["backend_fixtures", "backend_fixtures:", ":install_backend", ""])
    def test_malformed_reference(self, reference) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_backend_installer(reference)

        assert exc_info.value.code is ErrorCode.CONFIG_INVALID
        assert "expected 'module:callable'" in exc_info.value.user_message

    @pytest.mark.parametrize(
        "reference",
        ["no_such_backend_module:install", "backend_fixtures:no_such_installer"],
    )
    def test_unloadable_reference(self, reference) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_backend_installer(reference)

        assert exc_info.value.code is ErrorCode.CONFIG_INVALID
        assert "could not be loaded" in exc_info.value.user_message
        assert isinstance(exc_info.value.__cause__, ImportError | AttributeError)

    def test_non_callable_reference(self) -> None:
        router = create_default_router(Mock())

        with pytest.raises(ConfigError, match="not callable"):
            install_backend(router, "backend_fixtures:not_callable")

        assert router.commands() == ["load_preferences", "save_preferences"]
