"""
In-process request/response channel to the watermarking backend.

A command channel is any callable taking a command name and an argument dict
and returning the command's result. CommandRouter is the default channel: it
dispatches command names to registered handlers. A backend integration is a
callable that registers the watermarking commands on a router; it is named as
``package.module:callable`` and loaded with install_backend().
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from importlib import import_module
from typing import TYPE_CHECKING, Any

from .errors import BackendError, ConfigError, ErrorCode

if TYPE_CHECKING:
    from .config_manager import ConfigManager

logger = logging.getLogger(__name__)

CommandChannel = Callable[[str, dict[str, Any]], Any]
CommandHandler = Callable[[dict[str, Any]], Any]
BackendInstaller = Callable[["CommandRouter"], Any]

BACKEND_ENV_VAR = "ENDECODE_BACKEND"

BACKEND_COMMANDS = (
    "encode_text",
    "decode_text",
    "add_watermark_marker",
    "get_supported_files",
    "add_tail_watermark",
    "extract_tail_watermark",
    "remove_tail_watermarks",
    "batch_copy_and_encode",
    "load_preferences",
    "save_preferences",
)


class CommandRouter:
    """
    Dispatch command names to handlers.

    Handlers receive the argument dict. Unknown commands are rejected with
    a BackendError so callers see the same failure type as any other
    backend rejection.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._lock = threading.RLock()

    def register(self, command: str, handler: CommandHandler) -> None:
        with self._lock:
            if command in self._handlers:
                logger.debug(f"Replacing handler for command '{command}'")
            self._handlers[command] = handler

    def unregister(self, command: str) -> None:
        with self._lock:
            self._handlers.pop(command, None)

    def has_command(self, command: str) -> bool:
        with self._lock:
            return command in self._handlers

    def commands(self) -> list[str]:
        with self._lock:
            return sorted(self._handlers)

    def __call__(self, command: str, args: dict[str, Any]) -> Any:
        with self._lock:
            handler = self._handlers.get(command)
        if handler is None:
            raise BackendError(
                f"Command '{command}' is not available",
                code=ErrorCode.COMMAND_UNAVAILABLE,
                command=command,
            )
        return handler(args)


def create_default_router(config_manager: ConfigManager) -> CommandRouter:
    """
    Build a router serving the preference commands from local storage.

    Watermarking commands are added by install_backend().
    """
    router = CommandRouter()
    router.register("load_preferences", lambda args: config_manager.load_preferences())
    router.register("save_preferences", lambda args: config_manager.save_preferences(args["prefs"]))
    return router


def load_backend_installer(reference: str) -> BackendInstaller:
    """
    Resolve a ``package.module:callable`` reference to a backend installer.

    Raises:
        ConfigError: If the reference is malformed, cannot be imported or is not callable
    """
    module_name, _, attribute = reference.strip().partition(":")
    if not module_name or not attribute:
        raise ConfigError(
            ErrorCode.CONFIG_INVALID,
            f"Invalid backend reference '{reference}', expected 'module:callable'",
            context={"backend": reference},
        )

    try:
        installer = getattr(import_module(module_name), attribute)
    except (ImportError, AttributeError) as e:
        raise ConfigError(
            ErrorCode.CONFIG_INVALID,
            f"Backend '{reference}' could not be loaded",
            technical_message=f"{type(e).__name__}: {e}",
            context={"backend": reference},
        ) from e

    if not callable(installer):
        raise ConfigError(
            ErrorCode.CONFIG_INVALID,
            f"Backend '{reference}' is not callable",
            context={"backend": reference},
        )
    return installer


def install_backend(router: CommandRouter, reference: str) -> list[str]:
    """
    Let the referenced backend register its commands on router.

    Returns:
        Backend commands still missing afterwards
    """
    load_backend_installer(reference)(router)
    missing = [command for command in BACKEND_COMMANDS if not router.has_command(command)]
    if missing:
        logger.warning(f"Backend '{reference}' does not provide: {', '.join(missing)}")
    else:
        logger.info(f"Backend '{reference}' installed")
    return missing
