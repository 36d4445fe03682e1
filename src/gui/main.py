"""
Main entry point for the ENDEcode GUI application.

The watermarking backend is plugged in either by passing a command channel to
main(), or by naming a backend installer with ``--backend module:callable``
(or the ENDECODE_BACKEND environment variable).
"""

import argparse
import logging
import os
import sys

from PySide6.QtWidgets import QApplication

from core.command_channel import BACKEND_ENV_VAR, CommandChannel, create_default_router, install_backend
from core.config import ensure_app_directories, setup_qsettings
from core.config_manager import ConfigManager
from core.error_handler import ErrorHandler, init_logging, setup_error_handling
from core.errors import ConfigError
from gui.app_context import create_app_context
from gui.main_window import MainWindow
from gui.utils.styling import system_theme

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    """Split our own options from the arguments left for Qt."""
    parser = argparse.ArgumentParser(description="ENDEcode", add_help=False)
    parser.add_argument(
        "--backend",
        default=os.environ.get(BACKEND_ENV_VAR),
        help="Backend installer as module:callable",
    )
    return parser.parse_known_args(argv)


def build_channel(backend: str | None, error_handler: ErrorHandler) -> CommandChannel:
    """
    Build the default router and install the named backend on it.

    A backend that fails to load is reported and the application starts with
    the preference commands only.
    """
    router = create_default_router(ConfigManager())
    if not backend:
        logger.warning("No backend configured; watermark operations are unavailable")
        return router

    try:
        install_backend(router, backend)
    except ConfigError as e:
        error_handler.handle(e, {"backend": backend})
    return router


def main(channel: CommandChannel | None = None, argv: list[str] | None = None) -> int:
    """Main application entry point."""
    argv = list(sys.argv if argv is None else argv)
    args, qt_args = parse_args(argv[1:])

    setup_qsettings()
    app = QApplication([argv[0] if argv else "endecode-gui", *qt_args])

    init_logging(logging.INFO)
    error_handler = setup_error_handling()
    ensure_app_directories()

    if channel is None:
        channel = build_channel(args.backend, error_handler)

    context = create_app_context(channel, initial_theme=system_theme(), error_handler=error_handler)
    window = MainWindow(context)
    window.show()
    window.initialize()

    try:
        return app.exec()
    finally:
        error_handler.restore_hooks()


if __name__ == "__main__":
    raise SystemExit(main())
