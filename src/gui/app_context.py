"""
Construction of the application's shared services.

The entry point builds exactly one AppContext and passes it to the main
window; nothing in the application reaches for a global store.
"""

from dataclasses import dataclass

from core.backend_interface import BackendInterface
from core.command_channel import CommandChannel, create_default_router
from core.config_manager import ConfigManager
from core.error_handler import ErrorHandler, get_error_handler
from core.operation_gate import OperationGate
from core.preferences import PreferencesManager
from core.progress_scheduler import ProgressScheduler
from core.state_store import Preferences, StateStore, ThemeMode
from core.threading import OperationController


@dataclass
class AppContext:
    store: StateStore
    gate: OperationGate
    scheduler: ProgressScheduler
    backend: BackendInterface
    controller: OperationController
    preferences: PreferencesManager
    error_handler: ErrorHandler


def create_app_context(
    channel: CommandChannel | None = None,
    *,
    initial_theme: ThemeMode = ThemeMode.LIGHT,
    error_handler: ErrorHandler | None = None,
) -> AppContext:
    """
    Build the shared services.

    Args:
        channel: Backend command channel; defaults to a router serving preferences from QSettings
        initial_theme: Theme used until stored preferences are loaded
        error_handler: Error handler; defaults to the process-wide instance

    Returns:
        AppContext with every service wired to the same StateStore
    """
    if channel is None:
        channel = create_default_router(ConfigManager())

    store = StateStore(Preferences(theme_mode=initial_theme))
    gate = OperationGate(store)
    scheduler = ProgressScheduler()
    backend = BackendInterface(channel)
    handler = error_handler or get_error_handler()
    controller = OperationController(gate, scheduler, handler)
    preferences = PreferencesManager(store, backend)

    return AppContext(
        store=store,
        gate=gate,
        scheduler=scheduler,
        backend=backend,
        controller=controller,
        preferences=preferences,
        error_handler=handler,
    )
