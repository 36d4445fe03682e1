"""
Fixtures shared by the unit tests.
"""

from unittest.mock import Mock

import pytest
from backend_fixtures import FakeBackend

from core.backend_interface import BackendInterface
from core.error_handler import ErrorHandler
from gui.app_context import create_app_context

PHOTO_FILES = ["/photos/a.jpg", "/photos/b.png", "/photos/c.jpg"]


@pytest.fixture
def fake_backend():
    return FakeBackend(files=PHOTO_FILES)


@pytest.fixture
def backend(fake_backend):
    return BackendInterface(fake_backend.router())


@pytest.fixture
def error_handler(qapp):
    """Stand-in for the process-wide ErrorHandler that records handled errors."""
    handler = Mock(spec=ErrorHandler)
    handler.handle.side_effect = lambda exc, context=None: exc
    return handler


@pytest.fixture
def app_context(qapp, fake_backend, error_handler):
    context = create_app_context(fake_backend.router(), error_handler=error_handler)
    yield context
    context.controller.shutdown()
    context.scheduler.cancel()
