"""
Single-flight admission control for long-running operations.

The gate sits on top of the StateStore working flag: acquiring it marks the
application busy, and the returned ReleaseToken is the only thing allowed to
clear that flag again.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

from .errors import AlreadyBusyError
from .state_store import StateStore

logger = logging.getLogger(__name__)


class ReleaseToken:
    """
    Proof of a successful acquisition.

    Releasing is idempotent, and the token can be used as a context manager
    so the release runs on every exit path of the guarded block.
    """

    def __init__(self, gate: OperationGate, operation: str, token_id: int) -> None:
        self._gate = gate
        self.operation = operation
        self.id = token_id
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        self._gate.release(self)

    def __enter__(self) -> ReleaseToken:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "held"
        return f"ReleaseToken(id={self.id}, operation={self.operation!r}, {state})"


class OperationGate:
    """
    Guarantee at most one long-running operation is active application-wide.

    A second acquisition while busy fails fast with AlreadyBusyError; it is
    never queued and never overwrites the running operation.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._ids = itertools.count(1)
        self._active: ReleaseToken | None = None

    @property
    def is_busy(self) -> bool:
        return self._store.is_working

    @property
    def active_operation(self) -> str | None:
        return self._store.current_operation

    def acquire(self, operation: str) -> ReleaseToken:
        """
        Mark the application busy with the named operation.

        Args:
            operation: Human-readable operation name

        Returns:
            Token that must be released when the operation ends

        Raises:
            AlreadyBusyError: If another operation is already active
        """
        if self._store.is_working:
            raise AlreadyBusyError(self._store.current_operation, operation)

        token = ReleaseToken(self, operation, next(self._ids))
        self._active = token
        self._store.set_working(True, operation)
        logger.debug(f"Acquired gate for '{operation}' ({token.id})")
        return token

    def release(self, token: ReleaseToken | None) -> None:
        """Clear the working status held by token; a no-op for stale or foreign tokens."""
        if token is None or token._released:
            return
        token._released = True

        if token is not self._active:
            logger.debug(f"Ignoring release of inactive token {token.id}")
            return

        self._active = None
        self._store.set_working(False)
        logger.debug(f"Released gate for '{token.operation}' ({token.id})")

    @contextmanager
    def hold(self, operation: str) -> Iterator[ReleaseToken]:
        """Acquire for the duration of a with-block, releasing on every exit path."""
        token = self.acquire(operation)
        try:
            yield token
        finally:
            self.release(token)
