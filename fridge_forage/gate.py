"""Request gate: at most one in-flight AI request per operation kind."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Literal

RequestKind = Literal["expiry", "discovery"]
RequestState = Literal["pending", "completed", "failed"]


class GateBusyError(Exception):
    """Raised when a request of the same kind is already in flight."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"A {kind} request is already in progress")


@dataclass
class RequestHandle:
    """One in-flight request. Moves from pending to completed or failed exactly once."""

    kind: str
    gate: "RequestGate"
    state: RequestState = "pending"

    @property
    def pending(self) -> bool:
        return self.state == "pending"

    def complete(self) -> None:
        self._finish("completed")

    def fail(self) -> None:
        self._finish("failed")

    def _finish(self, state: RequestState) -> None:
        if not self.pending:
            raise RuntimeError(f"{self.kind} request already {self.state}")
        self.state = state
        self.gate._release(self)


class RequestGate:
    """
    Tracks in-flight requests by kind.

    Starting a request while another of the same kind is pending raises
    GateBusyError; different kinds may run side by side. Requests cannot be
    cancelled, only completed or failed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: dict[str, RequestHandle] = {}

    def is_busy(self, kind: str) -> bool:
        with self._lock:
            return kind in self._active

    def start(self, kind: RequestKind) -> RequestHandle:
        with self._lock:
            if kind in self._active:
                raise GateBusyError(kind)
            handle = RequestHandle(kind=kind, gate=self)
            self._active[kind] = handle
            return handle

    def _release(self, handle: RequestHandle) -> None:
        with self._lock:
            if self._active.get(handle.kind) is handle:
                del self._active[handle.kind]

    @contextmanager
    def hold(self, kind: RequestKind) -> Iterator[RequestHandle]:
        """Run a block as one request; it fails on exception and completes otherwise."""
        handle = self.start(kind)
        try:
            yield handle
        except BaseException:
            if handle.pending:
                handle.fail()
            raise
        if handle.pending:
            handle.complete()
