"""
Bookkeeping for in-flight non-blocking calls.
"""

import threading
from typing import Any, List, Optional, Set


class PendingCall:
    """Handle for one callback or subscription call.

    ``cancel()`` removes the call from its registry and cancels the
    underlying task. The network request itself may still finish; its
    outcome is simply never delivered.
    """

    def __init__(self, registry: "PendingCallRegistry", label: str = ""):
        self.label = label
        self.cancelled = False
        self._registry = registry
        self._handle: Optional[Any] = None

    def attach(self, handle: Any) -> None:
        self._handle = handle
        if self.cancelled:
            handle.cancel()

    def cancel(self) -> None:
        self._registry.discard(self)
        self._cancel_handle()

    def _cancel_handle(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()

    @property
    def done(self) -> bool:
        return self._handle is not None and self._handle.done()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "done" if self.done else "pending"
        return f"<PendingCall {self.label} {state}>"


class PendingCallRegistry:
    """Thread-safe set of pending calls owned by one dispatcher."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: Set[PendingCall] = set()

    def register(self, label: str = "") -> PendingCall:
        call = PendingCall(self, label)
        with self._lock:
            self._calls.add(call)
        return call

    def complete(self, call: PendingCall) -> bool:
        """Remove ``call``; True if it was still tracked and may deliver."""
        with self._lock:
            if call in self._calls:
                self._calls.remove(call)
                return True
            return False

    def discard(self, call: PendingCall) -> None:
        with self._lock:
            self._calls.discard(call)

    def cancel_all(self) -> int:
        with self._lock:
            calls: List[PendingCall] = list(self._calls)
            self._calls.clear()
        for call in calls:
            call._cancel_handle()
        return len(calls)

    def __len__(self) -> int:
        with self._lock:
            return len(self._calls)

    def __contains__(self, call: object) -> bool:
        with self._lock:
            return call in self._calls
