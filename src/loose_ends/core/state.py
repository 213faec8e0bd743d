# src/loose_ends/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.pending import PendingTracker
from .ports import IdentityProvider, TaskRepo


@dataclass
class AppState:
    # Settings object (loose_ends.config.Settings or a test double with the same attributes).
    settings: Any

    task_store: TaskRepo
    identity: IdentityProvider

    # In-flight commands per user id (see tasks.pending).
    pending: dict[str, PendingTracker] = field(default_factory=dict)
    _pending_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def pending_for(self, user_id: str) -> PendingTracker:
        with self._pending_lock:
            tracker = self.pending.get(user_id)
            if tracker is None:
                tracker = self.pending[user_id] = PendingTracker()
            return tracker

    def drop_pending(self, user_id: str) -> None:
        with self._pending_lock:
            self.pending.pop(user_id, None)
