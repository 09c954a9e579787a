"""Broadcasting of state updates to whoever is watching.

The engine never waits on observers. Failing to deliver an update is logged
and otherwise ignored, since the persisted state is the source of truth.
"""

# Drunkenfall
# Copyright (C) 2025  Drunkenfall developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Tuple

from drunkenfall.utils import setup_logger

logger = setup_logger(__name__)

Sink = Callable[[str, Any], None]


class Broadcaster(ABC):
    """Interface for publishing updates to observers.

    Implementations must never raise out of :meth:`publish`.
    """

    @abstractmethod
    def publish(self, topic: str, payload: Any) -> None:
        """Send ``payload`` to everyone listening on ``topic``."""

    def close(self) -> None:
        """Release whatever the broadcaster holds."""


class NullBroadcaster(Broadcaster):
    """Drops every update."""

    def publish(self, topic: str, payload: Any) -> None:
        logger.debug(f"Dropping update on {topic}")


class ThreadedBroadcaster(Broadcaster):
    """Hands updates to ``sink`` on a worker pool.

    ``publish`` returns as soon as the update is queued. Errors raised by the
    sink are logged and never reach the caller.
    """

    def __init__(self, sink: Sink, max_workers: int = 2) -> None:
        self.sink = sink
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="drunkenfall-broadcast"
        )

    def publish(self, topic: str, payload: Any) -> None:
        try:
            self._executor.submit(self._deliver, topic, payload)
        except RuntimeError:
            logger.warning(f"Broadcaster is shut down, dropping update on {topic}")

    def _deliver(self, topic: str, payload: Any) -> None:
        try:
            self.sink(topic, payload)
        except Exception:
            logger.exception(f"Broadcast on {topic} failed")

    def close(self) -> None:
        """Wait for queued updates, then stop the workers."""
        self._executor.shutdown(wait=True)


class RecordingBroadcaster(Broadcaster):
    """Keeps every update in memory. Used by the tests and the testing CLI."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, Any]] = []
        self._lock = threading.Lock()

    def publish(self, topic: str, payload: Any) -> None:
        with self._lock:
            self.messages.append((topic, payload))

    def topics(self) -> List[str]:
        with self._lock:
            return [topic for topic, _ in self.messages]

    def clear(self) -> None:
        with self._lock:
            self.messages = []
