"""The storage boundary and an in-memory implementation of it.

A store only moves plain dictionaries around. Turning them into tournaments
and people is the job of the :class:`~drunkenfall.storage.database.Database`.
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

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


class Store(ABC):
    """Interface of a persistence backend.

    Implementations raise
    :class:`~drunkenfall.exceptions.PersistenceException` when they fail to
    read or write.
    """

    @abstractmethod
    def save_tournament(self, tournament_id: str, data: Record) -> None:
        """Write a tournament, replacing any earlier version."""

    @abstractmethod
    def load_tournament(self, tournament_id: str) -> Optional[Record]:
        """Read a tournament, or None if it is not stored."""

    @abstractmethod
    def load_tournaments(self) -> List[Record]:
        """Read all stored tournaments."""

    @abstractmethod
    def delete_tournament(self, tournament_id: str) -> None:
        """Remove a tournament. Removing a missing one is not an error."""

    @abstractmethod
    def save_person(self, person_id: str, data: Record) -> None:
        """Write a person, replacing any earlier version."""

    @abstractmethod
    def load_person(self, person_id: str) -> Optional[Record]:
        """Read a person, or None if it is not stored."""

    @abstractmethod
    def load_people(self) -> List[Record]:
        """Read all stored people."""


class MemoryStore(Store):
    """Keeps deep copies of every record in dictionaries."""

    def __init__(self) -> None:
        self._tournaments: Dict[str, Record] = {}
        self._people: Dict[str, Record] = {}
        self._lock = threading.Lock()

    def save_tournament(self, tournament_id: str, data: Record) -> None:
        with self._lock:
            self._tournaments[tournament_id] = copy.deepcopy(data)

    def load_tournament(self, tournament_id: str) -> Optional[Record]:
        with self._lock:
            data = self._tournaments.get(tournament_id)
            return copy.deepcopy(data) if data is not None else None

    def load_tournaments(self) -> List[Record]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._tournaments.values()]

    def delete_tournament(self, tournament_id: str) -> None:
        with self._lock:
            self._tournaments.pop(tournament_id, None)

    def save_person(self, person_id: str, data: Record) -> None:
        with self._lock:
            self._people[person_id] = copy.deepcopy(data)

    def load_person(self, person_id: str) -> Optional[Record]:
        with self._lock:
            data = self._people.get(person_id)
            return copy.deepcopy(data) if data is not None else None

    def load_people(self) -> List[Record]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._people.values()]
