"""The database: live tournaments and people on top of a store.

Tournaments are kept in memory once loaded and written through to the store
on every save. Observers are told about every save through the broadcaster.
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

import random
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from drunkenfall.broadcast import (
    Broadcaster,
    NullBroadcaster,
    Sink,
    ThreadedBroadcaster,
)
from drunkenfall.config import AppConfig
from drunkenfall.constants import (
    OFFICIAL_TOURNAMENT_PREFIX,
    TOPIC_ALL,
    TOPIC_TOURNAMENT,
)
from drunkenfall.exceptions import PersonNotFoundException
from drunkenfall.models.person import Person
from drunkenfall.models.tournament.tournament import Tournament
from drunkenfall.ranking import sort_by_schedule_date
from drunkenfall.storage.json_store import JsonFileStore
from drunkenfall.storage.store import Store
from drunkenfall.utils import setup_logger

logger = setup_logger(__name__)


class Database:
    """Repository of tournaments and people.

    The tournament list and the people list each have their own lock. On top
    of that, every tournament has a re-entrant lock that callers hold through
    :meth:`transaction` while they mutate it, so that there is only ever one
    writer per tournament.
    """

    def __init__(
        self,
        store: Store,
        broadcaster: Optional[Broadcaster] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.broadcaster = broadcaster or NullBroadcaster()
        self.rng = rng

        self.tournaments: List[Tournament] = []
        self.people: List[Person] = []

        self._tournament_lock = threading.Lock()
        self._people_lock = threading.Lock()
        self._transaction_locks: Dict[str, threading.RLock] = {}

    @classmethod
    def from_config(
        cls, config: AppConfig, sink: Optional[Sink] = None
    ) -> "Database":
        """Open a database on the JSON store in ``config.data_dir``.

        Updates go to ``sink`` on a worker pool when one is given.
        """
        broadcaster: Broadcaster = NullBroadcaster()
        if sink is not None:
            broadcaster = ThreadedBroadcaster(sink, max_workers=config.broadcast_workers)
        return cls(JsonFileStore(config.data_dir), broadcaster=broadcaster)

    # ========== Tournaments ==========

    def load_tournaments(self) -> List[Tournament]:
        """Read every stored tournament into memory, replacing what is there."""
        loaded = [
            Tournament.from_dict(data, db=self, rng=self.rng)
            for data in self.store.load_tournaments()
        ]
        with self._tournament_lock:
            self.tournaments = sort_by_schedule_date(loaded)
        logger.info(f"Loaded {len(loaded)} tournaments")
        return list(self.tournaments)

    def save_tournament(self, tournament: Tournament) -> None:
        """Write a tournament to the store and tell observers about it.

        Tournaments not seen before are added to the in-memory list.

        Raises:
            PersistenceException: If the store fails to write
        """
        self.store.save_tournament(tournament.id, tournament.to_dict())

        with self._tournament_lock:
            if not any(t is tournament for t in self.tournaments):
                self.tournaments = [
                    t for t in self.tournaments if t.id != tournament.id
                ]
                self.tournaments.append(tournament)

        self.publish(TOPIC_TOURNAMENT, tournament.to_dict())

    def overwrite_tournament(self, tournament: Tournament) -> None:
        """Replace the tournament with the same id, in the store and in memory.

        Used when a tournament has been edited as a whole and loaded from the
        outside.
        """
        tournament.db = self
        tournament.set_match_pointers()
        self.store.save_tournament(tournament.id, tournament.to_dict())

        with self._tournament_lock:
            for i, t in enumerate(self.tournaments):
                if t.id == tournament.id:
                    self.tournaments[i] = tournament
                    break
            else:
                self.tournaments.append(tournament)

        logger.info(f"Overwrote tournament {tournament.id}")

    def get_tournament(self, tournament_id: str) -> Optional[Tournament]:
        with self._tournament_lock:
            for t in self.tournaments:
                if t.id == tournament_id:
                    return t
        return None

    def get_tournaments(self) -> List[Tournament]:
        """All tournaments, earliest scheduled first."""
        with self._tournament_lock:
            tournaments = list(self.tournaments)
        return sort_by_schedule_date(tournaments)

    def get_current_tournament(self) -> Optional[Tournament]:
        """The first running tournament by schedule date, if any."""
        for t in self.get_tournaments():
            if t.is_running():
                return t
        return None

    def clear_test_tournaments(self) -> List[str]:
        """Delete every tournament whose name does not mark it as official.

        Returns:
            The ids of the deleted tournaments
        """
        with self._tournament_lock:
            doomed = [
                t for t in self.tournaments
                if not t.name.startswith(OFFICIAL_TOURNAMENT_PREFIX)
            ]

        for t in doomed:
            logger.info(f"Deleting {t.id}")
            self.store.delete_tournament(t.id)

        ids = {t.id for t in doomed}
        with self._tournament_lock:
            self.tournaments = [t for t in self.tournaments if t.id not in ids]
            for tid in ids:
                self._transaction_locks.pop(tid, None)

        self.publish(TOPIC_ALL, self.as_map())
        return sorted(ids)

    def as_map(self) -> Dict[str, Dict[str, Any]]:
        """Every tournament keyed on id, serialized."""
        return {t.id: t.to_dict() for t in self.get_tournaments()}

    @contextmanager
    def transaction(self, tournament_id: str) -> Iterator[None]:
        """Hold the writer lock of a tournament.

        Example:
            >>> with db.transaction(t.id):
            ...     t.next_match().end()
        """
        with self._tournament_lock:
            lock = self._transaction_locks.setdefault(tournament_id, threading.RLock())
        with lock:
            yield

    # ========== People ==========

    def load_people(self) -> List[Person]:
        """Read every stored person into memory, replacing what is there."""
        people = [Person.from_dict(data) for data in self.store.load_people()]
        with self._people_lock:
            self.people = people
        logger.info(f"Loaded {len(people)} people")
        return list(people)

    def save_person(self, person: Person) -> None:
        """Write a person and keep the in-memory copy current."""
        self.store.save_person(person.id, person.to_dict())
        with self._people_lock:
            for i, p in enumerate(self.people):
                if p.id == person.id:
                    self.people[i] = person
                    break
            else:
                self.people.append(person)

    def get_person(self, person_id: str) -> Person:
        """Look up a person.

        Raises:
            PersonNotFoundException: If nobody has that id
        """
        with self._people_lock:
            for p in self.people:
                if p.id == person_id:
                    return p

        data = self.store.load_person(person_id)
        if data is None:
            raise PersonNotFoundException(f"Person {person_id} not found")

        person = Person.from_dict(data)
        with self._people_lock:
            self.people.append(person)
        return person

    def get_safe_person(self, person_id: str) -> Optional[Person]:
        """Like :meth:`get_person`, but None instead of raising."""
        try:
            return self.get_person(person_id)
        except PersonNotFoundException:
            logger.warning(f"Could not find person {person_id}")
            return None

    def get_people(self, active_only: bool = False) -> List[Person]:
        with self._people_lock:
            people = list(self.people)
        if active_only:
            return [p for p in people if not p.disabled]
        return people

    def disable_person(self, person_id: str) -> Person:
        """Mark a person as no longer actively playing."""
        person = self.get_person(person_id)
        person.disabled = True
        self.save_person(person)
        logger.info(f"Disabled {person}")
        return person

    # ========== Broadcasting ==========

    def publish(self, topic: str, payload: Any) -> None:
        """Hand an update to the broadcaster. Never raises."""
        try:
            self.broadcaster.publish(topic, payload)
        except Exception:
            logger.exception(f"Broadcasting {topic} failed")

    def close(self) -> None:
        self.broadcaster.close()
