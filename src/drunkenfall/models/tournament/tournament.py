"""Main Tournament class - orchestrates all tournament operations.

This is the primary interface for running a tournament. Bracket mechanics
are delegated to the :class:`BracketManager`; the tournament keeps the state,
logs what happens and persists itself after every change.
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
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from drunkenfall.constants import (
    CREDITS_EXECUTIVE_ID,
    CREDITS_PRODUCER_IDS,
    EV_BACKFILL_SEMI,
    EV_NEW_TOURNAMENT,
    EV_PLAYER_JOIN,
    EV_PLAYER_REMOVE,
    EV_RESHUFFLE,
    EV_START,
    EV_TOURNAMENT_END,
    FINAL,
    WINNER_COUNT,
)
from drunkenfall.controllers.tournament.bracket_manager import BracketManager
from drunkenfall.exceptions import (
    AlreadyJoinedException,
    InvalidPlayerCountException,
    MatchNotFoundException,
    NotFinalMatchException,
    PlayerNotFoundException,
    TournamentFullException,
    TournamentStateException,
)
from drunkenfall.models.person import Person
from drunkenfall.models.player import Player
from drunkenfall.ranking import sort_by_kills
from drunkenfall.utils import from_iso, generate_id, setup_logger, to_iso, utc_now

from .credits import Credits
from .event import Event
from .match import Match
from .tournament_config import TournamentConfig

if TYPE_CHECKING:
    from drunkenfall.storage import Database

logger = setup_logger(__name__)


class Tournament:
    """The main container of data for a tournament.

    ``players`` holds one tournament-level :class:`Player` per person. Their
    stats are the sum of every match the person played, whereas the players
    stored on the matches only count that match. This is why matches do not
    hold references to the tournament players.

    ``matches`` holds the tryouts first, then two semis and the final.
    ``current`` is the index of the match being played, or about to be.

    All mutating operations assume a single writer per tournament; see
    :meth:`Database.transaction`.
    """

    def __init__(
        self,
        name: str,
        tournament_id: Optional[str] = None,
        scheduled: Optional[datetime] = None,
        config: Optional[TournamentConfig] = None,
        db: Optional["Database"] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize a new tournament.

        Args
        ----
        name: Tournament name
        tournament_id: Identifier, generated if not given
        scheduled: When the tournament is planned to start
        config: Match lengths and bracket limits
        db: Database the tournament persists itself into
        rng: Randomness source for shuffles and color picks
        """
        self.name = name
        self.id = tournament_id or generate_id("tournament")
        self.config = config or TournamentConfig()

        self.players: List[Player] = []
        self.winners: List[Player] = []
        self.runnerups: List[Person] = []
        self.casters: List[Person] = []
        self.matches: List[Match] = []
        self.current: int = 0

        self.opened: Optional[datetime] = utc_now()
        self.scheduled: Optional[datetime] = scheduled
        self.started: Optional[datetime] = None
        self.ended: Optional[datetime] = None
        self.events: List[Event] = []

        self.db = db
        self.rng = rng or random.Random()
        self.bracket_manager = BracketManager(self)

    @classmethod
    def create(
        cls,
        name: str,
        tournament_id: Optional[str] = None,
        scheduled: Optional[datetime] = None,
        actor: Optional[Person] = None,
        **kwargs: Any,
    ) -> "Tournament":
        """Create a new tournament, log it and persist it."""
        t = cls(name, tournament_id=tournament_id, scheduled=scheduled, **kwargs)
        t.log_event(
            EV_NEW_TOURNAMENT,
            "{name} ({id}) created",
            name=name,
            id=t.id,
            person=actor,
        )
        logger.info(f"Created tournament {name} ({t.id})")
        t.persist()
        return t

    def __str__(self) -> str:
        return f"<Tournament {self.name} ({self.id})>"

    def url(self) -> str:
        return f"/{self.id}/"

    # ========== Bracket accessors ==========

    def semi(self, index: int) -> Match:
        """Return one of the two semis."""
        return self.matches[len(self.matches) - 3 + index]

    def final(self) -> Match:
        return self.matches[len(self.matches) - 1]

    def get_match(self, index: int) -> Match:
        """Return the match at ``index``.

        Raises:
            MatchNotFoundException: If there is no such match
        """
        if not 0 <= index < len(self.matches):
            raise MatchNotFoundException(f"{self} has no match {index}")
        return self.matches[index]

    def match_index(self, match: Match) -> int:
        for i, m in enumerate(self.matches):
            if m is match:
                return i
        raise MatchNotFoundException(f"{match} is not part of {self}")

    def next_match(self) -> Match:
        """Return the match that is up next.

        Raises:
            TournamentStateException: If the tournament is not running
        """
        if not self.is_running():
            raise TournamentStateException(f"{self.name} is not running")
        return self.get_match(self.current)

    # ========== Predicates ==========

    def is_open(self) -> bool:
        """Is the tournament open for registration?"""
        return self.opened is not None

    def is_started(self) -> bool:
        return self.started is not None

    def is_ended(self) -> bool:
        return self.ended is not None

    def is_running(self) -> bool:
        return self.is_started() and not self.is_ended()

    def is_joinable(self) -> bool:
        if len(self.players) >= self.config.max_players:
            return False
        return self.is_open() and not self.is_started()

    def is_startable(self) -> bool:
        n = len(self.players)
        return (
            self.is_open()
            and not self.is_started()
            and self.config.min_players <= n <= self.config.max_players
        )

    def can_join(self, person: Person) -> bool:
        try:
            self.check_can_join(person)
        except (TournamentFullException, AlreadyJoinedException):
            return False
        return True

    def check_can_join(self, person: Person) -> None:
        """Check that a person is allowed to join.

        Raises:
            TournamentFullException: If the tournament is full
            AlreadyJoinedException: If someone with the same nick has joined
        """
        if len(self.players) >= self.config.max_players:
            raise TournamentFullException(f"{self.name} is full")
        for p in self.players:
            if p.person.nick == person.nick:
                raise AlreadyJoinedException(f"{person.nick} is already in {self.name}")

    # ========== Player Management ==========

    def get_tournament_player(self, person: Person) -> Player:
        """Return the tournament-level player object for ``person``.

        Raises:
            PlayerNotFoundException: If the person has not joined
        """
        return self.get_tournament_player_by_id(person.id)

    def get_tournament_player_by_id(self, person_id: str) -> Player:
        for p in self.players:
            if p.person.id == person_id:
                return p
        raise PlayerNotFoundException(f"No player found for {person_id} in {self.name}")

    def has_player(self, person: Person) -> bool:
        return any(p.person.id == person.id for p in self.players)

    def add_player(self, person: Person, actor: Optional[Person] = None) -> Player:
        """Add a person into the tournament.

        If the tournament has already started, they go straight into the
        runnerups so that they are placed in the next open seat.
        """
        person.correct(self.rng)
        self.check_can_join(person)

        player = Player(person=person)
        self.players.append(player)

        if self.is_started():
            self.bracket_manager.add_runnerup(person)

        self.log_event(
            EV_PLAYER_JOIN, "{nick} has joined", nick=person.nick, person=actor or person
        )
        logger.info(f"{person.nick} joined {self.name}")
        self.persist()
        return player

    def remove_player(self, person: Person, actor: Optional[Person] = None) -> None:
        """Remove a person from the tournament before it starts.

        Raises:
            TournamentStateException: If the tournament has started
            PlayerNotFoundException: If the person has not joined
        """
        if self.is_started():
            raise TournamentStateException(
                f"Cannot leave {self.name}, it has already started"
            )
        player = self.get_tournament_player(person)
        self.players.remove(player)

        self.log_event(
            EV_PLAYER_REMOVE, "{nick} has left", nick=person.nick, person=actor or person
        )
        logger.info(f"{person.nick} left {self.name}")
        self.persist()

    def toggle_player(self, person_id: str, actor: Optional[Person] = None) -> bool:
        """Join the person if they are not in the tournament, otherwise leave.

        Returns:
            True if the person joined, False if they left
        """
        if self.db is None:
            raise TournamentStateException(
                f"{self.name} has no database to look people up in"
            )
        person = self.db.get_person(person_id)

        if self.has_player(person):
            self.remove_player(person, actor=actor)
            return False

        self.add_player(person, actor=actor)
        return True

    def usurp_tournament(self, rng: Optional[random.Random] = None) -> None:
        """Fill the tournament with random people from the database."""
        if self.db is None:
            raise TournamentStateException(f"{self.name} has no database")
        rng = rng or self.rng
        people = self.db.get_people(active_only=True)
        if not people:
            logger.warning("No people to usurp the tournament with")
            return

        seats = self.config.max_players - len(self.players)
        for person in rng.sample(people, min(seats, len(people))):
            try:
                self.add_player(person)
            except AlreadyJoinedException as e:
                logger.debug(f"Skipping {person.nick}: {e}")

    # ========== Bracket control ==========

    def start_tournament(
        self, actor: Optional[Person] = None, rng: Optional[random.Random] = None
    ) -> None:
        """Build the bracket and seed the players into it.

        Raises:
            TournamentStateException: If the tournament has already started
            InvalidPlayerCountException: If there are too few or too many players
        """
        if self.is_started():
            raise TournamentStateException(f"{self.name} has already started")

        n = len(self.players)
        if n < self.config.min_players or n > self.config.max_players:
            raise InvalidPlayerCountException(
                f"Tournament needs {self.config.min_players} or more players and "
                f"{self.config.max_players} or less, got {n}"
            )

        self.bracket_manager.build(n)
        self.bracket_manager.shuffle_players(rng or self.rng)
        self.started = utc_now()

        # The first match is on right away
        self.next_match().set_time(0, actor=actor)
        self.log_event(EV_START, "Tournament started", person=actor)
        logger.info(f"{self.name} started with {n} players, {len(self.matches)} matches")
        self.persist()

    def reshuffle(
        self, actor: Optional[Person] = None, rng: Optional[random.Random] = None
    ) -> None:
        """Shuffle the players of a started tournament into new seats.

        Late joiners stay in the runnerup pool.

        Raises:
            TournamentStateException: If the tournament has not started or a
                seeded match has already started
        """
        if not self.is_started():
            raise TournamentStateException(f"{self.name} has not started")

        self.bracket_manager.reshuffle(rng or self.rng)
        self.log_event(EV_RESHUFFLE, "Players reshuffled", person=actor)
        self.persist()

    def check_move_players(self, match: Match) -> None:
        self.bracket_manager.check_move_players(match)

    def move_players(self, match: Match) -> None:
        """Move the players of a finished match along the bracket."""
        self.bracket_manager.move_players(match)

    def populate_runnerups(self, match: Match) -> None:
        self.bracket_manager.populate_runnerups(match)

    def get_runnerup_players(self) -> List[Player]:
        """Tournament players of the runnerup pool, best ranked first."""
        return self.bracket_manager.get_runnerup_players()

    def update_players(self) -> None:
        self.bracket_manager.update_players()

    def update_runnerups(self) -> None:
        self.bracket_manager.update_runnerups()

    def backfill_semis(
        self, person_ids: Sequence[str], actor: Optional[Person] = None
    ) -> None:
        """Place the given people into the open seats of the semis.

        Raises:
            BackfillCountException: If the amount does not match the open seats
            InvalidBackfillException: If someone is listed twice or already seated
            PlayerNotFoundException: If one of the people has not joined
        """
        players = [self.get_tournament_player_by_id(pid) for pid in person_ids]
        self.bracket_manager.backfill_semis(players)

        self.log_event(
            EV_BACKFILL_SEMI,
            "Backfilling {count} semi players",
            count=len(players),
            players=[p.person for p in players],
            person=actor,
        )
        logger.info(f"Backfilled {len(players)} players into the semis")
        self.persist()

    def award_medals(self, match: Match, actor: Optional[Person] = None) -> None:
        """Place the top three of the final as the winners.

        Raises:
            NotFinalMatchException: If ``match`` is not the final
        """
        if match.kind != FINAL:
            raise NotFinalMatchException("Awarding medals outside of the final")

        self.winners = sort_by_kills(match.players)[:WINNER_COUNT]
        self.ended = utc_now()

        self.log_event(EV_TOURNAMENT_END, "Tournament finished", person=actor)
        logger.info(
            f"{self.name} finished, winners: "
            f"{', '.join(p.name for p in self.winners)}"
        )
        self.persist()

    # ========== Reports ==========

    def get_credits(self) -> Credits:
        """Return what is needed to roll the credits.

        Raises:
            TournamentStateException: If the tournament has not ended
        """
        if not self.is_ended():
            raise TournamentStateException(
                "Cannot roll credits for unfinished tournament"
            )

        executive = None
        producers: List[Person] = []
        if self.db is not None:
            executive = self.db.get_safe_person(CREDITS_EXECUTIVE_ID)
            for pid in CREDITS_PRODUCER_IDS:
                producer = self.db.get_safe_person(pid)
                if producer is not None:
                    producers.append(producer)

        players = [w.person for w in self.winners] + list(self.runnerups)
        return Credits(
            executive=executive,
            producers=producers,
            players=players,
            archers_harmed=self.archers_harmed(),
        )

    def archers_harmed(self) -> int:
        """Archers killed during the whole tournament."""
        return sum(m.archers_harmed() for m in self.matches)

    # ========== Bookkeeping ==========

    def log_event(self, kind: str, message: str, **items: Any) -> None:
        """Make an event and store it on the tournament."""
        self.events.append(Event.create(kind, message, **items))

    def persist(self) -> None:
        """Save the tournament through the database.

        Raises:
            PersistenceException: If the store fails to write
        """
        if self.db is None:
            logger.debug(f"{self} has no database, not persisting")
            return
        self.db.save_tournament(self)

    def publish(self, topic: str, payload: Any) -> None:
        """Broadcast ``payload`` to observers. Never raises."""
        if self.db is not None:
            self.db.publish(topic, payload)

    def set_match_pointers(self) -> None:
        """Point every match back to this tournament.

        When tournaments are loaded, these references are not set.
        """
        for m in self.matches:
            m.tournament = self
            m.rebuild_present_colors()

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary."""
        return {
            "name": self.name,
            "id": self.id,
            "config": self.config.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "winners": [p.to_dict() for p in self.winners],
            "runnerups": [r.to_dict() for r in self.runnerups],
            "casters": [c.to_dict() for c in self.casters],
            "matches": [m.to_dict() for m in self.matches],
            "current": self.current,
            "opened": to_iso(self.opened),
            "scheduled": to_iso(self.scheduled),
            "started": to_iso(self.started),
            "ended": to_iso(self.ended),
            "events": [e.to_dict() for e in self.events],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        db: Optional["Database"] = None,
        rng: Optional[random.Random] = None,
    ) -> "Tournament":
        """Deserialize tournament from dictionary."""
        t = cls(
            name=data.get("name", "Untitled Tournament"),
            tournament_id=data["id"],
            scheduled=from_iso(data.get("scheduled")),
            config=TournamentConfig.from_dict(data.get("config", {})),
            db=db,
            rng=rng,
        )
        t.players = [Player.from_dict(p) for p in data.get("players", [])]
        t.winners = [Player.from_dict(p) for p in data.get("winners", [])]

        # Share the person objects of the tournament players where possible
        people = {p.person.id: p.person for p in t.players}
        t.runnerups = [
            people.get(r["id"]) or Person.from_dict(r) for r in data.get("runnerups", [])
        ]
        t.casters = [Person.from_dict(c) for c in data.get("casters", [])]
        t.matches = [Match.from_dict(m) for m in data.get("matches", [])]
        t.current = data.get("current", 0)
        t.opened = from_iso(data.get("opened"))
        t.started = from_iso(data.get("started"))
        t.ended = from_iso(data.get("ended"))
        t.events = [Event.from_dict(e) for e in data.get("events", [])]

        t.set_match_pointers()
        return t
