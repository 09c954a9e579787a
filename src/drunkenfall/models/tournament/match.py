"""A single match of the tournament and its state machine.

A match moves through ``unscheduled -> scheduled -> started -> ended``.
Rounds are committed while it is open, and ending it hands the roster back
to the tournament so the players can be moved along the bracket.
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
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from drunkenfall.constants import (
    EV_COLOR_CONFLICT,
    EV_MATCH_ENDED,
    EV_MATCH_STARTED,
    EV_TIME_SET,
    FINAL,
    MATCH_LENGTH,
    MATCH_PAUSE_MINUTES,
    PLAYERS_PER_MATCH,
    SELF_KILL,
    SWEEP_KILLS,
    TOPIC_GAME_MATCH,
    TRYOUT,
)
from drunkenfall.controllers.tournament.color_resolver import ColorResolver
from drunkenfall.exceptions import (
    MatchAlreadyEndedException,
    MatchAlreadyStartedException,
    MatchException,
    MatchFullException,
    PlayerNotFoundException,
)
from drunkenfall.models.person import Person
from drunkenfall.models.player import Player
from drunkenfall.ranking import sort_by_kills
from drunkenfall.type_hints import KillOrder, MatchKind
from drunkenfall.utils import from_iso, minutes_from_now, setup_logger, to_iso, utc_now

from .event import Event
from .round_data import Round

if TYPE_CHECKING:
    from .tournament import Tournament

logger = setup_logger(__name__)


class Match:
    """A game being played by up to four players.

    ``kill_order`` holds slot indices in the order of the kills the players
    have. If the player in slot 3 is in the lead, ``kill_order[0]`` is 2.

    ``rounds`` holds one :class:`Round` per committed round and is the
    changeset of everything that happened in the match.

    ``present_colors`` maps every color held in the match to the slot
    holding it. It is rebuilt from the roster whenever the roster changes.
    """

    def __init__(
        self,
        kind: MatchKind,
        index: int = 0,
        length: int = MATCH_LENGTH,
        tournament: Optional["Tournament"] = None,
    ) -> None:
        self.kind: MatchKind = kind
        self.index: int = index
        self.length: int = length
        self.pause: timedelta = timedelta(minutes=MATCH_PAUSE_MINUTES)

        self.players: List[Player] = []
        self.casters: List[Person] = []

        self.scheduled: Optional[datetime] = None
        self.started: Optional[datetime] = None
        self.ended: Optional[datetime] = None

        self.events: List[Event] = []
        self.kill_order: KillOrder = []
        self.rounds: List[Round] = []
        self.present_colors: Dict[str, int] = {}

        # Back-reference only; the tournament owns the match
        self.tournament: Optional["Tournament"] = tournament
        self.color_resolver = ColorResolver()

    def __str__(self) -> str:
        if not self.is_started():
            tempo = "not started"
        elif self.is_ended():
            tempo = "ended"
        else:
            tempo = "playing"

        if self.kind == FINAL:
            name = "Final"
        else:
            name = f"{self.kind.title()} {self.index + 1}"

        names = " / ".join(p.name for p in self.players)
        return f"<{name}: {names} - {tempo}>"

    def title(self) -> str:
        """Human readable title, e.g. ``Tryout 3/5`` or ``Semi 1/2``."""
        if self.kind == FINAL:
            return "Final"

        total = 2
        position = self.index + 1
        if self.tournament is not None:
            tryouts = len(self.tournament.matches) - 3
            if self.kind == TRYOUT:
                total = tryouts
            else:
                position = self.index - tryouts + 1

        return f"{self.kind.title()} {position}/{total}"

    # ========== Properties ==========

    @property
    def rng(self) -> random.Random:
        if self.tournament is not None:
            return self.tournament.rng
        return random.Random()

    def is_started(self) -> bool:
        return self.started is not None

    def is_ended(self) -> bool:
        return self.ended is not None

    def is_scheduled(self) -> bool:
        return self.scheduled is not None

    def is_open(self) -> bool:
        """Is the match being played right now?"""
        return self.is_started() and not self.is_ended()

    def can_start(self) -> bool:
        return not self.is_started() and not self.is_ended()

    def can_end(self) -> bool:
        """Has anyone reached the length of an open match?"""
        if not self.is_open():
            return False
        return any(p.kills >= self.length for p in self.players)

    def duration(self) -> timedelta:
        if self.started is None or self.ended is None:
            return timedelta(0)
        return self.ended - self.started

    # ========== Roster ==========

    def add_player(self, player: Player, rng: Optional[random.Random] = None) -> Player:
        """Add a match-local copy of ``player`` to the match.

        Adding the fourth player resolves any color conflicts.

        Returns:
            The match-local player object

        Raises:
            MatchFullException: If the match already holds four players
        """
        if len(self.players) >= PLAYERS_PER_MATCH:
            raise MatchFullException(f"Cannot add a fifth player to {self}")

        p = Player.for_match(player)
        if p.preferred_color is None:
            p.preferred_color = (rng or self.rng).choice(
                self.color_resolver.available_colors(self.players)
            )
        p.color = p.preferred_color
        self.players.append(p)
        self.rebuild_present_colors()

        if (
            len(self.players) == PLAYERS_PER_MATCH
            and len(self.present_colors) != PLAYERS_PER_MATCH
        ):
            self.correct_color_conflicts(rng)

        return p

    def update_player(self, player: Player) -> None:
        """Replace the player with the same person in the roster."""
        for i, o in enumerate(self.players):
            if o.id == player.id:
                self.players[i] = player
                self.rebuild_present_colors()
                return
        raise PlayerNotFoundException(f"{player.name} is not playing in {self}")

    def clear_players(self) -> None:
        self.players = []
        self.kill_order = []
        self.rebuild_present_colors()

    def rebuild_present_colors(self) -> None:
        """Map every color in the match to the first slot holding it."""
        self.present_colors = {}
        for i, p in enumerate(self.players):
            if p.color is not None:
                self.present_colors.setdefault(p.color, i)

    def correct_color_conflicts(self, rng: Optional[random.Random] = None) -> None:
        """Give every player in the match a distinct color.

        The tournament-wide score decides who keeps a contested color, since
        the match-local copies have not scored anything yet.
        """
        corrections = self.color_resolver.resolve(
            self.players, rng=rng or self.rng, score_of=self._tournament_score
        )
        for p, new in corrections:
            self.log_event(
                EV_COLOR_CONFLICT,
                "{nick} corrected from {preferred} to {new}",
                nick=p.name,
                preferred=p.preferred_color,
                new=new,
                person=p.person,
            )
        self.rebuild_present_colors()

    def _tournament_score(self, player: Player) -> int:
        if self.tournament is None:
            return player.score()
        try:
            return self.tournament.get_tournament_player(player.person).score()
        except PlayerNotFoundException:
            return player.score()

    # ========== State transitions ==========

    def commit(self, round_data: Round) -> None:
        """Apply the actions of a round to the players.

        Raises:
            MatchException: If the round does not have one slot per player
        """
        if len(round_data.kills) != len(self.players):
            raise MatchException(
                f"Round has {len(round_data.kills)} slots, {self} has "
                f"{len(self.players)} players"
            )

        for i, (kills, self_flag) in enumerate(round_data.kills):
            player = self.players[i]
            player.add_kill(kills)
            if self_flag == SELF_KILL:
                player.add_self()
            # A suicide is a shot on top of the one add_self() hands out
            if self_flag == SELF_KILL or kills == SWEEP_KILLS or round_data.shots[i]:
                player.add_shot()

        self.rounds.append(round_data)
        self.kill_order = self.make_kill_order()
        self.persist()

    def start(self, actor: Optional[Person] = None) -> None:
        """Start the match.

        Raises:
            MatchAlreadyStartedException: If the match has already started
        """
        if self.is_started():
            raise MatchAlreadyStartedException(f"{self.title()} already started")

        for p in self.players:
            p.reset()

        self.started = utc_now()
        if self.tournament is not None:
            self.casters = list(self.tournament.casters)

        self.log_event(
            EV_MATCH_STARTED, "{match} started", match=self.title(), person=actor
        )
        logger.info(f"{self.title()} started")

        self.persist()
        if self.tournament is not None:
            # Imported here since the message module renders matches
            from drunkenfall.messages import GameMatchMessage

            self.tournament.publish(
                TOPIC_GAME_MATCH, GameMatchMessage.from_match(self).to_dict()
            )

    def end(self, actor: Optional[Person] = None) -> None:
        """End the match and move its players along the bracket.

        Raises:
            MatchAlreadyEndedException: If the match has already ended
            MatchFullException: If the winners have no seats waiting for them
        """
        if self.is_ended():
            raise MatchAlreadyEndedException(f"{self.title()} already ended")

        # Nothing is touched unless the winners can move on
        if self.tournament is not None:
            self.tournament.check_move_players(self)

        # next_match() has to return the actual next match from here on
        if self.tournament is not None:
            self.tournament.current += 1

        self.kill_order = self.make_kill_order()

        # Give the winner one last shot
        if self.kill_order:
            self.players[self.kill_order[0]].add_shot()

        self.ended = utc_now()
        self.log_event(
            EV_MATCH_ENDED, "{match} ended", match=self.title(), person=actor
        )
        logger.info(f"{self.title()} ended")

        if self.tournament is not None:
            if self.kind == FINAL:
                self.tournament.award_medals(self, actor=actor)
            else:
                self.tournament.move_players(self)

        self.persist()

    def reset(self) -> None:
        """Zero the player scores and drop all the rounds.

        Start and end times are left alone so that a match can be corrected
        while it is being played.
        """
        for p in self.players:
            p.reset()
        self.rounds = []
        self.kill_order = []
        logger.info(f"{self.title()} reset")
        self.persist()

    def set_time(self, minutes: int, actor: Optional[Person] = None) -> None:
        """Schedule the match ``minutes`` from now."""
        self.scheduled = minutes_from_now(minutes)
        self.log_event(
            EV_TIME_SET,
            "{match} scheduled in {minutes}m",
            minutes=minutes,
            match=self.title(),
            person=actor,
        )
        self.persist()

    # ========== Scores ==========

    def make_kill_order(self) -> KillOrder:
        """Slot indices ordered by kills, ties kept in slot order."""
        slots = {id(p): i for i, p in enumerate(self.players)}
        return [slots[id(p)] for p in sort_by_kills(self.players)]

    def archers_harmed(self) -> int:
        """Number of archers killed during the match."""
        return sum(r.archers_harmed() for r in self.rounds)

    # ========== Bookkeeping ==========

    def log_event(self, kind: str, message: str, **items: Any) -> None:
        """Make an event and store it on the match."""
        self.events.append(Event.create(kind, message, **items))

    def persist(self) -> None:
        if self.tournament is not None:
            self.tournament.persist()

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "players": [p.to_dict() for p in self.players],
            "casters": [c.to_dict() for c in self.casters],
            "kind": self.kind,
            "index": self.index,
            "length": self.length,
            "pause": int(self.pause.total_seconds()),
            "scheduled": to_iso(self.scheduled),
            "started": to_iso(self.started),
            "ended": to_iso(self.ended),
            "events": [e.to_dict() for e in self.events],
            "kill_order": list(self.kill_order),
            "rounds": [r.to_dict() for r in self.rounds],
        }

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], tournament: Optional["Tournament"] = None
    ) -> "Match":
        """Deserialize match from dictionary."""
        match = cls(
            kind=data["kind"],
            index=data.get("index", 0),
            length=data.get("length", MATCH_LENGTH),
            tournament=tournament,
        )
        match.pause = timedelta(
            seconds=data.get("pause", MATCH_PAUSE_MINUTES * 60)
        )
        match.players = [Player.from_dict(p) for p in data.get("players", [])]
        match.casters = [Person.from_dict(c) for c in data.get("casters", [])]
        match.scheduled = from_iso(data.get("scheduled"))
        match.started = from_iso(data.get("started"))
        match.ended = from_iso(data.get("ended"))
        match.events = [Event.from_dict(e) for e in data.get("events", [])]
        match.kill_order = list(data.get("kill_order", []))
        match.rounds = [Round.from_dict(r) for r in data.get("rounds", [])]
        match.rebuild_present_colors()
        return match
