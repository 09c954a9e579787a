"""Statistics across tournaments.

A snapshot sums up what every person has done, per tournament and in total,
and ranks everyone on tournament wins and score.
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

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Iterable, Optional

from drunkenfall.models.person import Person
from drunkenfall.models.player import Player
from drunkenfall.models.tournament.match import Match
from drunkenfall.models.tournament.tournament import Tournament
from drunkenfall.ranking import sort_by_rank
from drunkenfall.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class PlayerSnapshot:
    """Sum of the stats of one person, in one tournament or in total."""

    shots: int = 0
    sweeps: int = 0
    kills: int = 0
    self_kills: int = 0
    matches: int = 0
    rounds: int = 0
    score: int = 0
    playtime: timedelta = field(default_factory=timedelta)
    wins: int = 0

    def add_match(self, player: Player, match: Match) -> None:
        self.matches += 1
        self.rounds += len(match.rounds)
        self.shots += player.shots
        self.sweeps += player.sweeps
        self.kills += player.kills
        self.self_kills += player.self_kills
        self.score += player.score()
        self.playtime += match.duration()

    def add(self, other: "PlayerSnapshot") -> None:
        self.matches += other.matches
        self.rounds += other.rounds
        self.shots += other.shots
        self.sweeps += other.sweeps
        self.kills += other.kills
        self.self_kills += other.self_kills
        self.score += other.score
        self.playtime += other.playtime
        self.wins += other.wins

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shots": self.shots,
            "sweeps": self.sweeps,
            "kills": self.kills,
            "self": self.self_kills,
            "matches": self.matches,
            "rounds": self.rounds,
            "score": self.score,
            "playtime": self.playtime.total_seconds(),
            "wins": self.wins,
        }


@dataclass
class Snapshot:
    """Everything about one person, ranked against everyone else."""

    person: Person
    total: PlayerSnapshot = field(default_factory=PlayerSnapshot)
    rank: int = 0
    tournaments: Dict[str, PlayerSnapshot] = field(default_factory=dict)

    def for_tournament(self, tournament_id: str) -> PlayerSnapshot:
        return self.tournaments.setdefault(tournament_id, PlayerSnapshot())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "person": self.person.to_dict(),
            "total": self.total.to_dict(),
            "rank": self.rank,
            "tournaments": {k: v.to_dict() for k, v in self.tournaments.items()},
        }


def build_snapshot(
    people: Iterable[Person],
    tournaments: Iterable[Tournament],
    name_prefix: Optional[str] = None,
) -> Dict[str, Snapshot]:
    """Build the snapshots of everyone, keyed on person id.

    Args:
        people: Everyone that should be ranked
        tournaments: Tournaments to gather stats from
        name_prefix: Only count tournaments whose name starts with this

    Only matches that have been started are counted. The winner of a
    tournament is the first of its winners.
    """
    snapshots: Dict[str, Snapshot] = {p.id: Snapshot(person=p) for p in people}

    for t in tournaments:
        if name_prefix is not None and not t.name.startswith(name_prefix):
            continue

        for m in t.matches:
            if not m.is_started():
                continue
            for p in m.players:
                if p.person.id not in snapshots:
                    logger.warning(f"Snapshot not set for {p.person}, adding it")
                    snapshots[p.person.id] = Snapshot(person=p.person)
                snapshots[p.person.id].for_tournament(t.id).add_match(p, m)

        if t.is_ended() and t.winners:
            winner = t.winners[0].person
            if winner.id not in snapshots:
                snapshots[winner.id] = Snapshot(person=winner)
            snapshots[winner.id].for_tournament(t.id).wins += 1

    for s in snapshots.values():
        s.total = PlayerSnapshot()
        for ps in s.tournaments.values():
            s.total.add(ps)

    for i, s in enumerate(sort_by_rank(snapshots.values())):
        s.rank = i + 1

    return snapshots
