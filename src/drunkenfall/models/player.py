"""Player statistics and scoring."""

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

from dataclasses import dataclass
from typing import Any, Dict, Optional

from drunkenfall.constants import (
    EXPLOSION_SCORE,
    KILL_SCORE,
    SELF_SCORE,
    SHOT_SCORE,
    SWEEP_SCORE,
)
from drunkenfall.models.person import Person


@dataclass
class Player:
    """A person taking part in a tournament, with their statistics.

    A ``Player`` lives in one of two places. The tournament keeps one object
    per person that aggregates the stats of every match they played. Each
    match keeps its own copy that only counts what happened in that match.

    Attributes
    ----------
    person : Person
        Identity behind the player.
    preferred_color : str or None
        Color the player asked for.
    color : str or None
        Color the player was assigned in the match.
    shots : int
        Shots taken (penalty drinks handed out).
    sweeps : int
        Rounds where the player killed all three opponents.
    kills : int
        Kills. Never negative.
    self_kills : int
        Suicides.
    explosions : int
        Explosion kills.
    matches : int
        Matches folded into this object, see :meth:`update`.

    Notes
    -----
    All the ``remove_*`` methods are best-effort undos: they do nothing when
    the counter is already at zero.
    """

    person: Person
    preferred_color: Optional[str] = None
    color: Optional[str] = None

    shots: int = 0
    sweeps: int = 0
    kills: int = 0
    self_kills: int = 0
    explosions: int = 0

    matches: int = 0

    def __post_init__(self) -> None:
        if self.preferred_color is None:
            self.preferred_color = self.person.preferred_color

    @classmethod
    def for_match(cls, other: "Player") -> "Player":
        """Make a fresh match-local copy of a tournament player."""
        return cls(person=other.person, preferred_color=other.person.preferred_color)

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.shots}sh {self.sweeps}sw {self.kills}k "
            f"{self.self_kills}s {self.explosions}e"
        )

    @property
    def id(self) -> str:
        """Identity key of the underlying person."""
        return self.person.id

    @property
    def name(self) -> str:
        return self.person.nick

    def score(self) -> int:
        """Calculate the score used to rank runnerups and color conflicts.

        A sweep is effectively worth 14 points since it also comes with a
        shot and three kills.
        """
        out = 0
        out += self.sweeps * SWEEP_SCORE
        out += self.shots * SHOT_SCORE
        out += self.kills * KILL_SCORE
        out += self.self_kills * SELF_SCORE
        out += self.explosions * EXPLOSION_SCORE
        return out

    # ========== Shots ==========

    def add_shot(self) -> None:
        self.shots += 1

    def remove_shot(self) -> None:
        if self.shots == 0:
            return
        self.shots -= 1

    # ========== Sweeps ==========

    def add_sweep(self) -> None:
        """Add a sweep, which also gives three kills and a shot."""
        self.sweeps += 1
        self.add_shot()
        self.add_kill(3)

    def remove_sweep(self) -> None:
        """Remove a sweep along with its three kills and shot."""
        if self.sweeps == 0:
            return
        self.sweeps -= 1
        self.remove_shot()
        for _ in range(3):
            self.remove_kill()

    # ========== Kills ==========

    def add_kill(self, kills: int = 1) -> None:
        """Add ``kills`` kills. The counter never drops below zero."""
        self.kills = max(0, self.kills + kills)

    def remove_kill(self) -> None:
        if self.kills == 0:
            return
        self.kills -= 1

    # ========== Self kills ==========

    def add_self(self) -> None:
        """Add a suicide. Costs a kill and gives a shot."""
        self.self_kills += 1
        self.remove_kill()
        self.add_shot()

    def remove_self(self) -> None:
        if self.self_kills == 0:
            return
        self.self_kills -= 1
        self.add_kill()
        self.remove_shot()

    # ========== Explosions ==========

    def add_explosion(self) -> None:
        """Add an explosion, which gives a kill and a shot."""
        self.explosions += 1
        self.add_shot()
        self.add_kill()

    def remove_explosion(self) -> None:
        if self.explosions == 0:
            return
        self.explosions -= 1
        self.remove_shot()
        self.remove_kill()

    # ========== Aggregation ==========

    def reset(self) -> None:
        """Zero all the statistics, including the match count."""
        self.shots = 0
        self.sweeps = 0
        self.kills = 0
        self.self_kills = 0
        self.explosions = 0
        self.matches = 0

    def update(self, other: "Player") -> None:
        """Fold the stats of a match-local player into this one.

        Every call counts as one match played.
        """
        self.shots += other.shots
        self.sweeps += other.sweeps
        self.kills += other.kills
        self.self_kills += other.self_kills
        self.explosions += other.explosions
        self.matches += 1

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player to dictionary."""
        return {
            "person": self.person.to_dict(),
            "preferred_color": self.preferred_color,
            "color": self.color,
            "shots": self.shots,
            "sweeps": self.sweeps,
            "kills": self.kills,
            "self": self.self_kills,
            "explosions": self.explosions,
            "matches": self.matches,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """Deserialize player from dictionary."""
        return cls(
            person=Person.from_dict(data["person"]),
            preferred_color=data.get("preferred_color"),
            color=data.get("color"),
            shots=data.get("shots", 0),
            sweeps=data.get("sweeps", 0),
            kills=data.get("kills", 0),
            self_kills=data.get("self", 0),
            explosions=data.get("explosions", 0),
            matches=data.get("matches", 0),
        )
