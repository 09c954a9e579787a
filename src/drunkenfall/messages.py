"""Payloads broadcast to the game client.

The game needs to know who is about to play, in which colors, and for how
long. These are built from a :class:`Match` when it starts.
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

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List

from drunkenfall.constants import COLORS, DEFAULT_LEVEL, DEFAULT_RULESET
from drunkenfall.models.player import Player

if TYPE_CHECKING:
    from drunkenfall.models.tournament.match import Match

# Archer types understood by the game
ARCHER_NORMAL = 0
ARCHER_ALTERNATE = 1


@dataclass
class GamePlayer:
    """A player as the game client sees it."""

    top_name: str
    bottom_name: str
    color: int
    archer_type: int = ARCHER_NORMAL

    @classmethod
    def from_player(cls, player: Player) -> "GamePlayer":
        color = COLORS.index(player.color) if player.color in COLORS else 0
        return cls(
            top_name=player.person.nick,
            bottom_name=player.person.name,
            color=color,
        )


@dataclass
class GameMatchMessage:
    """Configuration of the match that is about to be played."""

    players: List[GamePlayer] = field(default_factory=list)
    tournament: str = ""
    level: str = DEFAULT_LEVEL
    length: int = 0
    ruleset: str = DEFAULT_RULESET
    kind: str = ""

    @classmethod
    def from_match(cls, match: "Match") -> "GameMatchMessage":
        tournament = match.tournament.id if match.tournament is not None else ""
        return cls(
            players=[GamePlayer.from_player(p) for p in match.players],
            tournament=tournament,
            length=match.length,
            kind=match.kind,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
