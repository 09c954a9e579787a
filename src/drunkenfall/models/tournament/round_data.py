"""Data model for a committed round of a match."""

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
from typing import Any, Dict, List, Optional, Sequence

from drunkenfall.constants import SELF_KILL
from drunkenfall.exceptions import InvalidRoundException
from drunkenfall.type_hints import PlayerState, SlotScore
from drunkenfall.utils import to_iso, utc_now


@dataclass
class Round:
    """The changeset of one round of a match.

    Attributes
    ----------
    kills : list of list of int
        One ``[kills, self]`` pair per player slot. ``self`` is ``-1`` when the
        player killed themselves during the round, otherwise ``0``.
    shots : list of bool
        One flag per player slot, set when a shot was handed out explicitly.
    committed : str
        ISO-8601 timestamp of when the round was committed.
    """

    kills: List[SlotScore] = field(default_factory=list)
    shots: List[bool] = field(default_factory=list)
    committed: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.kills) != len(self.shots):
            raise InvalidRoundException(
                f"Round has {len(self.kills)} kill slots but {len(self.shots)} shot slots"
            )
        if self.committed is None:
            self.committed = to_iso(utc_now())

    @classmethod
    def from_player_states(cls, states: Sequence[PlayerState]) -> "Round":
        """Build a round from the per-slot ``(ups, downs, shot)`` game states."""
        return cls(
            kills=[[ups, downs] for ups, downs, _ in states],
            shots=[bool(shot) for _, _, shot in states],
        )

    def is_self(self, slot: int) -> bool:
        """Did the player in ``slot`` kill themselves this round?"""
        return self.kills[slot][1] == SELF_KILL

    def archers_harmed(self) -> int:
        """Count the archers that died during the round.

        A suicide shows up as a minus one and counts as a harmed archer too.
        """
        harmed = 0
        for kills, self_flag in self.kills:
            harmed += kills
            if self_flag == SELF_KILL:
                harmed += 1
        return harmed

    def to_dict(self) -> Dict[str, Any]:
        """Serialize round to dictionary."""
        return {
            "kills": [list(k) for k in self.kills],
            "shots": list(self.shots),
            "committed": self.committed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Round":
        """Deserialize round from dictionary."""
        return cls(
            kills=[list(k) for k in data.get("kills", [])],
            shots=list(data.get("shots", [])),
            committed=data.get("committed"),
        )
