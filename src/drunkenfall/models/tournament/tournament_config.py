"""TournamentConfig data class."""

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
from typing import Any, Dict

from drunkenfall.constants import (
    DOUBLE_PROMOTION_MAX_TRYOUTS,
    FINAL_LENGTH,
    MATCH_LENGTH,
    MAX_PLAYERS,
    MIN_PLAYERS,
)
from drunkenfall.exceptions import InvalidConfigurationException


@dataclass
class TournamentConfig:
    """Tournament configuration settings.

    Attributes
    ----------
    match_length : int
        Kills needed to end a tryout or a semi.
    final_length : int
        Kills needed to end the final.
    min_players : int
        Fewest players the tournament can start with. At exactly this many,
        the tryouts are skipped.
    max_players : int
        Most players that can join.
    double_promotion_max_tryouts : int
        While the bracket holds this many tryouts or fewer, the top two of
        each tryout advance to the semis.
    """

    match_length: int = MATCH_LENGTH
    final_length: int = FINAL_LENGTH
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS
    double_promotion_max_tryouts: int = DOUBLE_PROMOTION_MAX_TRYOUTS

    def __post_init__(self) -> None:
        if self.match_length < 1 or self.final_length < 1:
            raise InvalidConfigurationException("Match lengths must be positive")
        if self.min_players > self.max_players:
            raise InvalidConfigurationException(
                f"min_players ({self.min_players}) exceeds max_players ({self.max_players})"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "match_length": self.match_length,
            "final_length": self.final_length,
            "min_players": self.min_players,
            "max_players": self.max_players,
            "double_promotion_max_tryouts": self.double_promotion_max_tryouts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary."""
        return cls(
            match_length=data.get("match_length", MATCH_LENGTH),
            final_length=data.get("final_length", FINAL_LENGTH),
            min_players=data.get("min_players", MIN_PLAYERS),
            max_players=data.get("max_players", MAX_PLAYERS),
            double_promotion_max_tryouts=data.get(
                "double_promotion_max_tryouts", DOUBLE_PROMOTION_MAX_TRYOUTS
            ),
        )
