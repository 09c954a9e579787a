"""Credits data class."""

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
from typing import Any, Dict, List, Optional

from drunkenfall.models.person import Person


@dataclass
class Credits:
    """Everything needed to roll the credits of a finished tournament.

    Attributes
    ----------
    executive : Person or None
        The executive producer.
    producers : list of Person
        Producers that could be found.
    players : list of Person
        The winners in medal order, followed by the runnerups.
    archers_harmed : int
        Archers killed over the whole tournament.
    """

    executive: Optional[Person] = None
    producers: List[Person] = field(default_factory=list)
    players: List[Person] = field(default_factory=list)
    archers_harmed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize credits to dictionary."""
        return {
            "executive": self.executive.to_dict() if self.executive else None,
            "producers": [p.to_dict() for p in self.producers],
            "players": [p.to_dict() for p in self.players],
            "archers_harmed": self.archers_harmed,
        }
