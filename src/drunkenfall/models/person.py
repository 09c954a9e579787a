"""A person: the identity behind a player."""

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
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from drunkenfall.constants import COLORS, PERMISSION_PLAYER
from drunkenfall.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class Person:
    """Someone having a role in the tournament.

    The engine never authenticates a person. It only reads these fields and
    writes color corrections back through the database.

    Attributes
    ----------
    id : str
        Identity key.
    name : str
        Full name.
    nick : str
        Display name. Two people cannot join a tournament with the same nick.
    color_preference : list of str
        Archer colors in order of preference. Only the first one is used.
    avatar_url : str
        Link to the avatar picture.
    userlevel : int
        Permission level, see ``constants.PERMISSION_*``.
    disabled : bool
        Disabled people are ranked last and are not active players.
    """

    id: str
    name: str = ""
    nick: str = ""
    color_preference: List[str] = field(default_factory=list)
    avatar_url: str = ""
    userlevel: int = PERMISSION_PLAYER
    disabled: bool = False

    def __str__(self) -> str:
        return f"<Person {self.name} ({self.nick})>"

    @property
    def preferred_color(self) -> Optional[str]:
        """The color the person would like to play as."""
        if not self.color_preference:
            return None
        return self.color_preference[0]

    def correct(self, rng: Optional[random.Random] = None) -> None:
        """Fill in a nick and a color if they are missing.

        This happens when someone did not complete their registration.
        """
        if not self.nick:
            self.nick = self.name.split(" ")[0] if self.name else self.id
            logger.info(f"Corrected nick for {self}")

        if not self.color_preference:
            self.color_preference.append((rng or random).choice(COLORS))
            logger.info(f"Corrected color for {self}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize person to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "nick": self.nick,
            "color_preference": list(self.color_preference),
            "avatar_url": self.avatar_url,
            "userlevel": self.userlevel,
            "disabled": self.disabled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Person":
        """Deserialize person from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            nick=data.get("nick", ""),
            color_preference=list(data.get("color_preference", [])),
            avatar_url=data.get("avatar_url", ""),
            userlevel=data.get("userlevel", PERMISSION_PLAYER),
            disabled=data.get("disabled", False),
        )
