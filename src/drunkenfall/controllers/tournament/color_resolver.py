"""Color conflict resolution for full matches.

Four archers cannot share a color on screen. When the fourth player joins a
match and two or more of them prefer the same color, the best scoring player
of each group keeps it and the others get a random free color.
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
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from drunkenfall.constants import COLORS
from drunkenfall.exceptions import ColorConflictException
from drunkenfall.models.player import Player
from drunkenfall.utils import setup_logger

logger = setup_logger(__name__)

# (player, new color)
Correction = Tuple[Player, str]


class ColorResolver:
    """Assigns distinct colors to the players of a match.

    This class is responsible for:
    - Grouping players that prefer the same color
    - Letting the highest scoring player of a group keep the color
    - Drawing replacement colors from the ones nobody in the match holds
    """

    def __init__(self, colors: Sequence[str] = COLORS) -> None:
        self.colors = list(colors)

    def available_colors(self, players: Sequence[Player]) -> List[str]:
        """Colors that no player in ``players`` currently holds."""
        taken = {p.color for p in players}
        return [c for c in self.colors if c not in taken]

    def has_conflicts(self, players: Sequence[Player]) -> bool:
        return len({p.color for p in players}) != len(players)

    def conflict_groups(self, players: Sequence[Player]) -> Dict[str, List[Player]]:
        """Group players on preferred color, keeping only shared colors.

        Groups and their members keep slot order.
        """
        groups: Dict[str, List[Player]] = {}
        for p in players:
            groups.setdefault(p.preferred_color, []).append(p)
        return {color: ps for color, ps in groups.items() if len(ps) >= 2}

    def resolve(
        self,
        players: Sequence[Player],
        rng: Optional[random.Random] = None,
        score_of: Optional[Callable[[Player], int]] = None,
    ) -> List[Correction]:
        """Re-color players until every one of them holds a distinct color.

        Args:
            players: The roster of the match, mutated in place
            rng: Source for the replacement colors
            score_of: Score used to pick who keeps a contested color.
                Defaults to the player's own score.

        Returns:
            One (player, new color) tuple per corrected player
        """
        rng = rng or random.Random()
        score_of = score_of or (lambda p: p.score())
        corrections: List[Correction] = []

        for color, group in self.conflict_groups(players).items():
            # Stable, so equal scores keep slot order
            ranked = sorted(group, key=lambda p: -score_of(p))
            for p in ranked[1:]:
                available = self.available_colors(players)
                if not available:
                    raise ColorConflictException("Ran out of colors to hand out")

                new = rng.choice(sorted(available))
                logger.info(f"{p.name} corrected from {color} to {new}")
                p.color = new
                # Re-coloring only happens before anything has been played
                p.reset()
                corrections.append((p, new))

        return corrections
