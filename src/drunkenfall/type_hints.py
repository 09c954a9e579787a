"""Type hints used in Drunkenfall."""

from typing import List, Literal, Optional, Tuple

# Match kind type alias
MatchKind = Literal["tryout", "semi", "final"]

# Archer colors
Color = Literal[
    "green",
    "blue",
    "pink",
    "orange",
    "white",
    "yellow",
    "cyan",
    "purple",
    "red",
]

# List of players
Players = List["Player"]
# Slot indices ordered by kills
KillOrder = List[int]
# A (kills, self flag) pair for one slot in a round
SlotScore = List[int]
# A (ups, downs, shot) state for one slot, as reported by the game
PlayerState = Tuple[int, int, bool]
MaybePerson = Optional["Person"]
