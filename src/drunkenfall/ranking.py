"""Comparators used to rank players, snapshots and tournaments.

Every comparator follows the ``cmp`` protocol: it returns a negative number
when its first argument should be placed first, a positive number when the
second one should, and ``0`` when they tie. The ``sort_by_*`` helpers wrap
them with :func:`functools.cmp_to_key`. Python's sort is stable, so ties keep
the order they came in with (for a match roster that means slot order).
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

import functools
from typing import TYPE_CHECKING, Iterable, List

from drunkenfall.models.player import Player

if TYPE_CHECKING:
    from drunkenfall.models.tournament.tournament import Tournament
    from drunkenfall.stats import Snapshot


def _descending(a: int, b: int) -> int:
    if a == b:
        return 0
    return -1 if a > b else 1


def _ascending(a: int, b: int) -> int:
    return -_descending(a, b)


# ========== Players ==========


def compare_by_score(p1: Player, p2: Player) -> int:
    """Highest score first."""
    return _descending(p1.score(), p2.score())


def compare_by_kills(p1: Player, p2: Player) -> int:
    """Most kills first."""
    return _descending(p1.kills, p2.kills)


def compare_by_runnerup(p1: Player, p2: Player) -> int:
    """Players that have played the fewest matches first, then most kills.

    The ones that have not played as much are the ones that should get the
    open seats.
    """
    if p1.matches == p2.matches:
        return compare_by_kills(p1, p2)
    return _ascending(p1.matches, p2.matches)


def sort_by_score(players: Iterable[Player]) -> List[Player]:
    return sorted(players, key=functools.cmp_to_key(compare_by_score))


def sort_by_kills(players: Iterable[Player]) -> List[Player]:
    return sorted(players, key=functools.cmp_to_key(compare_by_kills))


def sort_by_runnerup(players: Iterable[Player]) -> List[Player]:
    return sorted(players, key=functools.cmp_to_key(compare_by_runnerup))


# ========== Snapshots ==========


def compare_by_rank(s1: "Snapshot", s2: "Snapshot") -> int:
    """Rank people across tournaments.

    People that are not actively playing always go last. Everyone else is
    ordered by tournament wins and then by total score.
    """
    if s1.person.disabled != s2.person.disabled:
        return 1 if s1.person.disabled else -1

    if s1.total.wins == s2.total.wins:
        return _descending(s1.total.score, s2.total.score)
    return _descending(s1.total.wins, s2.total.wins)


def sort_by_rank(snapshots: Iterable["Snapshot"]) -> List["Snapshot"]:
    return sorted(snapshots, key=functools.cmp_to_key(compare_by_rank))


# ========== Tournaments ==========


def compare_by_schedule_date(t1: "Tournament", t2: "Tournament") -> int:
    """Earliest scheduled first. Unscheduled tournaments go last."""
    if t1.scheduled is None or t2.scheduled is None:
        if t1.scheduled is None and t2.scheduled is None:
            return 0
        return 1 if t1.scheduled is None else -1

    if t1.scheduled == t2.scheduled:
        return 0
    return -1 if t1.scheduled < t2.scheduled else 1


def sort_by_schedule_date(tournaments: Iterable["Tournament"]) -> List["Tournament"]:
    return sorted(tournaments, key=functools.cmp_to_key(compare_by_schedule_date))
