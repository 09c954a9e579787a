"""Bracket management for tournaments.

This module handles building the bracket, seeding players into it, and moving
winners and losers between tryouts, semis, the final and the runnerup pool.
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

import math
import random
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from drunkenfall.constants import (
    EV_RUNNERUPS,
    FINAL,
    PLAYERS_PER_MATCH,
    SEMI,
    SEMI_SEATS,
    TRYOUT,
)
from drunkenfall.exceptions import (
    BackfillCountException,
    InvalidBackfillException,
    MatchFullException,
    TournamentStateException,
)
from drunkenfall.models.person import Person
from drunkenfall.models.player import Player
from drunkenfall.models.tournament.match import Match
from drunkenfall.ranking import sort_by_kills, sort_by_runnerup
from drunkenfall.utils import setup_logger

if TYPE_CHECKING:
    from drunkenfall.models.tournament.tournament import Tournament

logger = setup_logger(__name__)


class BracketManager:
    """Builds the bracket of a tournament and moves players through it.

    This class is responsible for:
    - Creating the tryout, semi and final matches
    - Shuffling the registered players into the first matches
    - Promoting tryout and semi winners
    - Keeping the runnerup pool ranked and backfilling matches from it

    It holds no state of its own; everything lives on the tournament.
    """

    def __init__(self, tournament: "Tournament") -> None:
        self.tournament = tournament

    @property
    def matches(self) -> List[Match]:
        return self.tournament.matches

    @property
    def tryout_count(self) -> int:
        """Number of tryouts in the bracket (everything but semis and final)."""
        return max(0, len(self.matches) - 3)

    @property
    def promotions_per_tryout(self) -> int:
        """How many players of each tryout advance to the semis."""
        if self.tryout_count <= self.tournament.config.double_promotion_max_tryouts:
            return 2
        return 1

    # ========== Building ==========

    def build(self, num_players: int) -> List[Match]:
        """Create the matches for ``num_players`` players.

        At exactly the minimum amount of players the tryouts are skipped and
        only the semis and the final are played. Above that, there are enough
        tryouts for everyone to play once.
        """
        if self.matches:
            raise TournamentStateException(
                f"{self.tournament.name} already has a bracket"
            )

        tryouts = 0
        if num_players != self.tournament.config.min_players:
            tryouts = math.ceil(num_players / PLAYERS_PER_MATCH)

        for _ in range(tryouts):
            self._new_match(TRYOUT)
        self._new_match(SEMI)
        self._new_match(SEMI)
        self._new_match(FINAL)

        logger.info(
            f"Built bracket for {self.tournament.name}: {tryouts} tryouts, "
            f"2 semis and a final"
        )
        return self.matches

    def _new_match(self, kind: str) -> Match:
        config = self.tournament.config
        length = config.final_length if kind == FINAL else config.match_length
        match = Match(
            kind=kind,
            index=len(self.matches),
            length=length,
            tournament=self.tournament,
        )
        self.matches.append(match)
        return match

    def seeded_matches(self) -> List[Match]:
        """The matches the shuffle seats players in.

        Those are the tryouts, or the two semis in a bracket without tryouts.
        """
        if self.tryout_count:
            return self.matches[: self.tryout_count]
        return self.matches[:2]

    def seeded_players(self) -> List[Player]:
        """Players that got a seat from the shuffle.

        People joining after the start went straight into the runnerup pool
        and are left out.
        """
        pool = {r.id for r in self.tournament.runnerups}
        return [p for p in self.tournament.players if p.id not in pool]

    def shuffle_players(
        self, rng: random.Random, players: Optional[Sequence[Player]] = None
    ) -> None:
        """Shuffle the players and pack them four at a time into the seeded matches."""
        players = list(self.tournament.players if players is None else players)
        # Fisher-Yates, so a seeded rng gives a reproducible bracket
        for i in range(len(players) - 1, 0, -1):
            j = rng.randint(0, i)
            players[i], players[j] = players[j], players[i]

        seeded = self.seeded_matches()
        for i, p in enumerate(players):
            seeded[i // PLAYERS_PER_MATCH].add_player(p, rng=rng)

    def clear_seeded_matches(self) -> None:
        """Empty the matches filled by the shuffle.

        Raises:
            TournamentStateException: If one of them has already started
        """
        seeded = self.seeded_matches()
        for m in seeded:
            if m.is_started():
                raise TournamentStateException(
                    f"Cannot reshuffle, {m.title()} has already started"
                )
        for m in seeded:
            m.clear_players()

    def reshuffle(self, rng: random.Random) -> None:
        """Seat the shuffled players anew, keeping late joiners in the pool."""
        players = self.seeded_players()
        self.clear_seeded_matches()
        self.shuffle_players(rng, players)

    # ========== Moving players ==========

    def check_move_players(self, match: Match) -> None:
        """Make sure the winners of ``match`` have seats waiting for them.

        Raises:
            MatchFullException: If a semi or the final cannot seat them
        """
        if match.kind == TRYOUT:
            first_semi = len(self.matches) - 3
            promoted = min(self.promotions_per_tryout, len(match.players))
            targets = [first_semi + ((i + match.index) % 2) for i in range(promoted)]
        elif match.kind == SEMI:
            targets = [len(self.matches) - 1] * min(2, len(match.players))
        else:
            return

        needed: Dict[int, int] = {}
        for index in targets:
            needed[index] = needed.get(index, 0) + 1
        for index, count in needed.items():
            target = self.matches[index]
            if len(target.players) + count > PLAYERS_PER_MATCH:
                raise MatchFullException(
                    f"{target.title()} has no room for the winners of {match.title()}"
                )

    def move_players(self, match: Match) -> None:
        """Move the winner(s) of a match into the next part of the bracket.

        Losers of tryouts go into the runnerup pool. If the next match is an
        under-filled tryout, it is filled up with the best runnerups.
        """
        if match.kind == TRYOUT:
            self.move_tryout_players(match)

            nm = self.tournament.next_match()
            if nm.kind == TRYOUT and len(nm.players) < PLAYERS_PER_MATCH:
                logger.info(f"Setting runnerups for {nm}")
                self.populate_runnerups(nm)

        elif match.kind == SEMI:
            final = self.tournament.final()
            for p in sort_by_kills(match.players)[:2]:
                final.add_player(p)
            logger.info(f"Moved the top two of {match.title()} into the final")

    def move_tryout_players(self, match: Match) -> None:
        """Send the best of a tryout to the semis, the rest to the runnerups.

        The semi is picked by alternating on the tryout index and the
        position, which keeps winners from facing off immediately in the
        semis.
        """
        first_semi = len(self.matches) - 3
        promotions = self.promotions_per_tryout

        for i, p in enumerate(sort_by_kills(match.players)):
            if i < promotions:
                semi = self.matches[first_semi + ((i + match.index) % 2)]
                semi.add_player(p)
                # Players that won a runnerup round leave the pool
                self.remove_from_runnerups(p.person)
                logger.info(f"{p.name} advanced to {semi.title()}")
            else:
                self.add_runnerup(p.person)

        self.update_runnerups()

    def populate_runnerups(self, match: Match) -> None:
        """Fill ``match`` up with the best ranked runnerups."""
        present = {p.id for p in match.players}
        added = []
        for p in self.get_runnerup_players():
            if len(match.players) >= PLAYERS_PER_MATCH:
                break
            if p.id in present:
                continue
            match.add_player(p)
            present.add(p.id)
            added.append(p.person)

        if added:
            match.log_event(
                EV_RUNNERUPS,
                "{count} runnerups added to {match}",
                count=len(added),
                match=match.title(),
                players=added,
            )

        if len(match.players) < PLAYERS_PER_MATCH:
            logger.warning(
                f"Not enough runnerups to fill {match}: "
                f"{len(match.players)} players"
            )

    # ========== Runnerups ==========

    def add_runnerup(self, person: Person) -> None:
        """Add ``person`` to the runnerup pool unless already in it."""
        if any(r.id == person.id for r in self.tournament.runnerups):
            return
        self.tournament.runnerups.append(person)

    def remove_from_runnerups(self, person: Person) -> None:
        self.tournament.runnerups = [
            r for r in self.tournament.runnerups if r.id != person.id
        ]

    def update_players(self) -> None:
        """Recompute the tournament-wide stats from every played match."""
        for p in self.tournament.players:
            p.reset()

        for m in self.matches:
            if not m.is_started():
                continue
            for p in m.players:
                self.tournament.get_tournament_player(p.person).update(p)

    def get_runnerup_players(self) -> List[Player]:
        """Tournament players of the runnerup pool, best ranked first.

        Raises:
            TournamentStateException: If the tournament has not started
        """
        if not self.tournament.is_started():
            raise TournamentStateException(
                f"{self.tournament.name} has not started, there are no runnerups"
            )

        self.update_players()
        players = [
            self.tournament.get_tournament_player(r) for r in self.tournament.runnerups
        ]
        return sort_by_runnerup(players)

    def update_runnerups(self) -> None:
        """Rewrite the runnerup pool in ranked order."""
        self.tournament.runnerups = [p.person for p in self.get_runnerup_players()]

    # ========== Semis ==========

    def open_semi_seats(self) -> int:
        first_semi = len(self.matches) - 3
        taken = len(self.matches[first_semi].players) + len(
            self.matches[first_semi + 1].players
        )
        return SEMI_SEATS - taken

    def backfill_semis(self, players: Sequence[Player]) -> None:
        """Place ``players`` into the open seats of the semis.

        Each player goes into the first semi until it is full, then into the
        second one.

        Raises:
            BackfillCountException: If the players do not match the open seats
            InvalidBackfillException: If a person is listed twice or already
                has a seat in a match that is still to be played
        """
        needed = self.open_semi_seats()
        if len(players) != needed:
            raise BackfillCountException(f"Need {needed} players, got {len(players)}")

        ids = [p.id for p in players]
        if len(set(ids)) != len(ids):
            raise InvalidBackfillException("The same person cannot be backfilled twice")
        for m in self.matches:
            if m.is_ended():
                continue
            for p in m.players:
                if p.id in ids:
                    raise InvalidBackfillException(
                        f"{p.name} already has a seat in {m.title()}"
                    )

        first_semi = len(self.matches) - 3
        for p in players:
            index = 0
            if len(self.matches[first_semi].players) == PLAYERS_PER_MATCH:
                index = 1
            self.matches[first_semi + index].add_player(p)
            self.remove_from_runnerups(p.person)
