import json

import pytest

from drunkenfall.constants import FINAL, SEMI, TOPIC_GAME_MATCH
from drunkenfall.exceptions import TournamentStateException
from drunkenfall.testing.rtg import (
    RandomTournamentGenerator,
    RoundPattern,
    RTGConfig,
    create_small_tournament,
)


@pytest.mark.parametrize("num_players", [8, 9, 16, 20, 32])
def test_autoplay_finishes_the_bracket(num_players):
    generator = RandomTournamentGenerator(RTGConfig(num_players=num_players, seed=num_players))
    tournament = generator.generate_complete_tournament()

    assert tournament.is_ended()
    assert tournament.current == len(tournament.matches)
    assert all(m.is_ended() for m in tournament.matches)
    assert len(tournament.winners) == 3
    assert len({p.id for p in tournament.winners}) == 3

    for m in tournament.matches:
        if m.kind in (SEMI, FINAL):
            assert len(m.players) == 4
        assert len({p.color for p in m.players}) == len(m.players)
        assert any(p.kills >= m.length for p in m.players)

    final_ids = {p.id for p in tournament.final().players}
    assert {p.id for p in tournament.winners} <= final_ids


def test_generation_is_reproducible():
    def play(seed):
        generator = RandomTournamentGenerator(RTGConfig(num_players=12, seed=seed))
        return generator.generate_complete_tournament()

    first, second = play(5), play(5)
    assert [p.id for p in first.winners] == [p.id for p in second.winners]
    assert [len(m.rounds) for m in first.matches] == [len(m.rounds) for m in second.matches]


@pytest.mark.parametrize("pattern", list(RoundPattern))
def test_round_patterns(pattern):
    generator = RandomTournamentGenerator(
        RTGConfig(num_players=10, seed=2, round_pattern=pattern)
    )
    assert generator.generate_complete_tournament().is_ended()


def test_usurp_registers_random_people():
    generator = RandomTournamentGenerator(RTGConfig(num_players=24, seed=8, usurp=True))
    tournament = generator.create_tournament()
    assert len(tournament.players) == 24
    assert len({p.id for p in tournament.players}) == 24


def test_finished_tournament_rolls_credits():
    generator = RandomTournamentGenerator(RTGConfig(num_players=12, seed=4))
    tournament = generator.generate_complete_tournament()

    credits = tournament.get_credits()
    assert credits.executive is None
    assert credits.producers == []
    assert [p.id for p in credits.players[:3]] == [p.id for p in tournament.winners]
    assert credits.archers_harmed == tournament.archers_harmed()
    assert credits.archers_harmed > 0
    assert credits.to_dict()["archers_harmed"] == credits.archers_harmed


def test_every_started_match_is_announced_to_the_game():
    generator = RandomTournamentGenerator(RTGConfig(num_players=8, seed=1))
    generator.generate_complete_tournament()

    announced = [m for t, m in generator.broadcaster.messages if t == TOPIC_GAME_MATCH]
    assert [m["kind"] for m in announced] == [SEMI, SEMI, FINAL]
    assert all(len(m["players"]) == 4 for m in announced)


def test_export_json_format():
    generator = RandomTournamentGenerator(RTGConfig(num_players=8, seed=3))
    tournament = generator.generate_complete_tournament()
    data = json.loads(generator.export_json_format(tournament))
    assert data["id"] == tournament.id
    assert len(data["winners"]) == 3


def test_small_tournament_has_no_tryouts():
    tournament = create_small_tournament(seed=6)
    assert [m.kind for m in tournament.matches] == [SEMI, SEMI, FINAL]


def test_finished_tournament_has_no_next_match():
    tournament = create_small_tournament(seed=7)
    with pytest.raises(TournamentStateException):
        tournament.next_match()


def test_config_rejects_bad_player_count():
    with pytest.raises(ValueError):
        RTGConfig(num_players=0)
