from datetime import datetime, timezone

from drunkenfall.models.person import Person
from drunkenfall.models.player import Player
from drunkenfall.models.tournament.tournament import Tournament
from drunkenfall.ranking import (
    compare_by_rank,
    sort_by_kills,
    sort_by_rank,
    sort_by_runnerup,
    sort_by_schedule_date,
    sort_by_score,
)
from drunkenfall.stats import PlayerSnapshot, Snapshot


def _player(nick, kills=0, matches=0, shots=0):
    p = Player(person=Person(id=nick, nick=nick))
    p.kills = kills
    p.matches = matches
    p.shots = shots
    return p


def test_sort_by_kills_is_stable():
    players = [_player("a", 1), _player("b", 3), _player("c", 1), _player("d", 3)]
    assert [p.name for p in sort_by_kills(players)] == ["b", "d", "a", "c"]


def test_sort_by_score():
    players = [_player("a", kills=1), _player("b", shots=1), _player("c")]
    assert [p.name for p in sort_by_score(players)] == ["b", "a", "c"]


def test_runnerups_with_fewest_matches_go_first():
    players = [
        _player("veteran", kills=9, matches=2),
        _player("weak", kills=1, matches=1),
        _player("strong", kills=5, matches=1),
    ]
    assert [p.name for p in sort_by_runnerup(players)] == ["strong", "weak", "veteran"]


def test_unscheduled_tournaments_go_last():
    early = Tournament("early", scheduled=datetime(2025, 1, 1, tzinfo=timezone.utc))
    late = Tournament("late", scheduled=datetime(2025, 6, 1, tzinfo=timezone.utc))
    never = Tournament("never")
    ordered = sort_by_schedule_date([never, late, early])
    assert [t.name for t in ordered] == ["early", "late", "never"]


def _snapshot(nick, wins=0, score=0, disabled=False):
    return Snapshot(
        person=Person(id=nick, nick=nick, disabled=disabled),
        total=PlayerSnapshot(wins=wins, score=score),
    )


def test_rank_by_wins_then_score():
    a = _snapshot("a", wins=1, score=10)
    b = _snapshot("b", wins=2, score=5)
    c = _snapshot("c", wins=1, score=50)
    assert [s.person.nick for s in sort_by_rank([a, b, c])] == ["b", "c", "a"]


def test_disabled_people_rank_last():
    champion = _snapshot("champion", wins=10, score=1000, disabled=True)
    rookie = _snapshot("rookie")
    assert compare_by_rank(champion, rookie) == 1
    assert sort_by_rank([champion, rookie])[0] is rookie
