import random

import pytest

from drunkenfall.broadcast import RecordingBroadcaster
from drunkenfall.constants import (
    COLORS,
    EV_BACKFILL_SEMI,
    EV_PLAYER_JOIN,
    EV_START,
    FINAL,
    SEMI,
    TOPIC_GAME_MATCH,
    TOPIC_TOURNAMENT,
    TRYOUT,
)
from drunkenfall.exceptions import (
    AlreadyJoinedException,
    BackfillCountException,
    InvalidBackfillException,
    MatchFullException,
    InvalidPlayerCountException,
    MatchNotFoundException,
    NotFinalMatchException,
    PlayerNotFoundException,
    TournamentFullException,
    TournamentStateException,
)
from drunkenfall.models.person import Person
from drunkenfall.models.tournament.round_data import Round
from drunkenfall.models.tournament.tournament import Tournament
from drunkenfall.storage import Database, MemoryStore


def _people(count, start=0):
    return [
        Person(
            id=f"p{i}",
            name=f"Player {i}",
            nick=f"nick{i}",
            color_preference=[COLORS[i % len(COLORS)]],
        )
        for i in range(start, start + count)
    ]


def _tournament(count, seed=1, db=None):
    tournament = Tournament("DrunkenFall Test", rng=random.Random(seed), db=db)
    for person in _people(count):
        tournament.add_player(person)
    return tournament


def _play(match, kills):
    """Start ``match``, commit one round with ``kills`` per slot and end it."""
    match.start()
    match.commit(
        Round(kills=[[k, 0] for k in kills], shots=[False] * len(kills))
    )
    match.end()


def test_minimum_players_skips_tryouts():
    tournament = _tournament(8)
    tournament.start_tournament()

    assert [m.kind for m in tournament.matches] == [SEMI, SEMI, FINAL]
    assert len(tournament.semi(0).players) == 4
    assert len(tournament.semi(1).players) == 4
    assert tournament.final().players == []
    assert tournament.next_match() is tournament.semi(0)
    assert tournament.next_match().is_scheduled()


def test_tryouts_for_twenty_players():
    tournament = _tournament(20)
    tournament.start_tournament()

    kinds = [m.kind for m in tournament.matches]
    assert kinds == [TRYOUT] * 5 + [SEMI, SEMI, FINAL]
    assert [len(m.players) for m in tournament.matches[:5]] == [4] * 5

    seated = {p.id for m in tournament.matches[:5] for p in m.players}
    assert seated == {p.id for p in tournament.players}
    assert [m.index for m in tournament.matches] == list(range(8))


def test_uneven_player_count_leaves_a_short_tryout():
    tournament = _tournament(9)
    tournament.start_tournament()
    assert [len(m.players) for m in tournament.matches[:3]] == [4, 4, 1]


def test_seeding_is_reproducible():
    first = _tournament(16, seed=7)
    second = _tournament(16, seed=7)
    first.start_tournament()
    second.start_tournament()

    def seats(t):
        return [[p.id for p in m.players] for m in t.matches]

    assert seats(first) == seats(second)


def test_every_match_has_distinct_colors():
    tournament = _tournament(32, seed=3)
    tournament.start_tournament()
    for m in tournament.matches[:8]:
        assert len({p.color for p in m.players}) == 4


def test_too_few_players_cannot_start():
    tournament = _tournament(7)
    assert not tournament.is_startable()
    with pytest.raises(InvalidPlayerCountException):
        tournament.start_tournament()
    assert tournament.matches == []
    assert not tournament.is_started()


def test_tournament_starts_only_once():
    tournament = _tournament(8)
    tournament.start_tournament()
    with pytest.raises(TournamentStateException):
        tournament.start_tournament()


def test_join_rules():
    tournament = _tournament(32)
    assert not tournament.is_joinable()
    with pytest.raises(TournamentFullException):
        tournament.add_player(_people(1, start=100)[0])

    small = _tournament(4)
    clone = Person(id="other", name="Someone Else", nick="nick1")
    assert not small.can_join(clone)
    with pytest.raises(AlreadyJoinedException):
        small.add_player(clone)
    assert len(small.players) == 4
    assert [e.kind for e in small.events].count(EV_PLAYER_JOIN) == 4


def test_joining_after_start_goes_to_runnerups():
    tournament = _tournament(8)
    tournament.start_tournament()
    late = _people(1, start=50)[0]

    tournament.add_player(late)
    assert tournament.runnerups == [late]
    assert tournament.get_tournament_player(late).person is late


def test_players_can_leave_before_start_only():
    tournament = _tournament(9)
    leaving = tournament.players[0].person
    tournament.remove_player(leaving)
    assert not tournament.has_player(leaving)
    with pytest.raises(PlayerNotFoundException):
        tournament.get_tournament_player(leaving)

    tournament.start_tournament()
    with pytest.raises(TournamentStateException):
        tournament.remove_player(tournament.players[0].person)


def test_toggle_player_through_database():
    db = Database(MemoryStore())
    person = Person(id="toggler", name="Toggle Person", nick="toggle", color_preference=["red"])
    db.save_person(person)
    tournament = Tournament("DrunkenFall Toggle", db=db)

    assert tournament.toggle_player("toggler") is True
    assert tournament.has_player(person)
    assert tournament.toggle_player("toggler") is False
    assert not tournament.has_player(person)


def test_next_match_requires_running_tournament():
    tournament = _tournament(8)
    with pytest.raises(TournamentStateException):
        tournament.next_match()
    with pytest.raises(MatchNotFoundException):
        tournament.get_match(0)


def test_runnerups_require_a_started_tournament():
    tournament = _tournament(8)
    with pytest.raises(TournamentStateException):
        tournament.get_runnerup_players()


def test_tryout_promotions_alternate_between_semis():
    tournament = _tournament(16)
    tournament.start_tournament()
    first, second = tournament.matches[0], tournament.matches[1]

    _play(first, [3, 2, 1, 0])
    assert tournament.current == 1
    assert [p.id for p in tournament.semi(0).players] == [first.players[0].id]
    assert [p.id for p in tournament.semi(1).players] == [first.players[1].id]
    assert [r.id for r in tournament.runnerups] == [
        first.players[2].id,
        first.players[3].id,
    ]

    _play(second, [0, 1, 2, 3])
    assert [p.id for p in tournament.semi(0).players] == [
        first.players[0].id,
        second.players[2].id,
    ]
    assert [p.id for p in tournament.semi(1).players] == [
        first.players[1].id,
        second.players[3].id,
    ]
    assert len(tournament.runnerups) == 4


def test_large_brackets_promote_only_the_winner():
    tournament = _tournament(20)
    tournament.start_tournament()
    assert tournament.bracket_manager.promotions_per_tryout == 1

    first = tournament.matches[0]
    _play(first, [0, 0, 4, 1])
    assert [p.id for p in tournament.semi(0).players] == [first.players[2].id]
    assert tournament.semi(1).players == []
    assert len(tournament.runnerups) == 3


def test_short_tryout_is_filled_from_runnerups():
    tournament = _tournament(9)
    tournament.start_tournament()

    _play(tournament.matches[0], [3, 2, 1, 0])
    _play(tournament.matches[1], [3, 2, 0, 1])

    short = tournament.matches[2]
    assert len(short.players) == 4
    assert len({p.id for p in short.players}) == 4
    assert len({p.color for p in short.players}) == 4

    # Everyone in the pool has played once, so the most kills go first
    pool_in_short = {p.id for p in short.players[1:]}
    assert tournament.matches[0].players[2].id in pool_in_short
    assert tournament.matches[1].players[3].id in pool_in_short


def test_backfill_needs_exactly_the_open_seats():
    tournament = _tournament(20)
    tournament.start_tournament()

    with pytest.raises(BackfillCountException, match="Need 8 players, got 1"):
        tournament.backfill_semis([tournament.players[0].id])
    assert tournament.semi(0).players == []


def test_backfill_fills_first_semi_first():
    tournament = _tournament(20)
    tournament.start_tournament()
    for m in tournament.matches[:5]:
        _play(m, [3, 2, 1, 0])

    open_seats = tournament.bracket_manager.open_semi_seats()
    assert open_seats == 3
    picks = [p.id for p in tournament.get_runnerup_players()[:open_seats]]

    tournament.backfill_semis(picks, actor=tournament.players[0].person)
    assert len(tournament.semi(0).players) == 4
    assert len(tournament.semi(1).players) == 4
    assert not {r.id for r in tournament.runnerups} & set(picks)
    event = tournament.events[-1]
    assert event.kind == EV_BACKFILL_SEMI
    assert event.person["id"] == tournament.players[0].person.id


def test_semis_send_top_two_to_final_and_final_awards_medals():
    tournament = _tournament(8)
    tournament.start_tournament()

    _play(tournament.semi(0), [1, 4, 0, 2])
    _play(tournament.semi(1), [5, 0, 3, 1])
    final = tournament.final()
    assert [p.id for p in final.players] == [
        tournament.semi(0).players[1].id,
        tournament.semi(0).players[3].id,
        tournament.semi(1).players[0].id,
        tournament.semi(1).players[2].id,
    ]

    _play(final, [2, 6, 1, 4])
    assert tournament.is_ended()
    assert not tournament.is_running()
    assert [p.id for p in tournament.winners] == [
        final.players[1].id,
        final.players[3].id,
        final.players[0].id,
    ]


def test_medals_are_only_awarded_in_the_final():
    tournament = _tournament(8)
    tournament.start_tournament()
    with pytest.raises(NotFinalMatchException):
        tournament.award_medals(tournament.semi(0))
    assert tournament.winners == []
    assert not tournament.is_ended()


def test_credits_need_a_finished_tournament():
    tournament = _tournament(8)
    with pytest.raises(TournamentStateException):
        tournament.get_credits()


def test_reshuffle_before_play():
    tournament = _tournament(12, seed=5)
    tournament.start_tournament()
    tournament.reshuffle(rng=random.Random(11))
    seated = [p.id for m in tournament.matches[:3] for p in m.players]
    assert sorted(seated) == sorted(p.id for p in tournament.players)

    tournament.matches[0].start()
    with pytest.raises(TournamentStateException):
        tournament.reshuffle()


def test_changes_are_persisted_and_broadcast():
    broadcaster = RecordingBroadcaster()
    db = Database(MemoryStore(), broadcaster=broadcaster)
    tournament = _tournament(8, db=db)
    tournament.start_tournament()
    tournament.next_match().start()

    stored = db.store.load_tournament(tournament.id)
    assert stored["started"] is not None
    assert stored["matches"][0]["started"] is not None
    assert db.get_tournament(tournament.id) is tournament

    topics = broadcaster.topics()
    assert TOPIC_TOURNAMENT in topics
    game_messages = [m for t, m in broadcaster.messages if t == TOPIC_GAME_MATCH]
    assert len(game_messages) == 1
    assert game_messages[0]["kind"] == SEMI
    assert len(game_messages[0]["players"]) == 4
    assert any(e.kind == EV_START for e in tournament.events)


def test_tournament_survives_serialization():
    tournament = _tournament(9)
    tournament.start_tournament()
    _play(tournament.matches[0], [3, 2, 1, 0])

    loaded = Tournament.from_dict(tournament.to_dict())
    assert loaded.id == tournament.id
    assert loaded.current == 1
    assert [m.kind for m in loaded.matches] == [m.kind for m in tournament.matches]
    assert all(m.tournament is loaded for m in loaded.matches)
    assert [r.id for r in loaded.runnerups] == [r.id for r in tournament.runnerups]
    for r in loaded.runnerups:
        assert loaded.get_tournament_player(r).person is r


def test_four_tryouts_fill_both_semis_and_rank_the_pool():
    tournament = _tournament(16)
    tournament.start_tournament()
    tryouts = tournament.matches[:4]
    for m in tryouts:
        _play(m, [3, 2, 1, 0])

    assert tournament.next_match() is tournament.semi(0)
    for semi_index in (0, 1):
        expected = [
            m.players[rank].id
            for m in tryouts
            for rank in (0, 1)
            if (rank + m.index) % 2 == semi_index
        ]
        assert [p.id for p in tournament.semi(semi_index).players] == expected

    pool = tournament.get_runnerup_players()
    assert [(p.matches, p.kills) for p in pool] == [(1, 1)] * 4 + [(1, 0)] * 4
    assert {p.id for p in pool[:4]} == {m.players[2].id for m in tryouts}
    assert {p.id for p in pool[4:]} == {m.players[3].id for m in tryouts}
    assert tournament.bracket_manager.open_semi_seats() == 0


def test_reshuffle_keeps_late_joiners_out_of_the_semis():
    tournament = _tournament(8)
    tournament.start_tournament()
    late = _people(1, start=100)[0]
    tournament.add_player(late)

    tournament.reshuffle(rng=random.Random(3))
    assert tournament.final().players == []
    seated = [p.id for s in (tournament.semi(0), tournament.semi(1)) for p in s.players]
    assert sorted(seated) == sorted(f"p{i}" for i in range(8))
    assert [r.id for r in tournament.runnerups] == [late.id]


def test_reshuffle_only_touches_the_tryouts():
    tournament = _tournament(16)
    tournament.start_tournament()
    late = _people(1, start=100)[0]
    tournament.add_player(late)

    tournament.reshuffle(rng=random.Random(3))
    assert [len(m.players) for m in tournament.matches[:4]] == [4] * 4
    assert tournament.semi(0).players == []
    assert tournament.semi(1).players == []
    seated = {p.id for m in tournament.matches[:4] for p in m.players}
    assert late.id not in seated
    assert [r.id for r in tournament.runnerups] == [late.id]


def test_backfill_rejects_people_seated_in_unplayed_matches():
    tournament = _tournament(16)
    tournament.start_tournament()
    _play(tournament.matches[0], [3, 2, 1, 0])

    pool = [r.id for r in tournament.runnerups]
    waiting = [p.id for p in tournament.matches[3].players]
    with pytest.raises(InvalidBackfillException):
        tournament.backfill_semis(pool + waiting)
    with pytest.raises(InvalidBackfillException):
        tournament.backfill_semis([pool[0]] * 6)

    assert len(tournament.semi(0).players) == 1
    assert len(tournament.semi(1).players) == 1
    _play(tournament.matches[1], [3, 2, 1, 0])
    assert tournament.current == 2


def test_end_changes_nothing_when_the_winners_have_no_seat():
    tournament = _tournament(8)
    tournament.start_tournament()
    _play(tournament.semi(0), [1, 4, 0, 2])

    second = tournament.semi(1)
    final = tournament.final()
    for p in second.players[:2]:
        final.add_player(p)
    second.start()
    second.commit(Round(kills=[[2, 0], [1, 0], [0, 0], [0, 0]], shots=[False] * 4))

    with pytest.raises(MatchFullException):
        second.end()
    assert not second.is_ended()
    assert tournament.current == 1
    assert len(final.players) == 4
    assert [p.shots for p in second.players] == [0, 0, 0, 0]
