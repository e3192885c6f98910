import pytest

from scoreline.exceptions import InvalidState, NotFound
from scoreline.models import RoundStatus
from scoreline.services.standings_service import (
    OVERALL,
    calculate_standings,
    cumulative_totals_through,
    rank_entries,
)


def test_competition_ranking():
    entries = [
        {'user_id': i, 'name': name, 'total_points': points}
        for i, (name, points) in enumerate(
            [('Fay', 5), ('Ann', 10), ('Eve', 5), ('Bob', 10), ('Cid', 7), ('Dan', 5)], start=1
        )
    ]

    ranked = rank_entries(entries)

    assert [e['total_points'] for e in ranked] == [10, 10, 7, 5, 5, 5]
    assert [e['rank'] for e in ranked] == [1, 1, 3, 4, 4, 4]
    assert [e['name'] for e in ranked] == ['Ann', 'Bob', 'Cid', 'Dan', 'Eve', 'Fay']


def test_tied_names_fall_back_to_id():
    ranked = rank_entries(
        [
            {'user_id': 9, 'name': 'Sam', 'total_points': 1},
            {'user_id': 3, 'name': 'Sam', 'total_points': 1},
        ]
    )
    assert [e['user_id'] for e in ranked] == [3, 9]


def test_overall_ignores_rounds_that_are_not_completed(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    make.scored_round({alice: 3, bob: 1})

    # Stray points in a CLOSED round never count
    closed = make.round(status=RoundStatus.CLOSED)
    fixture = make.fixture(closed, result=(1, 0))
    make.prediction(bob, fixture, 1, 0, points=6)

    standings = calculate_standings(session, OVERALL)

    totals = {e['user_id']: e['total_points'] for e in standings}
    assert totals == {alice.id: 3, bob.id: 1}


def test_every_player_listed_admins_excluded(session, make):
    alice = make.user('Alice')
    zed = make.user('Zed')
    make.user('Root', admin=True)
    make.scored_round({alice: 1})

    standings = calculate_standings(session)

    assert [(e['name'], e['total_points'], e['rank']) for e in standings] == [
        ('Alice', 1, 1),
        ('Zed', 0, 2),
    ]
    zed_entry = standings[1]
    assert zed_entry['user_id'] == zed.id
    assert zed_entry['predictions_made'] == 0
    assert zed_entry['accuracy'] is None


def test_statistics(session, make):
    alice = make.user('Alice')
    round_obj = make.round(status=RoundStatus.COMPLETED)
    for points in (3, 6, 1, 0):
        fixture = make.fixture(round_obj, result=(1, 0))
        make.prediction(alice, fixture, 1, 0, points=points)

    entry = calculate_standings(session)[0]

    assert entry['total_points'] == 10
    assert entry['predictions_made'] == 4
    assert entry['correct_outcomes'] == 3
    assert entry['exact_scores'] == 2
    assert entry['accuracy'] == 75.0


def test_per_round_scope(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    make.scored_round({alice: 6, bob: 0})
    second = make.scored_round({alice: 0, bob: 3})

    standings = calculate_standings(session, second.id)

    assert [(e['user_id'], e['total_points'], e['rank']) for e in standings] == [
        (bob.id, 3, 1),
        (alice.id, 0, 2),
    ]


def test_per_round_scope_requires_completed_round(session, make):
    open_round = make.round(status=RoundStatus.OPEN)

    with pytest.raises(InvalidState):
        calculate_standings(session, open_round.id)

    with pytest.raises(NotFound):
        calculate_standings(session, 12345)


def test_member_filter(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    carl = make.user('Carl')
    make.scored_round({alice: 5, bob: 3, carl: 4})

    standings = calculate_standings(session, OVERALL, member_filter={bob.id, carl.id})

    assert [(e['user_id'], e['rank']) for e in standings] == [(carl.id, 1), (bob.id, 2)]


def test_empty_member_filter_gives_empty_table(session, make):
    alice = make.user('Alice')
    make.scored_round({alice: 5})

    assert calculate_standings(session, OVERALL, member_filter=set()) == []


def test_group_members_as_filter(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    carl = make.user('Carl')
    make.scored_round({alice: 1, bob: 2, carl: 3})
    group = make.group('Office', members=[alice, bob], inactive=[carl])

    standings = calculate_standings(session, member_filter=group.get_member_ids())

    assert [e['name'] for e in standings] == ['Bob', 'Alice']


def test_cumulative_totals_follow_schedule_order(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    first = make.scored_round({alice: 3, bob: 0}, offset_days=7)
    third = make.scored_round({alice: 0, bob: 6}, offset_days=21)
    second = make.scored_round({alice: 1, bob: 1}, offset_days=14)

    totals = {e['user_id']: e['total_points'] for e in cumulative_totals_through(session, second)}
    assert totals == {alice.id: 4, bob.id: 1}

    totals = {e['user_id']: e['total_points'] for e in cumulative_totals_through(session, first)}
    assert totals == {alice.id: 3, bob.id: 0}

    totals = {e['user_id']: e['total_points'] for e in cumulative_totals_through(session, third)}
    assert totals == {alice.id: 4, bob.id: 7}
