from scoreline.models import RoundStatus, StandingsSnapshot
from scoreline.services.movement_service import movement, standings_with_movement
from scoreline.services.scoring_service import score_round
from scoreline.services.standings_service import OVERALL


def test_movement_diff():
    current = {1: 1, 2: 2, 3: 3}
    previous = {1: 2, 2: 1}

    assert movement(current, previous) == {1: 1, 2: -1, 3: None}


def test_movement_unchanged_is_zero_not_none():
    assert movement({7: 4}, {7: 4}) == {7: 0}


def test_movement_with_empty_previous():
    assert movement({1: 1, 2: 1}, {}) == {1: None, 2: None}


def play_round(session, make, offset_days, predictions):
    """Create a CLOSED round, one 2-1 fixture, the given (user, home, away, joker) predictions, then score it"""
    round_obj = make.round(status=RoundStatus.CLOSED, offset_days=offset_days)
    fixture = make.fixture(round_obj, result=(2, 1))
    for user, home, away, joker in predictions:
        make.prediction(user, fixture, home, away, joker=joker)
    score_round(session, round_obj.id)
    return round_obj


def by_user(table):
    return {e['user_id']: e for e in table['standings']}


def test_overall_movement_against_previous_snapshot(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')

    first = play_round(session, make, 7, [(alice, 2, 1, False), (bob, 0, 1, False)])
    play_round(session, make, 14, [(alice, 0, 0, False), (bob, 2, 1, True)])
    carl = make.user('Carl')

    table = standings_with_movement(session, OVERALL)
    entries = by_user(table)

    assert table['previous_round_id'] == first.id
    assert entries[bob.id]['rank'] == 1
    assert entries[bob.id]['movement'] == 1
    assert entries[alice.id]['movement'] == -1
    assert entries[carl.id]['movement'] is None


def test_single_completed_round_has_no_movement(session, make):
    alice = make.user('Alice')
    play_round(session, make, 7, [(alice, 2, 1, False)])

    table = standings_with_movement(session)

    assert table['previous_round_id'] is None
    assert table['standings'][0]['movement'] is None


def test_per_round_movement(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    play_round(session, make, 7, [(alice, 2, 1, False), (bob, 1, 1, False)])
    second = play_round(session, make, 14, [(alice, 1, 1, False), (bob, 3, 0, False)])

    entries = by_user(standings_with_movement(session, second.id))

    assert entries[bob.id]['rank'] == 1
    assert entries[bob.id]['movement'] == 1
    assert entries[alice.id]['movement'] == -1


def test_member_filter_reranks_snapshot(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')
    carl = make.user('Carl')
    play_round(session, make, 7, [(alice, 2, 1, False), (bob, 1, 0, False), (carl, 0, 0, False)])
    play_round(session, make, 14, [(bob, 2, 1, False)])

    # Overall before round two: Alice 3, Bob 1, Carl 0. Within {Bob, Carl}: Bob 1, Carl 2
    entries = by_user(standings_with_movement(session, OVERALL, member_filter={bob.id, carl.id}))

    assert entries[bob.id]['rank'] == 1
    assert entries[bob.id]['movement'] == 0
    assert entries[carl.id]['movement'] == 0
    assert alice.id not in entries


def test_out_of_order_scoring_refreshes_later_snapshots(session, make):
    alice = make.user('Alice')
    bob = make.user('Bob')

    early = make.round(status=RoundStatus.CLOSED, offset_days=7)
    early_fixture = make.fixture(early, result=(2, 1))
    make.prediction(alice, early_fixture, 2, 1, joker=True)

    late = play_round(session, make, 14, [(bob, 2, 1, False)])
    assert StandingsSnapshot.get_rank_map(session, late.id) == {bob.id: 1, alice.id: 2}

    report = score_round(session, early.id)

    assert report.snapshot_rounds == [early.id, late.id]
    assert StandingsSnapshot.get_rank_map(session, late.id) == {alice.id: 1, bob.id: 2}
    assert StandingsSnapshot.get_rank_map(session, early.id) == {alice.id: 1, bob.id: 2}
