import pytest
from click.testing import CliRunner

from manage import cli
from scoreline import cache
from scoreline.models import Fixture, Prediction, Round, RoundStatus


@pytest.fixture()
def runner(app):
    return CliRunner()


def test_round_lifecycle_from_cli(runner, session, make):
    alice = make.user('Alice')

    result = runner.invoke(cli, ['round', 'create', 'Matchday 1', '--deadline', '2026-09-01T12:00:00'])
    assert result.exit_code == 0, result.output
    round_obj = session.query(Round).filter_by(name='Matchday 1').one()

    result = runner.invoke(cli, ['fixture', 'add', str(round_obj.id), 'Lions', 'Tigers'])
    assert result.exit_code == 0, result.output
    fixture = session.query(Fixture).filter_by(round_id=round_obj.id).one()

    assert runner.invoke(cli, ['round', 'open', str(round_obj.id)]).exit_code == 0
    prediction = make.prediction(alice, fixture, 2, 2)
    assert runner.invoke(cli, ['round', 'close', str(round_obj.id)]).exit_code == 0

    result = runner.invoke(cli, ['round', 'score', str(round_obj.id)])
    assert result.exit_code == 1
    assert 'Results missing' in result.output

    assert runner.invoke(cli, ['fixture', 'result', str(fixture.id), '1', '1']).exit_code == 0

    result = runner.invoke(cli, ['round', 'score', str(round_obj.id)])
    assert result.exit_code == 0, result.output
    assert session.get(Round, round_obj.id).status == RoundStatus.COMPLETED
    assert session.get(Prediction, prediction.id).points_awarded == 1

    result = runner.invoke(cli, ['standings', 'show'])
    assert result.exit_code == 0
    assert 'Alice' in result.output

    result = runner.invoke(cli, ['verify'])
    assert result.exit_code == 0
    assert 'consistent' in result.output


def test_negative_result_is_rejected(runner, make):
    round_obj = make.round(status=RoundStatus.CLOSED)
    fixture = make.fixture(round_obj)

    result = runner.invoke(cli, ['fixture', 'result', str(fixture.id), '--', '-1', '0'])

    assert result.exit_code == 1
    assert 'non-negative' in result.output


def test_verify_flags_points_outside_completed_rounds(runner, make):
    alice = make.user('Alice')
    round_obj = make.round(status=RoundStatus.OPEN)
    fixture = make.fixture(round_obj)
    make.prediction(alice, fixture, 1, 0, points=3)

    result = runner.invoke(cli, ['verify'])

    assert result.exit_code == 1
    assert 'outside completed rounds' in result.output


def test_user_commands(runner):
    assert runner.invoke(cli, ['user', 'create', 'Alice', '--email', 'alice@example.com']).exit_code == 0
    result = runner.invoke(cli, ['user', 'create', 'Alias', '--email', 'alice@example.com'])
    assert result.exit_code == 1

    result = runner.invoke(cli, ['user', 'list'])
    assert 'Alice' in result.output
    assert 'Alias' not in result.output


def test_new_player_shows_up_in_cached_standings(runner, app, client):
    cache.init_app(app, config={'CACHE_TYPE': 'SimpleCache'})
    assert client.get('/api/standings').get_json()['standings'] == []

    assert runner.invoke(cli, ['user', 'create', 'Alice']).exit_code == 0

    names = [e['name'] for e in client.get('/api/standings').get_json()['standings']]
    assert names == ['Alice']
