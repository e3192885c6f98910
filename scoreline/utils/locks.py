"""
Row locks for round state changes

SELECT ... FOR UPDATE on the round row. A second writer blocks until the
first transaction commits or rolls back, then sees the committed status.
SQLite ignores FOR UPDATE; its single-writer lock serializes instead.
"""

from scoreline.models import Round


def with_round_lock(session, round_id):
    """
    Lock a round row for the rest of the transaction

    Returns the query; call .first() to load the round. populate_existing
    makes an already-loaded Round pick up the committed state.
    """
    return (
        session.query(Round)
        .filter(Round.id == round_id)
        .with_for_update(nowait=False)
        .populate_existing()
    )
