"""
Pool and event lifecycle: cascading deletes and re-inviting a pool

Foreign keys are not relied on to cascade; dependent rows are removed
explicitly, children first.
"""

import logging

from pickcrown import db
from pickcrown.models import (
    Category,
    CategoryOption,
    EmailLog,
    Event,
    Matchup,
    Pool,
    PoolEntry,
    Round,
    Team,
    TeamElimination,
)

logger = logging.getLogger(__name__)


def _delete_pool_rows(pool_id):
    entry_ids = [
        entry_id
        for (entry_id,) in db.session.query(PoolEntry.id).filter_by(pool_id=pool_id)
    ]

    bracket_deleted, category_deleted = PoolEntry.delete_picks_for(entry_ids)
    entries_deleted = PoolEntry.query.filter_by(pool_id=pool_id).delete(
        synchronize_session=False
    )
    Pool.query.filter_by(id=pool_id).delete(synchronize_session=False)

    return {
        "bracket_picks": bracket_deleted,
        "category_picks": category_deleted,
        "entries": entries_deleted,
    }


def delete_pool(pool_id):
    """
    Delete a pool with its entries and picks. The caller commits.

    Returns:
        tuple: (counts dict or None, message)
    """
    pool = db.session.get(Pool, pool_id)
    if not pool:
        return None, "Pool not found"

    EmailLog.query.filter_by(pool_id=pool_id).delete(synchronize_session=False)
    counts = _delete_pool_rows(pool_id)
    logger.info(f"Deleted pool {pool_id}: {counts}")
    return counts, "Pool deleted"


def delete_event(event_id):
    """
    Delete an event and everything under it. The caller commits.

    Order: pools (with entries and picks), matchups, category options,
    categories, eliminations, teams, rounds, then the event itself.

    Returns:
        tuple: (counts dict or None, message)
    """
    event = db.session.get(Event, event_id)
    if not event:
        return None, "Event not found"

    counts = {"pools": 0}
    for pool in Pool.query.filter_by(event_id=event_id).all():
        delete_pool(pool.id)
        counts["pools"] += 1

    counts["matchups"] = Matchup.query.filter_by(event_id=event_id).delete(
        synchronize_session=False
    )

    category_ids = [
        category_id
        for (category_id,) in db.session.query(Category.id).filter_by(
            event_id=event_id
        )
    ]
    if category_ids:
        CategoryOption.query.filter(
            CategoryOption.category_id.in_(category_ids)
        ).delete(synchronize_session=False)
    counts["categories"] = Category.query.filter_by(event_id=event_id).delete(
        synchronize_session=False
    )

    TeamElimination.clear_for_event(event_id)
    counts["teams"] = Team.query.filter_by(event_id=event_id).delete(
        synchronize_session=False
    )
    counts["rounds"] = Round.query.filter_by(event_id=event_id).delete(
        synchronize_session=False
    )

    Event.query.filter_by(id=event_id).delete(synchronize_session=False)
    logger.info(f"Deleted event {event_id}: {counts}")
    return counts, "Event deleted"


def reinvite_pool(pool_id, new_event_id):
    """
    Start a new pool for another event with the same commissioner and
    participants. Entries are copied without picks. The caller commits.

    Returns:
        tuple: (new pool or None, message)
    """
    original = db.session.get(Pool, pool_id)
    if not original:
        return None, "Pool not found"

    if not db.session.get(Event, new_event_id):
        return None, "Event not found"

    new_pool = Pool(
        event_id=new_event_id,
        name=original.name,
        commissioner_name=original.commissioner_name,
        commissioner_email=original.commissioner_email,
        is_private=original.is_private,
        status="active",
    )
    db.session.add(new_pool)
    db.session.flush()

    entries = original.entries.all()
    for entry in entries:
        db.session.add(
            PoolEntry(pool_id=new_pool.id, email=entry.email, entry_name=entry.entry_name)
        )

    logger.info(
        f"Reinvited pool {pool_id} as {new_pool.id} for event {new_event_id} "
        f"with {len(entries)} entries"
    )
    return new_pool, "Pool reinvited"
