"""Creating pool entries with their picks"""

import logging

from pickcrown import db
from pickcrown.models import (
    BracketPick,
    Category,
    CategoryOption,
    CategoryPick,
    Matchup,
    PoolEntry,
)
from pickcrown.utils.api_helpers import parse_int

logger = logging.getLogger(__name__)


def _validate_bracket_pick(pick, event_id):
    matchup_id = parse_int(pick.get("matchup_id")) if isinstance(pick, dict) else None
    team_id = parse_int(pick.get("picked_team_id")) if isinstance(pick, dict) else None
    if matchup_id is None or team_id is None:
        return None, "Bracket picks need matchup_id and picked_team_id"

    matchup = db.session.get(Matchup, matchup_id)
    if not matchup or matchup.event_id != event_id:
        return None, f"Matchup {matchup_id} is not part of this event"
    if not matchup.involves_team(team_id):
        return None, f"Team {team_id} is not part of matchup {matchup_id}"

    return BracketPick(matchup_id=matchup_id, picked_team_id=team_id), None


def _validate_category_pick(pick, event_id):
    category_id = parse_int(pick.get("category_id")) if isinstance(pick, dict) else None
    option_id = parse_int(pick.get("option_id")) if isinstance(pick, dict) else None
    if category_id is None or option_id is None:
        return None, "Category picks need category_id and option_id"

    category = db.session.get(Category, category_id)
    if not category or category.event_id != event_id:
        return None, f"Category {category_id} is not part of this event"

    option = db.session.get(CategoryOption, option_id)
    if not option or option.category_id != category_id:
        return None, f"Option {option_id} does not belong to category {category_id}"

    return CategoryPick(category_id=category_id, option_id=option_id), None


def create_entry(pool, entry_name, email, bracket_picks=None, category_picks=None):
    """
    Create an entry with its picks. The caller commits.

    Picks are validated against the pool's event before anything is added,
    so an invalid pick creates nothing.

    Returns:
        tuple: (entry or None, message)
    """
    event = pool.event
    if event is None:
        return None, "Event not found"

    if event.has_started():
        return None, "Picks are locked - the event has already started"

    if pool.status != "active":
        return None, "Pool is not accepting entries"

    picks = []
    seen_matchups = set()
    for pick in bracket_picks or []:
        bracket_pick, error = _validate_bracket_pick(pick, event.id)
        if error:
            return None, error
        if bracket_pick.matchup_id in seen_matchups:
            return None, f"Matchup {bracket_pick.matchup_id} picked more than once"
        seen_matchups.add(bracket_pick.matchup_id)
        picks.append(bracket_pick)

    seen_categories = set()
    for pick in category_picks or []:
        category_pick, error = _validate_category_pick(pick, event.id)
        if error:
            return None, error
        if category_pick.category_id in seen_categories:
            return None, f"Category {category_pick.category_id} picked more than once"
        seen_categories.add(category_pick.category_id)
        picks.append(category_pick)

    entry = PoolEntry(pool_id=pool.id, entry_name=entry_name, email=email)
    db.session.add(entry)
    db.session.flush()

    for pick in picks:
        pick.pool_entry_id = entry.id
        db.session.add(pick)

    logger.info(f"Created entry {entry.id} in pool {pool.id} with {len(picks)} picks")
    return entry, "Entry created"
