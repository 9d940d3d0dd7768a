"""
Standings, CSV export, the event podium and season leaderboards

Scoring for a pool entry:
    - a category pick scores the category's points when its option is the
      category's correct option
    - a bracket pick scores the round's points when the picked team is the
      matchup winner

Entries are ranked by total points (highest first) with standard
competition ranking, so tied entries share a rank and the next rank skips.
"""

import csv
import io
import re

from pickcrown import db
from pickcrown.models import (
    BracketPick,
    Category,
    CategoryOption,
    CategoryPick,
    Event,
    Matchup,
    Pool,
    PoolEntry,
    Round,
)
from pickcrown.utils.logging_config import get_logger
from pickcrown.utils.timezone_utils import get_utc_time

logger = get_logger(__name__)

MEDALS = ("🥇", "🥈", "🥉")

CSV_HEADERS = ["Rank", "Entry Name", "Email", "Points"]


def standings_sort_key(row):
    return (-row["total_points"], (row["entry_name"] or "").lower())


def _category_points(entry_ids):
    """Points and correct-pick counts from category picks, per entry id"""
    rows = (
        db.session.query(
            CategoryPick.pool_entry_id,
            CategoryPick.option_id,
            Category.correct_option_id,
            Category.points,
            CategoryOption.is_correct,
        )
        .join(Category, Category.id == CategoryPick.category_id)
        .join(CategoryOption, CategoryOption.id == CategoryPick.option_id)
        .filter(CategoryPick.pool_entry_id.in_(entry_ids))
        .all()
    )

    totals = {}
    for entry_id, option_id, correct_option_id, points, is_correct in rows:
        if correct_option_id is not None:
            correct = option_id == correct_option_id
        else:
            correct = is_correct is True

        if correct:
            points_so_far, count = totals.get(entry_id, (0, 0))
            totals[entry_id] = (points_so_far + (points or 0), count + 1)

    return totals


def _bracket_points(entry_ids):
    """Points and correct-pick counts from bracket picks, per entry id"""
    rows = (
        db.session.query(
            BracketPick.pool_entry_id,
            db.func.sum(Round.points),
            db.func.count(BracketPick.id),
        )
        .join(Matchup, Matchup.id == BracketPick.matchup_id)
        .join(Round, Round.id == Matchup.round_id)
        .filter(
            BracketPick.pool_entry_id.in_(entry_ids),
            Matchup.winner_id.isnot(None),
            BracketPick.picked_team_id == Matchup.winner_id,
        )
        .group_by(BracketPick.pool_entry_id)
        .all()
    )

    return {entry_id: (points or 0, count) for entry_id, points, count in rows}


def rank_standings(rows):
    """Sort rows and assign competition ranks in place"""
    rows.sort(key=standings_sort_key)

    previous_points = None
    rank = 0
    for position, row in enumerate(rows, start=1):
        if row["total_points"] != previous_points:
            rank = position
            previous_points = row["total_points"]
        row["rank"] = rank

    return rows


def calculate_standings(pool_id):
    """
    Standings for every entry in a pool.

    Returns:
        list of dicts with rank, entry_id, entry_name, email, total_points
        and correct_picks, best first
    """
    entries = PoolEntry.query.filter_by(pool_id=pool_id).all()
    if not entries:
        return []

    entry_ids = [entry.id for entry in entries]
    category_totals = _category_points(entry_ids)
    bracket_totals = _bracket_points(entry_ids)

    rows = []
    for entry in entries:
        category_points, category_correct = category_totals.get(entry.id, (0, 0))
        bracket_points, bracket_correct = bracket_totals.get(entry.id, (0, 0))
        rows.append(
            {
                "rank": None,
                "entry_id": entry.id,
                "entry_name": entry.entry_name,
                "email": entry.email,
                "total_points": category_points + bracket_points,
                "correct_picks": category_correct + bracket_correct,
            }
        )

    return rank_standings(rows)


def export_filename(pool_name):
    """Attachment filename for a pool's standings export"""
    return f"{re.sub(r'[^a-z0-9]', '_', pool_name or 'pool', flags=re.IGNORECASE)}_standings.csv"


def standings_to_csv(pool, standings, exported_at=None):
    """
    Serialize standings to CSV text.

    Two comment lines name the pool, its event and the export time, then a
    blank line, the header row and one row per entry.
    """
    exported_at = exported_at or get_utc_time()
    event = pool.event

    output = io.StringIO()
    output.write(
        f"# {pool.name} - {event.name if event else ''} {event.year if event else ''}".rstrip()
        + "\n"
    )
    output.write(f"# Exported: {exported_at.isoformat()}\n")
    output.write("\n")
    output.write(",".join(CSV_HEADERS) + "\n")

    # Names and emails are always quoted, rank and points never
    writer = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for row in standings:
        writer.writerow(
            [row["rank"], row["entry_name"], row["email"] or "", row["total_points"]]
        )

    return output.getvalue()


def build_podium(entries):
    """
    Top three entries across pools.

    Sorted by total points (highest first), ties broken by entry name
    ignoring case. Each result carries its position and medal.
    """
    ordered = sorted(entries, key=standings_sort_key)

    return [
        {
            "entry_name": entry["entry_name"],
            "total_points": entry["total_points"],
            "position": position,
            "medal": MEDALS[position - 1],
        }
        for position, entry in enumerate(ordered[:3], start=1)
    ]


def get_event_podium(event_id):
    """Podium built from the standings of every pool under an event"""
    pools = Pool.query.filter_by(event_id=event_id).all()
    if not pools:
        return []

    all_entries = []
    for pool in pools:
        all_entries.extend(calculate_standings(pool.id))

    logger.debug(
        f"Podium for event {event_id}: {len(all_entries)} entries across {len(pools)} pools"
    )
    return build_podium(all_entries)


def calculate_season_standings(season_id):
    """
    Leaderboard across every event of a season.

    Participants are matched by email. Within one event only their best
    entry counts, so entering two pools of the same event does not double
    their points. Rows are ranked like pool standings.

    Returns:
        list of dicts with rank, email, entry_name, total_points and
        events_entered, best first
    """
    events = (
        Event.query.filter_by(season_id=season_id)
        .order_by(Event.start_time, Event.id)
        .all()
    )

    totals = {}
    for event in events:
        best_in_event = {}
        for pool in Pool.query.filter_by(event_id=event.id).all():
            for row in calculate_standings(pool.id):
                email = (row["email"] or "").lower()
                if not email:
                    continue
                current = best_in_event.get(email)
                if current is None or row["total_points"] > current["total_points"]:
                    best_in_event[email] = row

        for email, row in best_in_event.items():
            total = totals.setdefault(
                email,
                {
                    "rank": None,
                    "email": email,
                    "entry_name": row["entry_name"],
                    "total_points": 0,
                    "events_entered": 0,
                },
            )
            total["total_points"] += row["total_points"]
            total["events_entered"] += 1

    logger.debug(
        f"Season {season_id} standings: {len(totals)} participants across {len(events)} events"
    )
    return rank_standings(list(totals.values()))
