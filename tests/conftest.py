from datetime import datetime, timedelta, timezone

import pytest

from pickcrown import create_app
from pickcrown import db as _db
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
    Team,
)


def utc_naive(**delta):
    """Naive UTC datetime offset from now, the way start times are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(**delta)


@pytest.fixture(scope="function")
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def db(app):
    return _db


@pytest.fixture
def make_event(db):
    def _make_event(name="Oscars", year=2025, starts_in_days=7, **kwargs):
        event = Event(
            name=name,
            year=year,
            event_type=kwargs.pop("event_type", "pick_one"),
            start_time=utc_naive(days=starts_in_days),
            status=kwargs.pop("status", "upcoming"),
            **kwargs,
        )
        db.session.add(event)
        db.session.commit()
        return event

    return _make_event


@pytest.fixture
def make_category(db):
    def _make_category(event, name, options=("A", "B"), points=1, order_index=None):
        category = Category(
            event_id=event.id,
            name=name,
            order_index=order_index
            if order_index is not None
            else Category.next_order_index(event.id),
            points=points,
        )
        db.session.add(category)
        db.session.flush()
        for idx, option_name in enumerate(options, start=1):
            db.session.add(
                CategoryOption(category_id=category.id, name=option_name, order_index=idx)
            )
        db.session.commit()
        return category

    return _make_category


@pytest.fixture
def make_pool(db):
    def _make_pool(event, name="Office Pool", **kwargs):
        pool = Pool(
            event_id=event.id,
            name=name,
            commissioner_name=kwargs.get("commissioner_name", "Dana"),
            commissioner_email=kwargs.get("commissioner_email", "dana@example.com"),
            status=kwargs.get("status", "active"),
        )
        db.session.add(pool)
        db.session.commit()
        return pool

    return _make_pool


@pytest.fixture
def make_entry(db):
    def _make_entry(pool, entry_name, email=None, category_picks=None, bracket_picks=None):
        """category_picks: {category: option}; bracket_picks: {matchup: team}"""
        entry = PoolEntry(
            pool_id=pool.id,
            entry_name=entry_name,
            email=email or f"{entry_name.lower()}@example.com",
        )
        db.session.add(entry)
        db.session.flush()
        for category, option in (category_picks or {}).items():
            db.session.add(
                CategoryPick(
                    pool_entry_id=entry.id, category_id=category.id, option_id=option.id
                )
            )
        for matchup, team in (bracket_picks or {}).items():
            db.session.add(
                BracketPick(
                    pool_entry_id=entry.id, matchup_id=matchup.id, picked_team_id=team.id
                )
            )
        db.session.commit()
        return entry

    return _make_entry


@pytest.fixture
def bracket(db, make_event):
    """A bracket event with one 10-point round and a single matchup"""
    event = make_event(name="March Madness", event_type="bracket")
    round_ = Round(event_id=event.id, name="Final", round_order=1, points=10)
    team_a = Team(event_id=event.id, name="Duke", seed=1)
    team_b = Team(event_id=event.id, name="UConn", seed=2)
    db.session.add_all([round_, team_a, team_b])
    db.session.flush()

    matchup = Matchup(
        event_id=event.id, round_id=round_.id, team_a_id=team_a.id, team_b_id=team_b.id
    )
    db.session.add(matchup)
    db.session.commit()

    return {
        "event": event,
        "round": round_,
        "team_a": team_a,
        "team_b": team_b,
        "matchup": matchup,
    }
