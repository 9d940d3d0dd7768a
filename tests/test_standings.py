from datetime import datetime, timezone

from pickcrown.models import Season
from pickcrown.services.standings import (
    build_podium,
    calculate_season_standings,
    calculate_standings,
    export_filename,
    get_event_podium,
    standings_to_csv,
)


def _options(category):
    return {option.name: option for option in category.options.all()}


def test_category_points_follow_correct_option(db, make_event, make_category, make_pool, make_entry):
    event = make_event()
    picture = make_category(event, "Best Picture", options=("Dune", "Anora"), points=5)
    actor = make_category(event, "Best Actor", options=("Brody", "Chalamet"), points=3)
    pool = make_pool(event)

    p, a = _options(picture), _options(actor)
    make_entry(pool, "Alice", category_picks={picture: p["Anora"], actor: a["Brody"]})
    make_entry(pool, "Bob", category_picks={picture: p["Dune"], actor: a["Brody"]})

    picture.set_correct_option(p["Anora"])
    actor.set_correct_option(a["Brody"])
    db.session.commit()

    standings = calculate_standings(pool.id)

    assert [(row["entry_name"], row["total_points"]) for row in standings] == [
        ("Alice", 8),
        ("Bob", 3),
    ]
    assert standings[0]["correct_picks"] == 2
    assert standings[1]["correct_picks"] == 1


def test_is_correct_flag_counts_without_correct_option_id(db, make_event, make_category, make_pool, make_entry):
    event = make_event()
    category = make_category(event, "Best Song", options=("X", "Y"), points=2)
    pool = make_pool(event)
    options = _options(category)
    make_entry(pool, "Alice", category_picks={category: options["Y"]})

    options["Y"].is_correct = True
    db.session.commit()

    assert calculate_standings(pool.id)[0]["total_points"] == 2


def test_bracket_points_use_round_points(db, bracket, make_pool, make_entry):
    pool = make_pool(bracket["event"])
    matchup = bracket["matchup"]
    make_entry(pool, "Alice", bracket_picks={matchup: bracket["team_a"]})
    make_entry(pool, "Bob", bracket_picks={matchup: bracket["team_b"]})

    matchup.set_winner(bracket["team_a"].id)
    db.session.commit()

    standings = calculate_standings(pool.id)
    assert standings[0]["entry_name"] == "Alice"
    assert standings[0]["total_points"] == 10
    assert standings[1]["total_points"] == 0


def test_ties_share_rank_and_next_rank_skips(db, make_event, make_category, make_pool, make_entry):
    event = make_event()
    category = make_category(event, "Best Picture", options=("Dune", "Anora"), points=5)
    pool = make_pool(event)
    options = _options(category)
    make_entry(pool, "bob", category_picks={category: options["Anora"]})
    make_entry(pool, "Alice", category_picks={category: options["Anora"]})
    make_entry(pool, "Cara", category_picks={category: options["Dune"]})

    category.set_correct_option(options["Anora"])
    db.session.commit()

    standings = calculate_standings(pool.id)
    assert [(row["rank"], row["entry_name"]) for row in standings] == [
        (1, "Alice"),
        (1, "bob"),
        (3, "Cara"),
    ]


def test_empty_pool_has_no_standings(make_event, make_pool):
    pool = make_pool(make_event())
    assert calculate_standings(pool.id) == []


def test_build_podium_sorts_by_points_then_name():
    entries = [
        {"entry_name": "Bob", "total_points": 50},
        {"entry_name": "Alice", "total_points": 50},
        {"entry_name": "Cara", "total_points": 30},
        {"entry_name": "Dan", "total_points": 10},
    ]

    podium = build_podium(entries)

    assert [(p["entry_name"], p["position"], p["medal"]) for p in podium] == [
        ("Alice", 1, "🥇"),
        ("Bob", 2, "🥈"),
        ("Cara", 3, "🥉"),
    ]


def test_build_podium_with_fewer_than_three_entries():
    podium = build_podium([{"entry_name": "Solo", "total_points": 4}])
    assert len(podium) == 1
    assert podium[0]["medal"] == "🥇"


def test_event_podium_merges_pools(db, make_event, make_category, make_pool, make_entry):
    event = make_event()
    category = make_category(event, "Best Picture", options=("Dune", "Anora"), points=5)
    options = _options(category)
    first_pool = make_pool(event, name="Office")
    second_pool = make_pool(event, name="Family")

    make_entry(first_pool, "Alice", category_picks={category: options["Anora"]})
    make_entry(second_pool, "Bob", category_picks={category: options["Dune"]})
    category.set_correct_option(options["Anora"])
    db.session.commit()

    podium = get_event_podium(event.id)
    assert [p["entry_name"] for p in podium] == ["Alice", "Bob"]


def test_season_standings_total_best_entry_per_event(db, make_event, make_category, make_pool, make_entry):
    season = Season.create_season("Awards 2025", year=2025)
    db.session.commit()

    oscars = make_event(name="Oscars", season_id=season.id)
    grammys = make_event(name="Grammys", season_id=season.id)
    outside = make_event(name="Emmys")

    picture = make_category(oscars, "Best Picture", options=("Dune", "Anora"), points=5)
    album = make_category(grammys, "Album", options=("Brat", "Cowboy Carter"), points=3)
    drama = make_category(outside, "Drama", options=("Shogun", "Slow Horses"), points=10)
    p, a, d = _options(picture), _options(album), _options(drama)

    office, family = make_pool(oscars, name="Office"), make_pool(oscars, name="Family")
    make_entry(office, "Alice", category_picks={picture: p["Anora"]})
    make_entry(family, "Alice", category_picks={picture: p["Dune"]})
    make_entry(office, "Bob", category_picks={picture: p["Dune"]})

    grammys_pool = make_pool(grammys)
    make_entry(grammys_pool, "Alice", category_picks={album: a["Brat"]})
    make_entry(grammys_pool, "Bob", category_picks={album: a["Cowboy Carter"]})
    make_entry(grammys_pool, "Cara", category_picks={album: a["Cowboy Carter"]})

    make_entry(make_pool(outside), "Dan", category_picks={drama: d["Shogun"]})

    picture.set_correct_option(p["Anora"])
    album.set_correct_option(a["Cowboy Carter"])
    drama.set_correct_option(d["Shogun"])
    db.session.commit()

    standings = calculate_season_standings(season.id)

    assert [
        (row["rank"], row["entry_name"], row["total_points"], row["events_entered"])
        for row in standings
    ] == [
        (1, "Alice", 5, 2),
        (2, "Bob", 3, 2),
        (2, "Cara", 3, 1),
    ]


def test_season_without_events_has_no_standings(db):
    season = Season.create_season("Empty", year=2025)
    db.session.commit()
    assert calculate_season_standings(season.id) == []


def test_export_filename_replaces_non_alphanumerics():
    assert export_filename("Oscars 2025: Office!") == "Oscars_2025__Office__standings.csv"


def test_standings_csv_layout(make_event, make_pool):
    event = make_event(name="Oscars", year=2025)
    pool = make_pool(event, name="Office Pool")
    standings = [
        {"rank": 1, "entry_name": "Alice", "email": "alice@example.com", "total_points": 8},
        {"rank": 2, "entry_name": 'Bob "B"', "email": "bob@example.com", "total_points": 3},
    ]
    exported_at = datetime(2025, 3, 2, 12, 0, tzinfo=timezone.utc)

    lines = standings_to_csv(pool, standings, exported_at=exported_at).splitlines()

    assert lines[0] == "# Office Pool - Oscars 2025"
    assert lines[1] == "# Exported: 2025-03-02T12:00:00+00:00"
    assert lines[2] == ""
    assert lines[3] == "Rank,Entry Name,Email,Points"
    assert lines[4] == '1,"Alice","alice@example.com",8'
    assert lines[5] == '2,"Bob ""B""","bob@example.com",3'
