from pickcrown.models import AuditLog, Category, CategoryOption, Matchup
from pickcrown.services.results import apply_bulk_results


def _option(category, name):
    return category.options.filter_by(name=name).one()


def test_bulk_results_report_partial_failures(client, db, bracket, make_category):
    event = bracket["event"]
    category = make_category(event, "MVP", options=("Flagg", "Clingan"))
    other = make_category(event, "Sixth Man", options=("X", "Y"))
    flagg = _option(category, "Flagg")

    response = client.post(
        "/api/results/bulk",
        json={
            "eventId": event.id,
            "results": [
                {"matchupId": bracket["matchup"].id, "winnerId": bracket["team_a"].id},
                {"categoryId": category.id, "winnerId": flagg.id},
                {"matchupId": 9999, "winnerId": 1},
                {"categoryId": other.id, "winnerId": flagg.id},
                {"winnerId": 1},
            ],
        },
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is False
    assert data["updated"] == 2
    assert len(data["errors"]) == 3
    assert "Matchup 9999: not found" in data["errors"]
    assert any("missing matchupId or categoryId" in e for e in data["errors"])

    assert db.session.get(Matchup, bracket["matchup"].id).winner_id == bracket["team_a"].id
    assert db.session.get(Category, category.id).correct_option_id == flagg.id
    assert AuditLog.query.filter_by(action="bulk_results_entry").count() == 1


def test_bulk_results_all_succeed(client, bracket):
    response = client.post(
        "/api/results/bulk",
        json={
            "results": [
                {"matchupId": bracket["matchup"].id, "winnerId": bracket["team_b"].id}
            ]
        },
    )

    assert response.status_code == 200
    assert response.get_json() == {"success": True, "updated": 1, "errors": []}


def test_bulk_rejects_winner_outside_matchup(db, bracket):
    other_team_id = bracket["team_b"].id + 100

    updated, errors = apply_bulk_results(
        bracket["event"].id,
        [{"matchupId": bracket["matchup"].id, "winnerId": other_team_id}],
    )

    assert updated == []
    assert len(errors) == 1
    assert db.session.get(Matchup, bracket["matchup"].id).winner_id is None


def test_bulk_results_requires_list(client):
    response = client.post("/api/results/bulk", json={"results": "nope"})
    assert response.status_code == 400


def test_category_result_marks_siblings_incorrect(client, db, make_event, make_category):
    category = make_category(make_event(), "Best Picture", options=("Dune", "Anora", "Wicked"))
    anora = _option(category, "Anora")

    response = client.put(
        "/api/results", json={"categoryId": category.id, "optionId": anora.id}
    )

    assert response.status_code == 200
    flags = {
        option.name: option.is_correct
        for option in CategoryOption.query.filter_by(category_id=category.id)
    }
    assert flags == {"Dune": False, "Anora": True, "Wicked": False}
    assert db.session.get(Category, category.id).correct_option_id == anora.id


def test_category_result_can_be_cleared(client, db, make_event, make_category):
    category = make_category(make_event(), "Best Picture", options=("Dune", "Anora"))
    category.set_correct_option(_option(category, "Dune"))
    db.session.commit()

    response = client.put("/api/results", json={"categoryId": category.id, "optionId": None})

    assert response.status_code == 200
    assert db.session.get(Category, category.id).correct_option_id is None
    assert all(
        option.is_correct is None
        for option in CategoryOption.query.filter_by(category_id=category.id)
    )


def test_category_result_rejects_foreign_option(client, make_event, make_category):
    event = make_event()
    category = make_category(event, "Best Picture")
    other = make_category(event, "Best Actor")

    response = client.put(
        "/api/results",
        json={"categoryId": category.id, "optionId": other.options.first().id},
    )
    assert response.status_code == 400


def test_matchup_winner_route(client, db, bracket):
    response = client.put(
        "/api/matchups",
        json={"id": bracket["matchup"].id, "winnerTeamId": bracket["team_b"].id},
    )

    assert response.status_code == 200
    assert response.get_json()["matchup"]["winner_id"] == bracket["team_b"].id

    response = client.put(
        "/api/matchups", json={"id": bracket["matchup"].id, "winnerTeamId": 12345}
    )
    assert response.status_code == 400

    response = client.put("/api/matchups", json={"id": 777, "winnerTeamId": None})
    assert response.status_code == 404
