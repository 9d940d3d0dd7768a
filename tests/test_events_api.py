import pytest

from pickcrown import cache
from pickcrown.models import AuditLog, Event, TeamElimination


def test_create_and_fetch_event(client):
    response = client.post(
        "/api/events",
        json={
            "name": "Oscars",
            "year": 2026,
            "event_type": "pick_one",
            "start_time": "2026-03-15T23:00:00Z",
        },
    )

    assert response.status_code == 201
    event = response.get_json()["event"]
    assert event["status"] == "upcoming"
    assert event["start_time"] == "2026-03-15T23:00:00"

    response = client.get(f"/api/events/{event['id']}")
    assert response.status_code == 200
    detail = response.get_json()["event"]
    assert detail["categories"] == []
    assert detail["rounds"] == []


def test_create_event_validation(client):
    response = client.post("/api/events", json={"year": 2026})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Event name is required"

    response = client.post(
        "/api/events", json={"name": "Oscars", "year": 2026, "event_type": "bogus"}
    )
    assert response.status_code == 400

    response = client.post(
        "/api/events", json={"name": "Oscars", "year": 2026, "start_time": "soon"}
    )
    assert response.status_code == 400


def test_list_events_filters_by_status(client, make_event):
    make_event(name="Oscars", status="completed")
    make_event(name="Grammys")

    response = client.get("/api/events?status=completed")

    names = [event["name"] for event in response.get_json()["events"]]
    assert names == ["Oscars"]


def test_update_event(client, make_event):
    event = make_event()

    response = client.put("/api/events", json={"id": event.id, "name": "Academy Awards"})
    assert response.status_code == 200
    assert response.get_json()["event"]["name"] == "Academy Awards"

    assert client.put("/api/events", json={"id": 999, "name": "X"}).status_code == 404
    assert client.put("/api/events", json={"name": "X"}).status_code == 400


def test_get_missing_event_returns_json_404(client):
    response = client.get("/api/events/12345")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Event not found"}


def test_unknown_api_path_returns_json_404(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Resource not found"}


def test_complete_event_writes_audit(client, db, make_event):
    event = make_event()

    response = client.post(f"/api/events/{event.id}/complete")

    assert response.status_code == 200
    assert db.session.get(Event, event.id).status == "completed"
    log = AuditLog.query.filter_by(action="mark_event_complete").one()
    assert log.audit_metadata == {"previous_status": "upcoming"}


def test_set_and_clear_elimination(client, bracket):
    event = bracket["event"]
    team = bracket["team_b"]
    url = f"/api/events/{event.id}/eliminations"

    response = client.post(
        url, json={"team_id": team.id, "eliminated_in_round_id": bracket["round"].id}
    )
    assert response.status_code == 200
    assert response.get_json()["elimination"]["team_id"] == team.id
    assert TeamElimination.query.count() == 1

    # Setting it again updates the same record
    client.post(url, json={"team_id": team.id, "eliminated_in_round_id": bracket["round"].id})
    assert TeamElimination.query.count() == 1

    response = client.post(url, json={"team_id": team.id})
    assert response.status_code == 200
    assert response.get_json()["elimination"] is None
    assert TeamElimination.query.filter_by(team_id=team.id).count() == 0


def test_elimination_requires_team(client, bracket):
    response = client.post(f"/api/events/{bracket['event'].id}/eliminations", json={})
    assert response.status_code == 400


def test_clear_all_eliminations(client, db, bracket):
    event = bracket["event"]
    TeamElimination.set_elimination(event.id, bracket["team_a"].id, bracket["round"].id)
    TeamElimination.set_elimination(event.id, bracket["team_b"].id, bracket["round"].id)
    db.session.commit()

    response = client.delete(f"/api/events/{event.id}/eliminations")

    assert response.get_json() == {"success": True, "cleared": 2}
    assert client.get(f"/api/events/{event.id}/eliminations").get_json() == {
        "eliminations": []
    }


def test_podium_route(client, db, make_event, make_category, make_pool, make_entry):
    event = make_event()
    category = make_category(event, "Best Picture", options=("Dune", "Anora"), points=50)
    pool = make_pool(event)
    anora = category.options.filter_by(name="Anora").one()
    dune = category.options.filter_by(name="Dune").one()
    make_entry(pool, "Bob", category_picks={category: anora})
    make_entry(pool, "Alice", category_picks={category: anora})
    make_entry(pool, "Cara", category_picks={category: dune})
    category.set_correct_option(anora)
    db.session.commit()

    response = client.get(f"/api/events/{event.id}/podium")

    assert response.status_code == 200
    podium = response.get_json()["podium"]
    assert [(p["entry_name"], p["medal"]) for p in podium] == [
        ("Alice", "🥇"),
        ("Bob", "🥈"),
        ("Cara", "🥉"),
    ]
    assert client.get("/api/events/999/podium").status_code == 404


def test_podium_cache_cleared_by_result_entry(app, client, db, make_event, make_category, make_pool, make_entry):
    cache.init_app(app, config={"CACHE_TYPE": "SimpleCache"})

    event = make_event()
    category = make_category(event, "Best Picture", options=("Dune", "Anora"), points=5)
    pool = make_pool(event)
    dune = category.options.filter_by(name="Dune").one()
    make_entry(pool, "Alice", category_picks={category: category.options.filter_by(name="Anora").one()})
    make_entry(pool, "Bob", category_picks={category: dune})
    url = f"/api/events/{event.id}/podium"

    def leader():
        podium = client.get(url).get_json()["podium"]
        return podium[0]["entry_name"], podium[0]["total_points"]

    assert leader() == ("Alice", 0)

    # Written behind the API's back, so the cached podium stays stale
    category.set_correct_option(dune)
    db.session.commit()
    assert leader() == ("Alice", 0)

    response = client.put("/api/results", json={"categoryId": category.id, "optionId": dune.id})
    assert response.status_code == 200
    assert leader() == ("Bob", 5)


@pytest.mark.parametrize(
    "path",
    [
        "/api/events",
        "/api/pools",
        "/api/seasons",
        "/api/rounds",
        "/api/commissioners",
        "/api/feedback",
    ],
)
@pytest.mark.parametrize("body", [[1, 2], "oscars", 7])
def test_form_routes_reject_non_object_bodies(client, path, body):
    response = client.post(path, json=body)

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid JSON body"}
