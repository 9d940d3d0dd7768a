from pickcrown.models import BracketPick, Matchup, Round, Team


def test_team_crud(client, db, make_event):
    event = make_event(event_type="bracket")

    response = client.post("/api/teams", json={"eventId": event.id, "name": "Duke", "seed": 1})
    assert response.status_code == 201
    team = response.get_json()["team"]
    assert team["display_name"] == "#1 Duke"

    response = client.put("/api/teams", json={"id": team["id"], "conference": "ACC"})
    assert response.get_json()["team"]["conference"] == "ACC"

    teams = client.get(f"/api/teams?eventId={event.id}").get_json()["teams"]
    assert [t["name"] for t in teams] == ["Duke"]

    response = client.delete(f"/api/teams?id={team['id']}")
    assert response.status_code == 200
    assert db.session.get(Team, team["id"]) is None


def test_team_list_requires_event(client):
    assert client.get("/api/teams").status_code == 400


def test_team_in_matchup_cannot_be_deleted(client, bracket):
    response = client.delete(f"/api/teams?id={bracket['team_a'].id}")
    assert response.status_code == 409


def test_rounds_are_ordered(client, make_event):
    event = make_event(event_type="bracket")
    for name, order in (("Final Four", 5), ("Round of 64", 1)):
        response = client.post(
            "/api/rounds",
            json={"eventId": event.id, "name": name, "round_order": order, "points": order * 2},
        )
        assert response.status_code == 201

    rounds = client.get(f"/api/rounds?eventId={event.id}").get_json()["rounds"]
    assert [r["name"] for r in rounds] == ["Round of 64", "Final Four"]


def test_round_requires_all_fields(client, make_event):
    event = make_event()
    response = client.post("/api/rounds", json={"eventId": event.id, "name": "Final"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "All fields required"


def test_round_with_matchups_cannot_be_deleted(client, db, bracket):
    response = client.delete(f"/api/rounds?id={bracket['round'].id}")
    assert response.status_code == 409
    assert db.session.get(Round, bracket["round"].id) is not None


def test_create_matchup(client, bracket):
    event = bracket["event"]

    response = client.post(
        "/api/matchups",
        json={
            "eventId": event.id,
            "roundId": bracket["round"].id,
            "teamAId": bracket["team_b"].id,
            "teamBId": bracket["team_a"].id,
        },
    )

    assert response.status_code == 201
    matchups = client.get(f"/api/matchups?eventId={event.id}").get_json()["matchups"]
    assert len(matchups) == 2
    assert matchups[1]["team_a"]["name"] == "UConn"


def test_create_matchup_validation(client, bracket):
    event = bracket["event"]
    base = {"eventId": event.id, "roundId": bracket["round"].id}

    response = client.post("/api/matchups", json=dict(base, teamAId=bracket["team_a"].id))
    assert response.status_code == 400
    assert response.get_json()["error"] == "All fields required"

    response = client.post(
        "/api/matchups",
        json=dict(base, teamAId=bracket["team_a"].id, teamBId=bracket["team_a"].id),
    )
    assert response.status_code == 400


def test_delete_matchup_removes_picks(client, db, bracket, make_pool, make_entry):
    pool = make_pool(bracket["event"])
    make_entry(pool, "Alice", bracket_picks={bracket["matchup"]: bracket["team_a"]})
    matchup_id = bracket["matchup"].id

    response = client.delete(f"/api/matchups?id={matchup_id}")

    assert response.status_code == 200
    assert db.session.get(Matchup, matchup_id) is None
    assert BracketPick.query.count() == 0
