import email
import smtplib
from unittest.mock import patch

from pickcrown.models import EmailLog


def _recipients(mock_smtp):
    server = mock_smtp.return_value.__enter__.return_value
    return sorted(call.args[1][0] for call in server.sendmail.call_args_list)


def _plain_bodies(mock_smtp):
    server = mock_smtp.return_value.__enter__.return_value
    bodies = []
    for call in server.sendmail.call_args_list:
        message = email.message_from_string(call.args[2])
        for part in message.walk():
            if part.get_content_type() == "text/plain":
                bodies.append(part.get_payload(decode=True).decode("utf-8"))
    return bodies


def test_reminders_are_sent_once_per_participant(client, make_event, make_pool, make_entry):
    pool = make_pool(make_event(starts_in_days=2))
    make_entry(pool, "Alice")
    make_entry(pool, "Bob")

    with patch("smtplib.SMTP") as mock_smtp:
        response = client.post("/api/email/send-reminders", json={"poolId": pool.id})

    assert response.status_code == 200
    data = response.get_json()
    assert data["sent"] == 2
    assert data["skipped"] == 0
    assert _recipients(mock_smtp) == ["alice@example.com", "bob@example.com"]
    assert EmailLog.query.filter_by(email_type="reminder", status="sent").count() == 2

    with patch("smtplib.SMTP") as mock_smtp:
        data = client.post("/api/email/send-reminders", json={"poolId": pool.id}).get_json()

    assert data["sent"] == 0
    assert data["skipped"] == 2
    assert not mock_smtp.called


def test_failed_reminders_are_reported(client, make_event, make_pool, make_entry):
    pool = make_pool(make_event())
    make_entry(pool, "Alice")

    with patch("smtplib.SMTP", side_effect=smtplib.SMTPException("down")):
        response = client.post("/api/email/send-reminders", json={"poolId": pool.id})

    data = response.get_json()
    assert data["success"] is False
    assert data["failed"] == 1
    assert data["recipients"]["failed"] == ["alice@example.com"]
    assert EmailLog.query.filter_by(status="failed").count() == 1


def test_reminders_rejected_after_start(client, make_event, make_pool):
    pool = make_pool(make_event(starts_in_days=-1))
    response = client.post("/api/email/send-reminders", json={"poolId": pool.id})
    assert response.status_code == 400


def test_reminders_unknown_pool(client):
    response = client.post("/api/email/send-reminders", json={"poolId": 999})
    assert response.status_code == 404


def test_results_emails_need_completed_event(client, db, make_event, make_pool, make_entry):
    event = make_event()
    pool = make_pool(event)
    make_entry(pool, "Alice")

    response = client.post("/api/email/send-results", json={"poolId": pool.id})
    assert response.status_code == 400

    event.status = "completed"
    db.session.commit()

    with patch("smtplib.SMTP") as mock_smtp:
        response = client.post("/api/email/send-results", json={"poolId": pool.id})

    assert response.status_code == 200
    assert response.get_json()["sent"] == 1
    assert _recipients(mock_smtp) == ["alice@example.com"]
    log = EmailLog.query.filter_by(email_type="results").one()
    assert log.email_metadata == {"rank": 1, "points": 0}


def test_feedback(client):
    with patch("smtplib.SMTP") as mock_smtp:
        response = client.post(
            "/api/feedback", json={"message": "Love it", "email": "fan@example.com"}
        )

    assert response.status_code == 200
    assert _recipients(mock_smtp) == ["feedback@example.com"]


def test_feedback_requires_message(client):
    response = client.post("/api/feedback", json={"message": "  "})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Message required"


def test_results_for_event_send_once_per_address_with_podium(client, db, make_event, make_category, make_pool, make_entry):
    event = make_event()
    category = make_category(event, "Best Picture", options=("Dune", "Anora"), points=5)
    anora = category.options.filter_by(name="Anora").one()
    dune = category.options.filter_by(name="Dune").one()
    office = make_pool(event, name="Office")
    family = make_pool(event, name="Family")
    make_entry(office, "Alice", category_picks={category: anora})
    make_entry(family, "Alice", category_picks={category: dune})
    make_entry(family, "Bob", category_picks={category: dune})
    category.set_correct_option(anora)
    event.status = "completed"
    db.session.commit()

    with patch("smtplib.SMTP") as mock_smtp:
        response = client.post("/api/email/send-results", json={"eventId": event.id})

    assert response.status_code == 200
    data = response.get_json()
    assert data["recipients"]["sent"] == ["alice@example.com", "bob@example.com"]
    assert data["recipients"]["skipped"] == ["alice@example.com"]
    assert _recipients(mock_smtp) == ["alice@example.com", "bob@example.com"]

    bodies = _plain_bodies(mock_smtp)
    assert len(bodies) == 2
    assert all("podium (all pools)" in body for body in bodies)
    assert all("🥇 Alice – 5 pts" in body for body in bodies)


def test_results_request_validation(client, make_event):
    assert client.post("/api/email/send-results", json={}).status_code == 400
    assert client.post("/api/email/send-results", json={"eventId": 999}).status_code == 404

    event = make_event(status="completed")
    response = client.post("/api/email/send-results", json={"eventId": event.id})
    assert response.status_code == 404
    assert response.get_json()["error"] == "No pools found"


def test_invites_skip_participants_and_repeat_invites(client, make_event, make_pool, make_entry):
    pool = make_pool(make_event())
    make_entry(pool, "Alice")
    emails = ["Bob@Example.com", " bob@example.com", "alice@example.com", "cara@example.com"]

    with patch("smtplib.SMTP") as mock_smtp:
        response = client.post("/api/email/send-invites", json={"poolId": pool.id, "emails": emails})

    assert response.status_code == 200
    data = response.get_json()
    assert data["sent"] == 2
    assert data["recipients"]["skipped"] == ["alice@example.com"]
    assert _recipients(mock_smtp) == ["bob@example.com", "cara@example.com"]
    assert EmailLog.query.filter_by(email_type="invite", status="sent").count() == 2

    with patch("smtplib.SMTP") as mock_smtp:
        data = client.post(
            "/api/email/send-invites", json={"poolId": pool.id, "emails": emails}
        ).get_json()

    assert data["sent"] == 0
    assert data["skipped"] == 3
    assert not mock_smtp.called


def test_invites_validation(client, make_event, make_pool):
    pool = make_pool(make_event())
    url = "/api/email/send-invites"

    assert client.post(url, json={"poolId": pool.id, "emails": []}).status_code == 400
    assert client.post(url, json={"poolId": pool.id, "emails": "a@example.com"}).status_code == 400

    response = client.post(url, json={"poolId": pool.id, "emails": ["not-an-email", 7]})
    assert response.status_code == 400
    assert "not-an-email" in response.get_json()["error"]

    assert client.post(url, json={"poolId": 999, "emails": ["a@example.com"]}).status_code == 404

    started = make_pool(make_event(starts_in_days=-1))
    response = client.post(url, json={"poolId": started.id, "emails": ["a@example.com"]})
    assert response.status_code == 400


def test_incomplete_reminders_target_unfinished_entries(client, make_event, make_category, make_pool, make_entry):
    event = make_event()
    picture = make_category(event, "Best Picture")
    actor = make_category(event, "Best Actor")
    pool = make_pool(event)
    make_entry(
        pool,
        "Alice",
        category_picks={picture: picture.options.first(), actor: actor.options.first()},
    )
    make_entry(pool, "Bob", category_picks={picture: picture.options.first()})
    make_entry(pool, "Cara")

    with patch("smtplib.SMTP") as mock_smtp:
        response = client.post("/api/email/send-reminder-incomplete", json={"poolId": pool.id})

    assert response.status_code == 200
    assert response.get_json()["sent"] == 2
    assert _recipients(mock_smtp) == ["bob@example.com", "cara@example.com"]
    assert EmailLog.query.filter_by(email_type="reminder_incomplete").count() == 2


def test_incomplete_reminders_rejected_after_start(client, make_event, make_pool):
    pool = make_pool(make_event(starts_in_days=-1))
    response = client.post("/api/email/send-reminder-incomplete", json={"poolId": pool.id})
    assert response.status_code == 400
