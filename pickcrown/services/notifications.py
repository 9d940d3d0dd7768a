"""Invite, reminder and results emails for pool participants"""

import logging

from pickcrown import db
from pickcrown.models import (
    BracketPick,
    Category,
    CategoryPick,
    EmailLog,
    Matchup,
    PoolEntry,
)
from pickcrown.services.standings import calculate_standings, get_event_podium
from pickcrown.utils.email_service import EmailService
from pickcrown.utils.timezone_utils import format_deadline

logger = logging.getLogger(__name__)


def _empty_report():
    return {"sent": [], "skipped": [], "failed": []}


def _log_report(label, pool_id, report):
    logger.info(
        f"{label} for pool {pool_id}: {len(report['sent'])} sent, "
        f"{len(report['skipped'])} skipped, {len(report['failed'])} failed"
    )


def send_reminders(pool):
    """
    Send a pick reminder to every participant of a pool.

    A participant who already received a reminder for the pool is skipped.
    Each attempt is recorded in the email log and committed.

    Returns:
        tuple: (report dict or None, message)
    """
    event = pool.event
    if event is None:
        return None, "Event not found"

    if event.has_started():
        return None, "Event has already started"

    service = EmailService()
    deadline = format_deadline(event.start_time)
    report = _empty_report()

    for entry in pool.entries.all():
        email = entry.email
        if EmailLog.already_sent(pool.id, "reminder", email):
            report["skipped"].append(email)
            continue

        ok = service.send_pick_reminder(pool, event, email, deadline)
        EmailLog.record(pool.id, "reminder", email, "sent" if ok else "failed")
        report["sent" if ok else "failed"].append(email)

    db.session.commit()
    _log_report("Reminders", pool.id, report)
    return report, "Reminders processed"


def send_invites(pool, emails):
    """
    Invite a list of addresses to join a pool.

    Addresses that already have an entry or were already invited to the
    pool are skipped.

    Args:
        pool: Pool to invite to
        emails: Normalized, de-duplicated addresses

    Returns:
        tuple: (report dict or None, message)
    """
    event = pool.event
    if event is None:
        return None, "Event not found"

    if event.has_started():
        return None, "Event has already started"

    service = EmailService()
    deadline = format_deadline(event.start_time)
    report = _empty_report()

    for email in emails:
        if pool.has_participant(email) or EmailLog.already_sent(pool.id, "invite", email):
            report["skipped"].append(email)
            continue

        ok = service.send_invite(pool, event, email, deadline)
        EmailLog.record(pool.id, "invite", email, "sent" if ok else "failed")
        report["sent" if ok else "failed"].append(email)

    db.session.commit()
    _log_report("Invites", pool.id, report)
    return report, "Invites processed"


def incomplete_entries(pool):
    """
    Entries of a pool that are missing picks.

    An entry is incomplete when it has fewer picks than the event has
    categories and matchups together.
    """
    required = (
        Category.query.filter_by(event_id=pool.event_id).count()
        + Matchup.query.filter_by(event_id=pool.event_id).count()
    )
    if required == 0:
        return []

    entries = pool.entries.order_by(PoolEntry.id).all()
    entry_ids = [entry.id for entry in entries]
    if not entry_ids:
        return []

    pick_counts = {}
    for model in (CategoryPick, BracketPick):
        rows = (
            db.session.query(model.pool_entry_id, db.func.count(model.id))
            .filter(model.pool_entry_id.in_(entry_ids))
            .group_by(model.pool_entry_id)
            .all()
        )
        for entry_id, count in rows:
            pick_counts[entry_id] = pick_counts.get(entry_id, 0) + count

    return [entry for entry in entries if pick_counts.get(entry.id, 0) < required]


def send_incomplete_reminders(pool):
    """
    Nudge participants whose picks are unfinished.

    Not de-duplicated against earlier sends, since an entry can stay
    incomplete across several nudges. Every attempt is still logged.

    Returns:
        tuple: (report dict or None, message)
    """
    event = pool.event
    if event is None:
        return None, "Event not found"

    if event.has_started():
        return None, "Event has already started"

    service = EmailService()
    deadline = format_deadline(event.start_time)
    report = _empty_report()

    for entry in incomplete_entries(pool):
        ok = service.send_incomplete_reminder(pool, event, entry.email, deadline)
        EmailLog.record(pool.id, "reminder_incomplete", entry.email, "sent" if ok else "failed")
        report["sent" if ok else "failed"].append(entry.email)

    db.session.commit()
    _log_report("Incomplete-pick reminders", pool.id, report)
    return report, "Reminders processed"


def send_results_emails(event, pools):
    """
    Email each participant their final placing.

    Only allowed once the event is completed. Every email carries the
    event podium across all pools. A participant is emailed once per run
    even when they entered several pools, and participants who were
    already sent results for a pool are skipped.

    Args:
        event: Completed event
        pools: Pools of the event to send results for

    Returns:
        tuple: (report dict or None, message)
    """
    if event is None:
        return None, "Event not found"

    if not event.is_completed:
        return None, "Event is not completed yet"

    podium = get_event_podium(event.id)
    service = EmailService()
    report = _empty_report()
    sent_this_run = set()

    for pool in pools:
        standings = calculate_standings(pool.id)

        for standing in standings:
            email = standing["email"]
            if not email:
                continue

            if email in sent_this_run or EmailLog.already_sent(pool.id, "results", email):
                report["skipped"].append(email)
                continue

            ok = service.send_results(pool, event, standing, standings, podium=podium)
            EmailLog.record(
                pool.id,
                "results",
                email,
                "sent" if ok else "failed",
                metadata={"rank": standing["rank"], "points": standing["total_points"]},
            )
            if ok:
                sent_this_run.add(email)
            report["sent" if ok else "failed"].append(email)

    db.session.commit()
    logger.info(
        f"Results emails for event {event.id} across {len(pools)} pools: "
        f"{len(report['sent'])} sent, {len(report['skipped'])} skipped, "
        f"{len(report['failed'])} failed"
    )
    return report, "Results emails processed"
