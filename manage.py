#!/usr/bin/env python3
"""
PickCrown Management CLI

Command-line management for PickCrown: database setup, event cloning,
pool standings and the audit trail.
"""

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pickcrown import create_app, db
from pickcrown.models import AuditLog, Event, Pool, PoolEntry, Season
from pickcrown.services.cloning import clone_event
from pickcrown.services.standings import (
    calculate_standings,
    export_filename,
    standings_to_csv,
)

app = create_app()


@click.group()
def cli():
    """PickCrown Management CLI"""
    pass


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


# Event Commands
@cli.group()
def event():
    """Event management commands"""
    pass


@event.command(name="list")
@click.option("--status", help="Only events with this status")
@with_appcontext
def list_events(status):
    """List events"""
    query = Event.query
    if status:
        query = query.filter_by(status=status)
    events = query.order_by(Event.year.desc(), Event.id).all()

    if not events:
        click.echo("No events found.")
        return

    click.echo("Events:")
    for e in events:
        starts = e.start_time.strftime("%Y-%m-%d %H:%M") if e.start_time else "TBD"
        click.echo(
            f"  [{e.id}] {e.name} {e.year} ({e.event_type}) - {e.status}, starts {starts}"
        )


@event.command()
@click.argument("event_id", type=int)
@click.option("--year", type=int, help="Year of the new event (default: next year)")
@click.option("--name", help="Name of the new event (default: same name)")
@click.option(
    "--start-time",
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%d %H:%M"]),
    help="Start time of the new event (UTC)",
)
@with_appcontext
def clone(event_id, year, name, start_time):
    """Clone an event's categories into a new event"""
    try:
        result, message = clone_event(
            event_id, new_year=year, new_start_time=start_time, new_name=name
        )
        if not result:
            click.echo(f"❌ {message}")
            return

        new_event = result["event"]
        AuditLog.log_action(
            "clone_event",
            actor_email="cli",
            target_type="event",
            target_id=new_event.id,
            metadata={
                "source_event_id": event_id,
                "categories_cloned": result["categories_cloned"],
                "categories_failed": result["categories_failed"],
            },
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error cloning event: {str(e)}")
        logging.error(f"Event clone failed - SQL error: {e}")
        return

    click.echo(
        f"✅ Cloned event {event_id} into [{new_event.id}] {new_event.name} {new_event.year}"
    )
    click.echo(f"   Categories cloned: {result['categories_cloned']}")
    if result["categories_failed"]:
        click.echo(f"⚠️  Categories failed: {result['categories_failed']}")


# Pool Commands
@cli.group()
def pool():
    """Pool commands"""
    pass


@pool.command()
@click.argument("pool_id", type=int)
@with_appcontext
def standings(pool_id):
    """Print the standings of a pool"""
    pool_obj = db.session.get(Pool, pool_id)
    if not pool_obj:
        click.echo(f"❌ Pool {pool_id} not found!")
        return

    rows = calculate_standings(pool_id)
    click.echo(f"👑 {pool_obj.name}")
    click.echo("=" * 40)

    if not rows:
        click.echo("No entries yet.")
        return

    for row in rows:
        click.echo(f"  {row['rank']:>3}. {row['entry_name']:<30} {row['total_points']:>5} pts")


@pool.command()
@click.argument("pool_id", type=int)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    help="File to write (default: derived from the pool name)",
)
@with_appcontext
def export(pool_id, output):
    """Export a pool's standings to CSV"""
    pool_obj = db.session.get(Pool, pool_id)
    if not pool_obj:
        click.echo(f"❌ Pool {pool_id} not found!")
        return

    path = output or export_filename(pool_obj.name)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(standings_to_csv(pool_obj, calculate_standings(pool_id)))

    click.echo(f"✅ Standings written to {path}")


# Audit Commands
@cli.group()
def audit():
    """Audit log commands"""
    pass


@audit.command()
@click.option("-n", "--limit", default=20, show_default=True, help="Number of entries")
@click.option("--action", help="Only this action")
@with_appcontext
def tail(limit, action):
    """Show the most recent audit entries"""
    logs = AuditLog.recent(limit=limit, action=action)
    if not logs:
        click.echo("No audit entries.")
        return

    for log in logs:
        when = log.created_at.strftime("%Y-%m-%d %H:%M:%S") if log.created_at else "-"
        click.echo(
            f"  {when}  {log.actor_email:<25} {log.action:<20} "
            f"{log.target_type or '-'} {log.target_id or ''}"
        )


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("👑 PickCrown Application Status")
    click.echo("=" * 40)

    # Database connection
    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"📅 Seasons: {Season.query.count()}")

    event_count = Event.query.count()
    completed = Event.query.filter_by(status="completed").count()
    click.echo(f"🏆 Events: {completed}/{event_count} completed")

    active_pools = Pool.query.filter_by(status="active").count()
    click.echo(f"🎯 Active Pools: {active_pools}")
    click.echo(f"👥 Entries: {PoolEntry.query.count()}")


if __name__ == "__main__":
    with app.app_context():
        cli()
