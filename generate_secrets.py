#!/usr/bin/env python3
"""
Generate secrets for a PickCrown .env file
Prints a SECRET_KEY and, with --postgres, a DB_PASSWORD for the database user
"""

import secrets

import click


@click.command()
@click.option("--postgres", is_flag=True, help="Also generate DB_PASSWORD")
def generate_secrets(postgres):
    """Generate secure random values for the application"""
    click.echo("🔐 Generating secrets for PickCrown...")
    click.echo("=" * 50)

    click.echo(f"SECRET_KEY={secrets.token_urlsafe(32)}")
    if postgres:
        click.echo("DB_TYPE=postgresql")
        click.echo(f"DB_PASSWORD={secrets.token_urlsafe(24)}")

    click.echo("=" * 50)
    click.echo("📝 Copy these values to your .env file")


if __name__ == "__main__":
    generate_secrets()
