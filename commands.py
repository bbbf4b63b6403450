"""
CLI Commands - Database, storage and admin setup

Usage:
    flask --app wsgi init-db
    flask --app wsgi seed-categories
    flask --app wsgi create-admin admin@example.com 'S3cure-pass'
"""

import click
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import Category, Profile
from utils.storage import get_bucket

DEFAULT_CATEGORIES = [
    {'name': 'Development', 'slug': 'development', 'icon': '💻', 'color_accent': '#f97316'},
    {'name': 'Design', 'slug': 'design', 'icon': '🎨', 'color_accent': '#fbbf24'},
    {'name': 'Video', 'slug': 'video', 'icon': '🎬', 'color_accent': '#ef4444'},
    {'name': 'Marketing', 'slug': 'marketing', 'icon': '📈', 'color_accent': '#22c55e'},
]


def seed_categories():
    """Insert missing default categories; returns how many were added"""
    added = 0
    for order, category in enumerate(DEFAULT_CATEGORIES):
        if Category.query.filter_by(slug=category['slug']).first():
            continue
        db.session.add(Category(display_order=order, **category))
        added += 1
    db.session.commit()
    return added


def create_admin(email, password):
    """Create or promote a profile to admin"""
    email = email.strip().lower()
    profile = Profile.query.filter_by(email=email).first()
    if profile is None:
        profile = Profile(email=email)
        db.session.add(profile)
    profile.set_password(password)
    profile.is_admin = True
    db.session.commit()
    return profile


def register_commands(app):

    @app.cli.command('init-db')
    def init_db_command():
        """Create tables and the storage bucket folder."""
        db.create_all()
        bucket = get_bucket()
        bucket.create()
        click.echo(f"✓ Tables created, bucket ready at {bucket.path}")

    @app.cli.command('seed-categories')
    def seed_categories_command():
        """Insert the default portfolio categories."""
        try:
            added = seed_categories()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise click.ClickException(str(e))
        click.echo(f"✓ {added} categories added")

    @app.cli.command('create-admin')
    @click.argument('email')
    @click.argument('password')
    def create_admin_command(email, password):
        """Create (or promote) an admin account."""
        if len(password) < 8:
            raise click.BadParameter('Password must be at least 8 characters long')
        try:
            profile = create_admin(email, password)
        except SQLAlchemyError as e:
            db.session.rollback()
            raise click.ClickException(str(e))
        click.echo(f"✓ Admin ready: {profile.email}")
