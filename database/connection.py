"""
Database connection management.
Handles per-request connections, initialization, and teardown.
"""

import logging
import os
import sqlite3

from flask import g, current_app

logger = logging.getLogger(__name__)


def connect(db_path: str, timeout: float = 3.0) -> sqlite3.Connection:
    """
    Open a configured SQLite connection.

    Args:
        db_path: Database file path (or ':memory:')
        timeout: Seconds to wait on a locked database before failing

    Returns:
        sqlite3.Connection: Connection with row factory and foreign keys on
    """
    directory = os.path.dirname(db_path)
    if directory and db_path != ':memory:' and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    # Enable foreign key constraints
    conn.execute('PRAGMA foreign_keys = ON')
    # Enable WAL mode for better concurrency
    if db_path != ':memory:':
        conn.execute('PRAGMA journal_mode = WAL')
    return conn


def get_db():
    """
    Get the connection bound to the current app context.

    Returns:
        sqlite3.Connection: Database connection object
    """
    if 'db' not in g:
        g.db = connect(
            current_app.config.get('DATABASE_PATH', 'instance/bookings.db'),
            timeout=current_app.config.get('DATABASE_TIMEOUT', 3.0)
        )
    return g.db


def close_db(e=None):
    """
    Close database connection.

    Args:
        e: Exception if any (from Flask teardown context)
    """
    db = g.pop('db', None)
    if db is not None:
        db.close()


def init_db():
    """
    Initialize database: drop existing tables, create new schema, insert seed data.
    WARNING: This will delete all existing data!
    """
    from database.schema import drop_tables, create_tables, create_indexes
    from database.seed import seed_database

    db = get_db()

    # Drop existing tables (in reverse order of dependencies)
    drop_tables(db)

    # Create all tables
    create_tables(db)

    # Create indexes
    create_indexes(db)

    # Insert seed data
    seed_database(db)

    db.commit()
    logger.info('Database initialized at %s', current_app.config.get('DATABASE_PATH'))
