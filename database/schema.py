"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'room_restrictions',
        'reservations',
        'restrictions',
        'rooms',
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Reference data
    db.execute('''
        CREATE TABLE rooms (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            room_name TEXT UNIQUE NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE restrictions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            restriction_name TEXT UNIQUE NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 2. Reservations (dates stored as YYYY-MM-DD, half-open [start_date, end_date))
    db.execute('''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT NOT NULL,
            phone TEXT DEFAULT '',
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            processed INTEGER DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date < end_date)
        )
    ''')

    # 3. Calendar blocks. Overlap avoidance is enforced when booking, not here.
    db.execute('''
        CREATE TABLE room_restrictions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            room_id INTEGER NOT NULL REFERENCES rooms(id),
            restriction_id INTEGER NOT NULL REFERENCES restrictions(id),
            reservation_id INTEGER REFERENCES reservations(id) ON DELETE CASCADE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (start_date < end_date)
        )
    ''')


def create_indexes(db):
    """Create indexes used by the availability queries."""
    db.execute('''
        CREATE INDEX idx_room_restrictions_room_dates
        ON room_restrictions (room_id, start_date, end_date)
    ''')
    db.execute('''
        CREATE INDEX idx_room_restrictions_reservation
        ON room_restrictions (reservation_id)
    ''')
    db.execute('CREATE INDEX idx_reservations_processed ON reservations (processed)')
