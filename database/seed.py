"""
Database seed data.
Initial data population for fresh database installations.
"""

ROOMS = [
    "General's Quarters",
    "Major's Suite",
]

# Order matters: the first entry is the fixed "Reservation" restriction (id 1).
RESTRICTIONS = [
    'Reservation',
    'Owner Block',
]


def seed_database(db):
    """Insert initial seed data."""

    # 1. Rooms
    for room_name in ROOMS:
        db.execute('INSERT INTO rooms (room_name) VALUES (?)', (room_name,))

    # 2. Restriction reasons
    for restriction_name in RESTRICTIONS:
        db.execute(
            'INSERT INTO restrictions (restriction_name) VALUES (?)',
            (restriction_name,)
        )
