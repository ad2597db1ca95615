"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'reservation_status_history',
        'reservations',
        'resources',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            full_name TEXT,
            role TEXT NOT NULL DEFAULT 'user' CHECK (role IN ('admin', 'user')),
            institution TEXT,
            phone TEXT,
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            last_login TIMESTAMP
        )
    ''')

    # 2. Resource catalog (rooms and the tour guide)
    db.execute('''
        CREATE TABLE resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            kind TEXT NOT NULL CHECK (kind IN ('room', 'tour-guide')),
            description TEXT,
            capacity INTEGER,
            location TEXT,
            facilities TEXT,
            open_time TEXT NOT NULL DEFAULT '08:00',
            close_time TEXT NOT NULL DEFAULT '17:00',
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (open_time < close_time)
        )
    ''')

    # 3. Reservations
    db.execute('''
        CREATE TABLE reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            resource_id INTEGER NOT NULL REFERENCES resources(id),
            requester_id INTEGER NOT NULL REFERENCES users(id),
            title TEXT NOT NULL,
            purpose TEXT,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            duration_minutes INTEGER,
            participants INTEGER NOT NULL DEFAULT 1,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK (status IN ('pending', 'approved', 'rejected', 'cancelled', 'completed')),
            admin_note TEXT,
            contact_name TEXT,
            contact_phone TEXT,
            contact_email TEXT,
            equipment TEXT,
            notes TEXT,
            document_path TEXT,
            tour_type TEXT,
            age_group TEXT,
            language TEXT,
            assigned_guide TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK (end_time > start_time)
        )
    ''')

    # 4. Append-only status history
    db.execute('''
        CREATE TABLE reservation_status_history (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            reservation_id INTEGER NOT NULL REFERENCES reservations(id) ON DELETE CASCADE,
            status TEXT NOT NULL
                CHECK (status IN ('pending', 'approved', 'rejected', 'cancelled', 'completed')),
            changed_at TEXT NOT NULL,
            changed_by INTEGER REFERENCES users(id),
            note TEXT
        )
    ''')


def create_indexes(db):
    """Create indexes for frequent lookups."""
    db.execute('CREATE INDEX idx_resources_kind_active ON resources(kind, active)')
    db.execute('CREATE INDEX idx_reservations_requester ON reservations(requester_id, status)')
    # Conflict checking and slot generation
    db.execute('''
        CREATE INDEX idx_reservations_conflict
        ON reservations(resource_id, status, start_time, end_time)
    ''')
    db.execute('CREATE INDEX idx_reservations_start ON reservations(start_time)')
    db.execute('CREATE INDEX idx_history_reservation ON reservation_status_history(reservation_id)')
