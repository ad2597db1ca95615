"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Users (admin + demo requester)
    users_data = [
        ('admin', 'admin@libroom.local', 'admin123', 'Administrator', 'admin',
         'Pustaka Wilayah Aceh', '081234567890'),
        ('demo', 'demo@libroom.local', 'demo123', 'Demo User', 'user',
         'Universitas Syiah Kuala', '081234567891'),
    ]

    for username, email, password, full_name, role, institution, phone in users_data:
        db.execute('''
            INSERT INTO users (username, email, password_hash, full_name, role, institution, phone)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (username, email, generate_password_hash(password), full_name, role, institution, phone))

    # 2. Rooms
    rooms_data = [
        ('Ruang Seminar Utama', 'Ruang seminar berkapasitas besar dengan fasilitas lengkap',
         100, 'Lantai 1', 'Proyektor,Sound System,AC,WiFi'),
        ('Ruang Meeting Kecil', 'Ruang meeting untuk diskusi kelompok kecil',
         20, 'Lantai 2', 'Proyektor,Whiteboard,AC'),
    ]

    for name, description, capacity, location, facilities in rooms_data:
        db.execute('''
            INSERT INTO resources (name, kind, description, capacity, location, facilities,
                                   open_time, close_time)
            VALUES (?, 'room', ?, ?, ?, ?, '08:00', '17:00')
        ''', (name, description, capacity, location, facilities))

    # 3. The single tour guide resource (one tour at a time)
    db.execute('''
        INSERT INTO resources (name, kind, description, capacity, open_time, close_time)
        VALUES ('Pemandu Tur Perpustakaan', 'tour-guide',
                'Tur perpustakaan dengan pemandu', NULL, '08:00', '17:00')
    ''')
