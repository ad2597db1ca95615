"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import os
import pytest
import tempfile
from datetime import date, datetime, time, timedelta

# Set test database path BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'libroom_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database after all tests
    for suffix in ('', '-wal', '-shm'):
        path = TEST_DB_PATH + suffix
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked


@pytest.fixture
def app(tmp_path):
    """
    Create test application with a fresh database per test.

    No application context stays pushed: every request and every
    `with app.app_context()` block gets its own connection.
    """
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'libroom_test.db')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Create anonymous test client."""
    return app.test_client()


def _login(app, username, password):
    test_client = app.test_client()
    response = test_client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    assert response.status_code == 200, response.get_json()
    return test_client


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded admin."""
    return _login(app, 'admin', 'admin123')


@pytest.fixture
def user_client(app):
    """Test client logged in as the seeded requester."""
    return _login(app, 'demo', 'demo123')


@pytest.fixture
def catalog(app):
    """IDs of seeded users and resources."""
    from database import get_db

    with app.app_context():
        db = get_db()
        users = {row['username']: row['id'] for row in db.execute('SELECT id, username FROM users')}
        resources = {row['name']: row['id'] for row in db.execute('SELECT id, name FROM resources')}

    return {
        'admin_id': users['admin'],
        'user_id': users['demo'],
        'room_id': resources['Ruang Seminar Utama'],
        'small_room_id': resources['Ruang Meeting Kecil'],
        'tour_id': resources['Pemandu Tur Perpustakaan'],
    }


@pytest.fixture
def future_day():
    """A weekday-agnostic date safely in the future."""
    return date.today() + timedelta(days=7)


def at(day, hour, minute=0):
    """Build a naive local datetime on day at hour:minute."""
    return datetime.combine(day, time(hour, minute))


def iso(value):
    """Format a datetime the way clients send it."""
    return value.strftime('%Y-%m-%dT%H:%M:%S')


@pytest.fixture
def make_reservation(app, catalog, future_day):
    """
    Factory that creates a reservation directly through the model layer.

    Usage:
        reservation = make_reservation(start_hour=9, end_hour=11, status='approved')
    """
    from models.reservation import create_reservation, approve_reservation, reject_reservation

    def _make(resource_id=None, start_hour=9, end_hour=11, day=None, status='pending',
              requester_id=None, **fields):
        day = day or future_day
        resource_id = resource_id or catalog['room_id']
        data = {
            'title': fields.pop('title', 'Rapat Koordinasi'),
            'purpose': fields.pop('purpose', 'Diskusi program kerja'),
            'participants': fields.pop('participants', 5),
            'start_time': iso(at(day, start_hour)),
            'end_time': iso(at(day, end_hour)),
        }
        if resource_id == catalog['tour_id']:
            data.update({
                'duration': (end_hour - start_hour) * 60,
                'contact_person': {'name': 'Budi', 'phone': '081234567890'},
            })
        data.update(fields)

        with app.app_context():
            reservation = create_reservation(requester_id or catalog['user_id'], resource_id, data)
            if status == 'approved':
                reservation = approve_reservation(reservation['id'], catalog['admin_id'])
            elif status == 'rejected':
                reservation = reject_reservation(reservation['id'], catalog['admin_id'])
        return reservation

    return _make
